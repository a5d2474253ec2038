"""``naws doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment satisfies naws' requirements: Python,
boto3, the interactive selector, the editor and working AWS
credentials.

This module lives in the CLI layer — it may import from ``infra`` and
``core``, and it renders via Rich.
"""

from __future__ import annotations

import platform
import sys
from importlib import metadata

from naws.cli import exit_codes
from naws.cli.console import console
from naws.config import NawsSettings
from naws.core.protocols import Endpoint, RemoteGateway
from naws.exceptions import NawsError
from naws.infra.binaries import detect_editor, detect_fzf
from naws.version import __version__

Check = tuple[str, str, str]

OK = "[green]OK[/green]"
WARN = "[yellow]WARN[/yellow]"
FAIL = "[red]FAIL[/red]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    return "Python", version, OK if ok else "[red]FAIL (>=3.10 required)[/red]"


def _package_check(distribution: str, *, required: bool = True) -> Check:
    """Return (label, value, status) for an installed distribution."""
    try:
        version = metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return distribution, "NOT INSTALLED", FAIL if required else WARN
    return distribution, version, OK


def _selector_check(settings: NawsSettings) -> Check:
    status = detect_fzf()
    if status.found:
        return "fzf", str(status.path), OK
    if settings.selector == "fzf":
        return "fzf", "not found (NAWS_SELECTOR=fzf)", FAIL
    return "fzf", "not found — using questionary", WARN


def _editor_check(settings: NawsSettings) -> Check:
    status = detect_editor(settings.editor)
    if status.found:
        return "editor", f"{settings.editor} ({status.path})", OK
    return "editor", f"{settings.editor} not found", WARN


def _credentials_check(gateway: RemoteGateway) -> Check:
    """Return (label, value, status) for ``sts get-caller-identity``."""
    try:
        identity = gateway.invoke(Endpoint("sts", "get_caller_identity"), {})
    except NawsError as exc:
        return "AWS identity", str(exc), FAIL
    return "AWS identity", str(identity.get("Arn", "unknown")), OK


def _target_check(settings: NawsSettings) -> Check:
    value = (
        f"profile={settings.profile or 'default'} "
        f"region={settings.region or 'default'}"
    )
    if settings.endpoint_url:
        value += f" endpoint={settings.endpoint_url}"
    return "AWS target", value, OK


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\nnaws doctor", file=sys.stderr)
    print("=" * 72, file=sys.stderr)
    print(f"{'Component':<14} {'Value':<48} {'Status':<8}", file=sys.stderr)
    print("-" * 72, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<14} {value:<48} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def collect_checks(settings: NawsSettings, gateway: RemoteGateway) -> list[Check]:
    return [
        ("naws", __version__, OK),
        _python_version_check(),
        _package_check("boto3"),
        _package_check("rich", required=False),
        _package_check("questionary", required=False),
        _selector_check(settings),
        _editor_check(settings),
        _target_check(settings),
        _credentials_check(gateway),
    ]


def run_doctor(settings: NawsSettings, gateway: RemoteGateway | None = None) -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check fails,
        :data:`exit_codes.GENERAL_ERROR` otherwise.
    """
    if gateway is None:
        from naws.infra.aws_gateway import Boto3Gateway

        gateway = Boto3Gateway(settings)

    checks = collect_checks(settings, gateway)
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.markup import escape
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
        print("Some checks failed." if has_failure else "All checks passed.", file=sys.stderr)
        return exit_codes.GENERAL_ERROR if has_failure else exit_codes.SUCCESS

    table = Table(
        title="naws doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20, overflow="fold")
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, escape(value), status)

    console.print()
    console.print(table)
    console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
