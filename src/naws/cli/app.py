"""CLI application entry point and command routing for naws.

This module is the **sole error boundary** for the entire application.
It catches :class:`~naws.exceptions.NawsError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the domain
  command modules and through them to the core/infra layers.
* ``print()`` is forbidden outside the CLI layer; Rich console is used
  exclusively.
* Flags are parsed here; domain handlers receive only their free
  arguments.
"""

from __future__ import annotations

import argparse
import sys

from loguru import logger

from naws.cli import exit_codes
from naws.cli.console import console
from naws.cli.render import escape_markup
from naws.config import NawsSettings, load_settings
from naws.core.models import Column, Entity
from naws.core.protocols import Selector
from naws.core.registry import Registry
from naws.core.selection import SelectionCodec, choose_one
from naws.exceptions import NawsError, UnknownCommandError
from naws.version import __version__

SUBCOMMAND_CODEC = SelectionCodec(
    [
        Column("name", 12, header="Command"),
        Column("description", 48, header="Description"),
    ],
)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    The CLI supports:
    * ``naws <domain> [<subcommand> [args...]]``
    * ``naws <domain>``   — pick the subcommand interactively
    * ``naws doctor``     — environment diagnostics
    * ``naws --version``
    """
    parser = argparse.ArgumentParser(
        prog="naws",
        description="Interactive browser for AWS storage, queues, logs, batch jobs and events.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging on stderr.",
    )
    parser.add_argument("--profile", default=None, help="AWS profile name.")
    parser.add_argument("--region", default=None, help="AWS region.")
    parser.add_argument(
        "--endpoint-url",
        default=None,
        help="Override endpoint, e.g. http://localhost:4566 for LocalStack.",
    )
    parser.add_argument(
        "--selector",
        choices=("auto", "fzf", "questionary"),
        default=None,
        help="Interactive selector backend.",
    )
    parser.add_argument(
        "domain",
        nargs="?",
        default=None,
        help="Domain to work with, or 'doctor' to run diagnostics.",
    )
    parser.add_argument("subcommand", nargs="?", default=None)
    parser.add_argument("args", nargs=argparse.REMAINDER)
    return parser


def _settings_from(args: argparse.Namespace) -> NawsSettings:
    return load_settings().with_overrides(
        profile=args.profile,
        region=args.region,
        endpoint_url=args.endpoint_url,
        selector=args.selector,
    )


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _print_domains(registry: Registry) -> None:
    console.print("\n[bold]Domains:[/bold]")
    for name in registry.list_domains():
        console.print(f"  [cyan]{name:<10}[/cyan] {registry.get(name).description}")
    console.print("  [cyan]doctor    [/cyan] Check the local environment and AWS credentials")


def _pick_subcommand(selector: Selector, registry: Registry, domain_name: str) -> str | None:
    """Let the user choose one of *domain_name*'s subcommands."""
    domain = registry.get(domain_name)
    entities: list[Entity] = []
    for name in registry.list_subcommands(domain_name):
        sub = domain.subcommand(name)
        description = sub.description if sub is not None else ""
        entities.append(Entity.from_record({"name": name, "description": description}, "name"))
    chosen = choose_one(selector, SUBCOMMAND_CODEC, entities, prompt=f"naws {domain_name}")
    return chosen.identifier if chosen else None


def _report(exc: NawsError) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape_markup(str(exc))}")
    if exc.hint:
        console.print(f"[yellow]Hint:[/yellow] {escape_markup(exc.hint)}")


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the naws CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    from naws.cli.commands import build_context, build_registry
    from naws.cli.logging_setup import configure_logging

    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = _settings_from(args)
    configure_logging(verbose=args.verbose, log_file=settings.log_file)
    logger.debug("naws {} starting with {}", __version__, settings.model_dump(exclude={"editor"}))

    if args.domain is not None and args.domain.lower() == "doctor":
        from naws.cli.doctor import run_doctor

        return run_doctor(settings)

    ctx = build_context(settings)
    registry = build_registry(ctx)

    if args.domain is None:
        parser.print_help()
        _print_domains(registry)
        return exit_codes.SUCCESS

    subcommand = args.subcommand
    try:
        if subcommand is None:
            subcommand = _pick_subcommand(ctx.selector, registry, args.domain)
            if subcommand is None:
                console.print("[yellow]No command selected.[/yellow]")
                return exit_codes.SUCCESS
        return registry.dispatch(args.domain, subcommand, args.args)
    except UnknownCommandError as exc:
        _report(exc)
        return exit_codes.GENERAL_ERROR


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except NawsError as exc:
        _report(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        logger.opt(exception=exc).debug("Unexpected error")
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
