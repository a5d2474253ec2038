"""Infrastructure: detection of helper executables (fzf, editors).

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shlex
import shutil
from dataclasses import dataclass
from pathlib import Path

from naws.exceptions import EnvironmentCheckError


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BinaryStatus:
    """Result of an executable lookup.

    Attributes
    ----------
    name : str
        Executable that was looked up.
    found : bool
        Whether it was located on PATH.
    path : Path | None
        Absolute path to the binary, or ``None``.
    install_commands : tuple[str, ...]
        Suggested shell commands for installing it on the current
        platform.  Empty when it is already present.
    """

    name: str
    found: bool
    path: Path | None
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_binary(name: str) -> BinaryStatus:
    """Probe PATH for *name*; never raises."""
    result = shutil.which(name)
    if result is not None:
        return BinaryStatus(
            name=name,
            found=True,
            path=Path(result).resolve(),
            install_commands=(),
        )
    return BinaryStatus(
        name=name,
        found=False,
        path=None,
        install_commands=_platform_install_commands(name),
    )


def detect_fzf() -> BinaryStatus:
    return detect_binary("fzf")


def detect_editor(command: str) -> BinaryStatus:
    """Probe the executable of an editor command line such as ``code -w``."""
    parts = shlex.split(command)
    return detect_binary(parts[0] if parts else command)


def require_fzf() -> Path:
    """Locate fzf or raise :class:`EnvironmentCheckError`."""
    status = detect_fzf()
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append("Install fzf using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        hint_lines.append("Or set NAWS_SELECTOR=questionary.")
        raise EnvironmentCheckError(
            "fzf is not installed or not on PATH.",
            hint="\n".join(hint_lines),
        )
    return status.path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def _platform_install_commands(name: str) -> tuple[str, ...]:
    """Return install commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "windows":
        return (
            f"winget install {name}",
            f"choco install {name}",
        )
    if system == "linux":
        return (
            f"sudo apt install {name}",
            f"sudo dnf install {name}",
            f"sudo pacman -S {name}",
        )
    if system == "darwin":
        return (f"brew install {name}",)
    return ()
