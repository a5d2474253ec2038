"""Scoped external-editor invocation.

The payload is written to a temporary file, the user's editor is run
on it, and the saved content is read back.  The temporary file is
removed on every exit path: success, editor failure, or the file having
been deleted from under us.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from naws.exceptions import EditorError


@contextmanager
def scratch_file(initial: str, extension: str) -> Iterator[Path]:
    """Yield a temporary file holding *initial*; always delete it afterwards."""
    suffix = extension if extension.startswith(".") else f".{extension}"
    fd, name = tempfile.mkstemp(prefix="naws-", suffix=suffix)
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(initial)
        yield path
    finally:
        path.unlink(missing_ok=True)


class ExternalEditor:
    """Concrete :class:`~naws.core.protocols.TextEditor` running a command line.

    Parameters
    ----------
    command:
        Editor command, split with :func:`shlex.split` (e.g. ``"code -w"``).
    """

    def __init__(self, command: str) -> None:
        self._argv = shlex.split(command)
        if not self._argv:
            raise EditorError("No editor configured.", hint="Set NAWS_EDITOR or EDITOR.")

    def edit_text(self, initial: str, extension: str = ".txt") -> str:
        with scratch_file(initial, extension) as path:
            logger.debug("Opening {} in {}", path, self._argv[0])
            try:
                completed = subprocess.run([*self._argv, str(path)], check=False)  # noqa: S603
            except OSError as exc:
                raise EditorError(
                    f"Could not start editor '{self._argv[0]}': {exc}",
                    hint="Set NAWS_EDITOR or EDITOR to an installed editor.",
                ) from exc
            if completed.returncode != 0:
                raise EditorError(
                    f"Editor exited with status {completed.returncode}; nothing was sent.",
                )
            try:
                return path.read_text(encoding="utf-8")
            except FileNotFoundError as exc:
                raise EditorError("The edited file was removed before it could be read.") from exc
