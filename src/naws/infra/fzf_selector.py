"""fzf backed implementation of :class:`~naws.core.protocols.Selector`.

Candidates are piped to ``fzf`` on stdin as NUL-terminated records, so
a label whose identifier contains a newline stays one item; fzf draws
its UI on the terminal and prints the chosen records on stdout, again
NUL-terminated.  Exit status 1 (no match) and 130 (Esc / Ctrl+C) both
mean "nothing selected".
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

from loguru import logger

from naws.exceptions import SelectorError

_NO_MATCH = 1
_ABORTED = 130


class FzfSelector:
    """Concrete :class:`Selector` driving an external ``fzf`` process."""

    def __init__(self, executable: str = "fzf", *, height: str = "60%") -> None:
        self._executable = executable
        self._height = height

    def build_command(self, *, multiple: bool, prompt: str) -> list[str]:
        command = [
            self._executable,
            f"--height={self._height}",
            "--layout=reverse",
            "--no-sort",
            "--read0",
            "--print0",
        ]
        if prompt:
            command.append(f"--prompt={prompt}> ")
        if multiple:
            command.extend(["--multi", "--bind=ctrl-a:select-all"])
        return command

    def select(
        self,
        candidates: Sequence[str],
        *,
        multiple: bool = False,
        prompt: str = "",
    ) -> list[str]:
        if not candidates:
            return []
        command = self.build_command(multiple=multiple, prompt=prompt)
        try:
            completed = subprocess.run(  # noqa: S603
                command,
                input="".join(f"{label}\0" for label in candidates),
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                check=False,
            )
        except OSError as exc:
            raise SelectorError(
                f"Could not start fzf: {exc}",
                hint="Install fzf or set NAWS_SELECTOR=questionary.",
            ) from exc

        if completed.returncode in (_NO_MATCH, _ABORTED):
            logger.debug("fzf returned {} — nothing selected", completed.returncode)
            return []
        if completed.returncode != 0:
            raise SelectorError(f"fzf exited with status {completed.returncode}.")
        return [record for record in completed.stdout.split("\0") if record]
