"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters and CLI
prompts must satisfy.  Core code depends ONLY on these protocols —
never on concrete implementations — preserving the dependency
inversion principle.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Names one remote operation, e.g. ``Endpoint("s3", "list_objects_v2")``."""

    service: str
    operation: str

    def __str__(self) -> str:
        return f"{self.service}.{self.operation}"


class RemoteGateway(Protocol):
    """Contract for remote API invocation backends.

    Any object that implements :meth:`invoke` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    def invoke(
        self,
        endpoint: Endpoint,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute one remote call and return its JSON-shaped payload.

        Implementations must map all backend-specific exceptions to
        :class:`~naws.exceptions.NawsError` subclasses.

        Raises
        ------
        TransportError
            When the remote call does not succeed.  The message carries
            the backend's human-readable diagnostic.
        """
        ...  # pragma: no cover


class Selector(Protocol):
    """Contract for interactive fuzzy selection front-ends."""

    def select(
        self,
        candidates: Sequence[str],
        *,
        multiple: bool = False,
        prompt: str = "",
    ) -> list[str]:
        """Present *candidates* and return the chosen lines verbatim.

        An empty list means the user aborted or chose nothing; that is
        a valid outcome, not an error.

        Raises
        ------
        SelectorError
            When the selector itself fails to run.
        """
        ...  # pragma: no cover


class Prompter(Protocol):
    """Contract for free-text and yes/no prompts."""

    def prompt_line(self, message: str, *, default: str = "") -> str:
        """Ask for one line of text.  May return an empty string."""
        ...  # pragma: no cover

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask a yes/no question."""
        ...  # pragma: no cover


class TextEditor(Protocol):
    """Contract for composing a payload in an external editor."""

    def edit_text(self, initial: str, extension: str = ".txt") -> str:
        """Open *initial* in an editor and return the saved content.

        Raises
        ------
        EditorError
            When the editor exits unsuccessfully or its file vanishes.
        """
        ...  # pragma: no cover
