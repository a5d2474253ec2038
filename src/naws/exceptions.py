"""Custom exception hierarchy for naws.

All exceptions that cross layer boundaries must inherit from
:class:`NawsError`.  Raw third-party exceptions (e.g. from botocore)
must NEVER propagate beyond the infrastructure layer — they must be
caught and re-raised as a typed subclass defined here.

Hierarchy
---------
NawsError
├── TransportError
├── SelectionNotFoundError
├── ValidationError
├── UnknownCommandError
├── RegistryError
├── EntityFieldError
├── SelectorError
├── EditorError
└── EnvironmentError
    └── EnvironmentCheckError
"""

from __future__ import annotations


class NawsError(Exception):
    """Base exception for all naws errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Remote API ------------------------------------------------------------

class TransportError(NawsError):
    """Raised when a remote API call returns a non-success outcome."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.endpoint: str | None = endpoint
        """Dotted ``service.operation`` name of the failed call, if known."""


# --- Selection -------------------------------------------------------------

class SelectionNotFoundError(NawsError):
    """Raised when a selected label no longer maps to a known entity."""


class SelectorError(NawsError):
    """Raised when the interactive selector process itself fails."""


# --- User input ------------------------------------------------------------

class ValidationError(NawsError):
    """Raised when user-supplied input is empty or malformed."""


class EditorError(NawsError):
    """Raised when the external editor fails or its scratch file vanishes."""


# --- Dispatch / registry ---------------------------------------------------

class UnknownCommandError(NawsError):
    """Raised when a domain or subcommand name is not registered."""


class RegistryError(NawsError):
    """Raised on an invalid domain registration."""


# --- Entities --------------------------------------------------------------

class EntityFieldError(NawsError):
    """Raised when an entity field is missing or has an unexpected type."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(NawsError):
    """Raised when a required runtime dependency is not available."""


class EnvironmentCheckError(EnvironmentError):
    """Raised when a required environment precondition is not met."""


def append_credentials_suggestion(hint: str) -> str:
    """Append AWS credential guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "Also check your AWS credentials:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    aws sts get-caller-identity",
        )
    )
