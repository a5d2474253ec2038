"""Interactive prompts for the CLI layer (questionary).

This module is responsible for:

* :class:`QuestionarySelector` — the in-process fuzzy selector used when
  fzf is unavailable or not wanted.
* :class:`QuestionaryPrompter` — free-text and yes/no prompts.
* :func:`build_selector` — picking the selector backend from settings.

``questionary`` returns ``None`` when the user presses Esc or Ctrl+C;
every prompt here maps that to the neutral answer (no selection, empty
text, "no").
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from naws.config import NawsSettings
from naws.core.protocols import Selector
from naws.exceptions import EnvironmentError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


# ---------------------------------------------------------------------------
# Selector
# ---------------------------------------------------------------------------

class QuestionarySelector:
    """Concrete :class:`~naws.core.protocols.Selector` built on questionary.

    Single selection uses ``questionary.select`` with its type-to-filter
    search; multiple selection uses ``questionary.checkbox``.  Choice
    values are the labels themselves so the codec can decode them.
    """

    def select(
        self,
        candidates: Sequence[str],
        *,
        multiple: bool = False,
        prompt: str = "",
    ) -> list[str]:
        if not candidates:
            return []
        questionary = _import_questionary()
        message = prompt or "Select:"
        choices = [questionary.Choice(title=label, value=label) for label in candidates]

        if multiple:
            picked: list[str] | None = questionary.checkbox(
                message,
                choices=choices,
            ).ask()
            return list(picked or [])

        selected: str | None = questionary.select(
            message,
            choices=choices,
            use_search_filter=True,
            use_jk_keys=False,
            use_shortcuts=False,
        ).ask()  # Returns None on Ctrl+C / Esc
        return [selected] if selected is not None else []


def build_selector(settings: NawsSettings) -> Selector:
    """Return the selector backend requested by *settings*.

    ``auto`` prefers fzf when it is on PATH and falls back to
    questionary otherwise; ``fzf`` insists on it.
    """
    from naws.infra.binaries import detect_fzf, require_fzf
    from naws.infra.fzf_selector import FzfSelector

    if settings.selector == "questionary":
        return QuestionarySelector()
    if settings.selector == "fzf":
        return FzfSelector(str(require_fzf()))
    status = detect_fzf()
    if status.found and status.path is not None:
        return FzfSelector(str(status.path))
    return QuestionarySelector()


# ---------------------------------------------------------------------------
# Prompter
# ---------------------------------------------------------------------------

class QuestionaryPrompter:
    """Concrete :class:`~naws.core.protocols.Prompter` built on questionary."""

    def prompt_line(self, message: str, *, default: str = "") -> str:
        questionary = _import_questionary()
        answer: str | None = questionary.text(message, default=default).ask()
        return (answer or "").strip()

    def confirm(self, message: str, *, default: bool = False) -> bool:
        questionary = _import_questionary()
        answer: bool | None = questionary.confirm(message, default=default).ask()
        return bool(answer)
