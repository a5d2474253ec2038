"""Tests for interactive prompts (cli/prompts.py).

questionary is replaced with ``MagicMock`` so no TTY is required.

Coverage:
* Single and multiple selection wiring.
* ``None`` answers (Esc / Ctrl+C) map to neutral results.
* Selector backend choice from settings.
* Missing questionary raises ``EnvironmentError``.
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from naws.cli.prompts import QuestionaryPrompter, QuestionarySelector, build_selector
from naws.config import NawsSettings
from naws.exceptions import EnvironmentCheckError, EnvironmentError
from naws.infra.binaries import BinaryStatus
from naws.infra.fzf_selector import FzfSelector

LABELS = ["one  ⟦1⟧", "two  ⟦2⟧"]


@pytest.fixture()
def questionary() -> MagicMock:
    fake = MagicMock()
    with patch.dict(sys.modules, {"questionary": fake}):
        yield fake


# ---------------------------------------------------------------------------
# QuestionarySelector
# ---------------------------------------------------------------------------

class TestQuestionarySelector:
    def test_single_selection(self, questionary: MagicMock) -> None:
        questionary.select.return_value.ask.return_value = LABELS[1]
        assert QuestionarySelector().select(LABELS, prompt="Queue") == [LABELS[1]]

        args, kwargs = questionary.select.call_args
        assert args == ("Queue",)
        assert kwargs["use_search_filter"] is True
        assert kwargs["use_jk_keys"] is False
        assert len(kwargs["choices"]) == 2

    def test_single_selection_aborted(self, questionary: MagicMock) -> None:
        questionary.select.return_value.ask.return_value = None
        assert QuestionarySelector().select(LABELS) == []

    def test_multiple_selection(self, questionary: MagicMock) -> None:
        questionary.checkbox.return_value.ask.return_value = [LABELS[0], LABELS[1]]
        assert QuestionarySelector().select(LABELS, multiple=True) == LABELS
        questionary.select.assert_not_called()

    def test_multiple_selection_aborted(self, questionary: MagicMock) -> None:
        questionary.checkbox.return_value.ask.return_value = None
        assert QuestionarySelector().select(LABELS, multiple=True) == []

    def test_no_candidates_never_prompts(self, questionary: MagicMock) -> None:
        assert QuestionarySelector().select([]) == []
        questionary.select.assert_not_called()

    @patch.dict(sys.modules, {"questionary": None})
    def test_missing_questionary(self) -> None:
        with pytest.raises(EnvironmentError, match="questionary is not installed"):
            QuestionarySelector().select(LABELS)


# ---------------------------------------------------------------------------
# QuestionaryPrompter
# ---------------------------------------------------------------------------

class TestQuestionaryPrompter:
    def test_prompt_line_strips(self, questionary: MagicMock) -> None:
        questionary.text.return_value.ask.return_value = "  group-1 "
        assert QuestionaryPrompter().prompt_line("Group:") == "group-1"

    def test_prompt_line_abort_is_empty(self, questionary: MagicMock) -> None:
        questionary.text.return_value.ask.return_value = None
        assert QuestionaryPrompter().prompt_line("Group:", default="x") == ""

    def test_confirm(self, questionary: MagicMock) -> None:
        questionary.confirm.return_value.ask.return_value = True
        assert QuestionaryPrompter().confirm("Delete?") is True
        questionary.confirm.assert_called_once_with("Delete?", default=False)

    def test_confirm_abort_is_no(self, questionary: MagicMock) -> None:
        questionary.confirm.return_value.ask.return_value = None
        assert QuestionaryPrompter().confirm("Delete?", default=True) is False


# ---------------------------------------------------------------------------
# build_selector
# ---------------------------------------------------------------------------

def _settings(selector: str) -> NawsSettings:
    return NawsSettings(_env_file=None, selector=selector)


def _fzf(found: bool) -> BinaryStatus:
    return BinaryStatus(
        name="fzf",
        found=found,
        path=Path("/usr/bin/fzf") if found else None,
        install_commands=() if found else ("brew install fzf",),
    )


class TestBuildSelector:
    def test_questionary_forced(self) -> None:
        assert isinstance(build_selector(_settings("questionary")), QuestionarySelector)

    @patch("naws.infra.binaries.detect_fzf")
    def test_auto_prefers_fzf(self, mock_detect: MagicMock) -> None:
        mock_detect.return_value = _fzf(True)
        assert isinstance(build_selector(_settings("auto")), FzfSelector)

    @patch("naws.infra.binaries.detect_fzf")
    def test_auto_falls_back(self, mock_detect: MagicMock) -> None:
        mock_detect.return_value = _fzf(False)
        assert isinstance(build_selector(_settings("auto")), QuestionarySelector)

    @patch("naws.infra.binaries.shutil.which", return_value=None)
    def test_fzf_forced_but_missing(self, _mock_which: object) -> None:
        with pytest.raises(EnvironmentCheckError):
            build_selector(_settings("fzf"))
