"""Shared pytest fixtures and configuration for the naws test suite.

Guidelines
----------
* No network access in any test — boto3 is replaced by fakes at the
  gateway boundary.
* No terminal — selectors, prompts and editors are scripted fakes.
* Core tests must be pure — no side effects.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

import pytest

from naws.cli.commands.context import CommandContext
from naws.config import NawsSettings
from naws.core.protocols import Endpoint
from naws.exceptions import TransportError

Responder = Callable[[dict[str, Any]], dict[str, Any]]


class FakeGateway:
    """Scripted :class:`RemoteGateway`.

    ``responses`` maps ``"service.operation"`` to either a dict, a list
    of dicts (consumed one per call), an exception instance, or a
    callable taking the params.
    """

    def __init__(self, responses: Mapping[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def invoke(self, endpoint: Endpoint, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        key = str(endpoint)
        call_params = dict(params or {})
        self.calls.append((key, call_params))
        if key not in self.responses:
            raise TransportError(f"no fake response for {key}", endpoint=key)
        response = self.responses[key]
        if isinstance(response, list):
            if not response:
                raise TransportError(f"fake responses for {key} exhausted", endpoint=key)
            response = response.pop(0)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(call_params)
        return dict(response)

    def calls_to(self, key: str) -> list[dict[str, Any]]:
        return [params for name, params in self.calls if name == key]


class FakeSelector:
    """Picks labels with *choose* (default: nothing)."""

    def __init__(self, choose: Callable[[Sequence[str]], list[str]] | None = None) -> None:
        self._choose = choose or (lambda labels: [])
        self.seen: list[tuple[list[str], bool, str]] = []

    def select(
        self,
        candidates: Sequence[str],
        *,
        multiple: bool = False,
        prompt: str = "",
    ) -> list[str]:
        self.seen.append((list(candidates), multiple, prompt))
        return self._choose(candidates)


class FakePrompter:
    def __init__(self, lines: Sequence[str] = (), confirm: bool = True) -> None:
        self._lines = list(lines)
        self._confirm = confirm
        self.messages: list[str] = []

    def prompt_line(self, message: str, *, default: str = "") -> str:
        self.messages.append(message)
        return self._lines.pop(0) if self._lines else default

    def confirm(self, message: str, *, default: bool = False) -> bool:
        self.messages.append(message)
        return self._confirm


class FakeEditor:
    def __init__(self, text: str = "") -> None:
        self.text = text
        self.opened: list[tuple[str, str]] = []

    def edit_text(self, initial: str, extension: str = ".txt") -> str:
        self.opened.append((initial, extension))
        return self.text


def pick_all(labels: Sequence[str]) -> list[str]:
    return list(labels)


def pick_first(labels: Sequence[str]) -> list[str]:
    return list(labels[:1])


@pytest.fixture()
def settings() -> NawsSettings:
    return NawsSettings(_env_file=None, selector="questionary", editor="vi", max_workers=1)


@pytest.fixture()
def make_ctx(settings: NawsSettings) -> Callable[..., CommandContext]:
    """Build a :class:`CommandContext` around fakes."""

    def _make(
        gateway: FakeGateway | None = None,
        *,
        selector: FakeSelector | None = None,
        prompter: FakePrompter | None = None,
        editor: FakeEditor | None = None,
    ) -> CommandContext:
        return CommandContext(
            settings=settings,
            gateway=gateway or FakeGateway(),
            selector=selector or FakeSelector(),
            prompter=prompter or FakePrompter(),
            editor=editor or FakeEditor(),
        )

    return _make
