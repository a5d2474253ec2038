"""Per-process context handed to every command handler.

Handlers are plain functions ``handler(ctx, args) -> int``; each domain
binds them to one :class:`CommandContext` with :func:`functools.partial`
when it builds its :class:`~naws.core.registry.DomainDescriptor`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from naws.cli.render import render_breakdown
from naws.config import NawsSettings
from naws.core.aggregation import aggregate
from naws.core.batch import Action, apply_all
from naws.core.listing import list_all
from naws.core.models import BatchOutcome, Entity, Partition
from naws.core.protocols import Endpoint, Prompter, RemoteGateway, Selector, TextEditor
from naws.core.selection import SelectionCodec, choose, choose_one
from naws.exceptions import ValidationError


@dataclass(frozen=True)
class CommandContext:
    """Collaborators shared by all handlers of one process."""

    settings: NawsSettings
    gateway: RemoteGateway
    selector: Selector
    prompter: Prompter
    editor: TextEditor

    # ------------------------------------------------------------------
    # Remote calls
    # ------------------------------------------------------------------

    def call(self, service: str, operation: str, **params: Any) -> dict[str, Any]:
        """Single-shot remote call; failures propagate as TransportError."""
        return self.gateway.invoke(Endpoint(service, operation), params)

    def list_all(
        self,
        service: str,
        operation: str,
        params: Mapping[str, Any] | None = None,
        **fetcher_options: Any,
    ) -> tuple[Entity, ...]:
        """Enumerate a paginated list call or raise if it was cut short."""
        result = list_all(self.gateway, Endpoint(service, operation), params, **fetcher_options)
        return result.require_complete()

    def aggregate(
        self,
        service: str,
        operation: str,
        partitions: Sequence[Partition],
        **fetcher_options: Any,
    ) -> tuple[Entity, ...]:
        """Enumerate every partition in parallel and print the breakdown."""
        endpoint = Endpoint(service, operation)

        def fetch_one(partition: Partition) -> Sequence[Entity]:
            return list_all(
                self.gateway, endpoint, partition.params, **fetcher_options,
            ).require_complete()

        result = aggregate(partitions, fetch_one, max_workers=self.settings.max_workers)
        render_breakdown(result)
        return result.entities

    def apply_all(self, items: Sequence[str], action: Action) -> BatchOutcome:
        return apply_all(items, action, max_workers=self.settings.max_workers)

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def pick(
        self,
        codec: SelectionCodec,
        entities: Sequence[Entity],
        prompt: str,
    ) -> Entity | None:
        return choose_one(self.selector, codec, entities, prompt=prompt)

    def pick_many(
        self,
        codec: SelectionCodec,
        entities: Sequence[Entity],
        prompt: str,
    ) -> list[Entity]:
        return choose(self.selector, codec, entities, prompt=prompt, multiple=True)

    def require_text(self, message: str, *, default: str = "") -> str:
        """Prompt for a value that must not be empty."""
        value = self.prompter.prompt_line(message, default=default).strip()
        if not value:
            raise ValidationError(f"{message.rstrip(':? ')} must not be empty.")
        return value


def arg(args: Sequence[str], index: int) -> str | None:
    """Return positional argument *index* or ``None``."""
    return args[index] if len(args) > index and args[index] else None
