"""Domain command handlers and registry assembly.

Each domain module exposes ``build_domain(ctx) -> DomainDescriptor``.
:func:`build_registry` registers them in display order and freezes the
registry before it is handed to the dispatcher.
"""

from __future__ import annotations

from naws.cli.commands import batch, events, logs, queue, storage
from naws.cli.commands.context import CommandContext
from naws.config import NawsSettings
from naws.core.registry import Registry

DOMAIN_MODULES = (storage, queue, logs, batch, events)


def build_context(settings: NawsSettings) -> CommandContext:
    """Wire the concrete collaborators for one process."""
    from naws.cli.prompts import QuestionaryPrompter, build_selector
    from naws.infra.aws_gateway import Boto3Gateway
    from naws.infra.editor import ExternalEditor

    return CommandContext(
        settings=settings,
        gateway=Boto3Gateway(settings),
        selector=build_selector(settings),
        prompter=QuestionaryPrompter(),
        editor=ExternalEditor(settings.editor),
    )


def build_registry(ctx: CommandContext) -> Registry:
    registry = Registry()
    for module in DOMAIN_MODULES:
        registry.register(module.build_domain(ctx))
    return registry.freeze()


__all__: list[str] = ["CommandContext", "build_context", "build_registry"]
