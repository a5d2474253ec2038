"""``naws logs`` — CloudWatch log groups, streams and live tailing."""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Any

from naws.cli import exit_codes
from naws.cli.commands.context import CommandContext, arg
from naws.cli.commands.formatting import epoch_ms, human_size, timestamp
from naws.cli.console import console, out
from naws.cli.render import escape_markup, nothing_selected, render_entities
from naws.core.listing import list_all
from naws.core.models import Column, Entity
from naws.core.protocols import Endpoint
from naws.core.registry import DomainDescriptor, SubcommandDescriptor
from naws.core.selection import SelectionCodec
from naws.core.tailing import LogTailer, Poll

TAIL_LOOKBACK = timedelta(minutes=5)

GROUP_CODEC = SelectionCodec(
    [
        Column("logGroupName", 55, header="Log group"),
        Column("retentionInDays", 9, header="Retention"),
        Column("storedBytes", 10, header="Stored", render=human_size),
    ],
)

STREAM_CODEC = SelectionCodec(
    [
        Column("logStreamName", 55, header="Stream"),
        Column("lastEventTimestamp", 19, header="Last event", render=timestamp),
    ],
)


def list_groups(ctx: CommandContext) -> tuple[Entity, ...]:
    return ctx.list_all(
        "logs",
        "describe_log_groups",
        items_key="logGroups",
        id_field="logGroupName",
        request_token="nextToken",
    )


def list_streams(ctx: CommandContext, group: str) -> tuple[Entity, ...]:
    return ctx.list_all(
        "logs",
        "describe_log_streams",
        {"logGroupName": group, "orderBy": "LastEventTime", "descending": True},
        items_key="logStreams",
        id_field="logStreamName",
        request_token="nextToken",
    )


def resolve_group(ctx: CommandContext, args: Sequence[str]) -> str | None:
    given = arg(args, 0)
    if given:
        return given
    chosen = ctx.pick(GROUP_CODEC, list_groups(ctx), "Log group")
    return chosen.identifier if chosen else None


def format_event(event: Entity) -> str:
    return (
        f"{timestamp(event.integer('timestamp'))} "
        f"{event.value('logStreamName', '-')} "
        f"{str(event.value('message', '')).rstrip()}"
    )


@contextmanager
def interrupt_stops(stop: threading.Event) -> Iterator[None]:
    """Route SIGINT to *stop* for the duration of the block.

    The previous handler is restored on exit.
    """

    def _handler(signum: int, frame: Any) -> None:
        stop.set()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def make_poll(ctx: CommandContext, group: str, pattern: str | None) -> Poll:
    """Return a poll function for :class:`LogTailer` over ``filter_log_events``."""
    endpoint = Endpoint("logs", "filter_log_events")

    def poll(since_ms: int | None) -> Sequence[Entity]:
        params: dict[str, Any] = {"logGroupName": group}
        if since_ms is not None:
            params["startTime"] = since_ms
        if pattern:
            params["filterPattern"] = pattern
        return list_all(
            ctx.gateway,
            endpoint,
            params,
            items_key="events",
            id_field="eventId",
            request_token="nextToken",
        ).require_complete()

    return poll


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def groups(ctx: CommandContext, args: Sequence[str]) -> int:
    render_entities("Log groups", GROUP_CODEC, list_groups(ctx), id_header="Log group")
    return exit_codes.SUCCESS


def streams(ctx: CommandContext, args: Sequence[str]) -> int:
    group = resolve_group(ctx, args)
    if group is None:
        return nothing_selected()
    render_entities(f"Streams in {group}", STREAM_CODEC, list_streams(ctx, group), id_header="Stream")
    return exit_codes.SUCCESS


def tail(ctx: CommandContext, args: Sequence[str]) -> int:
    """Follow a log group until Ctrl+C; optional second argument is a filter pattern."""
    group = resolve_group(ctx, args)
    if group is None:
        return nothing_selected()

    since = epoch_ms(datetime.now(timezone.utc) - TAIL_LOOKBACK)
    tailer = LogTailer(
        make_poll(ctx, group, arg(args, 1)),
        lambda event: out.print(escape_markup(format_event(event))),
        interval=ctx.settings.tail_interval,
        since_ms=since,
    )
    console.print(f"[bold]Tailing[/bold] {escape_markup(group)} (press Ctrl+C to stop)\n")
    with interrupt_stops(tailer.stop_event):
        count = tailer.run()
    console.print(f"\n[dim]Stopped after {count} event(s).[/dim]")
    return exit_codes.SUCCESS


def build_domain(ctx: CommandContext) -> DomainDescriptor:
    return DomainDescriptor(
        name="logs",
        description="CloudWatch log groups and streams",
        subcommands=(
            SubcommandDescriptor("groups", "List log groups", partial(groups, ctx)),
            SubcommandDescriptor("streams", "List streams [group]", partial(streams, ctx)),
            SubcommandDescriptor("tail", "Follow new events [group] [pattern]", partial(tail, ctx)),
        ),
    )
