"""``naws queue`` — SQS queues and messages."""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial
from typing import Any

from naws.cli import exit_codes
from naws.cli.commands.context import CommandContext, arg
from naws.cli.console import console
from naws.cli.render import escape_markup, nothing_selected, render_detail, render_entities
from naws.core.models import Column, Entity
from naws.core.registry import DomainDescriptor, SubcommandDescriptor
from naws.core.selection import SelectionCodec
from naws.exceptions import ValidationError

QUEUE_CODEC = SelectionCodec(
    [
        Column("QueueName", 50, header="Queue"),
        Column("Type", 8),
    ],
)

MESSAGE_CODEC = SelectionCodec(
    [
        Column("Body", 70),
        Column("ReceiveCount", 8, header="Receives"),
    ],
)


def queue_record(url: str) -> dict[str, Any]:
    """Expand a bare queue URL into a displayable record."""
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return {
        "QueueUrl": url,
        "QueueName": name,
        "Type": "fifo" if name.endswith(".fifo") else "standard",
    }


def list_queues(ctx: CommandContext) -> tuple[Entity, ...]:
    return ctx.list_all(
        "sqs",
        "list_queues",
        {"MaxResults": 1000},
        items_key="QueueUrls",
        id_field="QueueUrl",
        request_token="NextToken",
        transform=queue_record,
    )


def resolve_queue(ctx: CommandContext, args: Sequence[str]) -> str | None:
    """Queue URL from a URL or name argument, else an interactive pick."""
    given = arg(args, 0)
    if given:
        if given.startswith(("http://", "https://")):
            return given
        return str(ctx.call("sqs", "get_queue_url", QueueName=given)["QueueUrl"])
    chosen = ctx.pick(QUEUE_CODEC, list_queues(ctx), "Queue")
    return chosen.identifier if chosen else None


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def list_(ctx: CommandContext, args: Sequence[str]) -> int:
    render_entities("Queues", QUEUE_CODEC, list_queues(ctx), id_header="URL")
    return exit_codes.SUCCESS


def info(ctx: CommandContext, args: Sequence[str]) -> int:
    url = resolve_queue(ctx, args)
    if url is None:
        return nothing_selected()
    payload = ctx.call("sqs", "get_queue_attributes", QueueUrl=url, AttributeNames=["All"])
    render_detail(url, payload.get("Attributes", {}))
    return exit_codes.SUCCESS


def send(ctx: CommandContext, args: Sequence[str]) -> int:
    url = resolve_queue(ctx, args)
    if url is None:
        return nothing_selected()

    body = ctx.editor.edit_text("", ".txt").strip()
    if not body:
        raise ValidationError("Message body must not be empty.", hint="Nothing was sent.")

    params: dict[str, Any] = {"QueueUrl": url, "MessageBody": body}
    if queue_record(url)["Type"] == "fifo":
        params["MessageGroupId"] = ctx.require_text("Message group id:")
        dedup = ctx.prompter.prompt_line("Deduplication id (empty for content-based):")
        if dedup:
            params["MessageDeduplicationId"] = dedup

    result = ctx.call("sqs", "send_message", **params)
    message_id = escape_markup(str(result.get("MessageId", "")))
    console.print(f"[bold green]Sent[/bold green] message {message_id}")
    return exit_codes.SUCCESS


def peek(ctx: CommandContext, args: Sequence[str]) -> int:
    """Receive up to ten messages without hiding them from other consumers."""
    url = resolve_queue(ctx, args)
    if url is None:
        return nothing_selected()
    payload = ctx.call(
        "sqs",
        "receive_message",
        QueueUrl=url,
        MaxNumberOfMessages=10,
        VisibilityTimeout=0,
        WaitTimeSeconds=1,
        AttributeNames=["All"],
    )
    messages = [
        Entity.from_record(
            {
                **message,
                "ReceiveCount": message.get("Attributes", {}).get("ApproximateReceiveCount"),
            },
            "MessageId",
        )
        for message in payload.get("Messages", [])
    ]
    render_entities("Messages", MESSAGE_CODEC, messages, id_header="MessageId")
    return exit_codes.SUCCESS


def purge(ctx: CommandContext, args: Sequence[str]) -> int:
    url = resolve_queue(ctx, args)
    if url is None:
        return nothing_selected()
    if not ctx.prompter.confirm(f"Delete ALL messages in {url}?", default=False):
        console.print("[yellow]Cancelled.[/yellow]")
        return exit_codes.SUCCESS
    ctx.call("sqs", "purge_queue", QueueUrl=url)
    console.print(f"[bold green]Purged[/bold green] {escape_markup(url)}")
    return exit_codes.SUCCESS


def build_domain(ctx: CommandContext) -> DomainDescriptor:
    return DomainDescriptor(
        name="queue",
        description="SQS queues and messages",
        subcommands=(
            SubcommandDescriptor("list", "List queues", partial(list_, ctx)),
            SubcommandDescriptor("info", "Show queue attributes [queue]", partial(info, ctx)),
            SubcommandDescriptor("send", "Compose and send a message [queue]", partial(send, ctx)),
            SubcommandDescriptor("peek", "Show waiting messages [queue]", partial(peek, ctx)),
            SubcommandDescriptor("purge", "Delete every message [queue]", partial(purge, ctx)),
        ),
    )
