"""``naws storage`` — S3 buckets and objects."""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial
from pathlib import Path

from naws.cli import exit_codes
from naws.cli.commands.context import CommandContext, arg
from naws.cli.commands.formatting import human_size, timestamp
from naws.cli.console import console
from naws.cli.render import (
    escape_markup,
    nothing_selected,
    render_batch_summary,
    render_entities,
)
from naws.core.models import Column, Entity
from naws.core.registry import DomainDescriptor, SubcommandDescriptor
from naws.core.selection import SelectionCodec
from naws.exceptions import ValidationError

BUCKET_CODEC = SelectionCodec(
    [
        Column("Name", 45, header="Bucket"),
        Column("CreationDate", 19, header="Created", render=timestamp),
    ],
)

OBJECT_CODEC = SelectionCodec(
    [
        Column("Key", 60),
        Column("Size", 10, render=human_size),
        Column("LastModified", 19, header="Modified", render=timestamp),
    ],
)


# ---------------------------------------------------------------------------
# Enumeration helpers
# ---------------------------------------------------------------------------

def list_buckets(ctx: CommandContext) -> tuple[Entity, ...]:
    return ctx.list_all(
        "s3",
        "list_buckets",
        items_key="Buckets",
        id_field="Name",
        request_token="ContinuationToken",
    )


def list_objects(ctx: CommandContext, bucket: str, prefix: str = "") -> tuple[Entity, ...]:
    params = {"Bucket": bucket}
    if prefix:
        params["Prefix"] = prefix
    return ctx.list_all(
        "s3",
        "list_objects_v2",
        params,
        items_key="Contents",
        id_field="Key",
        request_token="ContinuationToken",
        response_token="NextContinuationToken",
    )


def resolve_bucket(ctx: CommandContext, args: Sequence[str]) -> str | None:
    """Bucket from the first argument, else an interactive pick."""
    given = arg(args, 0)
    if given:
        return given.removeprefix("s3://").rstrip("/")
    chosen = ctx.pick(BUCKET_CODEC, list_buckets(ctx), "Bucket")
    return chosen.identifier if chosen else None


def download_target(dest: Path, key: str) -> Path:
    """Local path for *key* under *dest*; keys may not escape *dest*."""
    root = dest.resolve()
    target = (root / key).resolve()
    if not target.is_relative_to(root) or target == root:
        raise ValidationError(f"Refusing to write '{key}' outside {root}.")
    return target


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def buckets(ctx: CommandContext, args: Sequence[str]) -> int:
    render_entities("Buckets", BUCKET_CODEC, list_buckets(ctx), id_header="Bucket")
    return exit_codes.SUCCESS


def list_(ctx: CommandContext, args: Sequence[str]) -> int:
    bucket = resolve_bucket(ctx, args)
    if bucket is None:
        return nothing_selected()
    objects = list_objects(ctx, bucket, arg(args, 1) or "")
    render_entities(f"Objects in {bucket}", OBJECT_CODEC, objects, id_header="Key")
    return exit_codes.SUCCESS


def remove(ctx: CommandContext, args: Sequence[str]) -> int:
    bucket = resolve_bucket(ctx, args)
    if bucket is None:
        return nothing_selected()
    chosen = ctx.pick_many(
        OBJECT_CODEC, list_objects(ctx, bucket, arg(args, 1) or ""), "Objects to delete",
    )
    if not chosen:
        return nothing_selected()
    if not ctx.prompter.confirm(
        f"Permanently delete {len(chosen)} object(s) from {bucket}?", default=False,
    ):
        console.print("[yellow]Cancelled.[/yellow]")
        return exit_codes.SUCCESS

    def delete(key: str) -> None:
        ctx.call("s3", "delete_object", Bucket=bucket, Key=key)

    outcome = ctx.apply_all([e.identifier for e in chosen], delete)
    return render_batch_summary(outcome, "Deleted")


def download(ctx: CommandContext, args: Sequence[str]) -> int:
    bucket = resolve_bucket(ctx, args)
    if bucket is None:
        return nothing_selected()
    dest = Path(arg(args, 2) or ".")
    chosen = ctx.pick_many(
        OBJECT_CODEC, list_objects(ctx, bucket, arg(args, 1) or ""), "Objects to download",
    )
    if not chosen:
        return nothing_selected()

    def fetch(key: str) -> None:
        target = download_target(dest, key)
        target.parent.mkdir(parents=True, exist_ok=True)
        ctx.call("s3", "download_file", Bucket=bucket, Key=key, Filename=str(target))

    outcome = ctx.apply_all([e.identifier for e in chosen], fetch)
    return render_batch_summary(outcome, "Downloaded")


def upload(ctx: CommandContext, args: Sequence[str]) -> int:
    source = Path(arg(args, 0) or ctx.require_text("Local file to upload:"))
    if not source.is_file():
        raise ValidationError(f"Not a file: {source}")
    bucket = resolve_bucket(ctx, args[1:])
    if bucket is None:
        return nothing_selected()
    key = arg(args, 2) or ctx.require_text("Object key:", default=source.name)
    ctx.call("s3", "upload_file", Filename=str(source), Bucket=bucket, Key=key)
    console.print(f"[bold green]Uploaded[/bold green] {escape_markup(str(source))} → "
        f"{escape_markup(f's3://{bucket}/{key}')}")
    return exit_codes.SUCCESS


def build_domain(ctx: CommandContext) -> DomainDescriptor:
    return DomainDescriptor(
        name="storage",
        description="S3 buckets and objects",
        subcommands=(
            SubcommandDescriptor("buckets", "List buckets", partial(buckets, ctx)),
            SubcommandDescriptor("list", "List objects [bucket] [prefix]", partial(list_, ctx)),
            SubcommandDescriptor(
                "remove", "Delete selected objects [bucket] [prefix]", partial(remove, ctx),
            ),
            SubcommandDescriptor(
                "download",
                "Download selected objects [bucket] [prefix] [dest]",
                partial(download, ctx),
            ),
            SubcommandDescriptor(
                "upload", "Upload a file <file> [bucket] [key]", partial(upload, ctx),
            ),
        ),
    )
