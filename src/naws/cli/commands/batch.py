"""``naws batch`` — AWS Batch job queues and jobs.

``list_jobs`` only lists one status at a time, so job listings fan out
over every status with the partition aggregator and report a
per-status breakdown.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from functools import partial
from typing import Any

from naws.cli import exit_codes
from naws.cli.commands.context import CommandContext, arg
from naws.cli.commands.formatting import timestamp
from naws.cli.console import console
from naws.cli.render import (
    escape_markup,
    nothing_selected,
    render_batch_summary,
    render_detail,
    render_entities,
)
from naws.core.models import Column, Entity, Partition
from naws.core.registry import DomainDescriptor, SubcommandDescriptor
from naws.core.selection import SelectionCodec
from naws.exceptions import ValidationError

ACTIVE_STATUSES: tuple[str, ...] = (
    "SUBMITTED",
    "PENDING",
    "RUNNABLE",
    "STARTING",
    "RUNNING",
)
JOB_STATUSES: tuple[str, ...] = (*ACTIVE_STATUSES, "SUCCEEDED", "FAILED")

QUEUE_CODEC = SelectionCodec(
    [
        Column("jobQueueName", 40, header="Job queue"),
        Column("state", 9, header="State"),
        Column("status", 9, header="Status"),
        Column("priority", 8, header="Priority"),
    ],
)

JOB_CODEC = SelectionCodec(
    [
        Column("jobName", 36, header="Job"),
        Column("status", 10, header="Status"),
        Column("createdAt", 19, header="Created", render=timestamp),
    ],
)

DEFINITION_CODEC = SelectionCodec(
    [
        Column("jobDefinitionName", 40, header="Definition"),
        Column("revision", 8, header="Revision"),
        Column("type", 10, header="Type"),
    ],
)

DEFAULT_TERMINATE_REASON = "Terminated via naws"


# ---------------------------------------------------------------------------
# Enumeration helpers
# ---------------------------------------------------------------------------

def list_job_queues(ctx: CommandContext) -> tuple[Entity, ...]:
    return ctx.list_all(
        "batch",
        "describe_job_queues",
        items_key="jobQueues",
        id_field="jobQueueName",
        request_token="nextToken",
    )


def status_partitions(queue: str, statuses: Sequence[str] = JOB_STATUSES) -> list[Partition]:
    return [
        Partition(label=status, params={"jobQueue": queue, "jobStatus": status})
        for status in statuses
    ]


def list_jobs(
    ctx: CommandContext,
    queue: str,
    statuses: Sequence[str] = JOB_STATUSES,
) -> list[Entity]:
    """Every job of *queue* in *statuses*, newest first."""
    jobs = ctx.aggregate(
        "batch",
        "list_jobs",
        status_partitions(queue, statuses),
        items_key="jobSummaryList",
        id_field="jobId",
        request_token="nextToken",
    )
    return sorted(jobs, key=lambda job: job.value("createdAt", 0) or 0, reverse=True)


def resolve_queue(ctx: CommandContext, args: Sequence[str]) -> str | None:
    given = arg(args, 0)
    if given:
        return given
    chosen = ctx.pick(QUEUE_CODEC, list_job_queues(ctx), "Job queue")
    return chosen.identifier if chosen else None


def parse_overrides(text: str) -> dict[str, Any]:
    """Parse container overrides typed in the editor; blank means none."""
    if not text.strip():
        return {}
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(
            f"Container overrides are not valid JSON: {exc.msg} (line {exc.lineno}).",
            hint="Nothing was submitted.",
        ) from exc
    if not isinstance(parsed, dict):
        raise ValidationError("Container overrides must be a JSON object.")
    return parsed


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def queues(ctx: CommandContext, args: Sequence[str]) -> int:
    render_entities("Job queues", QUEUE_CODEC, list_job_queues(ctx), id_header="Job queue")
    return exit_codes.SUCCESS


def jobs(ctx: CommandContext, args: Sequence[str]) -> int:
    queue = resolve_queue(ctx, args)
    if queue is None:
        return nothing_selected()
    console.print(f"[bold]Jobs in {escape_markup(queue)} by status:[/bold]")
    render_entities(f"Jobs in {queue}", JOB_CODEC, list_jobs(ctx, queue), id_header="Job id")
    return exit_codes.SUCCESS


def describe(ctx: CommandContext, args: Sequence[str]) -> int:
    queue = resolve_queue(ctx, args)
    if queue is None:
        return nothing_selected()
    job = ctx.pick(JOB_CODEC, list_jobs(ctx, queue), "Job")
    if job is None:
        return nothing_selected()
    found = ctx.call("batch", "describe_jobs", jobs=[job.identifier]).get("jobs", [])
    if not found:
        console.print(f"[yellow]Job {escape_markup(job.identifier)} is no longer available.[/yellow]")
        return exit_codes.GENERAL_ERROR
    render_detail(job.identifier, found[0])
    return exit_codes.SUCCESS


def terminate(ctx: CommandContext, args: Sequence[str]) -> int:
    queue = resolve_queue(ctx, args)
    if queue is None:
        return nothing_selected()
    chosen = ctx.pick_many(JOB_CODEC, list_jobs(ctx, queue, ACTIVE_STATUSES), "Jobs to terminate")
    if not chosen:
        return nothing_selected()
    reason = ctx.require_text("Reason:", default=DEFAULT_TERMINATE_REASON)
    if not ctx.prompter.confirm(f"Terminate {len(chosen)} job(s) in {queue}?", default=False):
        console.print("[yellow]Cancelled.[/yellow]")
        return exit_codes.SUCCESS

    def stop(job_id: str) -> None:
        ctx.call("batch", "terminate_job", jobId=job_id, reason=reason)

    outcome = ctx.apply_all([job.identifier for job in chosen], stop)
    return render_batch_summary(outcome, "Terminated")


def submit(ctx: CommandContext, args: Sequence[str]) -> int:
    queue = resolve_queue(ctx, args)
    if queue is None:
        return nothing_selected()
    definitions = ctx.list_all(
        "batch",
        "describe_job_definitions",
        {"status": "ACTIVE"},
        items_key="jobDefinitions",
        id_field="jobDefinitionArn",
        request_token="nextToken",
    )
    definition = ctx.pick(DEFINITION_CODEC, definitions, "Job definition")
    if definition is None:
        return nothing_selected()

    name = ctx.require_text("Job name:")
    overrides = parse_overrides(ctx.editor.edit_text("{}\n", ".json"))

    params: dict[str, Any] = {
        "jobName": name,
        "jobQueue": queue,
        "jobDefinition": definition.identifier,
    }
    if overrides:
        params["containerOverrides"] = overrides
    result = ctx.call("batch", "submit_job", **params)
    console.print(
        f"[bold green]Submitted[/bold green] {escape_markup(name)} "
        f"(job id {escape_markup(str(result.get('jobId', '')))})",
    )
    return exit_codes.SUCCESS


def build_domain(ctx: CommandContext) -> DomainDescriptor:
    return DomainDescriptor(
        name="batch",
        description="AWS Batch job queues and jobs",
        subcommands=(
            SubcommandDescriptor("queues", "List job queues", partial(queues, ctx)),
            SubcommandDescriptor("jobs", "List jobs in every status [queue]", partial(jobs, ctx)),
            SubcommandDescriptor("describe", "Show one job [queue]", partial(describe, ctx)),
            SubcommandDescriptor(
                "terminate", "Terminate selected active jobs [queue]", partial(terminate, ctx),
            ),
            SubcommandDescriptor("submit", "Submit a job [queue]", partial(submit, ctx)),
        ),
    )
