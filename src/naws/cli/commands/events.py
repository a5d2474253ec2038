"""``naws events`` — EventBridge rules and EventBridge Scheduler schedules."""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial

from naws.cli import exit_codes
from naws.cli.commands.context import CommandContext, arg
from naws.cli.render import (
    nothing_selected,
    render_batch_summary,
    render_detail,
    render_entities,
)
from naws.core.models import Column, Entity
from naws.core.registry import DomainDescriptor, SubcommandDescriptor
from naws.core.selection import SelectionCodec

DEFAULT_BUS = "default"
DEFAULT_GROUP = "default"

BUS_CODEC = SelectionCodec([Column("Name", 40, header="Event bus")])

RULE_CODEC = SelectionCodec(
    [
        Column("Name", 40, header="Rule"),
        Column("State", 9),
        Column("ScheduleExpression", 24, header="Schedule"),
    ],
)

SCHEDULE_CODEC = SelectionCodec(
    [
        Column("Name", 40, header="Schedule"),
        Column("GroupName", 20, header="Group"),
        Column("State", 9),
    ],
)


def list_buses(ctx: CommandContext) -> tuple[Entity, ...]:
    return ctx.list_all(
        "events",
        "list_event_buses",
        items_key="EventBuses",
        id_field="Name",
        request_token="NextToken",
    )


def list_rules(ctx: CommandContext, bus: str) -> tuple[Entity, ...]:
    return ctx.list_all(
        "events",
        "list_rules",
        {"EventBusName": bus},
        items_key="Rules",
        id_field="Name",
        request_token="NextToken",
    )


def list_schedules(ctx: CommandContext) -> tuple[Entity, ...]:
    return ctx.list_all(
        "scheduler",
        "list_schedules",
        items_key="Schedules",
        id_field="Arn",
        request_token="NextToken",
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def buses(ctx: CommandContext, args: Sequence[str]) -> int:
    render_entities("Event buses", BUS_CODEC, list_buses(ctx), id_header="Name")
    return exit_codes.SUCCESS


def rules(ctx: CommandContext, args: Sequence[str]) -> int:
    bus = arg(args, 0) or DEFAULT_BUS
    render_entities(f"Rules on {bus}", RULE_CODEC, list_rules(ctx, bus), id_header="Rule")
    return exit_codes.SUCCESS


def _toggle(ctx: CommandContext, args: Sequence[str], *, enable: bool) -> int:
    bus = arg(args, 0) or DEFAULT_BUS
    wanted_state = "DISABLED" if enable else "ENABLED"
    candidates = [rule for rule in list_rules(ctx, bus) if rule.value("State") == wanted_state]
    verb = "enable" if enable else "disable"
    chosen = ctx.pick_many(RULE_CODEC, candidates, f"Rules to {verb}")
    if not chosen:
        return nothing_selected()

    operation = "enable_rule" if enable else "disable_rule"

    def apply(name: str) -> None:
        ctx.call("events", operation, Name=name, EventBusName=bus)

    outcome = ctx.apply_all([rule.identifier for rule in chosen], apply)
    return render_batch_summary(outcome, "Enabled" if enable else "Disabled")


def enable(ctx: CommandContext, args: Sequence[str]) -> int:
    return _toggle(ctx, args, enable=True)


def disable(ctx: CommandContext, args: Sequence[str]) -> int:
    return _toggle(ctx, args, enable=False)


def schedules(ctx: CommandContext, args: Sequence[str]) -> int:
    render_entities("Schedules", SCHEDULE_CODEC, list_schedules(ctx), id_header="ARN")
    return exit_codes.SUCCESS


def schedule(ctx: CommandContext, args: Sequence[str]) -> int:
    """Describe one schedule: ``[name] [group]`` or an interactive pick."""
    name = arg(args, 0)
    group = arg(args, 1) or DEFAULT_GROUP
    if name is None:
        chosen = ctx.pick(SCHEDULE_CODEC, list_schedules(ctx), "Schedule")
        if chosen is None:
            return nothing_selected()
        name = chosen.string("Name")
        group = str(chosen.value("GroupName") or DEFAULT_GROUP)
    payload = ctx.call("scheduler", "get_schedule", Name=name, GroupName=group)
    render_detail(f"{group}/{name}", payload)
    return exit_codes.SUCCESS


def build_domain(ctx: CommandContext) -> DomainDescriptor:
    return DomainDescriptor(
        name="events",
        description="EventBridge rules and schedules",
        subcommands=(
            SubcommandDescriptor("buses", "List event buses", partial(buses, ctx)),
            SubcommandDescriptor("rules", "List rules [bus]", partial(rules, ctx)),
            SubcommandDescriptor("enable", "Enable selected rules [bus]", partial(enable, ctx)),
            SubcommandDescriptor("disable", "Disable selected rules [bus]", partial(disable, ctx)),
            SubcommandDescriptor("schedules", "List schedules", partial(schedules, ctx)),
            SubcommandDescriptor("schedule", "Show one schedule [name] [group]", partial(schedule, ctx)),
        ),
    )
