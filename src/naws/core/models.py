"""Domain models for naws.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and derived views.  They carry zero I/O
and no dependencies on external packages.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from naws.exceptions import EntityFieldError, TransportError


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Entity:
    """One remote resource record (an object key, a queue, a job, …).

    The field set varies per domain.  Exactly one field, named by
    :attr:`id_field`, carries the stable identifier; construction fails
    when it is missing or empty.
    """

    fields: Mapping[str, Any]
    """Read-only view of the raw record."""

    id_field: str
    """Name of the field holding the stable identifier."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
        raw = self.fields.get(self.id_field)
        if raw is None or str(raw) == "":
            raise EntityFieldError(
                f"Record has no value for identifier field '{self.id_field}'.",
            )

    @classmethod
    def from_record(cls, record: Mapping[str, Any], id_field: str) -> Entity:
        """Wrap a raw API record, validating its identifier field."""
        return cls(fields=record, id_field=id_field)

    @property
    def identifier(self) -> str:
        """The stable identifier as text."""
        return str(self.fields[self.id_field])

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def string(self, name: str) -> str:
        """Return field *name* as ``str``; raise when missing or not text."""
        value = self._require(name)
        if not isinstance(value, str):
            raise EntityFieldError(
                f"Field '{name}' of {self.identifier} is {type(value).__name__}, not str.",
            )
        return value

    def integer(self, name: str) -> int:
        """Return field *name* as ``int``; raise when missing or not integral."""
        value = self._require(name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise EntityFieldError(
                f"Field '{name}' of {self.identifier} is {type(value).__name__}, not int.",
            )
        return value

    def value(self, name: str, default: Any = None) -> Any:
        """Return field *name* or *default*.  Intended for display only."""
        return self.fields.get(name, default)

    def _require(self, name: str) -> Any:
        if name not in self.fields:
            raise EntityFieldError(f"Field '{name}' is missing on {self.identifier}.")
        return self.fields[name]


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Page:
    """One page of a cursor-paginated collection."""

    entities: tuple[Entity, ...]
    next_token: str | None = None

    @property
    def is_last(self) -> bool:
        """A page without a continuation token is terminal."""
        return not self.next_token


@dataclass(frozen=True, slots=True)
class ListingResult:
    """Outcome of a full enumeration.

    ``error`` is ``None`` when the enumeration reached a terminal page;
    otherwise it holds the diagnostic of the failing fetch and
    ``entities`` holds everything accumulated before it.
    """

    entities: tuple[Entity, ...]
    pages: int
    error: str | None = None

    @property
    def complete(self) -> bool:
        return self.error is None

    def require_complete(self) -> tuple[Entity, ...]:
        """Return the entities, or raise when enumeration was cut short."""
        if self.error is not None:
            raise TransportError(
                self.error,
                hint=(
                    f"Listing stopped after {self.pages} page(s) and "
                    f"{len(self.entities)} item(s)."
                ),
            )
        return self.entities

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities)


# ---------------------------------------------------------------------------
# Partitioned aggregation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Partition:
    """A label plus the query parameters selecting one slice of a collection."""

    label: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))


@dataclass(frozen=True, slots=True)
class PartitionOutcome:
    """Success (with count) or failure (with error text) of one partition."""

    label: str
    count: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class AggregationResult:
    """Merged entities across partitions plus one outcome per partition."""

    entities: tuple[Entity, ...]
    outcomes: tuple[PartitionOutcome, ...]

    @property
    def succeeded(self) -> tuple[PartitionOutcome, ...]:
        return tuple(o for o in self.outcomes if o.ok)

    @property
    def failed(self) -> tuple[PartitionOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)

    def breakdown(self) -> list[str]:
        """One human-readable line per partition, e.g. ``RUNNING: 3``."""
        return [
            f"{o.label}: {o.count}" if o.ok else f"{o.label}: failed ({o.error})"
            for o in self.outcomes
        ]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Column:
    """One fixed-width column of a selection label."""

    field: str
    width: int
    header: str | None = None
    render: Callable[[Any], str] | None = None
    """Optional value → text conversion; ``None`` values never reach it."""

    def __post_init__(self) -> None:
        if self.width < 1:
            raise ValueError(f"Column '{self.field}' width must be positive.")

    @property
    def title(self) -> str:
        return self.header if self.header is not None else self.field


# ---------------------------------------------------------------------------
# Batch execution
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BatchItemOutcome:
    """Result of applying an action to one item."""

    identifier: str
    ok: bool
    error: str | None = None


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    """Per-item outcomes of one batch run, in input order."""

    items: tuple[BatchItemOutcome, ...]

    @property
    def succeeded(self) -> tuple[str, ...]:
        return tuple(item.identifier for item in self.items if item.ok)

    @property
    def failed(self) -> tuple[BatchItemOutcome, ...]:
        return tuple(item for item in self.items if not item.ok)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def all_ok(self) -> bool:
        return not self.failed
