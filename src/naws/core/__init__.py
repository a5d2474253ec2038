"""Core layer — the resource-enumeration and selection substrate.

Rules
-----
* No ``print()`` calls; diagnostics go through loguru only.
* No direct network I/O — remote calls go through :class:`RemoteGateway`.
* No imports from ``cli``, ``infra`` or ``domains``.
"""

from naws.core.aggregation import aggregate
from naws.core.batch import apply_all
from naws.core.listing import cursor_fetcher, enumerate_pages, list_all
from naws.core.models import (
    AggregationResult,
    BatchItemOutcome,
    BatchOutcome,
    Column,
    Entity,
    ListingResult,
    Page,
    Partition,
    PartitionOutcome,
)
from naws.core.protocols import Endpoint, Prompter, RemoteGateway, Selector, TextEditor
from naws.core.registry import DomainDescriptor, Registry, SubcommandDescriptor
from naws.core.selection import SelectionCodec, choose, choose_one
from naws.core.tailing import LogTailer

__all__: list[str] = [
    "AggregationResult",
    "BatchItemOutcome",
    "BatchOutcome",
    "Column",
    "DomainDescriptor",
    "Endpoint",
    "Entity",
    "ListingResult",
    "LogTailer",
    "Page",
    "Partition",
    "PartitionOutcome",
    "Prompter",
    "Registry",
    "RemoteGateway",
    "SelectionCodec",
    "Selector",
    "SubcommandDescriptor",
    "TextEditor",
    "aggregate",
    "apply_all",
    "choose",
    "choose_one",
    "cursor_fetcher",
    "enumerate_pages",
    "list_all",
]
