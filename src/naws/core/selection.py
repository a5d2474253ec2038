"""Selection codec — entities to fixed-width labels and back.

Every label has the shape::

    <col1 padded>  <col2 padded>  ...  ⟦<identifier>⟧

The identifier is never truncated: it lives in a suffix after the
first ``⟦`` of the line.  Column text is sanitised so it can never
contain ``⟦`` or ``⟧``, which makes decoding structural — the suffix is
found by position of the marker, not by column offsets — and
identifiers that themselves contain brackets or parentheses still
round-trip.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from loguru import logger

from naws.core.models import Column, Entity
from naws.core.protocols import Selector
from naws.exceptions import SelectionNotFoundError

ID_OPEN = "⟦"
ID_CLOSE = "⟧"
ELLIPSIS = "…"
EMPTY_CELL = "-"

_MARKER_SUBSTITUTES = {ord(ID_OPEN): "[", ord(ID_CLOSE): "]"}


# ---------------------------------------------------------------------------
# Cell rendering (pure)
# ---------------------------------------------------------------------------

def _sanitize(text: str) -> str:
    """Collapse control characters and strip identifier markers."""
    cleaned = "".join(" " if (ch < " " or ch == "\x7f") else ch for ch in text)
    return cleaned.translate(_MARKER_SUBSTITUTES)


def fit(text: str, width: int) -> str:
    """Left-align *text* in exactly *width* characters, truncating with ``…``."""
    if len(text) <= width:
        return text.ljust(width)
    if width == 1:
        return ELLIPSIS
    return text[: width - 1] + ELLIPSIS


def render_cell(entity: Entity, column: Column) -> str:
    value: Any = entity.value(column.field)
    if value is None:
        text = EMPTY_CELL
    elif column.render is not None:
        text = column.render(value)
    else:
        text = str(value)
    return fit(_sanitize(text), column.width)


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

class SelectionCodec:
    """Encodes entities as selectable labels and decodes choices back.

    Parameters
    ----------
    columns:
        Ordered fixed-width columns shown before the identifier suffix.
    separator:
        Text placed between columns.
    """

    def __init__(self, columns: Sequence[Column], separator: str = "  ") -> None:
        if ID_OPEN in separator or ID_CLOSE in separator:
            raise ValueError("Column separator must not contain identifier markers.")
        self._columns: tuple[Column, ...] = tuple(columns)
        self._separator = separator

    @property
    def columns(self) -> tuple[Column, ...]:
        return self._columns

    # ------------------------------------------------------------------
    # Encode
    # ------------------------------------------------------------------

    def encode_one(self, entity: Entity) -> str:
        cells = [render_cell(entity, column) for column in self._columns]
        body = self._separator.join(cells)
        suffix = f"{ID_OPEN}{entity.identifier}{ID_CLOSE}"
        return f"{body} {suffix}" if body else suffix

    def encode(self, entities: Sequence[Entity]) -> list[str]:
        """Render one label per entity, in order."""
        return [self.encode_one(entity) for entity in entities]

    def header(self) -> str:
        """Column titles laid out exactly like the label bodies."""
        return self._separator.join(
            fit(_sanitize(column.title), column.width) for column in self._columns
        )

    # ------------------------------------------------------------------
    # Decode
    # ------------------------------------------------------------------

    @staticmethod
    def identifier_of(label: str) -> str:
        """Extract the identifier suffix from *label*.

        Raises
        ------
        SelectionNotFoundError
            When *label* does not carry a well-formed suffix.
        """
        text = label.rstrip("\r\n")
        _, marker, tail = text.partition(ID_OPEN)
        if not marker or not tail.endswith(ID_CLOSE) or len(tail) == len(ID_CLOSE):
            raise SelectionNotFoundError(
                f"Selection is not a recognised item: {label!r}",
            )
        return tail[: -len(ID_CLOSE)]

    def decode(self, label: str, entities: Sequence[Entity]) -> Entity:
        """Return the entity *label* was rendered from.

        Raises
        ------
        SelectionNotFoundError
            When no entity in *entities* carries the label's identifier.
        """
        identifier = self.identifier_of(label)
        for entity in entities:
            if entity.identifier == identifier:
                return entity
        raise SelectionNotFoundError(
            f"'{identifier}' is no longer in the list.",
            hint="The data may have changed since it was listed; run the command again.",
        )

    def decode_all(self, labels: Sequence[str], entities: Sequence[Entity]) -> list[Entity]:
        """Decode several labels, preserving order and dropping repeats."""
        index = {entity.identifier: entity for entity in entities}
        chosen: list[Entity] = []
        seen: set[str] = set()
        for label in labels:
            identifier = self.identifier_of(label)
            if identifier in seen:
                continue
            entity = index.get(identifier)
            if entity is None:
                raise SelectionNotFoundError(
                    f"'{identifier}' is no longer in the list.",
                    hint="The data may have changed since it was listed; run the command again.",
                )
            seen.add(identifier)
            chosen.append(entity)
        return chosen


# ---------------------------------------------------------------------------
# Interactive helpers
# ---------------------------------------------------------------------------

def choose(
    selector: Selector,
    codec: SelectionCodec,
    entities: Sequence[Entity],
    *,
    prompt: str,
    multiple: bool = False,
) -> list[Entity]:
    """Let the user pick entities; stale or aborted choices yield ``[]``."""
    if not entities:
        return []
    labels = codec.encode(entities)
    picked = selector.select(labels, multiple=multiple, prompt=prompt)
    if not picked:
        return []
    if not multiple:
        picked = picked[:1]
    try:
        return codec.decode_all(picked, entities)
    except SelectionNotFoundError as exc:
        logger.warning("Discarding stale selection: {}", exc)
        return []


def choose_one(
    selector: Selector,
    codec: SelectionCodec,
    entities: Sequence[Entity],
    *,
    prompt: str,
) -> Entity | None:
    chosen = choose(selector, codec, entities, prompt=prompt, multiple=False)
    return chosen[0] if chosen else None
