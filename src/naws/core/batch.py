"""Batch operation executor.

Applies one action to many selected items and records every item's
outcome independently: a failing item never stops the rest.  Partial
failure is reported as data (:class:`BatchOutcome`), never raised.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from loguru import logger

from naws.core.models import BatchItemOutcome, BatchOutcome

Action = Callable[[str], object]


def _run_one(identifier: str, action: Action) -> BatchItemOutcome:
    try:
        action(identifier)
    except Exception as exc:  # noqa: BLE001
        message = str(exc) or type(exc).__name__
        logger.warning("Action failed for {}: {}", identifier, message)
        return BatchItemOutcome(identifier=identifier, ok=False, error=message)
    return BatchItemOutcome(identifier=identifier, ok=True)


def apply_all(
    items: Sequence[str],
    action: Action,
    *,
    max_workers: int = 1,
) -> BatchOutcome:
    """Apply *action* to every identifier in *items*.

    Parameters
    ----------
    items:
        Identifiers to act on.
    action:
        Called once per identifier; raising marks that item failed.
    max_workers:
        ``1`` runs sequentially; larger values use a thread pool.

    Returns
    -------
    BatchOutcome
        One outcome per item, in input order.
    """
    if max_workers <= 1 or len(items) <= 1:
        outcomes = [_run_one(identifier, action) for identifier in items]
    else:
        with ThreadPoolExecutor(
            max_workers=min(max_workers, len(items)),
            thread_name_prefix="naws-batch",
        ) as executor:
            # map() yields in submission order once each result is ready.
            outcomes = list(executor.map(lambda i: _run_one(i, action), items))

    result = BatchOutcome(items=tuple(outcomes))
    logger.debug(
        "Batch finished: {} succeeded, {} failed",
        result.succeeded_count,
        result.failed_count,
    )
    return result
