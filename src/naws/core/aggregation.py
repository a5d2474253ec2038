"""Parallel partition aggregator.

Some collections can only be listed one slice at a time (AWS Batch
lists jobs per status, for instance).  :func:`aggregate` fans a query
out over every partition concurrently, merges what comes back and
isolates failures so that one broken partition never hides the others.

Results are collected on the calling thread through
:func:`concurrent.futures.as_completed`; worker threads share no
mutable state.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from loguru import logger

from naws.core.models import AggregationResult, Entity, Partition, PartitionOutcome
from naws.exceptions import ValidationError

FetchOne = Callable[[Partition], Sequence[Entity]]


def aggregate(
    partitions: Collection[Partition],
    fetch_one: FetchOne,
    *,
    max_workers: int | None = None,
) -> AggregationResult:
    """Run *fetch_one* for every partition in parallel and merge results.

    Parameters
    ----------
    partitions:
        Slices to query.  Labels must be unique.
    fetch_one:
        Returns the entities of one partition, or raises.  An exception
        becomes that partition's failure outcome.
    max_workers:
        Thread-pool size; defaults to one worker per partition.

    Returns
    -------
    AggregationResult
        Entities of all successful partitions, concatenated in partition
        input order, plus one outcome per partition in the same order.
    """
    ordered = list(partitions)
    labels = [p.label for p in ordered]
    if len(set(labels)) != len(labels):
        raise ValidationError("Partition labels must be unique.")
    if not ordered:
        return AggregationResult(entities=(), outcomes=())

    workers = max_workers or len(ordered)
    results: dict[int, Sequence[Entity]] = {}
    errors: dict[int, str] = {}

    with ThreadPoolExecutor(
        max_workers=min(workers, len(ordered)),
        thread_name_prefix="naws-partition",
    ) as executor:
        future_to_index: dict[Future[Sequence[Entity]], int] = {
            executor.submit(fetch_one, partition): index
            for index, partition in enumerate(ordered)
        }
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            label = ordered[index].label
            try:
                results[index] = tuple(future.result())
            except Exception as exc:  # noqa: BLE001
                errors[index] = str(exc) or type(exc).__name__
                logger.warning("Partition {} failed: {}", label, errors[index])
            else:
                logger.debug("Partition {} returned {} item(s)", label, len(results[index]))

    merged: list[Entity] = []
    outcomes: list[PartitionOutcome] = []
    for index, partition in enumerate(ordered):
        if index in errors:
            outcomes.append(PartitionOutcome(label=partition.label, error=errors[index]))
            continue
        entities = results[index]
        merged.extend(entities)
        outcomes.append(PartitionOutcome(label=partition.label, count=len(entities)))

    return AggregationResult(entities=tuple(merged), outcomes=tuple(outcomes))
