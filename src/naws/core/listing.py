"""Paginated listing engine.

Fully enumerates a cursor-paginated collection.  Enumeration stops
purely on the absence of a continuation token — there is no page cap
and no "short page means done" heuristic.

Guarantees
----------
* Remote ordering is preserved within and across pages.
* A failing fetch never raises out of :func:`enumerate_pages`; the
  partial result is returned with its error recorded.
* No mutation guard: if the remote collection changes mid-enumeration
  the result reflects whatever the cursor returned.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger

from naws.core.models import Entity, ListingResult, Page
from naws.core.protocols import Endpoint, RemoteGateway
from naws.exceptions import EntityFieldError, TransportError

FetchPage = Callable[[str | None], Page]


def enumerate_pages(fetch_page: FetchPage) -> ListingResult:
    """Call *fetch_page* until a page without a token is returned.

    The first call receives ``None``; each following call receives the
    previous page's ``next_token``.
    """
    accumulated: list[Entity] = []
    pages = 0
    token: str | None = None

    while True:
        try:
            page = fetch_page(token)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Enumeration aborted after {} page(s): {}", pages, exc,
            )
            return ListingResult(
                entities=tuple(accumulated),
                pages=pages,
                error=str(exc) or type(exc).__name__,
            )

        pages += 1
        accumulated.extend(page.entities)
        logger.debug(
            "Fetched page {} ({} item(s), more={})",
            pages,
            len(page.entities),
            not page.is_last,
        )

        if page.is_last:
            return ListingResult(entities=tuple(accumulated), pages=pages)
        token = page.next_token


def cursor_fetcher(
    gateway: RemoteGateway,
    endpoint: Endpoint,
    params: Mapping[str, Any] | None = None,
    *,
    items_key: str,
    id_field: str,
    request_token: str = "NextToken",
    response_token: str | None = None,
    transform: Callable[[Any], Mapping[str, Any]] | None = None,
) -> FetchPage:
    """Build a ``fetch_page`` for the usual AWS list-call shape.

    Parameters
    ----------
    items_key:
        Response key holding the page's records (e.g. ``"Contents"``).
    id_field:
        Record field carrying the stable identifier.
    request_token / response_token:
        Parameter name used to send the cursor, and response key it is
        read from (defaults to *request_token*).  S3 for instance sends
        ``ContinuationToken`` and returns ``NextContinuationToken``.
    transform:
        Optional record transform applied before wrapping, used when an
        API returns bare strings (e.g. SQS queue URLs).
    """
    base = dict(params or {})
    out_key = response_token or request_token

    def fetch_page(token: str | None) -> Page:
        call_params = dict(base)
        if token:
            call_params[request_token] = token
        payload = gateway.invoke(endpoint, call_params)

        records = payload.get(items_key) or []
        if not isinstance(records, list):
            raise TransportError(
                f"Unexpected '{items_key}' payload from {endpoint}.",
                endpoint=str(endpoint),
            )

        entities: list[Entity] = []
        for raw in records:
            record = transform(raw) if transform is not None else raw
            if not isinstance(record, Mapping):
                raise TransportError(
                    f"Malformed record in '{items_key}' from {endpoint}.",
                    endpoint=str(endpoint),
                )
            try:
                entities.append(Entity.from_record(record, id_field))
            except EntityFieldError as exc:
                raise TransportError(str(exc), endpoint=str(endpoint)) from exc

        next_token = payload.get(out_key)
        return Page(
            entities=tuple(entities),
            next_token=str(next_token) if next_token else None,
        )

    return fetch_page


def list_all(
    gateway: RemoteGateway,
    endpoint: Endpoint,
    params: Mapping[str, Any] | None = None,
    **fetcher_options: Any,
) -> ListingResult:
    """Enumerate every record of a paginated list call."""
    return enumerate_pages(
        cursor_fetcher(gateway, endpoint, params, **fetcher_options),
    )
