"""boto3 backed implementation of :class:`~naws.core.protocols.RemoteGateway`.

This module is the **only** place in the codebase that imports
``boto3``/``botocore``.  All botocore exceptions are caught here and
re-raised as :class:`~naws.exceptions.TransportError` — nothing raw
escapes the infrastructure boundary.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from loguru import logger

from naws.config import NawsSettings
from naws.core.protocols import Endpoint
from naws.exceptions import EnvironmentError, TransportError, append_credentials_suggestion


def _import_boto3() -> tuple[Any, Any]:
    """Import boto3 and ``botocore.exceptions`` lazily."""
    try:
        import boto3
        import botocore.exceptions
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "boto3 is not installed. Install with: pip install boto3",
        ) from exc
    return boto3, botocore.exceptions


class Boto3Gateway:
    """Concrete :class:`RemoteGateway` backed by a boto3 session.

    Usage::

        gateway = Boto3Gateway(settings)
        payload = gateway.invoke(Endpoint("sqs", "list_queues"), {})

    Clients are created on first use per service and reused for the
    life of the gateway; boto3 clients are safe to share across the
    worker threads of the aggregator and batch executor.
    """

    # Error codes that mean "who are you?" rather than "what went wrong".
    _CREDENTIAL_CODES: tuple[str, ...] = (
        "ExpiredToken",
        "ExpiredTokenException",
        "InvalidClientTokenId",
        "UnrecognizedClientException",
        "AccessDenied",
        "AccessDeniedException",
        "SignatureDoesNotMatch",
    )

    def __init__(self, settings: NawsSettings, *, session: Any = None) -> None:
        self._settings = settings
        self._session = session
        self._clients: dict[str, Any] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Session / clients
    # ------------------------------------------------------------------

    def _get_session(self) -> Any:
        if self._session is None:
            boto3, errors = _import_boto3()
            try:
                self._session = boto3.session.Session(
                    profile_name=self._settings.profile,
                    region_name=self._settings.region,
                )
            except errors.BotoCoreError as exc:
                raise TransportError(
                    f"Could not create AWS session: {exc}",
                    hint=append_credentials_suggestion(
                        "Check NAWS_PROFILE / AWS_PROFILE.",
                    ),
                ) from exc
        return self._session

    def client(self, service: str) -> Any:
        """Return the (cached) boto3 client for *service*.

        Raises
        ------
        TransportError
            When botocore cannot build the client (e.g. no region).
        """
        with self._lock:
            existing = self._clients.get(service)
            if existing is not None:
                return existing
            kwargs: dict[str, Any] = {}
            if self._settings.endpoint_url:
                kwargs["endpoint_url"] = self._settings.endpoint_url
            session = self._get_session()
            _, errors = _import_boto3()
            try:
                created = session.client(service, **kwargs)
            except errors.BotoCoreError as exc:
                raise TransportError(
                    f"Could not create {service} client: {exc}",
                    endpoint=service,
                    hint="Set a region with --region, NAWS_REGION or AWS_REGION.",
                ) from exc
            self._clients[service] = created
            logger.debug("Created {} client (endpoint={})", service, kwargs.get("endpoint_url"))
            return created

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def invoke(
        self,
        endpoint: Endpoint,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Call ``client(endpoint.service).<endpoint.operation>(**params)``.

        Returns
        -------
        dict[str, Any]
            The response without ``ResponseMetadata``.  Operations that
            return nothing (e.g. ``download_file``) yield ``{}``.

        Raises
        ------
        TransportError
            For every failure of the call.
        """
        _, errors = _import_boto3()
        client = self.client(endpoint.service)
        operation = getattr(client, endpoint.operation, None)
        if operation is None:
            raise TransportError(
                f"{endpoint.service} has no operation '{endpoint.operation}'.",
                endpoint=str(endpoint),
            )

        logger.debug("Invoking {} {}", endpoint, dict(params or {}))
        try:
            response = operation(**dict(params or {}))
        except errors.ClientError as exc:
            self._raise_mapped(endpoint, exc)
        except errors.BotoCoreError as exc:
            raise TransportError(
                f"{endpoint}: {exc}",
                endpoint=str(endpoint),
                hint="Check your network, region and endpoint URL.",
            ) from exc
        except Exception as exc:
            raise TransportError(
                f"{endpoint}: unexpected error: {exc}",
                endpoint=str(endpoint),
            ) from exc

        if response is None:
            return {}
        if not isinstance(response, dict):
            raise TransportError(
                f"{endpoint} returned an unexpected data structure.",
                endpoint=str(endpoint),
            )
        payload = dict(response)  # shallow copy — isolate from botocore internals
        payload.pop("ResponseMetadata", None)
        return payload

    # ------------------------------------------------------------------
    # Exception mapping
    # ------------------------------------------------------------------

    @classmethod
    def _raise_mapped(cls, endpoint: Endpoint, exc: Any) -> None:
        """Translate a botocore ``ClientError`` into :class:`TransportError`.

        Always raises.
        """
        error = exc.response.get("Error", {}) if hasattr(exc, "response") else {}
        code = str(error.get("Code", "Unknown"))
        message = str(error.get("Message") or exc)
        hint = None
        if code in cls._CREDENTIAL_CODES:
            hint = append_credentials_suggestion(
                "The request was rejected for authorisation reasons.",
            )
        raise TransportError(
            f"{endpoint} failed ({code}): {message}",
            endpoint=str(endpoint),
            hint=hint,
        ) from exc
