"""Tests for the boto3 gateway (infra/aws_gateway.py).

boto3 sessions and clients are replaced by ``MagicMock`` — no network,
no credentials.

Coverage:
* Operation dispatch, ``ResponseMetadata`` stripping, ``None`` → ``{}``.
* Client caching and endpoint URL plumbing.
* ``ClientError`` / ``BotoCoreError`` / unknown errors → ``TransportError``.
* Credential error codes add the credentials hint.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoRegionError

from naws.config import NawsSettings
from naws.core.protocols import Endpoint
from naws.exceptions import EnvironmentError, TransportError
from naws.infra.aws_gateway import Boto3Gateway


def _gateway(client: MagicMock, **settings: object) -> tuple[Boto3Gateway, MagicMock]:
    settings.setdefault("endpoint_url", None)
    session = MagicMock()
    session.client.return_value = client
    gateway = Boto3Gateway(NawsSettings(_env_file=None, **settings), session=session)
    return gateway, session


def _client_error(code: str, message: str = "nope") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "ListBuckets")


class TestInvoke:
    def test_calls_operation_with_params(self) -> None:
        client = MagicMock()
        client.list_objects_v2.return_value = {
            "Contents": [{"Key": "a"}],
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }
        gateway, _ = _gateway(client)

        payload = gateway.invoke(Endpoint("s3", "list_objects_v2"), {"Bucket": "b"})

        client.list_objects_v2.assert_called_once_with(Bucket="b")
        assert payload == {"Contents": [{"Key": "a"}]}

    def test_none_response_is_empty_dict(self) -> None:
        client = MagicMock()
        client.download_file.return_value = None
        gateway, _ = _gateway(client)
        assert gateway.invoke(Endpoint("s3", "download_file"), {"Bucket": "b"}) == {}

    def test_non_dict_response_is_transport_error(self) -> None:
        client = MagicMock()
        client.list_buckets.return_value = ["not", "a", "dict"]
        gateway, _ = _gateway(client)
        with pytest.raises(TransportError, match="unexpected data structure"):
            gateway.invoke(Endpoint("s3", "list_buckets"))

    def test_unknown_operation(self) -> None:
        client = MagicMock(spec=["list_buckets"])
        gateway, _ = _gateway(client)
        with pytest.raises(TransportError, match="no operation 'explode'") as exc_info:
            gateway.invoke(Endpoint("s3", "explode"))
        assert exc_info.value.endpoint == "s3.explode"


class TestClients:
    def test_clients_are_cached_per_service(self) -> None:
        gateway, session = _gateway(MagicMock())
        assert gateway.client("s3") is gateway.client("s3")
        gateway.client("sqs")
        assert [c.args[0] for c in session.client.call_args_list] == ["s3", "sqs"]

    def test_endpoint_url_is_passed(self) -> None:
        gateway, session = _gateway(MagicMock(), endpoint_url="http://localhost:4566")
        gateway.client("logs")
        session.client.assert_called_once_with("logs", endpoint_url="http://localhost:4566")

    def test_no_endpoint_url_by_default(self) -> None:
        gateway, session = _gateway(MagicMock())
        gateway.client("logs")
        session.client.assert_called_once_with("logs")

    def test_session_built_from_settings(self) -> None:
        with patch("boto3.session.Session") as session_class:
            gateway = Boto3Gateway(
                NawsSettings(_env_file=None, profile="dev", region="eu-west-1"),
            )
            gateway.client("s3")
        session_class.assert_called_once_with(profile_name="dev", region_name="eu-west-1")

    def test_client_construction_failure_is_mapped(self) -> None:
        gateway, session = _gateway(MagicMock(), region=None)
        session.client.side_effect = NoRegionError()

        with pytest.raises(TransportError) as exc_info:
            gateway.invoke(Endpoint("sqs", "list_queues"), {})

        assert "Could not create sqs client" in str(exc_info.value)
        assert "--region" in (exc_info.value.hint or "")
        assert isinstance(exc_info.value.__cause__, NoRegionError)

    def test_failed_client_is_not_cached(self) -> None:
        client = MagicMock()
        gateway, session = _gateway(client)
        session.client.side_effect = [NoRegionError(), client]

        with pytest.raises(TransportError):
            gateway.client("s3")
        assert gateway.client("s3") is client

    @patch.dict("sys.modules", {"boto3": None})
    def test_missing_boto3(self) -> None:
        gateway = Boto3Gateway(NawsSettings(_env_file=None))
        with pytest.raises(EnvironmentError, match="boto3 is not installed"):
            gateway.client("s3")


class TestErrorMapping:
    def test_client_error(self) -> None:
        client = MagicMock()
        client.get_queue_url.side_effect = _client_error(
            "AWS.SimpleQueueService.NonExistentQueue", "The specified queue does not exist.",
        )
        gateway, _ = _gateway(client)

        with pytest.raises(TransportError) as exc_info:
            gateway.invoke(Endpoint("sqs", "get_queue_url"), {"QueueName": "missing"})

        err = exc_info.value
        assert "sqs.get_queue_url failed (AWS.SimpleQueueService.NonExistentQueue)" in str(err)
        assert "does not exist" in str(err)
        assert err.endpoint == "sqs.get_queue_url"
        assert err.hint is None
        assert isinstance(err.__cause__, ClientError)

    @pytest.mark.parametrize("code", ["ExpiredToken", "AccessDenied", "UnrecognizedClientException"])
    def test_credential_codes_add_hint(self, code: str) -> None:
        client = MagicMock()
        client.list_buckets.side_effect = _client_error(code)
        gateway, _ = _gateway(client)
        with pytest.raises(TransportError) as exc_info:
            gateway.invoke(Endpoint("s3", "list_buckets"))
        assert exc_info.value.hint is not None
        assert "aws sts get-caller-identity" in exc_info.value.hint

    def test_botocore_error(self) -> None:
        client = MagicMock()
        client.list_buckets.side_effect = EndpointConnectionError(endpoint_url="http://localhost:4566")
        gateway, _ = _gateway(client)
        with pytest.raises(TransportError, match="Could not connect") as exc_info:
            gateway.invoke(Endpoint("s3", "list_buckets"))
        assert exc_info.value.hint == "Check your network, region and endpoint URL."

    def test_unexpected_error(self) -> None:
        client = MagicMock()
        client.upload_file.side_effect = FileNotFoundError("gone.txt")
        gateway, _ = _gateway(client)
        with pytest.raises(TransportError, match="unexpected error: gone.txt"):
            gateway.invoke(Endpoint("s3", "upload_file"), {"Filename": "gone.txt"})
