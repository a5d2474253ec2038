"""Tests for ``naws storage`` handlers (cli/commands/storage.py).

The gateway, selector and prompter are scripted fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from conftest import FakeGateway, FakePrompter, FakeSelector, pick_all, pick_first

from naws.cli import exit_codes
from naws.cli.commands import storage
from naws.cli.commands.context import CommandContext
from naws.exceptions import TransportError, ValidationError

MakeCtx = Callable[..., CommandContext]


def _objects(*keys: str) -> dict[str, Any]:
    return {"Contents": [{"Key": key, "Size": 10} for key in keys]}


def _delete_fails_for(bad: str) -> Callable[[dict[str, Any]], dict[str, Any]]:
    def respond(params: dict[str, Any]) -> dict[str, Any]:
        if params["Key"] == bad:
            raise TransportError("AccessDenied")
        return {}

    return respond


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestResolveBucket:
    def test_argument_strips_scheme(self, make_ctx: MakeCtx) -> None:
        assert storage.resolve_bucket(make_ctx(), ["s3://logs-bucket/"]) == "logs-bucket"

    def test_interactive_pick(self, make_ctx: MakeCtx) -> None:
        gateway = FakeGateway({"s3.list_buckets": {"Buckets": [{"Name": "a"}, {"Name": "b"}]}})
        ctx = make_ctx(gateway, selector=FakeSelector(lambda labels: [labels[1]]))
        assert storage.resolve_bucket(ctx, []) == "b"


class TestDownloadTarget:
    def test_nested_key(self, tmp_path: Path) -> None:
        assert storage.download_target(tmp_path, "a/b.txt") == (tmp_path / "a" / "b.txt").resolve()

    @pytest.mark.parametrize("key", ["../escape.txt", "a/../../escape.txt", "/etc/passwd", "."])
    def test_keys_escaping_destination_rejected(self, tmp_path: Path, key: str) -> None:
        with pytest.raises(ValidationError, match="outside"):
            storage.download_target(tmp_path, key)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

class TestList:
    def test_prefix_is_sent(self, make_ctx: MakeCtx, capsys: pytest.CaptureFixture[str]) -> None:
        gateway = FakeGateway({"s3.list_objects_v2": _objects("logs/a.txt")})
        code = storage.list_(make_ctx(gateway), ["bkt", "logs/"])
        assert code == exit_codes.SUCCESS
        assert gateway.calls_to("s3.list_objects_v2") == [{"Bucket": "bkt", "Prefix": "logs/"}]
        assert "logs/a.txt" in capsys.readouterr().out

    def test_truncated_listing_aborts(self, make_ctx: MakeCtx) -> None:
        gateway = FakeGateway(
            {
                "s3.list_objects_v2": [
                    {**_objects("a"), "NextContinuationToken": "c1"},
                    TransportError("SlowDown"),
                ],
            },
        )
        with pytest.raises(TransportError, match="SlowDown") as exc_info:
            storage.list_(make_ctx(gateway), ["bkt"])
        assert exc_info.value.hint == "Listing stopped after 1 page(s) and 1 item(s)."


class TestRemove:
    def test_partial_failure_reports_every_item(
        self, make_ctx: MakeCtx, capsys: pytest.CaptureFixture[str],
    ) -> None:
        gateway = FakeGateway(
            {
                "s3.list_objects_v2": _objects("a", "b", "c"),
                "s3.delete_object": _delete_fails_for("b"),
            },
        )
        ctx = make_ctx(gateway, selector=FakeSelector(pick_all), prompter=FakePrompter(confirm=True))

        code = storage.remove(ctx, ["bkt"])

        assert code == exit_codes.GENERAL_ERROR
        assert [p["Key"] for p in gateway.calls_to("s3.delete_object")] == ["a", "b", "c"]
        err = capsys.readouterr().err
        assert "Deleted 2 item(s)" in err
        assert "Failed for 1 item(s)" in err
        assert "AccessDenied" in err

    def test_declined_confirmation_deletes_nothing(self, make_ctx: MakeCtx) -> None:
        gateway = FakeGateway({"s3.list_objects_v2": _objects("a")})
        ctx = make_ctx(gateway, selector=FakeSelector(pick_all), prompter=FakePrompter(confirm=False))
        assert storage.remove(ctx, ["bkt"]) == exit_codes.SUCCESS
        assert gateway.calls_to("s3.delete_object") == []

    def test_nothing_selected(self, make_ctx: MakeCtx) -> None:
        gateway = FakeGateway({"s3.list_objects_v2": _objects("a")})
        assert storage.remove(make_ctx(gateway), ["bkt"]) == exit_codes.SUCCESS
        assert gateway.calls_to("s3.delete_object") == []


class TestDownload:
    def test_downloads_under_destination(self, make_ctx: MakeCtx, tmp_path: Path) -> None:
        gateway = FakeGateway(
            {"s3.list_objects_v2": _objects("dir/a.txt", "b.txt"), "s3.download_file": {}},
        )
        ctx = make_ctx(gateway, selector=FakeSelector(pick_all))

        code = storage.download(ctx, ["bkt", "", str(tmp_path)])

        assert code == exit_codes.SUCCESS
        calls = gateway.calls_to("s3.download_file")
        assert [c["Filename"] for c in calls] == [
            str((tmp_path / "dir" / "a.txt").resolve()),
            str((tmp_path / "b.txt").resolve()),
        ]
        assert (tmp_path / "dir").is_dir()

    def test_escaping_key_fails_only_that_item(self, make_ctx: MakeCtx, tmp_path: Path) -> None:
        gateway = FakeGateway(
            {"s3.list_objects_v2": _objects("../evil", "ok.txt"), "s3.download_file": {}},
        )
        ctx = make_ctx(gateway, selector=FakeSelector(pick_all))
        assert storage.download(ctx, ["bkt", "", str(tmp_path)]) == exit_codes.GENERAL_ERROR
        assert [c["Key"] for c in gateway.calls_to("s3.download_file")] == ["ok.txt"]


class TestUpload:
    def test_upload_with_arguments(self, make_ctx: MakeCtx, tmp_path: Path) -> None:
        source = tmp_path / "report.csv"
        source.write_text("a,b\n", encoding="utf-8")
        gateway = FakeGateway({"s3.upload_file": {}})

        code = storage.upload(make_ctx(gateway), [str(source), "s3://bkt", "in/report.csv"])

        assert code == exit_codes.SUCCESS
        assert gateway.calls_to("s3.upload_file") == [
            {"Filename": str(source), "Bucket": "bkt", "Key": "in/report.csv"},
        ]

    def test_key_defaults_to_file_name(self, make_ctx: MakeCtx, tmp_path: Path) -> None:
        source = tmp_path / "report.csv"
        source.write_text("", encoding="utf-8")
        gateway = FakeGateway(
            {"s3.list_buckets": {"Buckets": [{"Name": "bkt"}]}, "s3.upload_file": {}},
        )
        ctx = make_ctx(gateway, selector=FakeSelector(pick_first))
        assert storage.upload(ctx, [str(source)]) == exit_codes.SUCCESS
        assert gateway.calls_to("s3.upload_file")[0]["Key"] == "report.csv"

    def test_missing_file_rejected_before_any_call(self, make_ctx: MakeCtx, tmp_path: Path) -> None:
        gateway = FakeGateway()
        with pytest.raises(ValidationError, match="Not a file"):
            storage.upload(make_ctx(gateway), [str(tmp_path / "nope.txt"), "bkt"])
        assert gateway.calls == []


def test_domain_lists_every_subcommand(make_ctx: MakeCtx) -> None:
    domain = storage.build_domain(make_ctx())
    assert [sub.name for sub in domain.subcommands] == ["buckets", "list", "remove", "download", "upload"]
