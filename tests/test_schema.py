from __future__ import annotations

import logging

import pytest

from frame_latency.errors import SchemaError
from frame_latency.schema import classify_header, resolve_schema


def test_resolve_schema_recovers_indices_in_header_order(headers: list[str]) -> None:
    schema = resolve_schema(headers)

    assert schema.group("timestamps").indices == (1, 2)
    assert schema.group("captures").indices == (3, 4)
    assert schema.group("transfers").indices == (5, 6)
    assert schema.singleton("frame_number").index == 0
    assert schema.singleton("sync").index == 7
    assert schema.singleton("encode").index == 11
    assert schema.singleton("dropped").index == 12
    assert schema.max_index == 12
    assert schema.unknown_headers == ()


def test_upload_capability_flag() -> None:
    base = ["timestamp0", "dolphin0", "transfer0", "sync", "bayer", "encode"]
    assert resolve_schema(base).has_upload is False

    with_upload = base[:4] + ["upload_done"] + base[4:]
    schema = resolve_schema(with_upload)
    assert schema.has_upload is True
    assert schema.singleton("upload").index == 4


def test_group_ceiling_excludes_higher_numbered_columns() -> None:
    headers = ["timestamp0", "timestamp1", "timestamp5", "dolphin0", "transfer0", "dma0", "dma1", "dma2"]
    schema = resolve_schema(headers, ceilings={"timestamps": 1, "dma_channels": 1})

    assert schema.group("timestamps").indices == (0, 1)
    assert schema.group("timestamps").ceiling == 1
    assert schema.group("dma_channels").indices == (5, 6)
    # 超过上限的列不算未知表头。
    assert schema.unknown_headers == ()


def test_numbered_group_rule_wins_over_prefix_rule() -> None:
    assert classify_header("dma3") == ("dma_channels", 3)
    assert classify_header("dma_done") == ("dma", None)
    assert classify_header("timestamp12") == ("timestamps", 12)
    assert classify_header("num_frame") == ("frame_number", None)
    assert classify_header("foobar1") is None


def test_unknown_header_is_logged_not_fatal(caplog: pytest.LogCaptureFixture) -> None:
    headers = ["timestamp0", "foobar1", "dolphin0", "transfer0", "encode"]
    with caplog.at_level(logging.WARNING, logger="frame_latency"):
        schema = resolve_schema(headers)

    assert schema.unknown_headers == ("foobar1",)
    assert schema.group("timestamps").indices == (0,)
    assert schema.group("captures").indices == (2,)
    assert schema.singleton("encode").index == 4
    assert any("Unknown header: foobar1" in r.getMessage() for r in caplog.records)


def test_empty_header_list_is_fatal() -> None:
    with pytest.raises(SchemaError):
        resolve_schema([])


def test_missing_required_group_is_fatal() -> None:
    with pytest.raises(SchemaError, match="captures"):
        resolve_schema(["timestamp0", "transfer0", "encode"])


def test_missing_optional_role_is_absent() -> None:
    schema = resolve_schema(["timestamp0", "dolphin0", "transfer0", "encode"])
    assert schema.has("encode")
    assert not schema.has("hdr")
    assert not schema.has("dma_channels")
    assert schema.has_field("ts")
    assert not schema.has_field("dma_channel")
    with pytest.raises(SchemaError):
        schema.singleton("stitch")
