from __future__ import annotations

from pathlib import Path

import pytest

from frame_latency.errors import SchemaError
from frame_latency.reader import read_table
from frame_latency.schema import resolve_schema


def test_read_table_skips_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "latency.csv"
    path.write_text("timestamp0;dolphin0;transfer0\n1.0;1.1;1.2\n\n2.0;2.1;2.2\n", encoding="utf-8")

    headers, rows = read_table(path)
    assert headers == ["timestamp0", "dolphin0", "transfer0"]
    assert rows == [["1.0", "1.1", "1.2"], ["2.0", "2.1", "2.2"]]


def test_read_table_strips_utf8_bom(tmp_path: Path) -> None:
    # 首列表头前带 UTF-8 BOM。
    path = tmp_path / "latency.csv"
    path.write_bytes("timestamp0;timestamp1;dolphin0;transfer0\n1.0;1.0;1.1;1.2\n".encode("utf-8-sig"))

    headers, _ = read_table(path)
    assert headers[0] == "timestamp0"

    schema = resolve_schema(headers)
    assert schema.unknown_headers == ()
    assert schema.group("timestamps").indices == (0, 1)


def test_read_table_without_header(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("\n\n", encoding="utf-8")
    with pytest.raises(SchemaError):
        read_table(path)


def test_read_table_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_table(tmp_path / "nope.csv")
