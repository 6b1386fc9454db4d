"""`;` 分隔的延迟日志读取。

只负责把文件切成表头 + 文本字段行；数值解析与 schema 识别都不在这里做。
"""

from __future__ import annotations

import csv
from pathlib import Path

from frame_latency.errors import SchemaError

DEFAULT_DELIMITER = ";"


def read_table(path: Path, *, delimiter: str = DEFAULT_DELIMITER) -> tuple[list[str], list[list[str]]]:
    """读取分隔文本文件。

    Returns:
        (headers, rows)：rows 不含表头，空行已跳过。

    Raises:
        FileNotFoundError: 文件不存在。
        SchemaError: 文件没有表头行。
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(str(path))

    with path.open("r", encoding="utf-8-sig", newline="") as f:
        lines = [row for row in csv.reader(f, delimiter=delimiter) if any(c.strip() for c in row)]

    if not lines:
        raise SchemaError(f"no header row in {path}")

    headers = [h.strip() for h in lines[0]]
    return headers, lines[1:]
