"""逐行抽取帧记录（FrameRecord）。

分两步：
1) `extract_frames` 把全部原始行解析为不可变的记录序列（保持行序，行序有语义）；
2) 聚合/报告阶段只读这个序列（见 `frame_latency.report`）。

说明：
- 文本转数值统一走 `parse_number`：空串/非数字/非有限值都按 0.0 处理，不抛异常。
- 行长度不足（少于 schema 引用到的最大列号 + 1）视为文件损坏，直接中止整次分析。
- 时钟跳变扫描只做诊断日志，不修改记录、不中止处理。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

from frame_latency.errors import RowFormatError, SchemaError
from frame_latency.schema import DIAGNOSTIC_SINGLETONS, Schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupSample:
    """一组冗余样本的汇总。

    属性:
        mean: 样本算术平均，作为该阶段的代表时间戳。
        spread: max - min，衡量阶段内抖动/偏斜；单样本时为 0。
    """

    mean: float
    spread: float


@dataclass(frozen=True)
class FrameRecord:
    """单帧记录。

    属性:
        row: 数据行号（从 1 开始，不含表头）。
        groups: 分组字段 -> GroupSample，例如 `ts`、`capture`。
        fields: 单列字段 -> 数值，例如 `sync`、`encode`；schema 里没有的角色不出现。
        frame_number: 帧号（诊断用）；schema 无此列时为 None。
        dropped: 是否为丢帧/无效帧。
    """

    row: int
    groups: Mapping[str, GroupSample]
    fields: Mapping[str, float]
    frame_number: float | None = None
    dropped: bool = False

    def value(self, name: str) -> float:
        """按字段名取值：分组返回均值，单列返回原值。"""

        g = self.groups.get(name)
        if g is not None:
            return g.mean
        if name in self.fields:
            return self.fields[name]
        raise KeyError(name)

    def spread(self, name: str) -> float:
        g = self.groups.get(name)
        if g is None:
            raise KeyError(name)
        return g.spread


@dataclass(frozen=True)
class ClockJumpConfig:
    """时钟跳变扫描参数。

    属性:
        low/high: 相邻两列差值（绝对值）落在开区间 (low, high) 内即视为可疑。
        context_columns: 日志里在可疑列对两侧各多打印多少列。
    """

    low: float = 0.5
    high: float = 1.5
    context_columns: int = 2


@dataclass(frozen=True)
class ClockJump:
    row: int
    column: int
    delta: float


def parse_number(text: object) -> float:
    """把文本字段转为 float；无法解析时返回 0.0。"""

    try:
        x = float(str(text).strip())
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(x):
        return 0.0
    return x


def mean_and_spread(values: Sequence[float]) -> GroupSample:
    """计算均值与极差。

    Raises:
        SchemaError: values 为空（对空分组求均值没有意义，必须显式失败而不是产出 NaN）。
    """

    if not values:
        raise SchemaError("cannot summarize an empty sample group")
    xs = [float(v) for v in values]
    return GroupSample(mean=sum(xs) / len(xs), spread=max(xs) - min(xs))


def _check_row_length(row: Sequence[str], schema: Schema, row_number: int) -> None:
    required = schema.max_index + 1
    if len(row) < required:
        raise RowFormatError(row_number=row_number, required=required, actual=len(row))


def extract_frame(row: Sequence[str], schema: Schema, *, row_number: int) -> FrameRecord:
    """把一行原始字段转为 FrameRecord。"""

    _check_row_length(row, schema, row_number)

    groups: dict[str, GroupSample] = {}
    for g in schema.groups.values():
        groups[g.record_field] = mean_and_spread([parse_number(row[i]) for i in g.indices])

    fields: dict[str, float] = {}
    for name, s in schema.singletons.items():
        if name in DIAGNOSTIC_SINGLETONS:
            continue
        fields[name] = parse_number(row[s.index])

    frame_number = None
    if "frame_number" in schema.singletons:
        frame_number = parse_number(row[schema.singletons["frame_number"].index])

    dropped = False
    if "dropped" in schema.singletons:
        dropped = parse_number(row[schema.singletons["dropped"].index]) != 0.0

    return FrameRecord(
        row=row_number,
        groups=MappingProxyType(groups),
        fields=MappingProxyType(fields),
        frame_number=frame_number,
        dropped=dropped,
    )


def _format_context(rows: Sequence[Sequence[str]], center: int, lo: int, hi: int) -> str:
    lines: list[str] = []
    for i in range(max(0, center - 1), min(len(rows), center + 2)):
        cells = [str(c) for c in rows[i][lo:hi]]
        marker = ">" if i == center else " "
        lines.append(f"{marker} row {i + 1}: " + "; ".join(cells))
    return "\n".join(lines)


def scan_clock_jumps(
    rows: Sequence[Sequence[str]],
    schema: Schema,
    cfg: ClockJumpConfig,
) -> list[ClockJump]:
    """扫描每行相邻时间列之间的“时钟跳变”。

    相邻列差值落在 (cfg.low, cfg.high) 内时，更像是两列时间源不一致，
    而不是真实延迟。命中时打印前后各一行在列窗口内的原始值，供人工排查。

    Returns:
        检测到的跳变列表（按行、列顺序）。
    """

    cols = schema.timing_columns()
    jumps: list[ClockJump] = []
    if len(cols) < 2:
        return jumps

    for r, row in enumerate(rows):
        for a, b in zip(cols, cols[1:]):
            if b >= len(row):
                break
            delta = abs(parse_number(row[b]) - parse_number(row[a]))
            if not (cfg.low < delta < cfg.high):
                continue

            jumps.append(ClockJump(row=r + 1, column=a, delta=delta))
            lo = max(0, a - int(cfg.context_columns))
            hi = b + 1 + int(cfg.context_columns)
            logger.warning(
                "clock jump at row %d between %s and %s (delta=%.6f)\n%s",
                r + 1,
                schema.headers[a],
                schema.headers[b],
                delta,
                _format_context(rows, r, lo, hi),
            )
    return jumps


def extract_frames(
    rows: Sequence[Sequence[str]],
    schema: Schema,
    *,
    clock_jump: ClockJumpConfig | None = None,
) -> tuple[FrameRecord, ...]:
    """把全部数据行解析为帧记录序列（保持行序）。

    Args:
        rows: 原始数据行（不含表头）。
        schema: `resolve_schema` 的结果。
        clock_jump: 时钟跳变扫描参数；None 表示不扫描。

    Raises:
        RowFormatError: 任意一行字段数不足；整次分析中止。
    """

    if clock_jump is not None:
        scan_clock_jumps(rows, schema, clock_jump)

    return tuple(extract_frame(row, schema, row_number=i + 1) for i, row in enumerate(rows))
