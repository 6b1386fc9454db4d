"""阶段延迟聚合与报告格式化。

流程：
1) `build_stage_chain`：按 profile 的 stage 列表和 schema 的能力（可选阶段是否存在）
   组装报告行；缺失的可选阶段被跳过，前后阶段直接桥接。
2) `aggregate`：对每一行计算延迟序列，再用统计量组合归约。
3) `render_report`：格式化为定宽文本表（数值单位 s -> ms，保留 4 位小数）。

报告行的顺序是对外契约（使用者按位置读报告），必须与 stage 链一致。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from frame_latency.errors import SchemaError
from frame_latency.frames import FrameRecord
from frame_latency.profiles import DiffMode, ReportProfile
from frame_latency.schema import Schema
from frame_latency.stats import Reducer, reduce_series, statistic_battery

logger = logging.getLogger(__name__)

TITLE_WIDTH = 20
COLUMN_WIDTH = 12


class LineKind(str, Enum):
    # 同一记录内的分组极差（抖动），不是跨阶段差值。
    SPREAD = "spread"
    # 同一字段在相邻两行之间的差值（帧间隔）。
    CROSS_ROW = "cross_row"
    # 两个阶段字段之间的差值。
    STAGE = "stage"


@dataclass(frozen=True)
class ReportLine:
    title: str
    kind: LineKind
    s1: str
    s2: str | None = None
    # 端到端总时长、帧间隔本来就可能超过单阶段的毛刺阈值，不做毛刺过滤。
    glitch_exempt: bool = False


@dataclass(frozen=True)
class ReportRow:
    title: str
    values: tuple[float, ...]


@dataclass(frozen=True)
class LatencyReport:
    profile: str
    reducers: tuple[Reducer, ...]
    rows: tuple[ReportRow, ...]

    def row(self, title: str) -> ReportRow:
        for r in self.rows:
            if r.title == title:
                return r
        raise KeyError(title)


def build_stage_chain(schema: Schema, profile: ReportProfile) -> tuple[ReportLine, ...]:
    """按 profile 与 schema 组装报告行。

    Raises:
        SchemaError: 非可选阶段在 schema 中不存在。
    """

    origin = profile.origin
    if not schema.has_field(origin):
        raise SchemaError(f"report origin '{origin}' has no columns")

    lines: list[ReportLine] = [ReportLine("Timestamp difference", LineKind.SPREAD, origin)]
    if profile.frame_interval:
        # 帧周期不受毛刺阈值约束。
        lines.append(ReportLine("Frame interval", LineKind.CROSS_ROW, origin, glitch_exempt=True))

    prev = origin
    for stage in profile.stages:
        if not schema.has_field(stage.field):
            if stage.optional:
                logger.debug("stage %s not present, bridging %s directly", stage.field, prev)
                continue
            raise SchemaError(f"required stage '{stage.field}' has no column (profile={profile.name})")
        lines.append(ReportLine(stage.title, LineKind.STAGE, prev, stage.field))
        prev = stage.field

    lines.append(ReportLine("Total time", LineKind.STAGE, origin, prev, glitch_exempt=True))
    return tuple(lines)


def _keep(d: float, *, glitch_threshold: float | None, title: str, row: int) -> bool:
    if glitch_threshold is not None and d > glitch_threshold:
        logger.warning(
            "%s: row %d difference %.6f exceeds glitch threshold %.6f, dropped from series",
            title,
            row,
            d,
            glitch_threshold,
        )
        return False
    return True


def _spans_dropped(frames: Sequence[FrameRecord], i: int) -> bool:
    if frames[i].dropped:
        return True
    return i > 0 and frames[i - 1].dropped


def latency_series(
    frames: Sequence[FrameRecord],
    s1: str,
    s2: str,
    *,
    mode: DiffMode,
    filter_dropped: bool = False,
    glitch_threshold: float | None = None,
    title: str | None = None,
) -> list[float]:
    """计算两个字段之间的延迟序列 |r[i][s1] - r[i][s2]|。

    Args:
        mode: SAME_ROW_LEGACY 从第 1 行开始（跳过第 0 行）；
            SAME_ROW_FILTERED 覆盖全部行，第 i 个值归属相邻行对 (i-1, i)。
        filter_dropped: 为 True 时，第 i 行或第 i-1 行为丢帧则跳过该值。
        glitch_threshold: 超过该阈值的差值视为测量毛刺，剔除并告警；None 表示不过滤。
    """

    title = title or f"{s1}->{s2}"
    start = 1 if mode is DiffMode.SAME_ROW_LEGACY else 0

    out: list[float] = []
    skipped = 0
    for i in range(start, len(frames)):
        if filter_dropped and _spans_dropped(frames, i):
            skipped += 1
            continue
        d = abs(frames[i].value(s1) - frames[i].value(s2))
        if _keep(d, glitch_threshold=glitch_threshold, title=title, row=frames[i].row):
            out.append(d)

    if skipped:
        logger.warning("%s: skipped %d entries spanning dropped frames", title, skipped)
    return out


def cross_row_series(
    frames: Sequence[FrameRecord],
    name: str,
    *,
    filter_dropped: bool = False,
    glitch_threshold: float | None = None,
    title: str | None = None,
) -> list[float]:
    """同一字段在相邻两行之间的差值 |r[i][name] - r[i-1][name]|。"""

    title = title or f"{name} interval"
    out: list[float] = []
    skipped = 0
    for i in range(1, len(frames)):
        if filter_dropped and _spans_dropped(frames, i):
            skipped += 1
            continue
        d = abs(frames[i].value(name) - frames[i - 1].value(name))
        if _keep(d, glitch_threshold=glitch_threshold, title=title, row=frames[i].row):
            out.append(d)

    if skipped:
        logger.warning("%s: skipped %d intervals spanning dropped frames", title, skipped)
    return out


def spread_series(frames: Sequence[FrameRecord], name: str, *, filter_dropped: bool = False) -> list[float]:
    return [f.spread(name) for f in frames if not (filter_dropped and f.dropped)]


def line_series(frames: Sequence[FrameRecord], line: ReportLine, profile: ReportProfile) -> list[float]:
    """计算单个报告行对应的序列。"""

    threshold = None if line.glitch_exempt else profile.glitch_threshold

    if line.kind is LineKind.SPREAD:
        return spread_series(frames, line.s1, filter_dropped=profile.filter_dropped)
    if line.kind is LineKind.CROSS_ROW:
        return cross_row_series(
            frames,
            line.s1,
            filter_dropped=profile.filter_dropped,
            glitch_threshold=threshold,
            title=line.title,
        )
    if line.s2 is None:
        raise ValueError(f"stage line '{line.title}' requires two fields")
    return latency_series(
        frames,
        line.s1,
        line.s2,
        mode=profile.diff_mode,
        filter_dropped=profile.filter_dropped,
        glitch_threshold=threshold,
        title=line.title,
    )


def aggregate(frames: Sequence[FrameRecord], schema: Schema, profile: ReportProfile) -> LatencyReport:
    """对全部帧记录按 stage 链计算统计报告。

    Raises:
        SchemaError: stage 链无法组装。
        EmptySeriesError: 任一行过滤后为空；整份报告失败。
    """

    reducers = statistic_battery(profile.tail_percentile)
    rows: list[ReportRow] = []
    for line in build_stage_chain(schema, profile):
        series = line_series(frames, line, profile)
        values = reduce_series(series, reducers, title=line.title)
        rows.append(ReportRow(line.title, tuple(values)))

    return LatencyReport(profile=profile.name, reducers=reducers, rows=tuple(rows))


def format_header(reducers: Sequence[Reducer]) -> str:
    # 列名超过列宽时截断，例如 standard_deviation -> "standard_dev"。
    cells = [" " + r.label.rjust(COLUMN_WIDTH)[:COLUMN_WIDTH] for r in reducers]
    return " " * (TITLE_WIDTH + 1) + "".join(cells)


def format_row(row: ReportRow) -> str:
    cells = [f" {v * 1000:{COLUMN_WIDTH}.4f}" for v in row.values]
    return row.title.ljust(TITLE_WIDTH, ".") + ":" + "".join(cells)


def render_report(report: LatencyReport) -> str:
    """渲染为文本表（不含结尾换行）。"""

    lines = [format_header(report.reducers)]
    lines.extend(format_row(r) for r in report.rows)
    return "\n".join(lines)
