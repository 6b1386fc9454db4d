"""报告 profile：`legacy` 与 `filtered`。

两种报告格式的 stage 链、过滤规则、尾部分位数都不同，这里显式分成两个命名 profile，
不做隐式合并：

- legacy：旧格式。同行差值，跳过第 0 行；不过滤丢帧/毛刺；尾部分位数 95.3。
- filtered：新格式（遥测字段更多）。同行差值覆盖全部行，按相邻行对过滤丢帧，
  超过毛刺阈值的差值剔除并告警；额外输出跨行的帧间隔；尾部分位数 99.9。
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from frame_latency.errors import ConfigError
from frame_latency.frames import ClockJumpConfig


class DiffMode(str, Enum):
    # 同行差值，从第 1 行开始，不过滤。
    SAME_ROW_LEGACY = "same_row_legacy"
    # 同行差值，全部行，按相邻行对过滤。
    SAME_ROW_FILTERED = "same_row_filtered"


@dataclass(frozen=True)
class StageSpec:
    """stage 链中的一个阶段。

    属性:
        field: FrameRecord 字段名。
        title: 报告行标题（该阶段相对前一阶段的耗时）。
        optional: schema 缺少该字段时是否允许跳过（相邻阶段直接桥接）。
    """

    field: str
    title: str
    optional: bool = False


@dataclass(frozen=True)
class ReportProfile:
    name: str
    stages: tuple[StageSpec, ...]
    diff_mode: DiffMode
    filter_dropped: bool
    glitch_threshold: float | None
    tail_percentile: float
    frame_interval: bool
    clock_jump: ClockJumpConfig | None
    # 报告链的起点字段（Timestamp difference / Total time 都以它为准）。
    origin: str = "ts"


LEGACY = ReportProfile(
    name="legacy",
    stages=(
        StageSpec("capture", "Capture time"),
        StageSpec("transfer", "Transfer time"),
        StageSpec("sync", "Sync time"),
        StageSpec("upload", "Upload time", optional=True),
        StageSpec("bayer", "Bayer time"),
        StageSpec("stitch", "Stitch time"),
        StageSpec("download", "Download time"),
        StageSpec("encode", "Encode time"),
    ),
    diff_mode=DiffMode.SAME_ROW_LEGACY,
    filter_dropped=False,
    glitch_threshold=None,
    tail_percentile=95.3,
    frame_interval=False,
    clock_jump=None,
)

FILTERED = ReportProfile(
    name="filtered",
    stages=(
        StageSpec("capture", "Capture time"),
        StageSpec("transfer", "Transfer time"),
        StageSpec("sync", "Sync time"),
        StageSpec("upload", "Upload time", optional=True),
        StageSpec("bayer", "Bayer time"),
        StageSpec("hdr", "HDR time", optional=True),
        StageSpec("stitch", "Stitch time"),
        StageSpec("dma_channel", "DMA channel time", optional=True),
        StageSpec("dma", "DMA time", optional=True),
        StageSpec("send", "Send time", optional=True),
        StageSpec("receive", "Receive time", optional=True),
        StageSpec("download", "Download time", optional=True),
        StageSpec("encode", "Encode time"),
    ),
    diff_mode=DiffMode.SAME_ROW_FILTERED,
    filter_dropped=True,
    glitch_threshold=0.75,
    tail_percentile=99.9,
    frame_interval=True,
    clock_jump=ClockJumpConfig(),
)

PROFILES: dict[str, ReportProfile] = {p.name: p for p in (LEGACY, FILTERED)}

DEFAULT_PROFILE = FILTERED.name


def get_profile(name: str) -> ReportProfile:
    s = str(name).strip().lower()
    p = PROFILES.get(s)
    if p is None:
        raise ConfigError(f"unknown profile: {s} (expected: {'|'.join(sorted(PROFILES))})")
    return p


def with_overrides(
    profile: ReportProfile,
    *,
    glitch_threshold: float | None = None,
    tail_percentile: float | None = None,
    clock_jump: ClockJumpConfig | None = None,
) -> ReportProfile:
    """在内置 profile 上覆盖部分参数（None 表示沿用 profile 默认值）。"""

    changes: dict[str, object] = {}
    if glitch_threshold is not None:
        changes["glitch_threshold"] = float(glitch_threshold)
    if tail_percentile is not None:
        changes["tail_percentile"] = float(tail_percentile)
    if clock_jump is not None:
        changes["clock_jump"] = clock_jump
    if not changes:
        return profile
    return replace(profile, **changes)
