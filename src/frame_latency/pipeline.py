"""一次完整分析：schema 解析 -> 帧抽取 -> 聚合。

三步严格顺序执行、互不重叠；帧抽取阶段先产出完整的不可变序列，再交给聚合阶段。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Sequence

from frame_latency.frames import extract_frames
from frame_latency.profiles import ReportProfile
from frame_latency.reader import read_table
from frame_latency.report import LatencyReport, aggregate
from frame_latency.schema import resolve_schema

logger = logging.getLogger(__name__)


def analyze_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    profile: ReportProfile,
    *,
    ceilings: Mapping[str, int] | None = None,
) -> LatencyReport:
    schema = resolve_schema(headers, ceilings=ceilings)
    logger.debug(
        "schema: groups=%s singletons=%s upload=%s",
        {k: list(g.indices) for k, g in schema.groups.items()},
        {k: s.index for k, s in schema.singletons.items()},
        schema.has_upload,
    )

    frames = extract_frames(rows, schema, clock_jump=profile.clock_jump)
    logger.info("%d frames, %d dropped", len(frames), sum(1 for f in frames if f.dropped))

    return aggregate(frames, schema, profile)


def analyze_file(
    path: Path,
    profile: ReportProfile,
    *,
    ceilings: Mapping[str, int] | None = None,
) -> LatencyReport:
    headers, rows = read_table(Path(path))
    return analyze_table(headers, rows, profile, ceilings=ceilings)
