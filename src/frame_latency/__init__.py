"""多阶段采集/传输流水线的逐帧延迟分析。

输入：`;` 分隔的日志，每行一帧，列名标注所属阶段（部分阶段有多路冗余采样）。
输出：按流水线顺序排列的阶段延迟统计表（毫秒）。
"""

from frame_latency.errors import ConfigError, EmptySeriesError, LatencyError, RowFormatError, SchemaError
from frame_latency.frames import ClockJumpConfig, FrameRecord, GroupSample, extract_frame, extract_frames
from frame_latency.pipeline import analyze_file, analyze_table
from frame_latency.profiles import FILTERED, LEGACY, ReportProfile, get_profile
from frame_latency.report import LatencyReport, aggregate, build_stage_chain, latency_series, render_report
from frame_latency.schema import GroupRole, Schema, SingletonRole, resolve_schema
from frame_latency.stats import Reducer, ReducerKind, reduce_series, statistic_battery

__all__ = [
    "ClockJumpConfig",
    "ConfigError",
    "EmptySeriesError",
    "FILTERED",
    "FrameRecord",
    "GroupRole",
    "GroupSample",
    "LEGACY",
    "LatencyError",
    "LatencyReport",
    "Reducer",
    "ReducerKind",
    "ReportProfile",
    "RowFormatError",
    "Schema",
    "SchemaError",
    "SingletonRole",
    "aggregate",
    "analyze_file",
    "analyze_table",
    "build_stage_chain",
    "extract_frame",
    "extract_frames",
    "get_profile",
    "latency_series",
    "reduce_series",
    "render_report",
    "resolve_schema",
    "statistic_battery",
]
