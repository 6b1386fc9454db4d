"""命令行入口（只管参数解析、日志配置与调用 pipeline）。

运行示例：
    frame-latency data/latency.csv
    frame-latency data/latency.csv --profile legacy
    python -m frame_latency data/latency.csv --config latency.yaml --glitch-threshold 0.5
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path

from frame_latency.config import AnalysisConfig, build_profile, load_analysis_config
from frame_latency.errors import LatencyError
from frame_latency.logging_utils import get_logger
from frame_latency.pipeline import analyze_file
from frame_latency.profiles import PROFILES
from frame_latency.report import render_report

EXIT_OK = 0
EXIT_FATAL = 2


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Per-stage latency report for a ';'-delimited frame log")
    p.add_argument("path", help="输入文件（; 分隔，首行为表头）")
    p.add_argument(
        "--profile",
        choices=sorted(PROFILES),
        default=None,
        help="报告格式（默认 filtered；也可在配置文件里指定）",
    )
    p.add_argument("--config", default=None, help="配置文件（.yaml/.yml/.json）")
    p.add_argument(
        "--glitch-threshold",
        type=float,
        default=None,
        help="毛刺阈值（秒）；超过该值的单个差值会被剔除并告警",
    )
    p.add_argument("--log-level", default=None, help="日志级别（DEBUG/INFO/WARNING/ERROR）")
    return p


def _resolve_config(args: argparse.Namespace) -> AnalysisConfig:
    cfg = load_analysis_config(Path(args.config)) if args.config else AnalysisConfig()

    # 命令行参数覆盖配置文件。
    changes: dict[str, object] = {}
    if args.profile is not None:
        changes["profile"] = str(args.profile)
    if args.glitch_threshold is not None:
        changes["glitch_threshold"] = float(args.glitch_threshold)
    if args.log_level is not None:
        changes["log_level"] = str(args.log_level).upper()
    return replace(cfg, **changes) if changes else cfg


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logger = get_logger(level=args.log_level or "INFO")

    try:
        cfg = _resolve_config(args)
        logger = get_logger(level=cfg.log_level)
        profile = build_profile(cfg)
        report = analyze_file(Path(args.path), profile, ceilings=cfg.ceilings)
    except FileNotFoundError as exc:
        logger.error("error: input file not found: %s", exc)
        return EXIT_FATAL
    except LatencyError as exc:
        logger.error("error: %s", exc)
        return EXIT_FATAL

    print(render_report(report))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
