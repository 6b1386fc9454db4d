# -*- coding: utf-8 -*-

"""生成一份可直接跑通报告的合成延迟日志。

运行示例：
    python tools/generate_sample_log.py --out data/sample_latency.csv --frames 500 --upload
    frame-latency data/sample_latency.csv
"""

from __future__ import annotations

import argparse
from pathlib import Path

from frame_latency.sample import SampleSpec, write_sample_log


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Generate a synthetic ';'-delimited latency log")
    p.add_argument("--out", default="data/sample_latency.csv", help="输出路径")
    p.add_argument("--frames", type=int, default=200, help="帧数")
    p.add_argument("--fps", type=float, default=30.0, help="帧率")
    p.add_argument("--upload", action="store_true", help="包含 upload 阶段")
    p.add_argument("--drop-ratio", type=float, default=0.02, help="丢帧比例")
    p.add_argument("--seed", type=int, default=0, help="随机种子")
    args = p.parse_args(argv)

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    n = write_sample_log(
        out,
        SampleSpec(
            frames=int(args.frames),
            fps=float(args.fps),
            upload=bool(args.upload),
            drop_ratio=float(args.drop_ratio),
            seed=int(args.seed),
        ),
    )

    # Use ASCII to avoid Windows console encoding issues.
    print(f"Generated sample latency log: {n} frames -> {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
