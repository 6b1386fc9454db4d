"""合成延迟日志（用于演示与端到端测试）。

生成的数据满足：
- 多路冗余列（timestamp/dolphin/transfer）在阶段时间附近有小幅抖动；
- 各阶段耗时为正、带噪声；
- 可按比例标记丢帧，可选择插入 upload 阶段。
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass(frozen=True)
class SampleSpec:
    frames: int = 200
    fps: float = 30.0
    timestamps: int = 3
    captures: int = 2
    transfers: int = 2
    upload: bool = False
    drop_ratio: float = 0.02
    jitter_s: float = 0.0005
    seed: int = 0


# 阶段名 -> 相对前一阶段的平均耗时（秒）。
_STAGE_MEAN_S: dict[str, float] = {
    "capture": 0.004,
    "transfer": 0.006,
    "sync": 0.002,
    "upload": 0.003,
    "bayer": 0.005,
    "stitch": 0.008,
    "download": 0.003,
    "encode": 0.010,
}


def sample_headers(spec: SampleSpec) -> list[str]:
    headers = ["num"]
    headers += [f"timestamp{i}" for i in range(spec.timestamps)]
    headers += [f"dolphin{i}" for i in range(spec.captures)]
    headers += [f"transfer{i}" for i in range(spec.transfers)]
    headers += ["sync"]
    if spec.upload:
        headers += ["upload"]
    headers += ["bayer", "stitch", "download", "encode", "dropped"]
    return headers


def generate_rows(spec: SampleSpec) -> tuple[list[str], list[list[str]]]:
    """生成 (headers, rows)，rows 中的字段均为文本。"""

    rng = np.random.default_rng(int(spec.seed))
    headers = sample_headers(spec)

    rows: list[list[str]] = []
    for n in range(int(spec.frames)):
        t0 = n / float(spec.fps)
        row: list[str] = [str(n)]

        row += [f"{t0 + d:.6f}" for d in rng.normal(0.0, spec.jitter_s, spec.timestamps)]

        t_capture = t0 + abs(rng.normal(_STAGE_MEAN_S["capture"], 0.0005))
        row += [f"{t_capture + d:.6f}" for d in rng.normal(0.0, spec.jitter_s, spec.captures)]

        t_transfer = t_capture + abs(rng.normal(_STAGE_MEAN_S["transfer"], 0.0005))
        row += [f"{t_transfer + d:.6f}" for d in rng.normal(0.0, spec.jitter_s, spec.transfers)]

        t = t_transfer
        stages = ["sync"] + (["upload"] if spec.upload else []) + ["bayer", "stitch", "download", "encode"]
        for stage in stages:
            t += abs(rng.normal(_STAGE_MEAN_S[stage], 0.0005))
            row.append(f"{t:.6f}")

        row.append("1" if rng.random() < float(spec.drop_ratio) else "0")
        rows.append(row)

    return headers, rows


def write_sample_log(path: Path, spec: SampleSpec) -> int:
    """写出 `;` 分隔文件，返回数据行数。"""

    headers, rows = generate_rows(spec)
    lines = [";".join(headers)] + [";".join(r) for r in rows]
    with Path(path).open("w", encoding="utf-8", newline="\n") as f:
        f.write("\n".join(lines) + "\n")
    return len(rows)
