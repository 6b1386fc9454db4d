"""pytest 运行期配置。

该仓库采用 src-layout（包代码在 ./src 下）。
为了让开发者直接在仓库根目录执行 `python -m pytest` 时也能导入
`frame_latency`，这里在测试收集阶段把 ./src 注入到 sys.path。

注意：这只是测试侧的便捷配置，不影响正式打包安装后的导入行为。
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_src_on_syspath() -> None:
    """将仓库的 ./src 目录加入 sys.path（若尚未存在）。"""

    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"

    # 使用绝对路径，避免因 cwd 不同导致的导入差异。
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_src_on_syspath()


# 一行完整的新格式日志：两路时间戳、两路采集、两路传输、各处理阶段与丢帧标记。
HEADERS = [
    "num",
    "timestamp0",
    "timestamp1",
    "dolphin0",
    "dolphin1",
    "transfer0",
    "transfer1",
    "sync",
    "bayer",
    "stitch",
    "download",
    "encode",
    "dropped",
]


def make_row(t: float, *, num: int = 0, dropped: int = 0, total: float = 1.5) -> list[str]:
    """以 t 为起点构造一行：capture..stitch 各间隔 0.2s，encode 在 t + total，download 比 encode 早 0.25s。

    相邻列差值都不超过 0.5s，不会触发时钟跳变告警。
    """

    values = [
        t,
        t,
        t + 0.2,
        t + 0.2,
        t + 0.4,
        t + 0.4,
        t + 0.6,
        t + 0.8,
        t + 1.0,
        t + total - 0.25,
        t + total,
    ]
    return [str(num)] + [f"{v:.3f}" for v in values] + [str(dropped)]


@pytest.fixture()
def headers() -> list[str]:
    return list(HEADERS)
