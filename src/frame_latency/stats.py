"""统计量组合（Statistic Battery）。

每个统计量用 `Reducer(kind, param)` 描述，再由 `_REDUCERS` 显式映射到函数；
报告里每一行都按同一组 reducer、同一顺序计算。

口径：
- variance / standard_deviation 为总体统计量（ddof=0）。
- percentile 在相邻秩之间线性插值；median 即 50 分位。
- mode 取出现次数最多的值；并列时取序列中最先出现的那个。
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

import numpy as np

from frame_latency.errors import EmptySeriesError


class ReducerKind(str, Enum):
    MEAN = "mean"
    STANDARD_DEVIATION = "standard_deviation"
    MIN = "min"
    MAX = "max"
    VARIANCE = "variance"
    MODE = "mode"
    PERCENTILE = "percentile"
    MEDIAN = "median"


@dataclass(frozen=True)
class Reducer:
    kind: ReducerKind
    param: float | None = None

    @property
    def label(self) -> str:
        """报告表头里的列名，例如 `percentile25`、`percentile99.9`。"""

        if self.param is None:
            return self.kind.value
        return f"{self.kind.value}{self.param:g}"


def _mode(xs: np.ndarray) -> float:
    counts = Counter(float(x) for x in xs)
    best = max(counts.values())
    return next(float(x) for x in xs if counts[float(x)] == best)


def _percentile(xs: np.ndarray, q: float | None) -> float:
    if q is None:
        raise ValueError("percentile reducer requires a parameter")
    return float(np.percentile(xs, float(q)))


_REDUCERS: dict[ReducerKind, Callable[[np.ndarray, float | None], float]] = {
    ReducerKind.MEAN: lambda xs, _: float(np.mean(xs)),
    ReducerKind.STANDARD_DEVIATION: lambda xs, _: float(np.std(xs)),
    ReducerKind.MIN: lambda xs, _: float(np.min(xs)),
    ReducerKind.MAX: lambda xs, _: float(np.max(xs)),
    ReducerKind.VARIANCE: lambda xs, _: float(np.var(xs)),
    ReducerKind.MODE: lambda xs, _: _mode(xs),
    ReducerKind.PERCENTILE: _percentile,
    ReducerKind.MEDIAN: lambda xs, _: float(np.median(xs)),
}


def statistic_battery(tail_percentile: float) -> tuple[Reducer, ...]:
    """固定顺序的统计量组合；最后一列分位数由 profile 决定（95.3 或 99.9）。"""

    return (
        Reducer(ReducerKind.MEAN),
        Reducer(ReducerKind.STANDARD_DEVIATION),
        Reducer(ReducerKind.MIN),
        Reducer(ReducerKind.MAX),
        Reducer(ReducerKind.VARIANCE),
        Reducer(ReducerKind.MODE),
        Reducer(ReducerKind.PERCENTILE, 25),
        Reducer(ReducerKind.MEDIAN),
        Reducer(ReducerKind.PERCENTILE, 75),
        Reducer(ReducerKind.PERCENTILE, tail_percentile),
    )


def reduce_series(
    series: Sequence[float],
    reducers: Sequence[Reducer],
    *,
    title: str = "series",
) -> list[float]:
    """对序列依次应用 reducers。

    Raises:
        EmptySeriesError: 序列为空。
    """

    if len(series) == 0:
        raise EmptySeriesError(title)
    xs = np.asarray(series, dtype=np.float64)
    return [_REDUCERS[r.kind](xs, r.param) for r in reducers]
