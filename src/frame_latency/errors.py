"""延迟分析的错误类型。

约定：
- 这里的异常都表示“致命”错误：整次分析中止，由 CLI 统一捕获并返回非零退出码。
- 非致命情况（未知表头、时钟跳变、毛刺、丢帧跳过）只记 warning 日志，不抛异常。
"""

from __future__ import annotations


class LatencyError(RuntimeError):
    """所有致命错误的基类。"""


class SchemaError(LatencyError):
    """表头无法构成可用 schema（例如必需的分组一列都没有）。"""


class RowFormatError(LatencyError):
    """数据行字段数少于 schema 引用到的最大列号。"""

    def __init__(self, *, row_number: int, required: int, actual: int) -> None:
        super().__init__(f"row {row_number}: expected at least {required} fields, got {actual}")
        self.row_number = row_number
        self.required = required
        self.actual = actual


class EmptySeriesError(LatencyError):
    """过滤后序列为空，统计量无定义。"""

    def __init__(self, title: str) -> None:
        super().__init__(f"no usable samples for '{title}' (series is empty after filtering)")
        self.title = title


class ConfigError(LatencyError):
    """配置文件或命令行参数不合法。"""
