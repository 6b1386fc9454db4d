"""frame_latency 的日志工具。

报告正文走 stdout，诊断信息（未知表头、时钟跳变、毛刺等）走 stderr，
两者不能混在一起。这里只做最小封装：
    - 给包根 logger 挂一个 stderr handler
    - 避免重复添加 handler
"""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "frame_latency"


def get_logger(name: str = PACKAGE_LOGGER, *, level: str = "INFO") -> logging.Logger:
    """创建或获取一个输出到 stderr 的 logger。

    Args:
        name: logger 名称；默认是包根 logger，子模块的 logger 会向上传播到这里。
        level: 日志级别（字符串，大小写不敏感）。

    Returns:
        logging.Logger: 配置完成的 logger。
    """

    logger = logging.getLogger(name)
    logger.setLevel(_parse_level(level))

    # 防止同名 logger 在多次调用时重复叠加 handler。
    if getattr(logger, "_frame_latency_configured", False):
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="[%(asctime)s][%(levelname)s][%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logger.addHandler(handler)

    setattr(logger, "_frame_latency_configured", True)
    return logger


def _parse_level(level: str) -> int:
    """解析日志级别字符串。"""

    value = logging.getLevelName(str(level).upper())
    if isinstance(value, int):
        return value
    return logging.INFO
