"""表头驱动的 schema 解析。

输入是表头字符串列表，输出是“语义角色 -> 列号”的映射。

规则：
- 规则表自上而下匹配，第一条命中即生效。
- 编号分组规则（例如 `timestamp3`、`dolphin0`）排在前缀规则之前，
  因此 `dma3` 属于 DMA 通道分组，而 `dma_done` 属于单列角色 `dma`。
- 分组可配置编号上限（ceiling）：编号超过上限的列直接排除，不报错。
- 未匹配任何规则的表头只记 warning，不中止解析。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from frame_latency.errors import SchemaError

logger = logging.getLogger(__name__)


# 分组角色名 -> 记录里的字段名（均值字段；spread 通过 FrameRecord.spread 访问）。
GROUP_FIELDS: dict[str, str] = {
    "timestamps": "ts",
    "captures": "capture",
    "transfers": "transfer",
    "dma_channels": "dma_channel",
}

# 诊断字段：不是时间戳，不参与时钟跳变扫描。
DIAGNOSTIC_SINGLETONS: tuple[str, ...] = ("frame_number", "dropped")

DEFAULT_REQUIRED_GROUPS: tuple[str, ...] = ("timestamps", "captures", "transfers")


@dataclass(frozen=True)
class GroupRule:
    role: str
    pattern: re.Pattern[str]


@dataclass(frozen=True)
class PrefixRule:
    role: str
    prefix: str


# 顺序即优先级。
RULES: tuple[GroupRule | PrefixRule, ...] = (
    GroupRule("timestamps", re.compile(r"^timestamp(\d+)$")),
    GroupRule("captures", re.compile(r"^dolphin(\d+)$")),
    GroupRule("transfers", re.compile(r"^transfer(\d+)$")),
    GroupRule("dma_channels", re.compile(r"^dma(\d+)$")),
    PrefixRule("sync", "sync"),
    PrefixRule("upload", "upload"),
    PrefixRule("bayer", "bayer"),
    PrefixRule("hdr", "hdr"),
    PrefixRule("stitch", "stitch"),
    PrefixRule("download", "download"),
    PrefixRule("encode", "encode"),
    PrefixRule("send", "send"),
    PrefixRule("receive", "receive"),
    PrefixRule("dma", "dma"),
    PrefixRule("frame_number", "num"),
    PrefixRule("dropped", "dropped"),
)


@dataclass(frozen=True)
class GroupRole:
    """一组冗余的同类列（多个采集传感器、多条传输链路等）。"""

    name: str
    indices: tuple[int, ...]
    ceiling: int | None = None

    @property
    def record_field(self) -> str:
        return GROUP_FIELDS[self.name]


@dataclass(frozen=True)
class SingletonRole:
    name: str
    index: int

    @property
    def record_field(self) -> str:
        return self.name


@dataclass(frozen=True)
class Schema:
    """解析后的 schema（不可变）。

    属性:
        headers: 原始表头（保序）。
        groups: 分组角色；未出现的分组不在其中。
        singletons: 单列角色；未出现的角色不在其中。
        unknown_headers: 未识别的表头（保序）。
    """

    headers: tuple[str, ...]
    groups: Mapping[str, GroupRole]
    singletons: Mapping[str, SingletonRole]
    unknown_headers: tuple[str, ...] = field(default=())

    def has(self, role: str) -> bool:
        """角色是否存在（分组需至少一列）。"""

        g = self.groups.get(role)
        if g is not None:
            return bool(g.indices)
        return role in self.singletons

    def has_field(self, name: str) -> bool:
        """按记录字段名判断（例如 `ts`、`capture`、`sync`）。"""

        for g in self.groups.values():
            if g.record_field == name:
                return bool(g.indices)
        return name in self.singletons

    def group(self, role: str) -> GroupRole:
        g = self.groups.get(role)
        if g is None or not g.indices:
            raise SchemaError(f"no columns resolved for group '{role}'")
        return g

    def singleton(self, role: str) -> SingletonRole:
        s = self.singletons.get(role)
        if s is None:
            raise SchemaError(f"no column resolved for '{role}'")
        return s

    @property
    def has_upload(self) -> bool:
        """是否存在 upload 阶段（决定 stage 链是否插入 Upload time）。"""

        return "upload" in self.singletons

    @property
    def max_index(self) -> int:
        """schema 引用到的最大列号；没有任何列时为 -1。"""

        idx = [i for g in self.groups.values() for i in g.indices]
        idx.extend(s.index for s in self.singletons.values())
        return max(idx) if idx else -1

    def timing_columns(self) -> list[int]:
        """所有时间类列号（升序），不含帧号/丢帧标记列。"""

        cols = {i for g in self.groups.values() for i in g.indices}
        cols.update(s.index for name, s in self.singletons.items() if name not in DIAGNOSTIC_SINGLETONS)
        return sorted(cols)


def classify_header(header: str) -> tuple[str, int | None] | None:
    """对单个表头做分类。

    Returns:
        (role, number)：分组规则命中时 number 为表头末尾的编号，前缀规则命中时为 None；
        未命中任何规则时返回 None。
    """

    h = str(header).strip()
    for rule in RULES:
        if isinstance(rule, GroupRule):
            m = rule.pattern.match(h)
            if m is not None:
                return rule.role, int(m.group(1))
        elif h.startswith(rule.prefix):
            return rule.role, None
    return None


def resolve_schema(
    headers: Sequence[str],
    *,
    ceilings: Mapping[str, int] | None = None,
    required_groups: Iterable[str] = DEFAULT_REQUIRED_GROUPS,
) -> Schema:
    """把表头列表解析为 Schema。

    Args:
        headers: 表头（保序）。
        ceilings: 分组编号上限，例如 {"dma_channels": 3} 表示只保留 dma0..dma3。
        required_groups: 必须至少有一列的分组；为空则抛 SchemaError。

    Raises:
        SchemaError: 表头为空，或必需分组一列都没有。
    """

    if not headers:
        raise SchemaError("header list is empty")

    ceilings = dict(ceilings or {})
    group_indices: dict[str, list[int]] = {role: [] for role in GROUP_FIELDS}
    singletons: dict[str, SingletonRole] = {}
    unknown: list[str] = []

    for i, h in enumerate(headers):
        hit = classify_header(h)
        if hit is None:
            logger.warning("Unknown header: %s", h)
            unknown.append(str(h))
            continue

        role, number = hit
        if number is not None:
            ceiling = ceilings.get(role)
            if ceiling is not None and number > int(ceiling):
                logger.debug("column %s excluded from %s (ceiling=%d)", h, role, ceiling)
                continue
            group_indices[role].append(i)
            continue

        prev = singletons.get(role)
        if prev is not None:
            logger.warning("duplicate column for %s: %s (column %d replaces column %d)", role, h, i, prev.index)
        singletons[role] = SingletonRole(role, i)

    for role in required_groups:
        if not group_indices.get(role):
            raise SchemaError(f"no columns resolved for required group '{role}'")

    groups = {
        role: GroupRole(role, tuple(idx), ceilings.get(role))
        for role, idx in group_indices.items()
        if idx
    }

    return Schema(
        headers=tuple(str(h) for h in headers),
        groups=MappingProxyType(groups),
        singletons=MappingProxyType(singletons),
        unknown_headers=tuple(unknown),
    )
