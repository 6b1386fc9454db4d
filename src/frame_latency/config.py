"""分析配置（dataclass）与 YAML/JSON 加载。

目标：
- 用一个 frozen dataclass 表达一次分析所需的可调参数
- 支持从 `.yaml/.yml/.json` 加载；命令行参数再覆盖文件里的值

配置示例（YAML）：

    profile: filtered
    glitch_threshold: 0.75
    tail_percentile: 99.9
    ceilings:
      dma_channels: 3
    clock_jump:
      low: 0.5
      high: 1.5
      context_columns: 2
    log_level: INFO

`clock_jump: false` 表示关闭时钟跳变扫描。
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from frame_latency.errors import ConfigError
from frame_latency.frames import ClockJumpConfig
from frame_latency.profiles import DEFAULT_PROFILE, PROFILES, ReportProfile, get_profile, with_overrides
from frame_latency.schema import GROUP_FIELDS


def _load_mapping(path: Path) -> dict[str, Any]:
    path = Path(path)
    suf = path.suffix.lower()

    if not path.exists():
        raise ConfigError(f"config file not found: {path}")

    if suf == ".json":
        with path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"invalid JSON in {path}: {exc}") from exc
    elif suf in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover
            raise ConfigError("PyYAML 未安装，无法读取 YAML 配置") from exc

        with path.open("r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    else:
        raise ConfigError(f"不支持的配置文件类型: {path}（仅支持 .json/.yaml/.yml）")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("配置文件顶层必须是对象（dict）")

    return data


def _as_optional_float(x: Any, name: str) -> float | None:
    if x is None:
        return None
    try:
        return float(x)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"config field '{name}' must be a number, got {x!r}") from exc


def _as_ceilings(x: Any) -> dict[str, int]:
    if x is None:
        return {}
    if not isinstance(x, dict):
        raise ConfigError("config field 'ceilings' must be an object")
    out: dict[str, int] = {}
    for k, v in x.items():
        role = str(k).strip()
        if role not in GROUP_FIELDS:
            raise ConfigError(f"unknown group in ceilings: {role} (expected: {'|'.join(GROUP_FIELDS)})")
        try:
            out[role] = int(v)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"ceiling for '{role}' must be an integer, got {v!r}") from exc
    return out


def _as_clock_jump(x: Any) -> ClockJumpConfig | bool | None:
    """None 表示沿用 profile；False 表示关闭；dict 表示自定义参数。"""

    if x is None:
        return None
    if isinstance(x, bool):
        return ClockJumpConfig() if x else False
    if not isinstance(x, dict):
        raise ConfigError("config field 'clock_jump' must be an object or a boolean")

    try:
        cfg = ClockJumpConfig(
            low=float(x.get("low", 0.5)),
            high=float(x.get("high", 1.5)),
            context_columns=int(x.get("context_columns", 2)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"config field 'clock_jump' has a non-numeric value: {x!r}") from exc
    if not cfg.low < cfg.high:
        raise ConfigError(f"clock_jump band is empty: ({cfg.low}, {cfg.high})")
    return cfg


@dataclass(frozen=True)
class AnalysisConfig:
    profile: str = DEFAULT_PROFILE
    glitch_threshold: float | None = None
    tail_percentile: float | None = None
    # 分组编号上限：编号更大的列不参与均值/极差。
    ceilings: dict[str, int] = field(default_factory=dict)
    clock_jump: ClockJumpConfig | bool | None = None
    log_level: str = "INFO"


def load_analysis_config(path: Path) -> AnalysisConfig:
    """加载分析配置文件。"""

    data = _load_mapping(Path(path))

    profile = str(data.get("profile", DEFAULT_PROFILE)).strip().lower()
    if profile not in PROFILES:
        raise ConfigError(f"unknown profile: {profile} (expected: {'|'.join(sorted(PROFILES))})")

    return AnalysisConfig(
        profile=profile,
        glitch_threshold=_as_optional_float(data.get("glitch_threshold"), "glitch_threshold"),
        tail_percentile=_as_optional_float(data.get("tail_percentile"), "tail_percentile"),
        ceilings=_as_ceilings(data.get("ceilings")),
        clock_jump=_as_clock_jump(data.get("clock_jump")),
        log_level=str(data.get("log_level", "INFO")).strip().upper(),
    )


def build_profile(cfg: AnalysisConfig) -> ReportProfile:
    """由配置得到最终生效的 ReportProfile。"""

    profile = with_overrides(
        get_profile(cfg.profile),
        glitch_threshold=cfg.glitch_threshold,
        tail_percentile=cfg.tail_percentile,
        clock_jump=cfg.clock_jump if isinstance(cfg.clock_jump, ClockJumpConfig) else None,
    )
    if cfg.clock_jump is False and profile.clock_jump is not None:
        profile = replace(profile, clock_jump=None)
    return profile
