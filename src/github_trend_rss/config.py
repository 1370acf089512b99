"""读取 JSON 配置文件，并按三层优先级合并出每个来源的最终配置。"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from .constants import (
    DEFAULT_LANGUAGE,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_TIME_RANGE,
    GITHUB_TRENDING_URL,
)
from .models import ConfigFile, GlobalSettings, SourceSettings, SourceSpec
from .validation import ConfigError, validate_global, validate_sources

logger = logging.getLogger(__name__)

_SETTING_FIELDS = frozenset(item.name for item in fields(SourceSettings))


def load_config(config_path: str | Path) -> ConfigFile:
    """读取并校验配置文件；任何问题都在开始抓取前以 ConfigError 抛出。"""
    path = Path(config_path)
    if not path.is_file():
        raise ConfigError(f"配置文件不存在：{path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"无法解析配置文件 {path}：{exc}") from exc
    if not isinstance(raw, Mapping):
        raise ConfigError(f"配置文件顶层必须是对象：{path}")
    config = ConfigFile(
        global_settings=validate_global(raw.get("global")),
        sources=validate_sources(raw.get("sources")),
    )
    logger.info("已加载配置文件 %s，共 %d 个来源", path, len(config.sources))
    return config


def merge_settings(
    global_settings: GlobalSettings,
    source: SourceSpec,
    overrides: Optional[Mapping[str, Any]] = None,
) -> SourceSettings:
    """合并单个来源的生效配置。

    优先级从低到高：
    1. global_settings：全局默认值（配置文件缺省时即内置默认值）；
    2. source：来源自身的 language/time_range/output_path/base_url 以及 source.overrides；
    3. overrides：调用方（如命令行）显式给出的值，值为 None 的键视为未指定。
    """
    values: dict[str, Any] = asdict(global_settings)
    values.update(
        name=source.name,
        language=source.language,
        time_range=source.time_range,
        output_path=source.output_path,
        base_url=source.base_url or GITHUB_TRENDING_URL,
    )
    values.update(source.overrides)
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key not in _SETTING_FIELDS:
            raise ConfigError(f"未知的配置项：{key}")
        values[key] = value
    return SourceSettings(**values)


def single_source_settings(overrides: Optional[Mapping[str, Any]] = None) -> SourceSettings:
    """不使用配置文件时的单来源配置，未指定的字段取内置默认值。"""
    source = SourceSpec(
        name="default",
        language=DEFAULT_LANGUAGE,
        time_range=DEFAULT_TIME_RANGE,
        output_path=DEFAULT_OUTPUT_PATH,
    )
    return merge_settings(GlobalSettings(), source, overrides)
