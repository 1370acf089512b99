"""集中处理配置文件与请求参数的校验，供 CLI 与 HTTP 端共同使用。"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .constants import DEFAULT_TIME_RANGE, SUPPORTED_TIME_RANGES
from .models import GlobalSettings, SourceSpec


class ConfigError(ValueError):
    """配置文件缺失、格式错误或缺少必填字段。"""


# 配置文件中的键与 GlobalSettings 字段的对应关系。
GLOBAL_KEYS: Dict[str, str] = {
    "cacheDir": "cache_dir",
    "cacheExpiry": "cache_expiry",
    "useCache": "use_cache",
    "maxReadmeLength": "max_readme_length",
    "logLevel": "log_level",
    "enableFileLogging": "enable_file_logging",
    "parallel": "parallel",
    "maxParallelRequests": "max_parallel_requests",
}
_INT_FIELDS = ("cache_expiry", "max_readme_length", "max_parallel_requests")
_BOOL_FIELDS = ("use_cache", "enable_file_logging", "parallel")


def validate_time_range(time_range: Optional[str]) -> str:
    """HTTP 接口使用的严格校验，未知时间窗口直接报错。"""

    tf = (time_range or DEFAULT_TIME_RANGE).lower()
    if tf not in SUPPORTED_TIME_RANGES:
        raise ValueError(f"时间窗口必须属于 {SUPPORTED_TIME_RANGES}")
    return tf


def _coerce_setting(key: str, value: Any, where: str) -> Any:
    """按字段类型校验单个设置项，where 用于错误信息定位。"""
    attr = GLOBAL_KEYS[key]
    if attr in _INT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigError(f"{where}.{key} 必须是正数")
        return int(value)
    if attr in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ConfigError(f"{where}.{key} 必须是布尔值")
        return value
    if not isinstance(value, str):
        raise ConfigError(f"{where}.{key} 必须是字符串")
    return value


def _collect_settings(raw: Mapping[str, Any], where: str) -> Dict[str, Any]:
    """提取 raw 中出现的设置项，返回以 GlobalSettings 字段名为键的字典。"""
    collected: Dict[str, Any] = {}
    for key, attr in GLOBAL_KEYS.items():
        if raw.get(key) is None:
            continue
        collected[attr] = _coerce_setting(key, raw[key], where)
    return collected


def validate_global(raw: Any) -> GlobalSettings:
    """global 块缺失时使用内置默认值，缺少的键同样回落到默认值。"""

    if raw is None:
        return GlobalSettings()
    if not isinstance(raw, Mapping):
        raise ConfigError("配置文件中的 'global' 必须是对象")
    return GlobalSettings(**_collect_settings(raw, "global"))


def validate_sources(raw: Any) -> List[SourceSpec]:
    """校验 sources 列表，缺少必填字段时指出具体来源与字段。

    来源对象里也可以出现 global 中的设置键，作为该来源自己的覆盖值。
    """

    if not isinstance(raw, list) or not raw:
        raise ConfigError("配置文件必须在 'sources' 数组中至少包含一个来源")
    sources: List[SourceSpec] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, Mapping):
            raise ConfigError(f"索引为 {index} 的来源必须是对象")
        name = entry.get("name")
        if not name or not isinstance(name, str):
            raise ConfigError(f"索引为 {index} 的来源缺少必填字段 'name'")
        language = entry.get("language")
        # language 必须出现，但允许为空串（表示全部语言）。
        if language is None:
            raise ConfigError(f"来源 '{name}' 缺少必填字段 'language'")
        for key in ("timeRange", "outputPath"):
            if not entry.get(key):
                raise ConfigError(f"来源 '{name}' 缺少必填字段 '{key}'")
        base_url = entry.get("baseUrl")
        if base_url is not None and not isinstance(base_url, str):
            raise ConfigError(f"来源 '{name}' 的 'baseUrl' 必须是字符串")
        sources.append(
            SourceSpec(
                name=name,
                language=str(language),
                time_range=str(entry["timeRange"]),
                output_path=str(entry["outputPath"]),
                base_url=base_url or None,
                overrides=_collect_settings(entry, f"sources[{index}]"),
            )
        )
    return sources
