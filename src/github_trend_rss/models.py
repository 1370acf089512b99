"""定义抓取、缓存、配置与调度过程中会用到的数据结构。"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_EXPIRY_MS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_PARALLEL_REQUESTS,
    DEFAULT_MAX_README_LENGTH,
    GITHUB_TRENDING_URL,
)


@dataclass(slots=True)
class TrendingRecord:
    """描述从 Trending HTML 页面解析出的一条仓库信息。

    除 identifier 外的字段都是展示用字符串，缺失时为空串而不是 None。
    readme 初始为空，由 ReadmeEnricher 填充。
    """

    identifier: str
    url: str
    description: str = ""
    primary_language: str = ""
    star_count: str = ""
    fork_count: str = ""
    stars_in_range: str = ""
    readme: str = ""

    def to_dict(self) -> Dict[str, str]:
        """转为 JSON 友好的字典结构。"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrendingRecord":
        """从缓存字典恢复，缺失或为 None 的字段回落为空串。"""
        identifier = data.get("identifier")
        if not isinstance(identifier, str) or "/" not in identifier:
            raise ValueError(f"无效的仓库标识：{identifier!r}")
        values = {}
        for item in fields(cls):
            raw = data.get(item.name)
            values[item.name] = "" if raw is None else str(raw)
        return cls(**values)


@dataclass(slots=True)
class CacheEntry:
    """某次抓取结果的带时间戳快照，records 保持抓取顺序。"""

    captured_at: float
    records: List[TrendingRecord]

    def is_fresh(self, now: float, max_age: float) -> bool:
        """now 与 max_age 单位均为秒。"""
        return now - self.captured_at <= max_age


@dataclass(slots=True)
class SourceSpec:
    """配置文件中的一个 Feed 来源。"""

    name: str
    language: str
    time_range: str
    output_path: str
    base_url: Optional[str] = None
    # 来源级别的设置覆盖，键为 GlobalSettings 字段名
    overrides: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class GlobalSettings:
    """所有来源共享的全局配置，可被来源或调用方覆盖。"""

    cache_dir: str = DEFAULT_CACHE_DIR
    cache_expiry: int = DEFAULT_CACHE_EXPIRY_MS
    use_cache: bool = True
    max_readme_length: int = DEFAULT_MAX_README_LENGTH
    log_level: str = DEFAULT_LOG_LEVEL
    enable_file_logging: bool = False
    parallel: bool = True
    max_parallel_requests: int = DEFAULT_MAX_PARALLEL_REQUESTS


@dataclass(slots=True)
class SourceSettings:
    """单个来源合并后的最终生效配置。"""

    name: str
    language: str
    time_range: str
    output_path: str
    base_url: str = GITHUB_TRENDING_URL
    cache_dir: str = DEFAULT_CACHE_DIR
    cache_expiry: int = DEFAULT_CACHE_EXPIRY_MS
    use_cache: bool = True
    max_readme_length: int = DEFAULT_MAX_README_LENGTH
    log_level: str = DEFAULT_LOG_LEVEL
    enable_file_logging: bool = False
    parallel: bool = True
    max_parallel_requests: int = DEFAULT_MAX_PARALLEL_REQUESTS

    @property
    def cache_expiry_seconds(self) -> float:
        return self.cache_expiry / 1000


@dataclass(slots=True)
class ConfigFile:
    """解析并校验后的配置文件。"""

    global_settings: GlobalSettings
    sources: List[SourceSpec]


class SourceState(str, Enum):
    """单个来源在流水线中的状态。"""

    PENDING = "pending"
    FETCHING = "fetching"
    ENRICHING = "enriching"
    RENDERING = "rendering"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class SourceOutcome:
    """记录单个来源的处理结果。"""

    name: str
    state: SourceState = SourceState.PENDING
    output_path: Optional[str] = None
    record_count: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is SourceState.DONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state.value,
            "output_path": self.output_path,
            "record_count": self.record_count,
            "error": self.error,
        }


@dataclass(slots=True)
class RunResult:
    """一次多来源运行的汇总。"""

    outcomes: List[SourceOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[SourceOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> List[SourceOutcome]:
        return [outcome for outcome in self.outcomes if outcome.state is SourceState.FAILED]
