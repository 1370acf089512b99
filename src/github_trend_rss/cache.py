"""按（语言、时间窗口、来源 URL）缓存 Trending 抓取结果的文件存储。"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Callable, Iterable, Optional
from urllib.parse import quote

from .constants import DEFAULT_CACHE_DIR, DEFAULT_CACHE_EXPIRY_MS, GITHUB_TRENDING_URL
from .models import CacheEntry, TrendingRecord
from .utils import sanitize_key_part


def _quote_part(value: Optional[str]) -> str:
    # 分隔符 "_" 也要转义，不同的（语言, 时间窗口）组合才不会得到同一个键。
    return quote(value or "", safe="").replace("_", "%5F")


def make_key(language: str, time_range: str, base_url: Optional[str] = None) -> str:
    """生成缓存键；默认来源不带 URL 片段，自定义来源追加清洗后的 URL。"""

    key = f"trending_{_quote_part(language)}_{_quote_part(time_range)}"
    if base_url and base_url.rstrip("/") != GITHUB_TRENDING_URL:
        key = f"{key}_{sanitize_key_part(base_url)}"
    return key


class CacheStore:
    """每个键对应 cache_dir 下的一个 JSON 文件，读写失败都不会向上抛出。"""

    def __init__(
        self,
        cache_dir: str | Path = DEFAULT_CACHE_DIR,
        max_age: float = DEFAULT_CACHE_EXPIRY_MS / 1000,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.max_age = max_age
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

    def _path_for(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def read(self, key: str, max_age: Optional[float] = None) -> Optional[CacheEntry]:
        """读取未过期的缓存，缺失、过期或损坏都返回 None。"""
        path = self._path_for(key)
        if not path.exists():
            return None
        limit = self.max_age if max_age is None else max_age
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            entry = CacheEntry(
                captured_at=float(payload["timestamp"]),
                records=[TrendingRecord.from_dict(item) for item in payload["data"]],
            )
        except (OSError, ValueError, KeyError, TypeError) as exc:
            self._logger.warning("读取缓存失败 %s：%s", path, exc)
            return None
        if not entry.is_fresh(self._clock(), limit):
            self._logger.info("缓存已过期：%s", key)
            return None
        self._logger.info("命中缓存：%s（%d 条）", path, len(entry.records))
        return entry

    def write(self, key: str, records: Iterable[TrendingRecord]) -> None:
        """整体覆盖写入缓存，失败时只记录日志。"""
        path = self._path_for(key)
        payload = {
            "timestamp": self._clock(),
            "data": [record.to_dict() for record in records],
        }
        try:
            if not self.cache_dir.exists():
                self.cache_dir.mkdir(parents=True, exist_ok=True)
                self._logger.info("已创建缓存目录：%s", self.cache_dir)
            path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            self._logger.warning("写入缓存失败 %s：%s", path, exc)
            return
        self._logger.info("已写入缓存：%s", path)
