"""调度单个或多个来源：缓存 -> 抓取 -> 补全 README -> 渲染 RSS -> 写文件。"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional

from .cache import CacheStore, make_key
from .config import merge_settings
from .feed import build_channel, render_feed
from .fetcher import TrendingPageClient
from .models import ConfigFile, RunResult, SourceOutcome, SourceSettings, SourceState, TrendingRecord
from .readme import ReadmeEnricher, build_enricher_from_env

logger = logging.getLogger(__name__)


def _load_records(
    settings: SourceSettings,
    fetcher: TrendingPageClient,
    cache: Optional[CacheStore],
) -> List[TrendingRecord]:
    """先查缓存，未命中或已过期时抓取页面并写回缓存。"""
    key = make_key(settings.language, settings.time_range, settings.base_url)
    if cache is not None:
        entry = cache.read(key, max_age=settings.cache_expiry_seconds)
        if entry is not None:
            logger.info("使用缓存数据：%s（%s）", settings.language or "all", settings.time_range)
            return entry.records
    records = fetcher.fetch(settings.time_range, settings.language, settings.base_url)
    if cache is not None:
        cache.write(key, records)
    return records


def _write_output(output_path: str, content: str) -> None:
    path = Path(output_path)
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("已创建输出目录：%s", path.parent)
    path.write_text(content, encoding="utf-8")


def process_source(
    settings: SourceSettings,
    fetcher: Optional[TrendingPageClient] = None,
    enricher: Optional[ReadmeEnricher] = None,
    cache: Optional[CacheStore] = None,
    channel_suffix: Optional[str] = None,
    outcome: Optional[SourceOutcome] = None,
) -> SourceOutcome:
    """按状态机处理单个来源，任何不可恢复的错误都原样抛出。

    outcome 由调用方传入时，抛错前的最后状态会保留在其中，便于定位失败阶段。
    """
    outcome = outcome or SourceOutcome(name=settings.name)
    outcome.output_path = settings.output_path
    own_fetcher = fetcher is None
    fetcher = fetcher or TrendingPageClient()
    enricher = enricher or build_enricher_from_env(max_length=settings.max_readme_length)
    if cache is None and settings.use_cache:
        cache = CacheStore(settings.cache_dir, max_age=settings.cache_expiry_seconds)
    elif not settings.use_cache:
        cache = None
    logger.info(
        "处理来源 %s：language=%s, time_range=%s, base_url=%s",
        settings.name,
        settings.language,
        settings.time_range,
        settings.base_url,
    )
    try:
        outcome.state = SourceState.FETCHING
        records = _load_records(settings, fetcher, cache)
        outcome.record_count = len(records)
        logger.info("获取到 %d 个 Trending 仓库", len(records))

        outcome.state = SourceState.ENRICHING
        asyncio.run(
            enricher.enrich_all(
                records,
                parallel=settings.parallel,
                limit=settings.max_parallel_requests,
                max_length=settings.max_readme_length,
            )
        )

        outcome.state = SourceState.RENDERING
        channel = build_channel(settings.time_range, settings.language, channel_suffix)
        content = render_feed(records, channel)

        outcome.state = SourceState.WRITING
        _write_output(settings.output_path, content)
        logger.info("RSS 已保存到 %s", settings.output_path)
    finally:
        if own_fetcher:
            fetcher.close()
    outcome.state = SourceState.DONE
    return outcome


def run_single(settings: SourceSettings, **components: Any) -> SourceOutcome:
    """单来源模式：与多来源相同的状态机，但错误直接抛给调用方。"""
    return process_source(settings, **components)


def run_sources(
    config: ConfigFile,
    overrides: Optional[Mapping[str, Any]] = None,
    **components: Any,
) -> RunResult:
    """依次处理配置文件中的所有来源，单个来源失败不会中断后续来源。"""
    result = RunResult()
    for source in config.sources:
        outcome = SourceOutcome(name=source.name)
        result.outcomes.append(outcome)
        logger.info("开始处理来源：%s", source.name)
        try:
            settings = merge_settings(config.global_settings, source, overrides)
            process_source(settings, channel_suffix=source.name, outcome=outcome, **components)
        except Exception as exc:  # noqa: BLE001
            logger.error("处理来源 %s 时出错（阶段 %s）：%s", source.name, outcome.state.value, exc)
            outcome.error = str(exc)
            outcome.state = SourceState.FAILED
    logger.info("处理完成：成功 %d 个，失败 %d 个", len(result.succeeded), len(result.failed))
    return result
