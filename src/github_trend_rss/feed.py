"""把补全后的 TrendingRecord 渲染为 RSS 2.0 文本。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from feedgen.feed import FeedGenerator

from .constants import FEED_AUTHOR, FEED_GENERATOR, FEED_LANGUAGE, FEED_LINK
from .models import TrendingRecord
from .utils import escape_html, time_range_label, xml_safe

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ChannelMeta:
    """RSS 频道级元数据。"""

    title: str
    description: str
    link: str = FEED_LINK


def build_channel(time_range: str, language: str, channel_suffix: Optional[str] = None) -> ChannelMeta:
    """按时间窗口和语言生成频道标题；配置文件模式下追加来源名。"""
    label = time_range_label(time_range)
    language_text = f" for {language}" if language else ""
    title = f"GitHub Trending {label}{language_text}"
    if channel_suffix:
        title = f"{title} - {xml_safe(channel_suffix)}"
    description = f"The most popular GitHub repositories {label.lower()}{language_text}."
    return ChannelMeta(title=title, description=description)


def _item_content(record: TrendingRecord) -> str:
    parts = [
        f'<h1><a href="{escape_html(record.url)}">{escape_html(record.identifier)}</a></h1>',
        f"<p>{escape_html(record.description)}</p>",
        f"<p>Language: {escape_html(record.primary_language or 'Not specified')}</p>",
        f"<p>Stars: {escape_html(record.star_count or '0')}</p>",
        f"<p>Forks: {escape_html(record.fork_count or '0')}</p>",
        f"<p>Stars today: {escape_html(record.stars_in_range or '0')}</p>",
    ]
    if record.readme:
        parts.append(f"<h2>README</h2><pre>{escape_html(record.readme)}</pre>")
    return "\n".join(parts)


def render_feed(
    records: Sequence[TrendingRecord],
    channel: ChannelMeta,
    now: Optional[datetime] = None,
) -> str:
    """生成 RSS 文本；条目顺序与 records 一致，records 为空时输出空频道。"""
    current = now or datetime.now(timezone.utc)
    logger.info("生成 RSS：%s（%d 条）", channel.title, len(records))
    fg = FeedGenerator()
    fg.id(channel.link)
    fg.title(channel.title)
    fg.link(href=channel.link, rel="alternate")
    fg.description(channel.description)
    fg.language(FEED_LANGUAGE)
    fg.author(dict(FEED_AUTHOR))
    fg.generator(FEED_GENERATOR)
    fg.copyright(f"All rights reserved {current.year}, GitHub")
    fg.lastBuildDate(current)
    for index, record in enumerate(records):
        entry = fg.add_entry(order="append")
        url = xml_safe(record.url)
        entry.id(url)
        entry.guid(url, permalink=True)
        entry.title(xml_safe(record.identifier))
        entry.link(href=url)
        if record.description:
            entry.description(xml_safe(record.description))
        entry.content(_item_content(record), type="CDATA")
        # 依次错开一秒，阅读器据此保持排名顺序。
        entry.pubDate(current - timedelta(seconds=index))
        if record.primary_language:
            entry.category(term=xml_safe(record.primary_language))
    return fg.rss_str(pretty=True).decode("utf-8")
