"""工具函数模块，供抓取、缓存与渲染复用。"""

from __future__ import annotations

import html
import re
from typing import Optional

from .constants import TIME_RANGE_LABELS

# 合并页面文本中的连续空白（换行、缩进等）。
_WHITESPACE_RE = re.compile(r"\s+")
# 缓存键中只保留字母和数字。
_KEY_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9]")
# XML 1.0 不允许出现的字符（NUL、ESC、换页符等控制字符）。
_XML_INVALID_RE = re.compile(r"[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def clean_text(value: Optional[str]) -> str:
    """去掉首尾空白并折叠中间的空白，None 视为空串。"""

    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def sanitize_key_part(value: str) -> str:
    """把任意字符串转换成可作为文件名片段的形式。"""
    return _KEY_UNSAFE_RE.sub("_", value)


def time_range_label(time_range: str) -> str:
    """daily/weekly/monthly 映射为标题文案，未知取值按月处理。"""
    return TIME_RANGE_LABELS.get(time_range, TIME_RANGE_LABELS["monthly"])


def xml_safe(text: Optional[str]) -> str:
    """删除 XML 中不合法的字符，例如 README 里的 ANSI 颜色码。"""
    return _XML_INVALID_RE.sub("", text or "")


def escape_html(text: str) -> str:
    """转义 README 等纯文本，便于嵌入 RSS 的 HTML 内容。"""
    return html.escape(xml_safe(text), quote=True)
