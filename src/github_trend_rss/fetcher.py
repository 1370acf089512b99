"""封装 GitHub Trending 页面的抓取与解析逻辑。"""

from __future__ import annotations

import logging
from typing import List, Optional

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag
from urllib.parse import quote

from .constants import (
    GITHUB_TRENDING_URL,
    GITHUB_URL,
    REQUEST_TIMEOUT,
    SUPPORTED_TIME_RANGES,
    USER_AGENT,
)
from .models import TrendingRecord
from .utils import clean_text

# 页面结构的选择器集中在此，GitHub 改版时只需调整这里。
REPO_BLOCK_SELECTOR = "article.Box-row"
NAME_LINK_SELECTOR = "h2 a"
DESCRIPTION_SELECTOR = "p"
LANGUAGE_SELECTOR = '[itemprop="programmingLanguage"]'
STARS_SELECTOR = 'a[href$="/stargazers"]'
FORKS_SELECTOR = 'a[href$="/forks"]'
RANGE_STARS_SELECTOR = ".d-inline-block.float-sm-right"


class FetchFailure(RuntimeError):
    """Trending 页面请求失败，status_code 为 None 表示网络层错误。"""

    def __init__(self, status_code: Optional[int], reason: str, url: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.url = url
        if status_code is None:
            message = f"GitHub Trending 页面请求失败 {url}：{reason}"
        else:
            message = f"GitHub Trending 页面请求失败 {url}：{status_code} {reason}"
        super().__init__(message)


def _node_text(section: Tag, selector: str) -> str:
    node = section.select_one(selector)
    return clean_text(node.get_text(" ", strip=True)) if node else ""


class TrendingPageClient:
    """负责抓取 Trending 页面 HTML，并解析为 TrendingRecord 列表。"""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT, "Accept": "text/html"})
        self.timeout = timeout
        self._logger = logger or logging.getLogger(__name__)

    @staticmethod
    def build_url(time_range: str, language: Optional[str], base_url: str = GITHUB_TRENDING_URL) -> str:
        """根据语言/时间范围生成 Trending 页面 URL，未知时间范围不拼接 since。"""
        url = base_url.rstrip("/")
        safe_lang = (language or "").strip()
        if safe_lang:
            url = f"{url}/{quote(safe_lang, safe='')}"
        if time_range in SUPPORTED_TIME_RANGES:
            url = f"{url}?since={time_range}"
        return url

    def fetch(
        self,
        time_range: str,
        language: Optional[str],
        base_url: str = GITHUB_TRENDING_URL,
    ) -> List[TrendingRecord]:
        """抓取页面并转换为 TrendingRecord 列表，失败时抛出 FetchFailure。"""
        url = self.build_url(time_range, language, base_url)
        self._logger.info("拉取 Trending 页面：%s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            self._logger.error("请求 Trending 页面失败 %s：%s", url, exc)
            raise FetchFailure(None, str(exc), url) from exc
        if not response.ok:
            self._logger.error("请求 Trending 页面失败 %s，状态码：%s", url, response.status_code)
            raise FetchFailure(response.status_code, response.reason or "", url)
        return self.parse(response.text)

    def parse(self, html: str) -> List[TrendingRecord]:
        """解析 HTML DOM，提取需要的字段；缺失节点回落为空串。"""
        soup = BeautifulSoup(html, "html.parser")
        repo_sections = soup.select(REPO_BLOCK_SELECTOR)
        if not repo_sections:
            self._logger.warning("页面中未找到任何仓库条目，GitHub 页面结构可能已变更。")
            return []
        results: List[TrendingRecord] = []
        for idx, section in enumerate(repo_sections, start=1):
            header = section.select_one(NAME_LINK_SELECTOR)
            href = (header.get("href") or "").strip() if header else ""
            identifier = href.strip("/")
            if "/" not in identifier:
                self._logger.warning("第 %d 个条目缺少仓库链接，已跳过", idx)
                continue
            results.append(
                TrendingRecord(
                    identifier=identifier,
                    url=f"{GITHUB_URL}/{identifier}",
                    description=_node_text(section, DESCRIPTION_SELECTOR),
                    primary_language=_node_text(section, LANGUAGE_SELECTOR),
                    star_count=_node_text(section, STARS_SELECTOR),
                    fork_count=_node_text(section, FORKS_SELECTOR),
                    stars_in_range=_node_text(section, RANGE_STARS_SELECTOR),
                )
            )
        self._logger.info("解析到 %d 个仓库", len(results))
        return results

    def close(self) -> None:
        """关闭 HTTP 会话。"""
        self.session.close()
