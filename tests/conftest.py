"""测试共用的假 HTTP 会话、页面片段与工具函数。"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

import httpx
import pytest
import requests

from github_trend_rss.models import TrendingRecord


def repo_block(
    path: str,
    description: Optional[str] = "A project",
    language: Optional[str] = "Python",
    stars: Optional[str] = "1,234",
    forks: Optional[str] = "56",
    today: Optional[str] = "78 stars today",
) -> str:
    """生成与 GitHub Trending 页面结构一致的单个仓库条目。"""
    parts = [
        '<article class="Box-row">',
        f'<h2 class="h3 lh-condensed"><a href="{path}" class="Link">\n  {path.strip("/").replace("/", " /")}\n</a></h2>',
    ]
    if description is not None:
        parts.append(f'<p class="col-9 color-fg-muted my-1 pr-4">\n  {description}\n</p>')
    parts.append('<div class="f6 color-fg-muted mt-2">')
    if language is not None:
        parts.append(
            f'<span class="d-inline-block ml-0 mr-3"><span itemprop="programmingLanguage">{language}</span></span>'
        )
    if stars is not None:
        parts.append(f'<a class="Link--muted d-inline-block mr-3" href="{path}/stargazers">\n {stars}\n</a>')
    if forks is not None:
        parts.append(f'<a class="Link--muted d-inline-block mr-3" href="{path}/forks">\n {forks}\n</a>')
    if today is not None:
        parts.append(f'<span class="d-inline-block float-sm-right">\n {today}\n</span>')
    parts.append("</div></article>")
    return "\n".join(parts)


def trending_page(*blocks: str) -> str:
    body = "\n".join(blocks)
    return f"<html><body><div class='Box'>{body}</div></body></html>"


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200, reason: str = "OK") -> None:
        self.text = text
        self.status_code = status_code
        self.reason = reason

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class FakeSession:
    """替代 requests.Session，按 URL 返回预设响应或抛出异常。"""

    def __init__(self, responses: Dict[str, Union[FakeResponse, Exception]]) -> None:
        self.responses = responses
        self.headers: Dict[str, str] = {}
        self.calls: List[str] = []
        self.closed = False

    def get(self, url: str, timeout: Optional[float] = None) -> FakeResponse:
        self.calls.append(url)
        result = self.responses.get(url)
        if result is None:
            raise requests.exceptions.ConnectionError(f"no route to {url}")
        if isinstance(result, Exception):
            raise result
        return result

    def close(self) -> None:
        self.closed = True


def make_record(identifier: str = "octo/alpha", **kwargs: str) -> TrendingRecord:
    return TrendingRecord(identifier=identifier, url=f"https://github.com/{identifier}", **kwargs)


def readme_transport(pages: Dict[str, str], failures: Optional[Dict[str, int]] = None) -> httpx.MockTransport:
    """pages 以 URL 为键返回 README；未列出的 URL 返回 404，failures 中的 URL 返回对应状态码。"""
    failures = failures or {}

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url in failures:
            return httpx.Response(failures[url])
        if url in pages:
            return httpx.Response(200, text=pages[url])
        return httpx.Response(404, text="404: Not Found")

    return httpx.MockTransport(handler)


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def no_sleep(sleeps: List[float]):
    """记录退避时长但不真正等待。"""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


@pytest.fixture(autouse=True)
def reset_package_logger():
    """configure_logging 会改动包级 logger，每个用例结束后复原。"""
    package_logger = logging.getLogger("github_trend_rss")
    level = package_logger.level
    handlers = list(package_logger.handlers)
    yield
    for handler in list(package_logger.handlers):
        if handler not in handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(level)
