"""为 Trending 仓库补全 README 内容，支持分支回退、指数退避与并发上限。"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Awaitable, Callable, List, Optional, Sequence

import httpx

from .constants import (
    DEFAULT_MAX_PARALLEL_REQUESTS,
    DEFAULT_MAX_README_LENGTH,
    DEFAULT_MAX_RETRIES,
    RAW_CONTENT_URL,
    README_BRANCHES,
    README_FETCH_ERROR,
    README_TRUNCATION_NOTICE,
    README_UNAVAILABLE,
    REQUEST_TIMEOUT,
    USER_AGENT,
)
from .models import TrendingRecord

SleepFunc = Callable[[float], Awaitable[None]]


class ReadmeNotFound(Exception):
    """某个分支在重试耗尽后仍未取到 README。"""


def summarize(text: str, max_length: int = DEFAULT_MAX_README_LENGTH) -> str:
    """超过 max_length 的 README 截断并追加提示，否则原样返回。"""

    if len(text) <= max_length:
        return text
    return text[:max_length] + README_TRUNCATION_NOTICE


def backoff_delay(attempt: int) -> float:
    """第 attempt 次重试（从 0 开始）前等待 2^attempt 秒。"""
    return float(2 ** attempt)


class ReadmeEnricher:
    """从 raw.githubusercontent.com 拉取 README 并写回 TrendingRecord。"""

    def __init__(
        self,
        max_length: int = DEFAULT_MAX_README_LENGTH,
        max_retries: int = DEFAULT_MAX_RETRIES,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFunc = asyncio.sleep,
        timeout: float = REQUEST_TIMEOUT,
        base_url: str = RAW_CONTENT_URL,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.max_length = max_length
        self.max_retries = max_retries
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._sleep = sleep
        self._headers = {"User-Agent": USER_AGENT}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._logger = logger or logging.getLogger(__name__)

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers,
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        )

    def readme_url(self, identifier: str, branch: str) -> str:
        return f"{self.base_url}/{identifier}/{branch}/README.md"

    async def _fetch_with_retry(self, client: httpx.AsyncClient, url: str) -> str:
        """单个分支：首次请求加最多 max_retries 次重试，状态码错误与网络错误都会重试。"""
        last_error = ""
        for attempt in range(self.max_retries + 1):
            try:
                response = await client.get(url)
            except httpx.RequestError as exc:
                last_error = f"网络错误：{exc}"
            else:
                if response.is_success:
                    return response.text
                last_error = f"状态码 {response.status_code}"
            if attempt >= self.max_retries:
                break
            delay = backoff_delay(attempt)
            self._logger.warning(
                "获取 %s 失败（%s），%.0f 秒后重试（剩余 %d 次）",
                url,
                last_error,
                delay,
                self.max_retries - attempt,
            )
            await self._sleep(delay)
        raise ReadmeNotFound(f"{url}：{last_error}")

    async def fetch_readme(self, identifier: str, client: Optional[httpx.AsyncClient] = None) -> str:
        """依次尝试 main、master 分支，全部失败时返回占位文本。"""
        if client is None:
            async with self._new_client() as own_client:
                return await self.fetch_readme(identifier, own_client)
        for branch in README_BRANCHES:
            self._logger.debug("从 %s 分支获取 %s 的 README", branch, identifier)
            try:
                text = await self._fetch_with_retry(client, self.readme_url(identifier, branch))
            except ReadmeNotFound as exc:
                self._logger.info("%s 分支没有可用的 README：%s", branch, exc)
                continue
            if not text.strip():
                # 文件存在但为空，与缺失同样处理。
                self._logger.info("%s 的 README 内容为空", identifier)
                return README_UNAVAILABLE
            return text
        self._logger.error("无法获取 %s 的 README", identifier)
        return README_UNAVAILABLE

    async def _readme_for(
        self,
        client: httpx.AsyncClient,
        record: TrendingRecord,
        position: str,
        max_length: int,
    ) -> str:
        """单条记录的完整结果；任何异常都转换成占位文本，不影响其他记录。"""
        self._logger.info("%s 获取 README：%s", position, record.identifier)
        try:
            text = await self.fetch_readme(record.identifier, client)
        except Exception as exc:  # noqa: BLE001
            self._logger.warning("%s 获取 %s 的 README 出错：%s", position, record.identifier, exc)
            return README_FETCH_ERROR
        self._logger.info("%s 已获取 README：%s", position, record.identifier)
        return summarize(text, max_length)

    async def enrich(self, record: TrendingRecord) -> TrendingRecord:
        """为单条记录填充 readme 并返回该记录。"""
        async with self._new_client() as client:
            record.readme = await self._readme_for(client, record, "[1/1]", self.max_length)
        return record

    async def enrich_all(
        self,
        records: Sequence[TrendingRecord],
        parallel: bool = True,
        limit: int = DEFAULT_MAX_PARALLEL_REQUESTS,
        max_length: Optional[int] = None,
    ) -> Sequence[TrendingRecord]:
        """批量补全 README。

        parallel 为 False 时按下标顺序逐条请求；否则最多 limit 个请求同时进行。
        每条记录的结果写入与其下标对应的槽位，完成顺序不影响输出顺序。
        max_length 未指定时使用实例上的 max_length。
        """
        cap = self.max_length if max_length is None else max_length
        total = len(records)
        slots: List[Optional[str]] = [None] * total
        async with self._new_client() as client:
            if not parallel:
                self._logger.info("顺序获取 %d 个 README", total)
                for index, record in enumerate(records):
                    slots[index] = await self._readme_for(client, record, f"[{index + 1}/{total}]", cap)
            else:
                gate = asyncio.Semaphore(max(1, limit))
                self._logger.info("并发获取 %d 个 README，最大并发数 %d", total, max(1, limit))

                async def worker(index: int, record: TrendingRecord) -> None:
                    async with gate:
                        slots[index] = await self._readme_for(client, record, f"[{index + 1}/{total}]", cap)

                await asyncio.gather(*(worker(index, record) for index, record in enumerate(records)))
        for record, readme in zip(records, slots):
            record.readme = readme or README_FETCH_ERROR
        return records


def build_enricher_from_env(**kwargs) -> ReadmeEnricher:
    """从环境变量读取 token，构造带鉴权的 README 客户端。"""
    token = os.environ.get("GITHUB_TOKEN") or os.environ.get("GITHUB_PAT")
    return ReadmeEnricher(token=token, **kwargs)
