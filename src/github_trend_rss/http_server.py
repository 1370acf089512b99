"""FastAPI 版本的 RSS 文件服务：托管生成的 Feed，并提供实时 Trending 查询。"""

from __future__ import annotations

import argparse
import mimetypes
from pathlib import Path
from typing import Callable, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse

from .constants import GITHUB_TRENDING_URL
from .fetcher import TrendingPageClient
from .validation import validate_time_range

# 与静态文件托管相关的 MIME 映射，未列出的扩展名交给 mimetypes 推断。
MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
}


def _media_type(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in MIME_TYPES:
        return MIME_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


def _resolve_inside(root: Path, relative: str) -> Optional[Path]:
    """把请求路径解析到 root 下，越界或不存在时返回 None。"""
    candidate = (root / relative).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    if not candidate.is_file():
        return None
    return candidate


def create_app(
    root_dir: str | Path = ".",
    client_factory: Optional[Callable[[], TrendingPageClient]] = None,
) -> FastAPI:
    """构建 FastAPI 应用，client_factory 可在单测中注入假的抓取客户端。"""

    root = Path(root_dir).resolve()
    factory = client_factory or TrendingPageClient
    app = FastAPI(title="GitHub Trend RSS", version="1.1.0")

    @app.get("/health", response_class=JSONResponse)
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/feeds", response_class=JSONResponse)
    def list_feeds() -> dict:
        feeds: List[str] = sorted(
            path.relative_to(root).as_posix()
            for path in root.rglob("*.xml")
            if not any(part.startswith(".") for part in path.relative_to(root).parts)
        )
        return {"feeds": feeds}

    @app.get("/trending", response_class=JSONResponse)
    async def get_trending(
        language: str = Query(default="", description="编程语言，留空表示全部"),
        time_range: Optional[str] = Query(default=None, description="daily/weekly/monthly"),
    ) -> dict:
        try:
            tf = validate_time_range(time_range)
        except ValueError as exc:  # 转换成 HTTP 400
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        client = factory()
        try:
            records = await run_in_threadpool(client.fetch, tf, language, GITHUB_TRENDING_URL)
        except RuntimeError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        finally:
            client.close()
        return {
            "time_range": tf,
            "language": language or "all",
            "retrieved": len(records),
            "repos": [record.to_dict() for record in records],
        }

    @app.get("/{file_path:path}")
    def serve_file(file_path: str) -> FileResponse:
        target = _resolve_inside(root, file_path or "index.html")
        if target is None:
            raise HTTPException(status_code=404, detail="File not found")
        return FileResponse(
            target,
            media_type=_media_type(target),
            headers={"Access-Control-Allow-Origin": "*"},
        )

    return app


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="GitHub Trend RSS HTTP Server")
    parser.add_argument("--host", default="0.0.0.0", help="监听地址")
    parser.add_argument("--port", type=int, default=3001, help="监听端口")
    parser.add_argument("--root", default=".", help="托管的目录")
    return parser


def main() -> None:
    parser = build_arg_parser()
    args = parser.parse_args()
    import uvicorn

    uvicorn.run(create_app(args.root), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
