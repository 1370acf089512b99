"""进程级日志配置：控制台输出，可选按日期写入日志文件。"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from .constants import DEFAULT_LOG_DIR

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"

# 兼容配置文件中常见的 WARN 写法。
_LEVEL_ALIASES = {"WARN": "WARNING"}


def resolve_level(level: str | int) -> int:
    """把 DEBUG/INFO/WARN/ERROR 等名称转换为 logging 数值级别，无法识别时回落为 INFO。"""
    if isinstance(level, int):
        return level
    name = _LEVEL_ALIASES.get(level.strip().upper(), level.strip().upper())
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def log_file_path(log_dir: str | Path = DEFAULT_LOG_DIR, today: Optional[date] = None) -> Path:
    day = (today or date.today()).isoformat()
    return Path(log_dir) / f"github-trend-rss_{day}.log"


def configure_logging(
    level: str | int = "INFO",
    enable_file_logging: bool = False,
    log_dir: str | Path = DEFAULT_LOG_DIR,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """配置 github_trend_rss 命名空间下的日志，重复调用会替换之前的处理器。"""
    package_logger = logging.getLogger("github_trend_rss")
    package_logger.setLevel(resolve_level(level))
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
        existing.close()
    formatter = logging.Formatter(LOG_FORMAT)
    console = handler or logging.StreamHandler()
    console.setFormatter(formatter)
    package_logger.addHandler(console)
    if enable_file_logging:
        path = log_file_path(log_dir)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
        except OSError as exc:
            package_logger.error("无法创建日志文件 %s：%s", path, exc)
        else:
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)
    return package_logger
