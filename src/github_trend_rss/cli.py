"""github-trend-rss 命令行入口。"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from typing import Any, Dict, List, Optional

from .config import load_config, single_source_settings
from .constants import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_EXPIRY_MS,
    DEFAULT_LANGUAGE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_PARALLEL_REQUESTS,
    DEFAULT_MAX_README_LENGTH,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_TIME_RANGE,
    SUPPORTED_TIME_RANGES,
)
from .logging_setup import configure_logging
from .pipeline import run_single, run_sources

logger = logging.getLogger(__name__)

# 配置文件模式下仍然生效的命令行设置项（显式传入时才覆盖配置文件）。
SETTING_OPTIONS = (
    "cache_dir",
    "cache_expiry",
    "use_cache",
    "max_readme_length",
    "log_level",
    "enable_file_logging",
    "parallel",
    "max_parallel_requests",
)


def positive_int(value: str) -> int:
    """argparse 类型：与配置文件一致，数值型设置必须为正整数。"""
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"需要整数，实际为 {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"必须是正整数，实际为 {number}")
    return number

def build_arg_parser() -> argparse.ArgumentParser:
    """构建 CLI 参数解析器；设置项默认值为 None，用于区分“未指定”。"""
    parser = argparse.ArgumentParser(
        prog="github-trend-rss",
        description="Generate RSS feed from GitHub Trending repositories",
    )
    parser.add_argument(
        "-l",
        "--language",
        default=None,
        help=f"编程语言，传空串表示全部语言（默认 {DEFAULT_LANGUAGE}）",
    )
    parser.add_argument(
        "-t",
        "--time-range",
        default=None,
        help=f"时间窗口：{'/'.join(SUPPORTED_TIME_RANGES)}（默认 {DEFAULT_TIME_RANGE}）",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output_path",
        default=None,
        help=f"RSS 输出路径（默认 {DEFAULT_OUTPUT_PATH}）",
    )
    parser.add_argument("--base-url", default=None, help="自定义 Trending 页面地址")
    parser.add_argument(
        "--no-cache",
        dest="use_cache",
        action="store_const",
        const=False,
        default=None,
        help="禁用缓存",
    )
    parser.add_argument("--cache-dir", default=None, help=f"缓存目录（默认 {DEFAULT_CACHE_DIR}）")
    parser.add_argument(
        "--cache-expiry",
        type=positive_int,
        default=None,
        help=f"缓存有效期，单位毫秒（默认 {DEFAULT_CACHE_EXPIRY_MS}）",
    )
    parser.add_argument(
        "--max-readme-length",
        type=positive_int,
        default=None,
        help=f"README 最大字符数（默认 {DEFAULT_MAX_README_LENGTH}）",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"日志级别 DEBUG/INFO/WARN/ERROR（默认 {DEFAULT_LOG_LEVEL}）",
    )
    parser.add_argument(
        "--enable-file-logging",
        action="store_const",
        const=True,
        default=None,
        help="同时写入 logs/ 下按日期命名的日志文件",
    )
    parser.add_argument(
        "--no-parallel",
        dest="parallel",
        action="store_const",
        const=False,
        default=None,
        help="顺序获取 README",
    )
    parser.add_argument(
        "--max-parallel-requests",
        type=positive_int,
        default=None,
        help=f"README 最大并发请求数（默认 {DEFAULT_MAX_PARALLEL_REQUESTS}）",
    )
    parser.add_argument("--config", dest="config_path", default=None, help="配置文件路径（JSON）")
    return parser


def collect_overrides(args: argparse.Namespace, include_source_fields: bool) -> Dict[str, Any]:
    """只收集显式传入的参数；配置文件模式下忽略单来源字段。"""
    names: List[str] = list(SETTING_OPTIONS)
    if include_source_fields:
        names += ["language", "time_range", "output_path", "base_url"]
    overrides = {name: getattr(args, name) for name in names}
    return {name: value for name, value in overrides.items() if value is not None}


def run(args: argparse.Namespace) -> int:
    """执行一次生成任务，返回进程退出码。"""
    if args.config_path:
        overrides = collect_overrides(args, include_source_fields=False)
        config = load_config(args.config_path)
        # 日志级别以命令行为先，其次是配置文件。
        configure_logging(
            overrides.get("log_level", config.global_settings.log_level),
            overrides.get("enable_file_logging", config.global_settings.enable_file_logging),
        )
        logger.info("使用配置文件：%s", args.config_path)
        result = run_sources(config, overrides)
        for outcome in result.failed:
            logger.warning("来源 %s 处理失败：%s", outcome.name, outcome.error)
        summary = {"sources": [outcome.to_dict() for outcome in result.outcomes]}
        print(json.dumps(summary, ensure_ascii=False, indent=2))
        return 0
    settings = single_source_settings(collect_overrides(args, include_source_fields=True))
    configure_logging(settings.log_level, settings.enable_file_logging)
    logger.info("使用命令行参数（language=%s, time_range=%s）", settings.language, settings.time_range)
    run_single(settings)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """解析参数并运行；未处理的异常打印错误与堆栈后以状态码 1 退出。"""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    try:
        code = run(args)
    except Exception as exc:  # noqa: BLE001
        logger.error("运行失败：%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)
    logger.info("GitHub Trend RSS 运行完成")
    sys.exit(code)


if __name__ == "__main__":
    main()
