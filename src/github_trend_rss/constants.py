"""GitHub Trending RSS 生成器的核心常量，便于全局复用。"""

from __future__ import annotations

# 支持的时间窗口，其余取值不会拼接 since 参数
SUPPORTED_TIME_RANGES: tuple[str, ...] = ("daily", "weekly", "monthly")
# 默认时间窗口
DEFAULT_TIME_RANGE = "daily"
# 命令行默认语言
DEFAULT_LANGUAGE = "python"
# GitHub Trending 页面入口
GITHUB_TRENDING_URL = "https://github.com/trending"
# 仓库主页前缀
GITHUB_URL = "https://github.com"
# README 原始内容入口
RAW_CONTENT_URL = "https://raw.githubusercontent.com"
# README 依次尝试的分支
README_BRANCHES: tuple[str, ...] = ("main", "master")
# 统一的 User-Agent，友好表明来源
USER_AGENT = "GitHub-Trend-RSS-Generator/1.0"
# HTTP 请求超时（秒）
REQUEST_TIMEOUT = 20

# 以下为全局配置的内置默认值
DEFAULT_OUTPUT_PATH = "./github-trending.xml"
DEFAULT_CACHE_DIR = "./.cache"
# 缓存有效期（毫秒），与配置文件保持同一单位
DEFAULT_CACHE_EXPIRY_MS = 3_600_000
DEFAULT_MAX_README_LENGTH = 20_000
DEFAULT_MAX_PARALLEL_REQUESTS = 5
DEFAULT_MAX_RETRIES = 3
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIR = "logs"

# README 获取失败时写入的占位文本
README_UNAVAILABLE = (
    "README not available. Either the repository does not have a README or it could not be accessed."
)
README_FETCH_ERROR = "README could not be fetched due to an error."
# README 超长截断后追加的提示
README_TRUNCATION_NOTICE = (
    "\n\n... [README content truncated due to size. Visit the repository for the complete README] ..."
)

# RSS 频道元数据
FEED_LINK = GITHUB_TRENDING_URL
FEED_LANGUAGE = "en"
FEED_GENERATOR = "GitHub Trending RSS Generator"
FEED_AUTHOR = {"name": "GitHub Trend RSS Generator", "email": "noreply@github.com"}
TIME_RANGE_LABELS: dict[str, str] = {
    "daily": "Today",
    "weekly": "This Week",
    "monthly": "This Month",
}
