"""GitHub Trending RSS 生成器的对外包入口。"""

from .fetcher import FetchFailure, TrendingPageClient
from .pipeline import process_source, run_single, run_sources
from .readme import ReadmeEnricher, build_enricher_from_env

__all__ = [
    "FetchFailure",
    "ReadmeEnricher",
    "TrendingPageClient",
    "build_enricher_from_env",
    "process_source",
    "run_single",
    "run_sources",
]
