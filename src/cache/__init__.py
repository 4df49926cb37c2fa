from .analyze_cache import AnalyzeCache, CacheEntry, CacheStatistics
from .metrics import CacheMetricsProtocol, NoopCacheMetrics, PrometheusCacheMetrics

__all__ = [
    "AnalyzeCache",
    "CacheEntry",
    "CacheMetricsProtocol",
    "CacheStatistics",
    "NoopCacheMetrics",
    "PrometheusCacheMetrics",
]
