from .analyze import router as analyze_router
from .cache import router as cache_router
from .health import router as health_router
from .identify import router as identify_router
from .metrics import router as metrics_router

__all__ = [
    "analyze_router",
    "cache_router",
    "health_router",
    "identify_router",
    "metrics_router",
]
