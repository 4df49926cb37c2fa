from .errors import (
    ApiError,
    AuthenticationError,
    ErrorCategory,
    ImageTooLargeError,
    InvalidActionError,
    InvalidRequestError,
    ProxyError,
    RateLimitError,
    UpstreamError,
)
from .requests import AnalyzeRequest, IdentifyPhraseRequest, IdentifyPhrasesRequest
from .responses import CacheClearResponse, CacheStatsResponse, HealthResponse, IdentifyPhrasesResponse, PhraseData

__all__ = [
    "ApiError",
    "AuthenticationError",
    "ErrorCategory",
    "ImageTooLargeError",
    "InvalidActionError",
    "InvalidRequestError",
    "ProxyError",
    "RateLimitError",
    "UpstreamError",
    "AnalyzeRequest",
    "IdentifyPhraseRequest",
    "IdentifyPhrasesRequest",
    "CacheClearResponse",
    "CacheStatsResponse",
    "HealthResponse",
    "IdentifyPhrasesResponse",
    "PhraseData",
]
