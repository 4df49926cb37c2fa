from .error_classifier import ClassifiedError, OperationContext, classify_error
from .limit_counter import LimitCounter
from .retry import RetryPolicy, UpstreamCallError, call_with_retry
from .service_factory import create_service_factory

__all__ = [
    "ClassifiedError",
    "LimitCounter",
    "OperationContext",
    "RetryPolicy",
    "UpstreamCallError",
    "call_with_retry",
    "classify_error",
    "create_service_factory",
]
