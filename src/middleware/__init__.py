from .auth import require_api_key
from .errors import register_exception_handlers
from .rate_limit import enforce_rate_limits

__all__ = ["require_api_key", "register_exception_handlers", "enforce_rate_limits"]
