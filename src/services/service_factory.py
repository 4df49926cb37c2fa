from __future__ import annotations

import threading
from typing import Callable, TypeVar

T = TypeVar("T")

_UNSET = object()


def create_service_factory(factory: Callable[[], T]) -> Callable[[], T]:
    """Return an accessor that builds ``factory()`` once, on first call.

    Lets services that need runtime configuration (the Gemini API key) be
    wired at app construction while only being built inside a request.
    Any value is memoized, including ``None`` or an empty container. A
    factory that raises leaves the accessor uninitialized.

    Example::

        get_gemini_service = create_service_factory(
            lambda: GeminiService(api_key=settings.gemini_api_key, http_client=client),
        )
        service = get_gemini_service()  # built here
        same = get_gemini_service()     # memoized
    """
    instance: object = _UNSET
    lock = threading.Lock()

    def accessor() -> T:
        nonlocal instance
        if instance is _UNSET:
            with lock:
                if instance is _UNSET:
                    instance = factory()
        return instance  # type: ignore[return-value]

    return accessor
