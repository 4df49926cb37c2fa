"""Opportunistic field extraction from arbitrary upstream failures.

SDKs and transports disagree on where they put a status code, a symbolic
error code or a retry hint, so every lookup here tolerates missing
attributes and never raises.
"""

from __future__ import annotations

import errno
from typing import Any


def error_status(error: Any) -> int | None:
    for attr in ("status_code", "status", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, bool):
            continue
        if isinstance(value, int) and value > 0:
            return value
        if isinstance(value, str) and value.isdigit():
            return int(value)

    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return status
    return None


def error_code(error: Any) -> str | None:
    code = getattr(error, "code", None)
    if isinstance(code, str) and code and not code.isdigit():
        return code.upper()

    err_no = getattr(error, "errno", None)
    if isinstance(err_no, int) and err_no in errno.errorcode:
        return errno.errorcode[err_no]
    return None


def error_message(error: Any) -> str:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    if isinstance(error, BaseException):
        return str(error)
    return ""


def retry_after_hint(error: Any) -> float | None:
    """Seconds the upstream asked us to wait, if it said so."""
    hint = getattr(error, "retry_after", None)
    if hint is None:
        headers = getattr(error, "headers", None)
        if headers is None:
            headers = getattr(getattr(error, "response", None), "headers", None)
        if headers is not None:
            try:
                hint = headers.get("retry-after") or headers.get("Retry-After")
            except AttributeError:
                hint = None

    if hint is None:
        return None
    try:
        seconds = float(hint)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None
