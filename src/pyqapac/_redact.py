"""Redaction for DEBUG request/response traces.

Login bodies carry passwords and every authenticated call carries a bearer
token; neither may reach a log file.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

REDACTED = "<redacted>"

_SENSITIVE_KEYS = frozenset(
    {"password", "access_token", "refresh_token", "token", "authorization", "cookie", "set_cookie"}
)
_MAX_ITEMS = 50
_MAX_DEPTH = 20


def _is_sensitive(key: object) -> bool:
    return str(key).lower().replace("-", "_") in _SENSITIVE_KEYS


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Copy *value* with secrets masked, long strings cut and long lists shortened.

    Route payloads carry hundreds of coordinates, so sequences keep only
    their first items followed by a ``<N more>`` marker.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    if value is None or isinstance(value, (bool, int, float)):
        return value

    def _child(item: Any) -> Any:
        return redact_for_log(item, max_string=max_string, _depth=_depth + 1)

    if isinstance(value, Mapping):
        return {str(key): REDACTED if _is_sensitive(key) else _child(item) for key, item in value.items()}
    if isinstance(value, Sequence):
        items = [_child(item) for item in value[:_MAX_ITEMS]]
        if len(value) > _MAX_ITEMS:
            items.append(f"<{len(value) - _MAX_ITEMS} more>")
        return items
    return repr(value)
