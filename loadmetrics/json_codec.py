"""orjson-backed JSON helpers for trace ingestion and report export."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import orjson


def _default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, Mapping):
        return dict(value)
    summary = getattr(value, "summary", None)
    if callable(summary):
        return summary()
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


def dumps_bytes(
    payload: Any,
    *,
    pretty: bool = False,
    sort_keys: bool = False,
) -> bytes:
    """Serialize payload to UTF-8 JSON bytes; non-finite floats become null."""
    # Dataclasses go through _default so trace events export their summary.
    options = (
        orjson.OPT_SERIALIZE_NUMPY | orjson.OPT_NON_STR_KEYS | orjson.OPT_PASSTHROUGH_DATACLASS
    )
    if pretty:
        options |= orjson.OPT_INDENT_2
    if sort_keys:
        options |= orjson.OPT_SORT_KEYS
    return orjson.dumps(payload, default=_default, option=options)


def dumps_text(
    payload: Any,
    *,
    pretty: bool = False,
    sort_keys: bool = False,
) -> str:
    return dumps_bytes(payload, pretty=pretty, sort_keys=sort_keys).decode("utf-8")


def loads(raw: bytes | str) -> Any:
    return orjson.loads(raw)


__all__ = ["dumps_bytes", "dumps_text", "loads"]
