"""Signed keyset cursors — (sort field, sort value, row key) packed into a token."""

import base64
import hashlib
import hmac
import json
import os
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

# HMAC secret for cursor signing.
# In production set ORDERHUB_CURSOR_SECRET env var.
_CURSOR_SECRET: bytes = os.environ.get(
    "ORDERHUB_CURSOR_SECRET", "changeme-cursor-secret"
).encode()


class InvalidCursorError(ValueError):
    """Raised when a cursor string cannot be decoded or has invalid signature."""


@dataclass(frozen=True)
class Cursor:
    """Decoded cursor: position of one row under one sort field."""

    field: str
    value: Any
    key: Any


def _sign(payload: str) -> str:
    """Return a truncated HMAC-SHA256 hex digest for *payload*."""
    return hmac.new(_CURSOR_SECRET, payload.encode(), hashlib.sha256).hexdigest()[:16]


def _pack(value: Any) -> list:
    # bool before int: bool is an int subclass
    if value is None:
        return ["none", None]
    if isinstance(value, bool):
        return ["bool", value]
    if isinstance(value, datetime):
        return ["dt", value.isoformat()]
    if isinstance(value, date):
        return ["date", value.isoformat()]
    if isinstance(value, Decimal):
        return ["dec", str(value)]
    if isinstance(value, int):
        return ["int", value]
    if isinstance(value, float):
        return ["float", value]
    return ["str", str(value)]


def _unpack(packed: Any) -> Any:
    tag, raw = packed
    if tag == "none":
        return None
    if tag == "dt":
        return datetime.fromisoformat(raw)
    if tag == "date":
        return date.fromisoformat(raw)
    if tag == "dec":
        return Decimal(raw)
    if tag in ("int", "float", "bool"):
        if isinstance(raw, bool) != (tag == "bool") or not isinstance(raw, (int, float)):
            raise ValueError(f"bad {tag} payload")
        return raw
    if tag == "str":
        return str(raw)
    raise ValueError(f"unknown cursor tag {tag!r}")


def encode_cursor(field: str, value: Any, key: Any) -> str:
    """Encode a row position into a signed, URL-safe base64 string."""
    payload = json.dumps({"f": field, "v": _pack(value), "k": _pack(key)})
    sig = _sign(payload)
    return base64.urlsafe_b64encode(f"{payload}|{sig}".encode()).decode()


def decode_cursor(cursor: str) -> Cursor:
    """Decode a signed base64 cursor string back to a :class:`Cursor`.

    Raises ``InvalidCursorError`` for malformed or tampered cursors.
    """
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        payload, sig = raw.rsplit("|", 1)
        expected = _sign(payload)
        if not hmac.compare_digest(sig, expected):
            raise InvalidCursorError(f"cursor signature mismatch: {cursor!r}")
        data = json.loads(payload)
        return Cursor(
            field=str(data["f"]),
            value=_unpack(data["v"]),
            key=_unpack(data["k"]),
        )
    except InvalidCursorError:
        raise
    except (
        json.JSONDecodeError,
        KeyError,
        TypeError,
        ValueError,
        UnicodeDecodeError,
        InvalidOperation,
    ) as exc:
        raise InvalidCursorError(f"invalid cursor: {cursor!r}") from exc
