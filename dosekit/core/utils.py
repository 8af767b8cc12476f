from __future__ import annotations

import hashlib
import math
import re


_RE_LEADING_WS = re.compile(r"^\s*")


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def decode_text(data: bytes) -> str:
    # utf-8-sig drops a leading BOM; bad bytes become U+FFFD instead of failing.
    return data.decode("utf-8-sig", errors="replace")


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def leading_whitespace_width(line: str) -> int:
    m = _RE_LEADING_WS.match(line)
    return len(m.group(0)) if m else 0


def round_half_up(value: float) -> int:
    """Round half up (2.5 -> 3, -2.5 -> -2), unlike Python's banker's rounding."""
    return math.floor(value + 0.5)


def truthy(v: str | None) -> bool:
    return (v or "").strip().lower() in ("1", "true", "yes", "y", "on")
