#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/lines.py
# [PROJECT] PlaylistEngine
# [ROLE] Line normalization and small value helpers shared by every parser
# [VERSION] v1.0
# [UPDATED] 2026-10-19
# ==============================================================================

import math
import re
from typing import List, Optional

BOM = "\ufeff"

_NEWLINE_RX = re.compile(r"\r\n?")


def strip_bom(text: str) -> str:
    if text and text[0] == BOM:
        return text[1:]
    return text


def split_lines(text: str) -> List[str]:
    """
    CRLF / CR -> LF, then split. Blank lines are kept: the IPTV scanner
    walks them while looking for an entry's URL line.
    """
    return _NEWLINE_RX.sub("\n", text or "").split("\n")


def normalize_lines(text: str) -> List[str]:
    return split_lines(strip_bom(text or ""))


def trim_quotes(value: Optional[str]) -> Optional[str]:
    if not value or len(value) < 2:
        return value
    first, last = value[0], value[-1]
    if (first == '"' and last == '"') or (first == "'" and last == "'"):
        return value[1:-1]
    return value


def to_number(value: Optional[str]) -> Optional[float]:
    """Finite float or None. Never raises."""
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    try:
        n = float(s)
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def to_int(value: Optional[str]) -> Optional[int]:
    n = to_number(value)
    return int(n) if n is not None else None


def round_half_up(value: float) -> Optional[int]:
    """-1.5 -> -1, 2.5 -> 3. None for inf/nan."""
    if not math.isfinite(value):
        return None
    return int(math.floor(value + 0.5))


def push_unique(items: List[str], value: str) -> None:
    if value not in items:
        items.append(value)


def decode_text(data: bytes) -> str:
    """Decode playlist bytes, trying the encodings providers actually ship."""
    for enc in ("utf-8-sig", "gb18030", "big5", "latin-1"):
        try:
            return data.decode(enc)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="ignore")
