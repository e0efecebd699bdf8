#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/attrs.py
# [PROJECT] PlaylistEngine
# [ROLE] Quote-aware key=value attribute tokenizer (IPTV + HLS)
# [VERSION] v1.0
# [UPDATED] 2026-10-19
# ==============================================================================

import re
from typing import Dict

from playlist_engine.lines import trim_quotes

# key="v" | key='v' | key=bareword | bare key
ATTR_RX = re.compile(
    r"""([A-Za-z0-9_.\-]+)\s*=\s*("[^"]*"|'[^']*'|[^\s,]+)"""
    r"""|([A-Za-z0-9_.\-]+)(?=\s|$)"""
)

# legacy underscore spelling -> canonical key
LEGACY_ALIASES = {
    "tvg_id": "tvg-id",
    "tvg_name": "tvg-name",
    "tvg_logo": "tvg-logo",
    "group_title": "group-title",
}


def parse_attrs(src: str) -> Dict[str, str]:
    """
    Tokenize an attribute fragment into {lower-cased key: value}.

    Format-agnostic: knows nothing about which names matter. Duplicate keys
    keep the last occurrence; a bare key gets the value "true".
    """
    out: Dict[str, str] = {}
    for m in ATTR_RX.finditer(src or ""):
        if m.group(1):
            out[m.group(1).lower()] = trim_quotes(m.group(2) or "")
        elif m.group(3):
            out[m.group(3).lower()] = "true"
    return out


def normalize_aliases(attrs: Dict[str, str]) -> Dict[str, str]:
    """Copy legacy values onto canonical keys that are absent. Never overwrites."""
    out = dict(attrs)
    for legacy, canonical in LEGACY_ALIASES.items():
        if out.get(legacy) and canonical not in out:
            out[canonical] = out[legacy]
    return out


def parse_custom_attrs(src: str) -> Dict[str, str]:
    """Only the X-* client attributes of an HLS attribute list."""
    return {k: v for k, v in parse_attrs(src).items() if k.startswith("x-")}
