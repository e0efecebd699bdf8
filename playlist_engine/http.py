#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/http.py
# [PROJECT] PlaylistEngine
# [ROLE] Playlist download with optional file cache (outside the parser core)
# [VERSION] v1.0
# [UPDATED] 2026-10-19
# ==============================================================================

from pathlib import Path
from typing import Dict, Optional

import requests

from playlist_engine.lines import decode_text
from playlist_engine.m3u import parse_playlist
from playlist_engine.models import Playlist

DEFAULT_USER_AGENT = "PlaylistEngine/1.0"


def build_headers(
    user_agent: Optional[str] = None,
    referer: Optional[str] = None,
    cookie: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """Explicit headers win over the convenience arguments."""
    out = dict(headers or {})
    present = {k.lower() for k in out}
    if "user-agent" not in present:
        out["User-Agent"] = user_agent or DEFAULT_USER_AGENT
    if referer and "referer" not in present:
        out["Referer"] = referer
    if cookie and "cookie" not in present:
        out["Cookie"] = cookie
    return out


def fetch_text(
    url: str,
    user_agent: Optional[str] = None,
    referer: Optional[str] = None,
    cookie: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = 30,
    cache_file: Optional[Path] = None,
) -> str:
    if cache_file is not None and cache_file.exists() and cache_file.stat().st_size > 0:
        return decode_text(cache_file.read_bytes())
    response = requests.get(
        url,
        timeout=timeout,
        headers=build_headers(user_agent, referer, cookie, headers),
        allow_redirects=True,
    )
    response.raise_for_status()
    if cache_file is not None:
        cache_file.parent.mkdir(parents=True, exist_ok=True)
        cache_file.write_bytes(response.content)
    return decode_text(response.content)


def load_playlist_from_url(url: str, **kwargs) -> Playlist:
    return parse_playlist(fetch_text(url, **kwargs))
