#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/models.py
# [PROJECT] PlaylistEngine
# [ROLE] IPTV playlist records (header, entries, HTTP hints)
# [VERSION] v1.0
# [UPDATED] 2026-10-19
# ==============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

# tvg-type value -> stream kind
STREAM_TYPES = {
    "live": "live",
    "vod": "vod",
    "movie": "vod",
    "video": "vod",
    "series": "series",
    "radio": "radio",
}


@dataclass
class PlaylistHeader:
    tvg_urls: List[str] = field(default_factory=list)
    tvg_shift: Optional[int] = None  # minutes
    user_agent: Optional[str] = None
    catchup: Optional[str] = None
    catchup_source: Optional[str] = None
    catchup_hours: Optional[float] = None
    catchup_days: Optional[float] = None
    timeshift: Optional[float] = None  # hours
    raw_attrs: Dict[str, str] = field(default_factory=dict)


@dataclass
class TvgInfo:
    id: Optional[str] = None
    name: Optional[str] = None
    logo: Optional[str] = None
    chno: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.id or self.name or self.logo or self.chno)


@dataclass
class HttpHints:
    user_agent: Optional[str] = None
    referer: Optional[str] = None
    cookie: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class Entry:
    name: str
    url: str
    duration: Optional[int] = None  # seconds, -1 for live
    group: Optional[List[str]] = None
    tvg: Optional[TvgInfo] = None
    http: Optional[HttpHints] = None
    kodi_props: Optional[Dict[str, str]] = None
    attrs: Dict[str, str] = field(default_factory=dict)
    stream_type: Optional[str] = None
    audio_track: Optional[str] = None
    aspect_ratio: Optional[str] = None
    is_adult: Optional[bool] = None
    recording: Optional[bool] = None
    provider_order: Optional[int] = None


@dataclass
class Playlist:
    header: PlaylistHeader = field(default_factory=PlaylistHeader)
    items: List[Entry] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
