#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/__init__.py
# [PROJECT] PlaylistEngine
# [ROLE] Public API: parse as IPTV, parse as HLS, classify format
# [VERSION] v1.0
# [UPDATED] 2026-10-19
# ==============================================================================

from playlist_engine.detector import ParsedPlaylist, detect_playlist_type, parse_playlist_auto
from playlist_engine.hls import parse_hls_playlist
from playlist_engine.hls_types import (
    HlsMasterPlaylist,
    HlsMediaPlaylist,
    HlsMediaSegment,
    HlsPlaylist,
    is_master_playlist,
    is_media_playlist,
)
from playlist_engine.m3u import parse_playlist
from playlist_engine.models import Entry, HttpHints, Playlist, PlaylistHeader, TvgInfo
from playlist_engine.normalize import (
    deduplicate_entries,
    merge_playlists,
    normalize_entry,
    normalize_playlist,
)

__version__ = "1.0.0"

__all__ = [
    "Entry",
    "HlsMasterPlaylist",
    "HlsMediaPlaylist",
    "HlsMediaSegment",
    "HlsPlaylist",
    "HttpHints",
    "ParsedPlaylist",
    "Playlist",
    "PlaylistHeader",
    "TvgInfo",
    "deduplicate_entries",
    "detect_playlist_type",
    "is_master_playlist",
    "is_media_playlist",
    "merge_playlists",
    "normalize_entry",
    "normalize_playlist",
    "parse_hls_playlist",
    "parse_playlist",
    "parse_playlist_auto",
]
