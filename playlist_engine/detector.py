#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/detector.py
# [PROJECT] PlaylistEngine
# [ROLE] Score-based IPTV vs HLS format detection + auto-dispatch
# [VERSION] v1.0
# [UPDATED] 2026-10-19
# ==============================================================================

"""
Best-effort format classifier. There is no format marker in an M3U file, so
the first lines are scored against HLS tags and IPTV attributes. Ties (and
files with neither) go to "iptv": most ambiguous M3U files in the wild are
IPTV lists. Callers that know the format should pass it explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from playlist_engine.hls import parse_hls_playlist
from playlist_engine.hls_types import HlsPlaylist
from playlist_engine.lines import normalize_lines
from playlist_engine.m3u import parse_playlist
from playlist_engine.models import Playlist

logger = logging.getLogger(__name__)

IPTV = "iptv"
HLS = "hls"
FORMATS = (IPTV, HLS)

SCAN_LINES = 50

HLS_SPECIFIC_TAGS = (
    "#EXT-X-VERSION",
    "#EXT-X-TARGETDURATION",
    "#EXT-X-MEDIA-SEQUENCE",
    "#EXT-X-DISCONTINUITY-SEQUENCE",
    "#EXT-X-PLAYLIST-TYPE",
    "#EXT-X-KEY",
    "#EXT-X-MAP",
    "#EXT-X-PROGRAM-DATE-TIME",
    "#EXT-X-DATERANGE",
    "#EXT-X-STREAM-INF",
    "#EXT-X-I-FRAME-STREAM-INF",
    "#EXT-X-MEDIA",
    "#EXT-X-SESSION-DATA",
    "#EXT-X-SESSION-KEY",
    "#EXT-X-BYTERANGE",
    "#EXT-X-DISCONTINUITY",
    "#EXT-X-ENDLIST",
    "#EXT-X-I-FRAMES-ONLY",
    "#EXT-X-INDEPENDENT-SEGMENTS",
    "#EXT-X-START",
    "#EXT-X-SERVER-CONTROL",
    "#EXT-X-PART-INF",
    "#EXT-X-RENDITION-REPORT",
    "#EXT-X-SKIP",
    "#EXT-X-PRELOAD-HINT",
)

IPTV_SPECIFIC_TAGS = (
    "TVG-ID=",
    "TVG-NAME=",
    "TVG-LOGO=",
    "TVG-CHNO=",
    "GROUP-TITLE=",
    "#EXTGRP",
    "#EXTVLCOPT",
    "#KODIPROP",
    "CATCHUP=",
    "CATCHUP-SOURCE=",
    "TIMESHIFT=",
)

HLS_STRONG_TAGS = ("#EXT-X-VERSION", "#EXT-X-TARGETDURATION", "#EXT-X-STREAM-INF")
IPTV_STRONG_ATTRS = ("GROUP-TITLE=", "TVG-ID=", "TVG-NAME=", "TVG-LOGO=")

HLS_LINE_SCORE = 10
IPTV_LINE_SCORE = 5
HLS_STRONG_BONUS = 20
IPTV_STRONG_BONUS = 15


@dataclass
class ParsedPlaylist:
    format: str  # "iptv" | "hls"
    playlist: Union[Playlist, HlsPlaylist]


def score_lines(text: str):
    """(hls_score, iptv_score) over the first SCAN_LINES lines."""
    upper = [line.strip().upper() for line in normalize_lines(text)[:SCAN_LINES]]

    hls_score = 0
    iptv_score = 0
    for line in upper:
        if line.startswith(HLS_SPECIFIC_TAGS):
            hls_score += HLS_LINE_SCORE
        if any(tag in line for tag in IPTV_SPECIFIC_TAGS):
            iptv_score += IPTV_LINE_SCORE

    if any(line.startswith(HLS_STRONG_TAGS) for line in upper):
        hls_score += HLS_STRONG_BONUS
    if any(attr in line for line in upper for attr in IPTV_STRONG_ATTRS):
        iptv_score += IPTV_STRONG_BONUS
    return hls_score, iptv_score


def detect_playlist_type(text: str) -> str:
    hls_score, iptv_score = score_lines(text)
    fmt = HLS if hls_score > iptv_score else IPTV
    logger.debug("Detected %s (hls=%d iptv=%d)", fmt, hls_score, iptv_score)
    return fmt


def parse_playlist_auto(text: str, fmt: Optional[str] = None) -> ParsedPlaylist:
    """
    Parse with an explicit format ("iptv" / "hls"), or detect it when fmt is
    None / "auto".
    """
    if fmt in (None, "auto"):
        fmt = detect_playlist_type(text)
    if fmt not in FORMATS:
        raise ValueError(f"Unknown playlist format: {fmt!r}")

    if fmt == HLS:
        return ParsedPlaylist(format=HLS, playlist=parse_hls_playlist(text))
    return ParsedPlaylist(format=IPTV, playlist=parse_playlist(text))
