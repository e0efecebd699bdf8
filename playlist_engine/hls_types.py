#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/hls_types.py
# [PROJECT] PlaylistEngine
# [ROLE] HLS (M3U8) record types: media/master playlists and their tags
# [VERSION] v1.0
# [UPDATED] 2026-10-19
# ==============================================================================

"""
Record types for Apple HTTP Live Streaming playlists.

A parsed playlist is either an HlsMediaPlaylist (segment list) or an
HlsMasterPlaylist (variant selection). Both carry a read-only ``type``
discriminator ("media" / "master"), but consumers should branch with
isinstance() or the is_media_playlist / is_master_playlist guards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

ENCRYPTION_METHODS = ("NONE", "AES-128", "SAMPLE-AES", "SAMPLE-AES-CENC", "SAMPLE-AES-CTR")
PLAYLIST_TYPES = ("VOD", "EVENT")  # no tag means LIVE
MEDIA_TYPES = ("AUDIO", "VIDEO", "SUBTITLES", "CLOSED-CAPTIONS")
VIDEO_RANGES = ("SDR", "PQ", "HLG")
PRELOAD_HINT_TYPES = ("PART", "MAP")


# ----------------------------
# Segment level
# ----------------------------

@dataclass
class HlsByteRange:
    length: int
    offset: Optional[int] = None


@dataclass
class HlsKey:
    method: str
    uri: Optional[str] = None
    iv: Optional[str] = None
    key_format: Optional[str] = None
    key_format_versions: Optional[str] = None


@dataclass
class HlsMap:
    """Media initialization section (fMP4)."""
    uri: str
    byte_range: Optional[HlsByteRange] = None


@dataclass
class HlsDateRange:
    id: str
    start_date: str
    klass: Optional[str] = None  # CLASS
    end_date: Optional[str] = None
    duration: Optional[float] = None
    planned_duration: Optional[float] = None
    end_on_next: Optional[bool] = None
    cue: Optional[str] = None
    client_attributes: Optional[Dict[str, str]] = None
    scte35_cmd: Optional[str] = None
    scte35_out: Optional[str] = None
    scte35_in: Optional[str] = None


@dataclass
class HlsMediaSegment:
    uri: str
    duration: float  # seconds
    title: Optional[str] = None
    byte_range: Optional[HlsByteRange] = None
    key: Optional[HlsKey] = None
    map: Optional[HlsMap] = None
    discontinuity: Optional[bool] = None
    gap: Optional[bool] = None
    program_date_time: Optional[str] = None
    date_ranges: Optional[List[HlsDateRange]] = None


# ----------------------------
# Media playlist (incl. low-latency)
# ----------------------------

@dataclass
class HlsServerControl:
    can_skip_until: Optional[float] = None
    can_skip_date_ranges: Optional[bool] = None
    hold_back: Optional[float] = None
    part_hold_back: Optional[float] = None
    can_block_reload: Optional[bool] = None


@dataclass
class HlsPartInf:
    part_target: float


@dataclass
class HlsStart:
    time_offset: float
    precise: Optional[bool] = None


@dataclass
class HlsSkip:
    skipped_segments: int
    recently_removed_date_ranges: Optional[str] = None


@dataclass
class HlsPreloadHint:
    type: str  # PART | MAP
    uri: str
    byte_range_start: Optional[int] = None
    byte_range_length: Optional[int] = None


@dataclass
class HlsRenditionReport:
    uri: str
    last_msn: Optional[int] = None
    last_part: Optional[int] = None


@dataclass
class HlsMediaPlaylist:
    target_duration: int = 0
    version: Optional[int] = None
    media_sequence: Optional[int] = None
    discontinuity_sequence: Optional[int] = None
    playlist_type: Optional[str] = None  # VOD | EVENT | None (LIVE)
    end_list: bool = False
    i_frames_only: Optional[bool] = None
    segments: List[HlsMediaSegment] = field(default_factory=list)
    server_control: Optional[HlsServerControl] = None
    part_inf: Optional[HlsPartInf] = None
    start: Optional[HlsStart] = None
    skip: Optional[HlsSkip] = None
    preload_hints: Optional[List[HlsPreloadHint]] = None
    rendition_reports: Optional[List[HlsRenditionReport]] = None
    independent_segments: Optional[bool] = None
    custom_attributes: Optional[Dict[str, str]] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def type(self) -> str:
        return "media"


# ----------------------------
# Master playlist
# ----------------------------

@dataclass
class HlsResolution:
    width: int
    height: int


@dataclass
class HlsVariantStream:
    uri: str
    bandwidth: int
    average_bandwidth: Optional[int] = None
    codecs: Optional[str] = None
    supplemental_codecs: Optional[str] = None
    resolution: Optional[HlsResolution] = None
    frame_rate: Optional[float] = None
    video_range: Optional[str] = None
    audio: Optional[str] = None
    video: Optional[str] = None
    subtitles: Optional[str] = None
    closed_captions: Optional[str] = None
    custom_attributes: Optional[Dict[str, str]] = None


@dataclass
class HlsIFrameStream:
    """I-frame variant for trick play."""
    uri: str
    bandwidth: int
    average_bandwidth: Optional[int] = None
    codecs: Optional[str] = None
    resolution: Optional[HlsResolution] = None
    video: Optional[str] = None
    custom_attributes: Optional[Dict[str, str]] = None


@dataclass
class HlsRendition:
    type: str  # AUDIO | VIDEO | SUBTITLES | CLOSED-CAPTIONS
    group_id: str
    name: str
    uri: Optional[str] = None
    language: Optional[str] = None
    assoc_language: Optional[str] = None
    default: Optional[bool] = None
    auto_select: Optional[bool] = None
    forced: Optional[bool] = None
    instream_id: Optional[str] = None
    characteristics: Optional[str] = None
    channels: Optional[str] = None
    custom_attributes: Optional[Dict[str, str]] = None


@dataclass
class HlsSessionData:
    data_id: str
    value: Optional[str] = None
    uri: Optional[str] = None
    language: Optional[str] = None


# same attribute set as a segment key
HlsSessionKey = HlsKey


@dataclass
class HlsMasterPlaylist:
    version: Optional[int] = None
    variants: List[HlsVariantStream] = field(default_factory=list)
    i_frame_streams: Optional[List[HlsIFrameStream]] = None
    renditions: Optional[List[HlsRendition]] = None
    session_data: Optional[List[HlsSessionData]] = None
    session_keys: Optional[List[HlsSessionKey]] = None
    start: Optional[HlsStart] = None
    independent_segments: Optional[bool] = None
    custom_attributes: Optional[Dict[str, str]] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def type(self) -> str:
        return "master"


HlsPlaylist = Union[HlsMediaPlaylist, HlsMasterPlaylist]


def is_master_playlist(playlist: HlsPlaylist) -> bool:
    return isinstance(playlist, HlsMasterPlaylist)


def is_media_playlist(playlist: HlsPlaylist) -> bool:
    return isinstance(playlist, HlsMediaPlaylist)
