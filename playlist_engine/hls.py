#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/hls.py
# [PROJECT] PlaylistEngine
# [ROLE] HLS M3U8 parsing: media + master state machines, per-tag parsers
# [VERSION] v1.0
# [UPDATED] 2026-10-19
# ==============================================================================

"""
HLS playlist parser.

Lines are dispatched by tag name (text before the first ':') through a
lookup table. Media playlists thread sticky state (key, map) and pending
state (discontinuity, gap, program-date-time, date ranges) into the next
#EXTINF segment; master playlists collect independent variant/rendition
records. #EXT-X-DEFINE variables are substituted into every later line
before it is dispatched.

Malformed tags are dropped or reported in .warnings; nothing here raises.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from playlist_engine.attrs import parse_attrs, parse_custom_attrs
from playlist_engine.hls_types import (
    ENCRYPTION_METHODS,
    MEDIA_TYPES,
    PLAYLIST_TYPES,
    PRELOAD_HINT_TYPES,
    VIDEO_RANGES,
    HlsByteRange,
    HlsDateRange,
    HlsIFrameStream,
    HlsKey,
    HlsMap,
    HlsMasterPlaylist,
    HlsMediaPlaylist,
    HlsMediaSegment,
    HlsPartInf,
    HlsPlaylist,
    HlsPreloadHint,
    HlsRendition,
    HlsRenditionReport,
    HlsResolution,
    HlsServerControl,
    HlsSessionData,
    HlsSkip,
    HlsStart,
    HlsVariantStream,
)
from playlist_engine.lines import normalize_lines, to_int, to_number

logger = logging.getLogger(__name__)

EXTM3U = "#EXTM3U"
STREAM_INF = "#EXT-X-STREAM-INF"

VARIABLE_RX = re.compile(r"\{\$([A-Za-z0-9_\-]+)\}")
INSTREAM_ID_RX = re.compile(r"^(?:CC|SERVICE)\d+$")
HEX_RX = re.compile(r"^0x[0-9A-Fa-f]+$")

WARN_NO_HEADER = "Missing #EXTM3U header; may not be a valid M3U8 file"
WARN_NO_TARGET_DURATION = "Missing #EXT-X-TARGETDURATION tag; required for media playlists"
WARN_NO_VARIANTS = "No variant streams found; master playlist should contain #EXT-X-STREAM-INF tags"


# ----------------------------
# Value helpers
# ----------------------------

def substitute_variables(line: str, variables: Dict[str, str]) -> str:
    """{$name} -> value; unknown names stay literal."""
    if not variables or "{$" not in line:
        return line
    return VARIABLE_RX.sub(lambda m: variables.get(m.group(1), m.group(0)), line)


def _yes_no(value: Optional[str]) -> Optional[bool]:
    if not value:
        return None
    return value == "YES"


def _one_of(value: Optional[str], allowed) -> Optional[str]:
    return value if value in allowed else None


def _hex(value: Optional[str]) -> Optional[str]:
    return value if value and HEX_RX.match(value) else None


def parse_byte_range(value: str) -> Optional[HlsByteRange]:
    """'length[@offset]'"""
    length_s, _, offset_s = (value or "").strip().partition("@")
    length = to_int(length_s)
    if length is None:
        return None
    return HlsByteRange(length=length, offset=to_int(offset_s) if offset_s else None)


def parse_resolution(value: Optional[str]) -> Optional[HlsResolution]:
    """'WIDTHxHEIGHT'"""
    width_s, sep, height_s = (value or "").lower().partition("x")
    width, height = to_int(width_s), to_int(height_s)
    if not sep or width is None or height is None:
        return None
    return HlsResolution(width=width, height=height)


# ----------------------------
# Tag attribute parsers
# ----------------------------

def parse_key(value: str) -> Optional[HlsKey]:
    attrs = parse_attrs(value)
    method = _one_of(attrs.get("method"), ENCRYPTION_METHODS)
    if method is None:
        return None
    if method == "NONE":
        return HlsKey(method="NONE")
    return HlsKey(
        method=method,
        uri=attrs.get("uri"),
        iv=attrs.get("iv"),
        key_format=attrs.get("keyformat"),
        key_format_versions=attrs.get("keyformatversions"),
    )


def parse_map(value: str) -> Optional[HlsMap]:
    attrs = parse_attrs(value)
    if not attrs.get("uri"):
        return None
    byte_range = attrs.get("byterange")
    return HlsMap(uri=attrs["uri"], byte_range=parse_byte_range(byte_range) if byte_range else None)


def parse_date_range(value: str) -> Optional[HlsDateRange]:
    attrs = parse_attrs(value)
    if not attrs.get("id") or not attrs.get("start-date"):
        return None
    client = {k: v for k, v in attrs.items() if k.startswith("x-")}
    return HlsDateRange(
        id=attrs["id"],
        start_date=attrs["start-date"],
        klass=attrs.get("class"),
        end_date=attrs.get("end-date"),
        duration=to_number(attrs.get("duration")),
        planned_duration=to_number(attrs.get("planned-duration")),
        end_on_next=_yes_no(attrs.get("end-on-next")),
        cue=attrs.get("cue"),
        client_attributes=client or None,
        scte35_cmd=_hex(attrs.get("scte35-cmd")),
        scte35_out=_hex(attrs.get("scte35-out")),
        scte35_in=_hex(attrs.get("scte35-in")),
    )


def parse_variant_stream(value: str, uri: str) -> Optional[HlsVariantStream]:
    attrs = parse_attrs(value)
    bandwidth = to_int(attrs.get("bandwidth"))
    if bandwidth is None:
        return None
    return HlsVariantStream(
        uri=uri,
        bandwidth=bandwidth,
        average_bandwidth=to_int(attrs.get("average-bandwidth")),
        codecs=attrs.get("codecs"),
        supplemental_codecs=attrs.get("supplemental-codecs"),
        resolution=parse_resolution(attrs.get("resolution")),
        frame_rate=to_number(attrs.get("frame-rate")),
        video_range=_one_of(attrs.get("video-range"), VIDEO_RANGES),
        audio=attrs.get("audio"),
        video=attrs.get("video"),
        subtitles=attrs.get("subtitles"),
        closed_captions=attrs.get("closed-captions"),
        custom_attributes=parse_custom_attrs(value) or None,
    )


def parse_iframe_stream(value: str) -> Optional[HlsIFrameStream]:
    attrs = parse_attrs(value)
    bandwidth = to_int(attrs.get("bandwidth"))
    if not attrs.get("uri") or bandwidth is None:
        return None
    return HlsIFrameStream(
        uri=attrs["uri"],
        bandwidth=bandwidth,
        average_bandwidth=to_int(attrs.get("average-bandwidth")),
        codecs=attrs.get("codecs"),
        resolution=parse_resolution(attrs.get("resolution")),
        video=attrs.get("video"),
        custom_attributes=parse_custom_attrs(value) or None,
    )


def parse_rendition(value: str) -> Optional[HlsRendition]:
    attrs = parse_attrs(value)
    media_type = _one_of(attrs.get("type"), MEDIA_TYPES)
    if media_type is None or not attrs.get("group-id") or not attrs.get("name"):
        return None
    instream_id = attrs.get("instream-id")
    return HlsRendition(
        type=media_type,
        group_id=attrs["group-id"],
        name=attrs["name"],
        uri=attrs.get("uri"),
        language=attrs.get("language"),
        assoc_language=attrs.get("assoc-language"),
        default=_yes_no(attrs.get("default")),
        auto_select=_yes_no(attrs.get("autoselect")),
        forced=_yes_no(attrs.get("forced")),
        instream_id=instream_id if instream_id and INSTREAM_ID_RX.match(instream_id) else None,
        characteristics=attrs.get("characteristics"),
        channels=attrs.get("channels"),
        custom_attributes=parse_custom_attrs(value) or None,
    )


def parse_session_data(value: str) -> Optional[HlsSessionData]:
    attrs = parse_attrs(value)
    if not attrs.get("data-id"):
        return None
    return HlsSessionData(
        data_id=attrs["data-id"],
        value=attrs.get("value"),
        uri=attrs.get("uri"),
        language=attrs.get("language"),
    )


def parse_start(value: str) -> Optional[HlsStart]:
    attrs = parse_attrs(value)
    offset = to_number(attrs.get("time-offset"))
    if offset is None:
        return None
    return HlsStart(time_offset=offset, precise=_yes_no(attrs.get("precise")))


def parse_server_control(value: str) -> HlsServerControl:
    attrs = parse_attrs(value)
    return HlsServerControl(
        can_skip_until=to_number(attrs.get("can-skip-until")),
        can_skip_date_ranges=_yes_no(attrs.get("can-skip-dateranges")),
        hold_back=to_number(attrs.get("hold-back")),
        part_hold_back=to_number(attrs.get("part-hold-back")),
        can_block_reload=_yes_no(attrs.get("can-block-reload")),
    )


def parse_part_inf(value: str) -> Optional[HlsPartInf]:
    target = to_number(parse_attrs(value).get("part-target"))
    return HlsPartInf(part_target=target) if target is not None else None


def parse_skip(value: str) -> Optional[HlsSkip]:
    attrs = parse_attrs(value)
    skipped = to_int(attrs.get("skipped-segments"))
    if skipped is None:
        return None
    return HlsSkip(
        skipped_segments=skipped,
        recently_removed_date_ranges=attrs.get("recently-removed-dateranges"),
    )


def parse_preload_hint(value: str) -> Optional[HlsPreloadHint]:
    attrs = parse_attrs(value)
    hint_type = _one_of(attrs.get("type"), PRELOAD_HINT_TYPES)
    if hint_type is None or not attrs.get("uri"):
        return None
    return HlsPreloadHint(
        type=hint_type,
        uri=attrs["uri"],
        byte_range_start=to_int(attrs.get("byterange-start")),
        byte_range_length=to_int(attrs.get("byterange-length")),
    )


def parse_rendition_report(value: str) -> Optional[HlsRenditionReport]:
    attrs = parse_attrs(value)
    if not attrs.get("uri"):
        return None
    return HlsRenditionReport(
        uri=attrs["uri"],
        last_msn=to_int(attrs.get("last-msn")),
        last_part=to_int(attrs.get("last-part")),
    )


# ----------------------------
# Scan state
# ----------------------------

@dataclass
class _ScanState:
    lines: List[str]
    pos: int = 0
    variables: Dict[str, str] = field(default_factory=dict)
    custom: Dict[str, str] = field(default_factory=dict)


@dataclass
class _MediaState(_ScanState):
    playlist: HlsMediaPlaylist = field(default_factory=HlsMediaPlaylist)
    preload_hints: List[HlsPreloadHint] = field(default_factory=list)
    rendition_reports: List[HlsRenditionReport] = field(default_factory=list)
    # sticky until redeclared
    key: Optional[HlsKey] = None
    map: Optional[HlsMap] = None
    # pending, consumed by the next #EXTINF
    date_ranges: List[HlsDateRange] = field(default_factory=list)
    discontinuity: bool = False
    gap: bool = False
    program_date_time: Optional[str] = None
    # opened by #EXTINF, closed by the URI line
    segment: Optional[HlsMediaSegment] = None


@dataclass
class _MasterState(_ScanState):
    playlist: HlsMasterPlaylist = field(default_factory=HlsMasterPlaylist)
    i_frame_streams: List[HlsIFrameStream] = field(default_factory=list)
    renditions: List[HlsRendition] = field(default_factory=list)
    session_data: List[HlsSessionData] = field(default_factory=list)
    session_keys: List[HlsKey] = field(default_factory=list)


Handler = Callable[[_ScanState, str], None]


def _scan(state: _ScanState, tags: Dict[str, Handler], on_uri: Callable[[_ScanState, str], None]) -> None:
    lines = state.lines
    while state.pos < len(lines):
        line = lines[state.pos].strip()
        if line:
            line = substitute_variables(line, state.variables)
            if line.startswith("#"):
                tag, _, value = line.partition(":")
                tag = tag.strip().upper()
                handler = tags.get(tag)
                if handler is not None:
                    handler(state, value)
                elif tag.startswith("#EXT-X-"):
                    # lossy union across tags sharing an X- name
                    state.custom.update(parse_custom_attrs(value))
            else:
                on_uri(state, line)
        state.pos += 1


# ----------------------------
# Handlers shared by both scanners
# ----------------------------

def _on_version(state, value):
    version = to_int(value)
    if version is not None:
        state.playlist.version = version


def _on_independent_segments(state, value):
    state.playlist.independent_segments = True


def _on_start(state, value):
    state.playlist.start = parse_start(value)


def _on_define(state, value):
    attrs = parse_attrs(value)
    if attrs.get("name") and "value" in attrs:
        state.variables[attrs["name"]] = attrs["value"]


COMMON_TAGS: Dict[str, Handler] = {
    "#EXT-X-VERSION": _on_version,
    "#EXT-X-INDEPENDENT-SEGMENTS": _on_independent_segments,
    "#EXT-X-START": _on_start,
    "#EXT-X-DEFINE": _on_define,
}


# ----------------------------
# Media playlist
# ----------------------------

def _on_target_duration(state, value):
    duration = to_int(value)
    if duration is not None:
        state.playlist.target_duration = duration


def _on_media_sequence(state, value):
    state.playlist.media_sequence = to_int(value)


def _on_discontinuity_sequence(state, value):
    state.playlist.discontinuity_sequence = to_int(value)


def _on_playlist_type(state, value):
    state.playlist.playlist_type = _one_of(value.strip().upper(), PLAYLIST_TYPES)


def _on_end_list(state, value):
    state.playlist.end_list = True


def _on_i_frames_only(state, value):
    state.playlist.i_frames_only = True


def _on_key(state, value):
    state.key = parse_key(value)


def _on_map(state, value):
    state.map = parse_map(value)


def _on_date_range(state, value):
    date_range = parse_date_range(value)
    if date_range is not None:
        state.date_ranges.append(date_range)
    else:
        logger.debug("Dropped #EXT-X-DATERANGE without ID/START-DATE at line %d", state.pos + 1)


def _on_discontinuity(state, value):
    state.discontinuity = True


def _on_gap(state, value):
    state.gap = True


def _on_program_date_time(state, value):
    if value.strip():
        state.program_date_time = value.strip()


def _on_server_control(state, value):
    state.playlist.server_control = parse_server_control(value)


def _on_part_inf(state, value):
    state.playlist.part_inf = parse_part_inf(value)


def _on_skip(state, value):
    state.playlist.skip = parse_skip(value)


def _on_preload_hint(state, value):
    hint = parse_preload_hint(value)
    if hint is not None:
        state.preload_hints.append(hint)


def _on_rendition_report(state, value):
    report = parse_rendition_report(value)
    if report is not None:
        state.rendition_reports.append(report)


def _on_extinf(state, value):
    duration_s, _, title = value.partition(",")
    duration = to_number(duration_s)
    if duration is None:
        logger.debug("Ignored #EXTINF without duration at line %d", state.pos + 1)
        return
    state.segment = HlsMediaSegment(
        uri="",
        duration=duration,
        title=title.strip() or None,
        key=state.key,
        map=state.map,
        discontinuity=state.discontinuity or None,
        gap=state.gap or None,
        program_date_time=state.program_date_time,
        date_ranges=list(state.date_ranges) or None,
    )
    state.date_ranges = []
    state.discontinuity = False
    state.gap = False
    state.program_date_time = None


def _on_byte_range(state, value):
    if state.segment is not None:
        state.segment.byte_range = parse_byte_range(value)


def _on_segment_uri(state, line):
    if state.segment is None:
        return
    state.segment.uri = line
    state.playlist.segments.append(state.segment)
    state.segment = None


MEDIA_TAGS: Dict[str, Handler] = dict(
    COMMON_TAGS,
    **{
        "#EXT-X-TARGETDURATION": _on_target_duration,
        "#EXT-X-MEDIA-SEQUENCE": _on_media_sequence,
        "#EXT-X-DISCONTINUITY-SEQUENCE": _on_discontinuity_sequence,
        "#EXT-X-PLAYLIST-TYPE": _on_playlist_type,
        "#EXT-X-ENDLIST": _on_end_list,
        "#EXT-X-I-FRAMES-ONLY": _on_i_frames_only,
        "#EXT-X-KEY": _on_key,
        "#EXT-X-MAP": _on_map,
        "#EXT-X-DATERANGE": _on_date_range,
        "#EXT-X-DISCONTINUITY": _on_discontinuity,
        "#EXT-X-GAP": _on_gap,
        "#EXT-X-PROGRAM-DATE-TIME": _on_program_date_time,
        "#EXT-X-SERVER-CONTROL": _on_server_control,
        "#EXT-X-PART-INF": _on_part_inf,
        "#EXT-X-SKIP": _on_skip,
        "#EXT-X-PRELOAD-HINT": _on_preload_hint,
        "#EXT-X-RENDITION-REPORT": _on_rendition_report,
        "#EXTINF": _on_extinf,
        "#EXT-X-BYTERANGE": _on_byte_range,
    }
)


def _parse_media(lines: List[str], warnings: List[str]) -> HlsMediaPlaylist:
    state = _MediaState(lines=lines)
    _scan(state, MEDIA_TAGS, _on_segment_uri)

    playlist = state.playlist
    playlist.preload_hints = state.preload_hints or None
    playlist.rendition_reports = state.rendition_reports or None
    playlist.custom_attributes = state.custom or None
    if playlist.target_duration == 0 and playlist.segments:
        warnings.append(WARN_NO_TARGET_DURATION)
    playlist.warnings = warnings
    logger.debug("Parsed HLS media playlist: %d segments", len(playlist.segments))
    return playlist


# ----------------------------
# Master playlist
# ----------------------------

def _on_stream_inf(state, value):
    nxt = state.lines[state.pos + 1].strip() if state.pos + 1 < len(state.lines) else ""
    if not nxt or nxt.startswith("#"):
        logger.debug("Dropped #EXT-X-STREAM-INF without URI at line %d", state.pos + 1)
        return
    state.pos += 1
    variant = parse_variant_stream(value, substitute_variables(nxt, state.variables))
    if variant is not None:
        state.playlist.variants.append(variant)


def _on_iframe_stream_inf(state, value):
    stream = parse_iframe_stream(value)
    if stream is not None:
        state.i_frame_streams.append(stream)


def _on_media(state, value):
    rendition = parse_rendition(value)
    if rendition is not None:
        state.renditions.append(rendition)


def _on_session_data(state, value):
    data = parse_session_data(value)
    if data is not None:
        state.session_data.append(data)


def _on_session_key(state, value):
    key = parse_key(value)
    if key is not None:
        state.session_keys.append(key)


def _ignore_uri(state, line):
    pass


MASTER_TAGS: Dict[str, Handler] = dict(
    COMMON_TAGS,
    **{
        STREAM_INF: _on_stream_inf,
        "#EXT-X-I-FRAME-STREAM-INF": _on_iframe_stream_inf,
        "#EXT-X-MEDIA": _on_media,
        "#EXT-X-SESSION-DATA": _on_session_data,
        "#EXT-X-SESSION-KEY": _on_session_key,
    }
)


def _parse_master(lines: List[str], warnings: List[str]) -> HlsMasterPlaylist:
    state = _MasterState(lines=lines)
    _scan(state, MASTER_TAGS, _ignore_uri)

    playlist = state.playlist
    playlist.i_frame_streams = state.i_frame_streams or None
    playlist.renditions = state.renditions or None
    playlist.session_data = state.session_data or None
    playlist.session_keys = state.session_keys or None
    playlist.custom_attributes = state.custom or None
    if not playlist.variants:
        warnings.append(WARN_NO_VARIANTS)
    playlist.warnings = warnings
    logger.debug(
        "Parsed HLS master playlist: %d variants, %d renditions",
        len(playlist.variants),
        len(state.renditions),
    )
    return playlist


# ----------------------------
# Entry point
# ----------------------------

def is_master_text(lines: List[str]) -> bool:
    return any(line.strip().upper().startswith(STREAM_INF) for line in lines)


def parse_hls_playlist(text: str) -> HlsPlaylist:
    """Parse M3U8 text into an HlsMasterPlaylist or HlsMediaPlaylist. Never raises."""
    warnings: List[str] = []
    lines = normalize_lines(text)

    first = next((line.strip() for line in lines if line.strip()), "")
    if not first.upper().startswith(EXTM3U):
        warnings.append(WARN_NO_HEADER)

    if is_master_text(lines):
        return _parse_master(lines, warnings)
    return _parse_media(lines, warnings)
