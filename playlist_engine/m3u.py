#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/m3u.py
# [PROJECT] PlaylistEngine
# [ROLE] Extended IPTV M3U parsing (header, #EXTINF entries, auxiliary tags)
# [VERSION] v1.0
# [UPDATED] 2026-10-19
# ==============================================================================

import logging
import re
from typing import Dict, List, Optional, Tuple

from playlist_engine.attrs import normalize_aliases, parse_attrs
from playlist_engine.lines import (
    normalize_lines,
    push_unique,
    round_half_up,
    to_number,
    trim_quotes,
)
from playlist_engine.models import (
    STREAM_TYPES,
    Entry,
    HttpHints,
    Playlist,
    PlaylistHeader,
    TvgInfo,
)

logger = logging.getLogger(__name__)

EXTM3U = "#EXTM3U"
EXTINF = "#EXTINF"
EXTGRP = "#EXTGRP"
EXTVLCOPT = "#EXTVLCOPT"
KODIPROP = "#KODIPROP"

HEADER_PREFIX_RX = re.compile(r"^#EXTM3U\s*", re.IGNORECASE)
DURATION_RX = re.compile(r"^(-?\d+(?:\.\d+)?)\s*(.*)$", re.DOTALL)
HTTP_HEADER_RX = re.compile(r"^([^:]+):\s*(.*)$")

TRUTHY_FLAGS = ("1", "true")


# ----------------------------
# Header
# ----------------------------

def parse_header(line: str) -> PlaylistHeader:
    """
    #EXTM3U url-tvg="a.xml;b.xml" tvg-shift="2" catchup="default"

    Every tokenized attribute stays in raw_attrs; the known ones are also typed.
    """
    raw = parse_attrs(HEADER_PREFIX_RX.sub("", line, count=1))
    urls = raw.get("url-tvg") or raw.get("tvg-url") or ""
    tvg_urls = [u.strip() for u in re.split(r"[;,]", urls) if u.strip()]

    shift_hours = to_number(raw.get("tvg-shift"))
    return PlaylistHeader(
        tvg_urls=tvg_urls,
        tvg_shift=round_half_up(shift_hours * 60) if shift_hours is not None else None,
        user_agent=raw.get("user-agent") or raw.get("http-user-agent"),
        catchup=raw.get("catchup"),
        catchup_source=raw.get("catchup-source"),
        catchup_hours=to_number(raw.get("catchup-hours")),
        catchup_days=to_number(raw.get("catchup-days")),
        timeshift=to_number(raw.get("timeshift")),
        raw_attrs=raw,
    )


# ----------------------------
# #EXTINF line
# ----------------------------

def find_name_separator(text: str) -> int:
    """
    Index of the first comma outside quoted attribute values, or -1.

    A quote only opens right after `=` (whitespace allowed), so an
    apostrophe inside a bareword like bob's.us stays literal.
    """
    quote = None
    prev = ""
    for idx, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
        elif ch in ('"', "'") and prev == "=":
            quote = ch
        elif ch == ",":
            return idx
        if not ch.isspace():
            prev = ch
    if quote:
        # unbalanced quote: fall back to the plain first comma
        return text.find(",")
    return -1


def parse_extinf(line: str) -> Tuple[Optional[int], Dict[str, str], str]:
    """
    #EXTINF:-1 tvg-id="a,b" group-title="X",Channel Name
    -> (duration, raw attrs, display name)
    """
    after = line.strip()[len(EXTINF):]
    if after.startswith(":"):
        after = after[1:]
    after = after.strip()

    sep = find_name_separator(after)
    left = after[:sep] if sep >= 0 else after
    name = after[sep + 1:].strip() if sep >= 0 else ""

    duration = None
    m = DURATION_RX.match(left.strip())
    if m:
        duration = round_half_up(float(m.group(1)))
        attrs_part = m.group(2)
    else:
        # some providers omit the duration
        attrs_part = left
    return duration, parse_attrs(attrs_part), trim_quotes(name)


def _flag(value: Optional[str]) -> Optional[bool]:
    # "0" / anything else -> unset, not False
    return True if value in TRUTHY_FLAGS else None


def _split_directive(line: str, tag: str) -> Tuple[str, str]:
    pair = line[len(tag):]
    if pair.startswith(":"):
        pair = pair[1:]
    pair = pair.strip()
    if "=" in pair:
        k, v = pair.split("=", 1)
        return k.strip(), v.strip()
    return pair, "true"


def split_pipe_headers(url: str) -> Tuple[str, Dict[str, str]]:
    """
    http://x/stream.m3u8|User-Agent=Foo&X-Token=abc
    -> ("http://x/stream.m3u8", {"User-Agent": "Foo", "X-Token": "abc"})
    """
    if "|" not in url:
        return url, {}
    base, params = url.split("|", 1)
    headers: Dict[str, str] = {}
    for part in params.split("&"):
        if "=" not in part:
            continue
        k, v = part.split("=", 1)
        k = k.strip()
        if k:
            headers[k] = v
    return base.strip(), headers


# ----------------------------
# Playlist
# ----------------------------

def parse_playlist(text: str) -> Playlist:
    """Parse extended IPTV M3U text. Never raises; problems land in .warnings."""
    warnings: List[str] = []
    items: List[Entry] = []
    header = PlaylistHeader()

    lines = normalize_lines(text)
    i = 0
    while i < len(lines) and not lines[i].strip():
        i += 1
    if i < len(lines) and lines[i].strip().upper().startswith(EXTM3U):
        header = parse_header(lines[i].strip())
        i += 1
    else:
        warnings.append("Missing #EXTM3U header")

    while i < len(lines):
        line = lines[i].strip()
        if not line or not line.upper().startswith(EXTINF):
            i += 1
            continue

        duration, raw_attrs, name = parse_extinf(line)
        attrs = normalize_aliases(raw_attrs)

        group: List[str] = []
        for g in (attrs.get("group-title") or "").split(";"):
            if g.strip():
                push_unique(group, g.strip())

        http: Optional[HttpHints] = None
        if header.user_agent:
            http = HttpHints(user_agent=header.user_agent)
        kodi_props: Optional[Dict[str, str]] = None

        # scan auxiliary lines until the URL, the next #EXTINF or EOF
        url = ""
        j = i + 1
        while j < len(lines):
            aux = lines[j].strip()
            if not aux:
                j += 1
                continue
            upper = aux.upper()
            if upper.startswith(EXTINF):
                break
            if not aux.startswith("#"):
                url = aux
                break

            if upper.startswith(EXTGRP):
                grp = trim_quotes(aux[len(EXTGRP):].lstrip(":").strip())
                if grp:
                    push_unique(group, grp)
            elif upper.startswith(EXTVLCOPT):
                k, v = _split_directive(aux, EXTVLCOPT)
                k = k.lower()
                if http is None:
                    http = HttpHints()
                if k == "http-user-agent":
                    http.user_agent = v
                elif k == "http-referrer":
                    http.referer = v
                elif k == "http-cookie":
                    http.cookie = v
                elif k.startswith("http-header"):
                    hm = HTTP_HEADER_RX.match(v)
                    if hm:
                        http.headers[hm.group(1).strip()] = hm.group(2)
                else:
                    attrs[f"vlcopt:{k}"] = v
            elif upper.startswith(KODIPROP):
                k, v = _split_directive(aux, KODIPROP)
                if kodi_props is None:
                    kodi_props = {}
                kodi_props[k] = v
            j += 1

        if not url:
            warnings.append(f"No URL found for entry '{name}' at line {i + 1}")
            logger.debug("Dropped entry without URL at line %d", i + 1)
            i = j
            continue

        url, pipe_headers = split_pipe_headers(url)
        if pipe_headers:
            if http is None:
                http = HttpHints()
            # generic map only; dedicated fields are left alone
            http.headers.update(pipe_headers)

        tvg = TvgInfo(
            id=attrs.get("tvg-id"),
            name=attrs.get("tvg-name"),
            logo=attrs.get("tvg-logo"),
            chno=attrs.get("tvg-chno"),
        )
        tvg_type = (attrs.get("tvg-type") or "").lower()

        items.append(
            Entry(
                name=name or attrs.get("tvg-name") or attrs.get("tvg-id") or url,
                url=url,
                duration=duration,
                group=group or None,
                tvg=None if tvg.is_empty() else tvg,
                http=http,
                kodi_props=kodi_props,
                attrs=attrs,
                stream_type=STREAM_TYPES.get(tvg_type),
                audio_track=attrs.get("audio-track"),
                aspect_ratio=attrs.get("aspect-ratio"),
                is_adult=_flag(attrs.get("adult")),
                recording=_flag(attrs.get("tvg-rec")),
            )
        )
        i = j + 1

    logger.debug("Parsed %d IPTV entries (%d warnings)", len(items), len(warnings))
    return Playlist(header=header, items=items, warnings=warnings)
