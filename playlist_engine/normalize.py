#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/normalize.py
# [PROJECT] PlaylistEngine
# [ROLE] Post-parse helpers: provider alias normalization, merge, dedupe
# [VERSION] v1.0
# [UPDATED] 2026-10-19
# ==============================================================================

from __future__ import annotations

import dataclasses
from typing import Dict, List

from playlist_engine.lines import push_unique
from playlist_engine.models import Entry, Playlist, PlaylistHeader, TvgInfo

PROVIDER_ORDER_OFFSET = 1_000_000

# provider spelling -> canonical attribute
KEY_ALIASES = {
    "tvg_id": "tvg-id",
    "channel-id": "tvg-id",
    "channelid": "tvg-id",
    "tvg_name": "tvg-name",
    "channel-name": "tvg-name",
    "channelname": "tvg-name",
    "tvg_logo": "tvg-logo",
    "tvg-logo-square": "tvg-logo",
    "tvg-logo-small": "tvg-logo",
    "logo": "tvg-logo",
    "icon": "tvg-logo",
    "channel-logo": "tvg-logo",
    "group_title": "group-title",
    "group": "group-title",
    "category": "group-title",
    "group-name": "group-title",
    "tvg_language": "tvg-language",
    "language": "tvg-language",
    "lang": "tvg-language",
    "tvg_country": "tvg-country",
    "country": "tvg-country",
    "tvg_type": "tvg-type",
    "type": "tvg-type",
    "content-type": "tvg-type",
    "tvg_year": "tvg-year",
    "year": "tvg-year",
    "tvg_chno": "tvg-chno",
    "channel-number": "tvg-chno",
    "chno": "tvg-chno",
    "timeshift": "catchup",
    "catchup-type": "catchup",
}


def normalize_entry(entry: Entry) -> Entry:
    """Return a copy with alias keys folded onto canonical names (first spelling wins)."""
    attrs: Dict[str, str] = {}
    for k, v in entry.attrs.items():
        target = KEY_ALIASES.get(k.lower(), k.lower())
        if not attrs.get(target):
            attrs[target] = v

    group = list(entry.group or [])
    for g in (attrs.get("group-title") or "").split(";"):
        if g.strip():
            push_unique(group, g.strip())

    old = entry.tvg or TvgInfo()
    tvg = TvgInfo(
        id=attrs.get("tvg-id", old.id),
        name=attrs.get("tvg-name", old.name),
        logo=attrs.get("tvg-logo", old.logo),
        chno=attrs.get("tvg-chno", old.chno),
    )

    return dataclasses.replace(
        entry,
        name=entry.name or tvg.name or tvg.id or entry.url,
        group=group or None,
        tvg=None if tvg.is_empty() else tvg,
        attrs=attrs,
    )


def normalize_playlist(playlist: Playlist) -> Playlist:
    return dataclasses.replace(playlist, items=[normalize_entry(e) for e in playlist.items])


def merge_playlists(playlists: List[Playlist], offset: int = PROVIDER_ORDER_OFFSET) -> Playlist:
    """
    Concatenate playlists, stamping provider_order = index * offset + position
    so the original per-source ordering survives later sorting.
    """
    header = next((p.header for p in playlists if p.header.tvg_urls), None) or PlaylistHeader()
    items: List[Entry] = []
    warnings: List[str] = []
    for idx, playlist in enumerate(playlists):
        for pos, entry in enumerate(playlist.items):
            items.append(dataclasses.replace(entry, provider_order=idx * offset + pos))
        warnings.extend(playlist.warnings)
    return Playlist(header=header, items=items, warnings=warnings)


def deduplicate_entries(entries: List[Entry]) -> List[Entry]:
    """One entry per URL, keeping the lowest provider_order (first seen on ties)."""
    seen: Dict[str, Entry] = {}
    for entry in entries:
        existing = seen.get(entry.url)
        if existing is None:
            seen[entry.url] = entry
            continue
        current = entry.provider_order if entry.provider_order is not None else float("inf")
        kept = existing.provider_order if existing.provider_order is not None else float("inf")
        if current < kept:
            seen[entry.url] = entry
    return list(seen.values())
