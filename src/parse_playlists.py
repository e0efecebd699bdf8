"""
PlaylistEngine: Parse Playlists (batch step)

Purpose
- Read the playlist sources listed in config, parse each one as IPTV M3U or
  HLS M3U8 (explicit or auto-detected), and write outputs/report.json with
  per-source counts and parse warnings.

Inputs
- config/playlist_engine.yml (authoritative)
- Local playlist files and/or remote playlist URLs listed under sources

Outputs
- outputs/report.json
- logs/parse_playlists.log
- logs/parse_playlists.error.json (only on error)

Environment
- PLAYLIST_FORMAT: auto | iptv | hls (default: auto); a source's own
  `format` key takes precedence

Change Log
- 1.0.0 (2026-10-19): Initial batch runner over the IPTV/HLS parsers.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional, Union

import requests
import yaml

sys.path.append(str(Path(__file__).resolve().parents[1]))

from playlist_engine import paths  # noqa: E402
from playlist_engine.detector import ParsedPlaylist, parse_playlist_auto  # noqa: E402
from playlist_engine.hls_types import HlsMasterPlaylist, HlsMediaPlaylist  # noqa: E402
from playlist_engine.http import fetch_text  # noqa: E402
from playlist_engine.lines import decode_text  # noqa: E402
from playlist_engine.models import Playlist  # noqa: E402

__app__ = "PlaylistEngine"
__component__ = "parse_playlists"
__version__ = "1.0.0"

FORMAT_CHOICES = ("auto", "iptv", "hls")


# ----------------------------
# Helpers: IO
# ----------------------------

def setup_logging() -> None:
    logging.basicConfig(
        filename=paths.logs_path("parse_playlists.log"),
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )


def load_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def write_json(path: Path, obj: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2, ensure_ascii=False), encoding="utf-8")


def env_format() -> str:
    fmt = os.getenv("PLAYLIST_FORMAT", "auto").strip().lower()
    return fmt if fmt in FORMAT_CHOICES else "auto"


# ----------------------------
# Sources
# ----------------------------

def as_source(raw: Union[str, dict]) -> dict:
    """Plain strings are shorthand for {url: ...} or {path: ...}."""
    if isinstance(raw, dict):
        return raw
    s = str(raw).strip()
    if s.lower().startswith(("http://", "https://")):
        return {"url": s}
    return {"path": s}


def source_label(source: dict) -> str:
    return str(source.get("url") or source.get("path") or "")


def source_format(source: dict, default: str) -> str:
    fmt = str(source.get("format") or default).strip().lower()
    if fmt not in FORMAT_CHOICES:
        logging.warning("Unknown format %r for %s, using auto", fmt, source_label(source))
        return "auto"
    return fmt


def read_source(source: dict, pipeline: dict) -> str:
    if source.get("url"):
        url = str(source["url"])
        return fetch_text(
            url,
            user_agent=source.get("user_agent") or pipeline.get("user_agent"),
            timeout=int(pipeline.get("timeout_sec", 30)),
            cache_file=paths.cache_path(url) if pipeline.get("cache", True) else None,
        )
    path = Path(str(source.get("path") or ""))
    if not path.is_absolute():
        path = paths.BASE_DIR / path
    return decode_text(path.read_bytes())


# ----------------------------
# Report
# ----------------------------

def summarize(parsed: ParsedPlaylist) -> dict:
    pl = parsed.playlist
    out = {"format": parsed.format}

    if isinstance(pl, Playlist):
        groups = {g for e in pl.items for g in (e.group or [])}
        out.update(
            items=len(pl.items),
            groups=len(groups),
            epg_urls=list(pl.header.tvg_urls),
        )
    elif isinstance(pl, HlsMasterPlaylist):
        out.update(
            type=pl.type,
            variants=len(pl.variants),
            renditions=len(pl.renditions or []),
            i_frame_streams=len(pl.i_frame_streams or []),
        )
    elif isinstance(pl, HlsMediaPlaylist):
        out.update(
            type=pl.type,
            segments=len(pl.segments),
            target_duration=pl.target_duration,
            end_list=pl.end_list,
            duration_sec=round(sum(s.duration for s in pl.segments), 3),
        )
    else:
        raise TypeError(f"Unexpected playlist record: {type(pl).__name__}")

    out["warnings"] = list(pl.warnings)
    return out


# ----------------------------
# Main
# ----------------------------

def main(config_path: Optional[Path] = None) -> int:
    cfg = load_yaml(config_path or paths.config_path())
    pipeline = cfg.get("pipeline", {}) or {}
    default_fmt = env_format()

    if bool(pipeline.get("archive_previous", True)):
        archived = paths.archive_previous()
        if archived:
            logging.info("Archived previous outputs -> %s", archived)

    sources = [as_source(s) for s in (cfg.get("sources") or [])]
    report = {
        "timestamp_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "app": __app__,
        "component": __component__,
        "version": __version__,
        "format_override": default_fmt,
        "sources": [],
        "warnings": [],
    }

    if not sources:
        logging.error("No playlist sources configured.")
        report["warnings"].append("no_sources_configured")

    parsed_ok = 0
    for source in sources:
        label = source_label(source)
        try:
            text = read_source(source, pipeline)
        except (OSError, requests.RequestException) as e:
            logging.warning("Source failed: %s :: %s", label, e)
            report["sources"].append({"source": label, "ok": False, "reason": f"exc={type(e).__name__}"})
            report["warnings"].append(f"source_failed: {label}")
            continue

        parsed = parse_playlist_auto(text, source_format(source, default_fmt))
        summary = summarize(parsed)
        for w in summary["warnings"]:
            logging.warning("%s: %s", label, w)
        logging.info("Parsed %s as %s", label, parsed.format)

        report["sources"].append({"source": label, "ok": True, **summary})
        parsed_ok += 1

    report["counts"] = {
        "sources": len(sources),
        "parsed": parsed_ok,
        "failed": len(sources) - parsed_ok,
        "parse_warnings": sum(len(s.get("warnings", [])) for s in report["sources"]),
    }

    out = paths.outputs_path(str(pipeline.get("report_file", "report.json")))
    write_json(out, report)
    print(f"Parsed {parsed_ok}/{len(sources)} playlists → {out}")

    return 0 if parsed_ok else 2


if __name__ == "__main__":
    setup_logging()
    try:
        raise SystemExit(main())
    except SystemExit:
        raise
    except Exception as e:
        err = {
            "timestamp_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "component": __component__,
            "version": __version__,
            "error_type": type(e).__name__,
            "error": str(e),
        }
        write_json(paths.logs_path(f"{__component__}.error.json"), err)
        print(f"FATAL: {type(e).__name__}: {e}", file=sys.stderr)
        raise SystemExit(2)
