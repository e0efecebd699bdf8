#!/usr/bin/env python3
# ==============================================================================
# [FILE] playlist_engine/paths.py
# [PROJECT] PlaylistEngine
# [ROLE] Path helpers for config, cache, outputs, logs, archive
# [VERSION] v1.1
# [UPDATED] 2026-10-19
# ==============================================================================

from pathlib import Path
import shutil
from datetime import datetime
from typing import Optional

BASE_DIR = Path(__file__).resolve().parent.parent


def config_path(filename: str = "playlist_engine.yml") -> Path:
    return BASE_DIR / "config" / filename


def cache_path(url: str) -> Path:
    return BASE_DIR / "cache" / (Path(url.split("?", 1)[0]).name or "playlist.m3u")


def outputs_path(filename: str) -> Path:
    return BASE_DIR / "outputs" / filename


def logs_path(filename: str) -> Path:
    logs = BASE_DIR / "logs"
    logs.mkdir(parents=True, exist_ok=True)
    return logs / filename


def archive_previous() -> Optional[Path]:
    """Copy the previous run's outputs to archive/<stamp>/. None when there was nothing."""
    outputs = BASE_DIR / "outputs"
    previous = [f for f in outputs.iterdir() if f.is_file()] if outputs.exists() else []
    if not previous:
        return None
    archive = BASE_DIR / "archive" / datetime.now().strftime("%Y%m%d_%H%M%S")
    archive.mkdir(parents=True, exist_ok=True)
    for file in previous:
        shutil.copy(file, archive / file.name)
    return archive
