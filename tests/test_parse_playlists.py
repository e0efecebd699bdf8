import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

import parse_playlists

IPTV_TEXT = (
    '#EXTM3U url-tvg="https://epg.example/guide.xml"\n'
    '#EXTINF:-1 tvg-id="a" group-title="News",A\n'
    "http://x/a\n"
    '#EXTINF:-1 tvg-id="b" group-title="Sports",B\n'
    "http://x/b\n"
    "#EXTINF:-1,Orphan\n"
)
MEDIA_TEXT = "#EXTM3U\n#EXT-X-TARGETDURATION:4\n#EXTINF:4,\na.ts\n#EXTINF:2.5,\nb.ts\n#EXT-X-ENDLIST\n"
MASTER_TEXT = "#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=1000\nlow.m3u8\n"


class TestParsePlaylistsRunner(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.base = Path(self._tmp.name)
        (self.base / "config").mkdir()
        (self.base / "data").mkdir()
        (self.base / "data" / "channels.m3u").write_text(IPTV_TEXT, encoding="utf-8")
        (self.base / "data" / "media.m3u8").write_text(MEDIA_TEXT, encoding="utf-8")

        patcher = mock.patch("playlist_engine.paths.BASE_DIR", self.base)
        patcher.start()
        self.addCleanup(patcher.stop)
        env = mock.patch.dict(os.environ, {"PLAYLIST_FORMAT": "auto"})
        env.start()
        self.addCleanup(env.stop)
        self.addCleanup(self._tmp.cleanup)

    def write_config(self, text: str) -> Path:
        path = self.base / "config" / "playlist_engine.yml"
        path.write_text(text, encoding="utf-8")
        return path

    def read_report(self) -> dict:
        return json.loads((self.base / "outputs" / "report.json").read_text(encoding="utf-8"))

    def test_local_sources(self):
        self.write_config(
            "sources:\n"
            "  - path: data/channels.m3u\n"
            "  - data/media.m3u8\n"
            "  - path: data/missing.m3u\n"
        )
        self.assertEqual(parse_playlists.main(), 0)

        report = self.read_report()
        self.assertEqual(report["counts"], {"sources": 3, "parsed": 2, "failed": 1, "parse_warnings": 1})
        iptv, media, missing = report["sources"]

        self.assertEqual(iptv["format"], "iptv")
        self.assertEqual(iptv["items"], 2)
        self.assertEqual(iptv["groups"], 2)
        self.assertEqual(iptv["epg_urls"], ["https://epg.example/guide.xml"])
        self.assertEqual(len(iptv["warnings"]), 1)

        self.assertEqual(media["format"], "hls")
        self.assertEqual(media["type"], "media")
        self.assertEqual(media["segments"], 2)
        self.assertEqual(media["duration_sec"], 6.5)
        self.assertTrue(media["end_list"])

        self.assertFalse(missing["ok"])
        self.assertEqual(missing["reason"], "exc=FileNotFoundError")
        self.assertIn("source_failed: data/missing.m3u", report["warnings"])

    def test_format_override(self):
        cfg = self.write_config("sources:\n  - path: data/media.m3u8\n")
        with mock.patch.dict(os.environ, {"PLAYLIST_FORMAT": "iptv"}):
            self.assertEqual(parse_playlists.main(cfg), 0)
        self.assertEqual(self.read_report()["sources"][0]["format"], "iptv")

    def test_source_format_beats_environment(self):
        cfg = self.write_config("sources:\n  - path: data/channels.m3u\n    format: hls\n")
        with mock.patch.dict(os.environ, {"PLAYLIST_FORMAT": "iptv"}):
            parse_playlists.main(cfg)
        self.assertEqual(self.read_report()["sources"][0]["format"], "hls")

    def test_url_source(self):
        cfg = self.write_config(
            "sources:\n  - url: https://example.com/live/master.m3u8?token=1\n"
            "pipeline:\n  user_agent: Test/1.0\n  timeout_sec: 7\n"
        )
        with mock.patch("parse_playlists.fetch_text", return_value=MASTER_TEXT) as fetch:
            self.assertEqual(parse_playlists.main(cfg), 0)
        fetch.assert_called_once_with(
            "https://example.com/live/master.m3u8?token=1",
            user_agent="Test/1.0",
            timeout=7,
            cache_file=self.base / "cache" / "master.m3u8",
        )
        source = self.read_report()["sources"][0]
        self.assertEqual(source["type"], "master")
        self.assertEqual(source["variants"], 1)

    def test_url_failure_is_recorded(self):
        cfg = self.write_config("sources:\n  - https://example.com/down.m3u\n")
        with mock.patch("parse_playlists.fetch_text", side_effect=requests.ConnectionError("down")):
            self.assertEqual(parse_playlists.main(cfg), 2)
        report = self.read_report()
        self.assertEqual(report["sources"][0]["reason"], "exc=ConnectionError")

    def test_no_sources(self):
        cfg = self.write_config("pipeline:\n  archive_previous: false\n")
        self.assertEqual(parse_playlists.main(cfg), 2)
        self.assertEqual(self.read_report()["warnings"], ["no_sources_configured"])

    def test_previous_outputs_are_archived(self):
        cfg = self.write_config("sources:\n  - data/channels.m3u\n")
        parse_playlists.main(cfg)
        self.assertFalse((self.base / "archive").exists())
        parse_playlists.main(cfg)
        archived = list((self.base / "archive").glob("*/report.json"))
        self.assertEqual(len(archived), 1)


if __name__ == "__main__":
    unittest.main()
