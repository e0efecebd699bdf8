import unittest

from playlist_engine.m3u import (
    find_name_separator,
    parse_extinf,
    parse_header,
    parse_playlist,
    split_pipe_headers,
)


class TestHeader(unittest.TestCase):
    def test_header_fields(self):
        header = parse_header(
            '#EXTM3U url-tvg="a.xml;b.xml" tvg-shift="2" catchup="default" '
            'catchup-days="7" timeshift="3" x-provider="acme"'
        )
        self.assertEqual(header.tvg_urls, ["a.xml", "b.xml"])
        self.assertEqual(header.tvg_shift, 120)
        self.assertEqual(header.catchup, "default")
        self.assertEqual(header.catchup_days, 7.0)
        self.assertEqual(header.timeshift, 3.0)
        self.assertEqual(header.raw_attrs["x-provider"], "acme")

    def test_tvg_url_fallback_and_fractional_shift(self):
        header = parse_header('#EXTM3U tvg-url="a.xml, b.xml" tvg-shift="-1.5"')
        self.assertEqual(header.tvg_urls, ["a.xml", "b.xml"])
        self.assertEqual(header.tvg_shift, -90)

    def test_overflowing_shift_is_unset(self):
        playlist = parse_playlist('#EXTM3U tvg-shift="1e308"\n#EXTINF:-1,A\nhttp://a\n')
        self.assertIsNone(playlist.header.tvg_shift)
        self.assertEqual(len(playlist.items), 1)

    def test_bare_header(self):
        header = parse_header("#EXTM3U")
        self.assertEqual(header.tvg_urls, [])
        self.assertIsNone(header.tvg_shift)


class TestExtinf(unittest.TestCase):
    def test_comma_inside_quotes_is_not_the_separator(self):
        duration, attrs, name = parse_extinf('#EXTINF:-1 tvg-id="a,b" group-title="X",Channel Name')
        self.assertEqual(duration, -1)
        self.assertEqual(attrs["tvg-id"], "a,b")
        self.assertEqual(attrs["group-title"], "X")
        self.assertEqual(name, "Channel Name")

    def test_missing_duration(self):
        duration, attrs, name = parse_extinf('#EXTINF:tvg-id="x",Name')
        self.assertIsNone(duration)
        self.assertEqual(attrs, {"tvg-id": "x"})
        self.assertEqual(name, "Name")

    def test_fractional_duration_rounds(self):
        duration, _, _ = parse_extinf("#EXTINF:10.6,Clip")
        self.assertEqual(duration, 11)

    def test_unbalanced_quote_uses_first_comma(self):
        self.assertEqual(find_name_separator('-1 tvg-name="Bad,Name'), 16)
        self.assertEqual(find_name_separator("-1 no comma"), -1)

    def test_apostrophe_in_bareword_is_not_a_quote(self):
        duration, attrs, name = parse_extinf("#EXTINF:-1 tvg-id=bob's.us,Bob's TV")
        self.assertEqual(duration, -1)
        self.assertEqual(attrs, {"tvg-id": "bob's.us"})
        self.assertEqual(name, "Bob's TV")

    def test_overflowing_duration_is_unset(self):
        playlist = parse_playlist("#EXTM3U\n#EXTINF:" + "9" * 400 + ",Big\nhttp://a\n")
        self.assertEqual(len(playlist.items), 1)
        self.assertEqual(playlist.items[0].name, "Big")
        self.assertIsNone(playlist.items[0].duration)


class TestPipeHeaders(unittest.TestCase):
    def test_split(self):
        url, headers = split_pipe_headers("http://x/stream.m3u8|X-Token=abc&User-Agent=Foo")
        self.assertEqual(url, "http://x/stream.m3u8")
        self.assertEqual(headers, {"X-Token": "abc", "User-Agent": "Foo"})

    def test_empty_suffix_only_strips(self):
        self.assertEqual(split_pipe_headers("http://x/a|"), ("http://x/a", {}))

    def test_no_pipe(self):
        self.assertEqual(split_pipe_headers("http://x/a"), ("http://x/a", {}))


class TestParsePlaylist(unittest.TestCase):
    def test_basic_entries(self):
        sample = (
            '#EXTM3U url-tvg="https://epg.example/guide.xml"\n'
            '#EXTINF:-1 tvg-id="abc" tvg-name="ABC" tvg-logo="logo.png" tvg-chno="5" group-title="News",ABC News\n'
            "http://example.com/stream1.m3u8\n"
            "#EXTINF:-1,No attributes\n"
            "http://example.com/stream2.ts"
        )
        playlist = parse_playlist(sample)
        self.assertEqual(playlist.warnings, [])
        self.assertEqual(playlist.header.tvg_urls, ["https://epg.example/guide.xml"])
        self.assertEqual(len(playlist.items), 2)

        first, second = playlist.items
        self.assertEqual(first.name, "ABC News")
        self.assertEqual(first.url, "http://example.com/stream1.m3u8")
        self.assertEqual(first.duration, -1)
        self.assertEqual(first.group, ["News"])
        self.assertEqual(first.tvg.id, "abc")
        self.assertEqual(first.tvg.name, "ABC")
        self.assertEqual(first.tvg.logo, "logo.png")
        self.assertEqual(first.tvg.chno, "5")

        self.assertEqual(second.name, "No attributes")
        self.assertIsNone(second.tvg)
        self.assertIsNone(second.group)
        self.assertIsNone(second.http)
        self.assertIsNone(second.kodi_props)

    def test_missing_url_drops_entry_with_warning(self):
        playlist = parse_playlist("#EXTM3U\n#EXTINF:-1,Orphan\n#EXTINF:-1,Next\nhttp://x/stream")
        self.assertEqual(len(playlist.items), 1)
        self.assertEqual(playlist.items[0].name, "Next")
        self.assertEqual(playlist.warnings, ["No URL found for entry 'Orphan' at line 2"])

    def test_missing_url_at_eof(self):
        playlist = parse_playlist("#EXTM3U\n#EXTINF:-1,Last\n#EXTVLCOPT:http-referrer=x\n")
        self.assertEqual(playlist.items, [])
        self.assertEqual(playlist.warnings, ["No URL found for entry 'Last' at line 2"])

    def test_missing_header_is_a_warning(self):
        playlist = parse_playlist("#EXTINF:-1,A\nhttp://a")
        self.assertEqual(playlist.warnings, ["Missing #EXTM3U header"])
        self.assertEqual(len(playlist.items), 1)

    def test_bom_and_crlf(self):
        playlist = parse_playlist("\ufeff#EXTM3U\r\n#EXTINF:-1,A\r\nhttp://a\r\n")
        self.assertEqual(playlist.warnings, [])
        self.assertEqual([e.url for e in playlist.items], ["http://a"])

    def test_garbage_never_raises(self):
        playlist = parse_playlist('\x00 random " text\n#EXTINF:\n')
        self.assertEqual(playlist.items, [])
        self.assertIn("Missing #EXTM3U header", playlist.warnings)

    def test_alias_precedence(self):
        both = parse_playlist('#EXTM3U\n#EXTINF:-1 tvg_id="legacy" tvg-id="canonical",A\nhttp://a')
        self.assertEqual(both.items[0].tvg.id, "canonical")
        legacy = parse_playlist('#EXTM3U\n#EXTINF:-1 tvg_id="legacy" group_title="Old",A\nhttp://a')
        self.assertEqual(legacy.items[0].tvg.id, "legacy")
        self.assertEqual(legacy.items[0].group, ["Old"])

    def test_auxiliary_lines(self):
        sample = (
            "#EXTM3U\n"
            '#EXTINF:-1 group-title="News",Chan\n'
            "#EXTGRP:Local\n"
            "#EXTGRP:News\n"
            "#EXTVLCOPT:http-user-agent=VLC/3.0\n"
            "#EXTVLCOPT:http-referrer=https://ref.example/\n"
            "#EXTVLCOPT:http-cookie=sid=1\n"
            "#EXTVLCOPT:http-header=X-Auth: token\n"
            "#EXTVLCOPT:network-caching=1000\n"
            "#KODIPROP:inputstream.adaptive.manifest_type=hls\n"
            "\n"
            "http://x/chan.m3u8\n"
        )
        entry = parse_playlist(sample).items[0]
        self.assertEqual(entry.group, ["News", "Local"])
        self.assertEqual(entry.http.user_agent, "VLC/3.0")
        self.assertEqual(entry.http.referer, "https://ref.example/")
        self.assertEqual(entry.http.cookie, "sid=1")
        self.assertEqual(entry.http.headers, {"X-Auth": "token"})
        self.assertEqual(entry.attrs["vlcopt:network-caching"], "1000")
        self.assertEqual(entry.kodi_props, {"inputstream.adaptive.manifest_type": "hls"})
        self.assertEqual(entry.url, "http://x/chan.m3u8")

    def test_pipe_headers_go_to_generic_map_only(self):
        sample = (
            "#EXTM3U\n"
            "#EXTINF:-1,Chan\n"
            "#EXTVLCOPT:http-user-agent=VLC/3.0\n"
            "http://x/stream.m3u8|X-Token=abc&User-Agent=Pipe/1.0\n"
        )
        entry = parse_playlist(sample).items[0]
        self.assertEqual(entry.url, "http://x/stream.m3u8")
        self.assertEqual(entry.http.user_agent, "VLC/3.0")
        self.assertEqual(entry.http.headers, {"X-Token": "abc", "User-Agent": "Pipe/1.0"})

    def test_playlist_user_agent_seeds_entries(self):
        playlist = parse_playlist('#EXTM3U user-agent="UA/1"\n#EXTINF:-1,A\nhttp://a\n')
        self.assertEqual(playlist.header.user_agent, "UA/1")
        self.assertEqual(playlist.items[0].http.user_agent, "UA/1")

    def test_typed_fields(self):
        sample = (
            "#EXTM3U\n"
            '#EXTINF:-1 tvg-type="Movie" adult="1" tvg-rec="true" audio-track="eng" aspect-ratio="16:9",Film\n'
            "http://a\n"
            '#EXTINF:-1 tvg-type="documentary" adult="0" tvg-rec="yes",Doc\n'
            "http://b\n"
        )
        film, doc = parse_playlist(sample).items
        self.assertEqual(film.stream_type, "vod")
        self.assertTrue(film.is_adult)
        self.assertTrue(film.recording)
        self.assertEqual(film.audio_track, "eng")
        self.assertEqual(film.aspect_ratio, "16:9")

        self.assertIsNone(doc.stream_type)
        self.assertEqual(doc.attrs["tvg-type"], "documentary")
        self.assertIsNone(doc.is_adult)
        self.assertIsNone(doc.recording)

    def test_multi_group_and_name_fallback(self):
        sample = (
            "#EXTM3U\n"
            '#EXTINF:-1 tvg-name="TN" group-title="A;B;A",\n'
            "http://a\n"
            '#EXTINF:-1 tvg-id="only.id",\n'
            "http://b\n"
            "#EXTINF:-1,\n"
            "http://c\n"
        )
        a, b, c = parse_playlist(sample).items
        self.assertEqual(a.name, "TN")
        self.assertEqual(a.group, ["A", "B"])
        self.assertEqual(b.name, "only.id")
        self.assertEqual(c.name, "http://c")


if __name__ == "__main__":
    unittest.main()
