"""Tests for youtube/normalizer.py: durations, thumbnails, detail fan-out."""

import asyncio

import pytest

from conftest import make_details, make_search_item
from youtube.client import ProviderError
from youtube.normalizer import (
    duration_to_clock, format_duration, generated_avatar, normalize_results, parse_duration,
    pick_thumbnail, placeholder_avatar, to_summary, video_to_summary,
)


class FakeClient:
    """Detail lookups answered from a dict; ids in `fail` raise."""

    def __init__(self, fail=(), missing=()):
        self.fail = set(fail)
        self.missing = set(missing)
        self.detail_calls = []

    async def search(self, params):
        return {}

    async def video_details(self, video_id):
        self.detail_calls.append(video_id)
        await asyncio.sleep(0)
        if video_id in self.fail:
            raise ProviderError("YouTube API error: 500")
        if video_id in self.missing:
            return None
        return make_details(video_id)


class TestDurations:
    @pytest.mark.parametrize("raw, expected", [
        ("PT45S", "0:45"),
        ("PT5S", "0:05"),
        ("PT4M13S", "4:13"),
        ("PT10M", "10:00"),
        ("PT1H5M30S", "1:05:30"),
        ("PT2H", "2:00:00"),
        ("PT1H30S", "1:00:30"),
        ("P1DT1M", "24:01:00"),
        ("P0D", "0:00"),
    ])
    def test_clock(self, raw, expected):
        assert duration_to_clock(raw) == expected

    @pytest.mark.parametrize("raw", ["", "N/A", "5:00", "PTXS", "1H", None, 42])
    def test_unparseable_is_zero(self, raw):
        assert duration_to_clock(raw) == "0:00"

    def test_parse_seconds(self):
        assert parse_duration("PT1H5M30S") == 3930
        assert parse_duration("garbage") is None

    def test_format_duration(self):
        assert format_duration(0) == "0:00"
        assert format_duration(None) == "0:00"
        assert format_duration(3735) == "1:02:15"


class TestThumbnails:
    def test_prefers_highest_resolution(self):
        thumbs = {
            "default": {"url": "https://i.ytimg.com/vi/abc/default.jpg"},
            "high": {"url": "https://i.ytimg.com/vi/abc/hqdefault.jpg"},
            "maxres": {"url": "https://i.ytimg.com/vi/abc/maxresdefault.jpg"},
        }
        assert pick_thumbnail(thumbs).endswith("maxresdefault.jpg")

    def test_falls_back_to_default(self):
        thumbs = {"default": {"url": "https://i.ytimg.com/vi/abc/default.jpg"}}
        assert pick_thumbnail(thumbs) == "https://i.ytimg.com/vi/abc/default.jpg"

    def test_disallowed_host_uses_ytimg(self):
        thumbs = {"high": {"url": "https://evil.example/x.jpg"}}
        assert pick_thumbnail(thumbs, "dQw4w9WgXcQ") == \
            "https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg"

    def test_nothing_available(self):
        assert pick_thumbnail(None, "bad id") == ""


class TestAvatars:
    def test_placeholder_uses_initial(self):
        assert placeholder_avatar("lofi girl") == "https://placehold.co/40?text=L"

    def test_placeholder_empty_name(self):
        assert placeholder_avatar("") == "https://placehold.co/40?text=%3F"

    def test_generated_avatar_quotes_name(self):
        assert generated_avatar("Lo Fi") == \
            "https://ui-avatars.com/api/?name=Lo%20Fi&background=random"


class TestToSummary:
    def test_maps_fields(self):
        item = make_search_item("abc12345678", title="Song", channel="Band")
        summary = to_summary(item, make_details("abc12345678", duration="PT3M7S", views="2500000"))
        assert summary.id == "abc12345678"
        assert summary.title == "Song"
        assert summary.duration == "3:07"
        assert summary.views == 2_500_000
        assert summary.uploader.display_name == "Band"
        assert summary.uploader.avatar == "https://placehold.co/40?text=B"
        assert summary.created_at == "2024-03-01T12:00:00Z"
        assert summary.thumbnail == "https://i.ytimg.com/vi/abc12345678/hqdefault.jpg"

    def test_missing_view_count_is_zero(self):
        details = make_details("abc12345678")
        del details["statistics"]
        assert to_summary(make_search_item("abc12345678"), details).views == 0

    def test_item_without_video_id_rejected(self):
        with pytest.raises(ValueError):
            to_summary({"id": {"kind": "youtube#channel"}, "snippet": {}}, {})

    def test_video_to_summary(self):
        summary = video_to_summary(make_details("xyz12345678", duration="PT1H1S", views="7"))
        assert summary.id == "xyz12345678"
        assert summary.duration == "1:00:01"
        assert summary.uploader.avatar.startswith("https://ui-avatars.com/api/?name=Chan")

    def test_summary_to_dict(self):
        summary = video_to_summary(make_details("xyz12345678"))
        d = summary.to_dict()
        assert d["uploader"]["display_name"] == "Chan"


class TestNormalizeResults:
    def test_all_succeed_in_order(self):
        ids = [f"vid{i:08d}" for i in range(5)]
        client = FakeClient()
        videos = asyncio.run(normalize_results(client, [make_search_item(v) for v in ids]))
        assert [v.id for v in videos] == ids
        assert sorted(client.detail_calls) == ids

    def test_failed_details_dropped_preserving_order(self):
        ids = [f"vid{i:08d}" for i in range(5)]
        client = FakeClient(fail={ids[1], ids[3]})
        videos = asyncio.run(normalize_results(client, [make_search_item(v) for v in ids]))
        assert [v.id for v in videos] == [ids[0], ids[2], ids[4]]

    def test_missing_details_dropped(self):
        client = FakeClient(missing={"gone0000000"})
        items = [make_search_item("gone0000000"), make_search_item("kept0000000")]
        videos = asyncio.run(normalize_results(client, items))
        assert [v.id for v in videos] == ["kept0000000"]

    def test_malformed_item_dropped(self):
        client = FakeClient()
        items = [{"id": {"kind": "youtube#playlist"}}, make_search_item("kept0000000")]
        videos = asyncio.run(normalize_results(client, items))
        assert [v.id for v in videos] == ["kept0000000"]
        assert client.detail_calls == ["kept0000000"]

    def test_lookups_run_concurrently(self):
        started = []
        gate = {}

        class GatedClient(FakeClient):
            async def video_details(self, video_id):
                started.append(video_id)
                await gate["release"].wait()
                return make_details(video_id)

        async def run():
            gate["release"] = asyncio.Event()
            task = asyncio.create_task(normalize_results(
                GatedClient(), [make_search_item("a0000000000"), make_search_item("b0000000000")]))
            for _ in range(5):
                await asyncio.sleep(0)
            # both lookups are in flight before either completes
            assert len(started) == 2
            gate["release"].set()
            return await task

        videos = asyncio.run(run())
        assert len(videos) == 2

    def test_empty_page(self):
        assert asyncio.run(normalize_results(FakeClient(), [])) == []
