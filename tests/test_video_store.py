"""Tests for data/video_store.py: library CRUD, listing, likes, settings."""

from data.video_store import VideoStore


def _add(store, title="Clip", creator="u1", **kw):
    kw.setdefault("video_url", "https://res.cloudinary.com/demo/video/upload/clip.mp4")
    return store.add_video(title=title, creator=creator, **kw)


class TestVideoStoreCRUD:
    def test_add_and_get_video(self, video_store):
        v = _add(video_store, title="First", category="music", tags="a, b ,,c")
        assert v["title"] == "First"
        assert v["tags"] == ["a", "b", "c"]
        assert v["is_public"] is True
        assert v["views"] == 0
        assert v["likes"] == 0
        assert video_store.get_video(v["id"])["title"] == "First"

    def test_get_nonexistent_returns_none(self, video_store):
        assert video_store.get_video(999) is None

    def test_non_https_urls_stripped(self, video_store):
        v = _add(video_store, thumbnail_url="http://insecure.example/t.jpg",
                 video_url="ftp://x/y.mp4")
        assert v["thumbnail_url"] == ""
        assert v["video_url"] == ""

    def test_tags_as_list(self, video_store):
        assert _add(video_store, tags=["x", " y "])["tags"] == ["x", "y"]

    def test_record_view(self, video_store):
        v = _add(video_store)
        assert video_store.record_view(v["id"])["views"] == 1
        assert video_store.record_view(v["id"])["views"] == 2

    def test_record_view_missing(self, video_store):
        assert video_store.record_view(404) is None

    def test_update_by_owner(self, video_store):
        v = _add(video_store, creator="owner")
        updated = video_store.update_video(v["id"], "owner", title="New", tags="z",
                                           is_public=False)
        assert updated["title"] == "New"
        assert updated["tags"] == ["z"]
        assert updated["is_public"] is False

    def test_update_by_other_user_refused(self, video_store):
        v = _add(video_store, creator="owner")
        assert video_store.update_video(v["id"], "intruder", title="Hacked") is None
        assert video_store.get_video(v["id"])["title"] == "Clip"

    def test_update_ignores_unknown_fields(self, video_store):
        v = _add(video_store, creator="owner")
        updated = video_store.update_video(v["id"], "owner", views=10**6, creator="other")
        assert updated["views"] == 0
        assert updated["creator"] == "owner"

    def test_delete_by_owner(self, video_store):
        v = _add(video_store, creator="owner")
        assert video_store.delete_video(v["id"], "intruder") is False
        assert video_store.delete_video(v["id"], "owner") is True
        assert video_store.get_video(v["id"]) is None


class TestListVideos:
    def test_newest_first_and_pages(self, video_store):
        for i in range(5):
            _add(video_store, title=f"v{i}")
        videos, total_pages = video_store.list_videos(page=1, limit=2)
        assert [v["title"] for v in videos] == ["v4", "v3"]
        assert total_pages == 3
        videos, _ = video_store.list_videos(page=3, limit=2)
        assert [v["title"] for v in videos] == ["v0"]

    def test_trending_orders_by_views(self, video_store):
        a = _add(video_store, title="a")
        b = _add(video_store, title="b")
        for _ in range(3):
            video_store.record_view(a["id"])
        video_store.record_view(b["id"])
        videos, _ = video_store.list_videos(sort="trending")
        assert [v["title"] for v in videos] == ["a", "b"]

    def test_category_filter_and_private_hidden(self, video_store):
        _add(video_store, title="m", category="music")
        _add(video_store, title="g", category="gaming")
        _add(video_store, title="hidden", category="music", is_public=False)
        videos, total_pages = video_store.list_videos(category="Music")
        assert [v["title"] for v in videos] == ["m"]
        assert total_pages == 1

    def test_empty(self, video_store):
        assert video_store.list_videos() == ([], 0)


class TestLikes:
    def test_toggle(self, video_store):
        v = _add(video_store)
        assert video_store.toggle_like(v["id"], "fan")["likes"] == 1
        assert video_store.is_liked_by(v["id"], "fan") is True
        assert video_store.toggle_like(v["id"], "fan")["likes"] == 0
        assert video_store.is_liked_by(v["id"], "fan") is False

    def test_likes_per_user(self, video_store):
        v = _add(video_store)
        video_store.toggle_like(v["id"], "a")
        assert video_store.toggle_like(v["id"], "b")["likes"] == 2

    def test_missing_video(self, video_store):
        assert video_store.toggle_like(12345, "fan") is None

    def test_delete_cascades(self, video_store):
        v = _add(video_store, creator="owner")
        video_store.toggle_like(v["id"], "fan")
        video_store.delete_video(v["id"], "owner")
        count = video_store.conn.execute("SELECT COUNT(*) FROM likes").fetchone()[0]
        assert count == 0


class TestSettings:
    def test_get_default(self, video_store):
        assert video_store.get_setting("missing", "fallback") == "fallback"

    def test_set_and_overwrite(self, video_store):
        video_store.set_setting("k", "1")
        video_store.set_setting("k", "2")
        assert video_store.get_setting("k") == "2"

    def test_delete_setting(self, video_store):
        video_store.set_setting("k", "1")
        assert video_store.delete_setting("k") is True
        assert video_store.delete_setting("k") is False

    def test_delete_settings_prefix_is_literal(self, video_store):
        video_store.set_setting("a_b:1", "x")
        video_store.set_setting("a_b:2", "x")
        video_store.set_setting("aXb:3", "x")
        assert video_store.delete_settings("a_b:") == 2
        assert video_store.get_setting("aXb:3") == "x"

    def test_persists_across_connections(self, tmp_path):
        path = str(tmp_path / "persist.db")
        s1 = VideoStore(db_path=path)
        s1.set_setting("page_token:music|date", "T")
        s1.close()
        s2 = VideoStore(db_path=path)
        assert s2.get_setting("page_token:music|date") == "T"
        s2.close()
