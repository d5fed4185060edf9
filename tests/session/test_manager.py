"""Tests for the in-memory session store."""

from mangabot.session.manager import Session, SessionManager
from tests.conftest import make_chapters


class TestSession:
    """Tests for Session chapter lookup."""

    def test_get_chapter_one_based(self) -> None:
        session = Session(title="T", chapters=make_chapters(3))
        assert session.get_chapter(1).number == 1
        assert session.get_chapter(3).number == 3

    def test_get_chapter_out_of_range(self) -> None:
        session = Session(title="T", chapters=make_chapters(3))
        assert session.get_chapter(0) is None
        assert session.get_chapter(-1) is None
        assert session.get_chapter(4) is None

    def test_get_chapter_empty(self) -> None:
        assert Session(title="T").get_chapter(1) is None


class TestSessionManager:
    """Tests for SessionManager get/set/delete."""

    def test_get_missing(self) -> None:
        assert SessionManager().get("messenger:1") is None

    def test_set_and_get(self) -> None:
        store = SessionManager()
        session = Session(title="T", chapters=make_chapters(2))
        store.set("messenger:1", session)
        assert store.get("messenger:1") is session
        assert "messenger:1" in store
        assert len(store) == 1

    def test_set_overwrites(self) -> None:
        store = SessionManager()
        store.set("messenger:1", Session(title="Old"))
        store.set("messenger:1", Session(title="New"))
        assert store.get("messenger:1").title == "New"
        assert len(store) == 1

    def test_delete(self) -> None:
        store = SessionManager()
        store.set("messenger:1", Session(title="T"))
        assert store.delete("messenger:1") is True
        assert store.get("messenger:1") is None

    def test_delete_missing_is_noop(self) -> None:
        store = SessionManager()
        assert store.delete("messenger:1") is False
        assert len(store) == 0

    def test_keys_are_independent(self) -> None:
        store = SessionManager()
        store.set("messenger:1", Session(title="A"))
        store.set("messenger:2", Session(title="B"))
        store.delete("messenger:1")
        assert store.get("messenger:2").title == "B"
