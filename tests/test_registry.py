"""Tests for FileRegistry."""

from __future__ import annotations

from poll_watch.files import WatchedFile
from poll_watch.registry import FileRegistry


class TestFileRegistry:
    def test_add_and_find(self, make_file) -> None:
        reg = FileRegistry()
        a = WatchedFile(make_file("a.txt", "a"), tag="x")
        b = WatchedFile(make_file("b.txt", "b"), tag="y")
        reg.add(a)
        reg.add(b)
        assert len(reg) == 2
        assert reg.find(lambda f: f.tag == "x") == [a]
        assert reg.find(lambda f: f.path.name == "b.txt") == [b]
        assert reg.find(lambda f: False) == []

    def test_same_path_registered_twice(self, make_file) -> None:
        path = make_file("a.txt", "a")
        reg = FileRegistry()
        first = WatchedFile(path, tag="one")
        second = WatchedFile(path, tag="two")
        reg.add(first)
        reg.add(second)
        assert len(reg.find(lambda f: f.path == path)) == 2

    def test_remove_is_by_identity(self, make_file) -> None:
        path = make_file("a.txt", "a")
        reg = FileRegistry()
        first = WatchedFile(path)
        second = WatchedFile(path)
        reg.add(first)
        reg.add(second)
        reg.remove(first)
        assert first not in reg
        assert second in reg
        assert reg.snapshot() == [second]

    def test_remove_unknown_is_noop(self, make_file) -> None:
        reg = FileRegistry()
        a = WatchedFile(make_file("a.txt", "a"))
        reg.remove(a)
        assert len(reg) == 0

    def test_snapshot_is_a_copy(self, make_file) -> None:
        reg = FileRegistry()
        a = WatchedFile(make_file("a.txt", "a"))
        reg.add(a)
        snap = reg.snapshot()
        reg.remove(a)
        assert snap == [a]
        assert len(reg) == 0
