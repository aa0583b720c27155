"""Tests for the JSON configuration layer."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from poll_watch.config import DEFAULT_CONFIG, Config
from poll_watch.readers import md5_checksum, read_file
from poll_watch.watcher import DEFAULT_POLL_INTERVAL


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "cfg" / "config.json"


class TestPersistence:
    def test_creates_default_file(self, config_path: Path) -> None:
        cfg = Config(config_path)
        assert config_path.exists()
        assert json.loads(config_path.read_text(encoding="utf-8")) == DEFAULT_CONFIG
        assert cfg.poll_interval == DEFAULT_POLL_INTERVAL
        assert cfg.files == []
        assert not cfg.is_configured()

    def test_stored_values_merge_over_defaults(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text(json.dumps({"poll_interval_seconds": 2}), encoding="utf-8")
        cfg = Config(config_path)
        assert cfg.poll_interval == 2.0
        assert cfg.log_level == "INFO"
        assert cfg.max_log_size_mb == 10

    def test_corrupt_file_falls_back_to_defaults(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text("{not json", encoding="utf-8")
        cfg = Config(config_path)
        assert cfg.poll_interval == DEFAULT_POLL_INTERVAL

    def test_save_round_trip(self, config_path: Path) -> None:
        cfg = Config(config_path)
        cfg.poll_interval = 3
        cfg.add_file("/tmp/a.txt", reader="md5", tag="t")
        cfg.save()
        again = Config(config_path)
        assert again.poll_interval == 3.0
        assert again.files == [{"path": "/tmp/a.txt", "reader": "md5", "tag": "t"}]


class TestAccessors:
    def test_poll_interval_clamped(self, config_path: Path) -> None:
        cfg = Config(config_path)
        cfg.poll_interval = 0
        assert cfg.poll_interval == 0.01

    def test_non_positive_stored_interval_uses_default(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text(json.dumps({"poll_interval_seconds": 0}), encoding="utf-8")
        assert Config(config_path).poll_interval == DEFAULT_POLL_INTERVAL

    def test_file_entries_normalised(self, config_path: Path) -> None:
        cfg = Config(config_path)
        cfg.files = [
            "plain.txt",
            {"path": " spaced.txt ", "reader": "SHA256"},
            {"path": "odd.txt", "reader": "crc32", "tag": "x"},
            {"reader": "raw"},
            42,
        ]
        assert cfg.files == [
            {"path": "plain.txt", "reader": "raw", "tag": ""},
            {"path": "spaced.txt", "reader": "sha256", "tag": ""},
            {"path": "odd.txt", "reader": "raw", "tag": "x"},
        ]

    def test_log_rotation_clamped(self, config_path: Path) -> None:
        cfg = Config(config_path)
        cfg.max_log_size_mb = 0
        cfg.log_backup_count = -5
        assert cfg.max_log_size_mb == 1
        assert cfg.log_backup_count == 0


class TestBuildWatcher:
    def test_registers_configured_files(self, config_path: Path, make_file) -> None:
        a = make_file("a.txt", "a")
        b = make_file("b.bin", b"b" * 100)
        cfg = Config(config_path)
        cfg.poll_interval = 0.5
        cfg.add_file(str(a), tag="text")
        cfg.add_file(str(b), reader="md5", tag="blob")

        watcher = cfg.build_watcher()
        assert watcher.poll_interval == 0.5
        by_tag = {f.tag: f for f in watcher.files}
        assert by_tag["text"].reader is read_file
        assert by_tag["blob"].reader is md5_checksum

    def test_missing_files_skipped(self, config_path: Path, tmp_path: Path, make_file) -> None:
        ok = make_file("ok.txt", "ok")
        cfg = Config(config_path)
        cfg.add_file(str(tmp_path / "missing.txt"))
        cfg.add_file(str(ok))
        watcher = cfg.build_watcher()
        assert [f.path for f in watcher.files] == [ok]


class TestInvalidStoredValues:
    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", "1e300"])
    def test_non_finite_interval_uses_default(
        self, config_path: Path, literal: str
    ) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text(
            '{"poll_interval_seconds": %s}' % literal, encoding="utf-8"
        )
        cfg = Config(config_path)
        assert cfg.poll_interval == DEFAULT_POLL_INTERVAL
        assert cfg.build_watcher().poll_interval == DEFAULT_POLL_INTERVAL

    def test_non_finite_interval_cannot_be_set(self, config_path: Path) -> None:
        cfg = Config(config_path)
        with pytest.raises(ValueError):
            cfg.poll_interval = float("inf")

    @pytest.mark.parametrize("content", ["[]", "42", '"text"', "null"])
    def test_non_object_file_falls_back_to_defaults(
        self, config_path: Path, content: str
    ) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text(content, encoding="utf-8")
        cfg = Config(config_path)
        assert cfg.poll_interval == DEFAULT_POLL_INTERVAL
        assert cfg.files == []
