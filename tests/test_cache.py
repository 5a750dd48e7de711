"""Tests for the content-addressed rule cache."""

import json
from datetime import timedelta
from unittest.mock import patch

import pytest

from data_model import CachedExtraction
from extraction.cache import FileRuleCache


@pytest.fixture
def cache(tmp_path, clock):
    return FileRuleCache(tmp_path / "ai-extractions", clock=clock)


class TestFileRuleCache:
    """Tests for FileRuleCache."""

    def test_missing_entry(self, cache):
        """An unknown hash is a miss."""
        assert cache.get("abc") is None
        assert not cache.exists("abc")

    def test_put_then_get(self, cache, make_rule, fixed_now):
        """A stored entry is read back with its rules and metadata."""
        cache.put(CachedExtraction("abc", [make_rule("R1")], fixed_now, tokens_used=120))

        entry = cache.get("abc")
        assert entry is not None
        assert [r.id for r in entry.rules] == ["R1"]
        assert entry.tokens_used == 120
        assert entry.extracted_at == fixed_now

    def test_empty_rule_list_is_a_valid_entry(self, cache, fixed_now):
        """Entries with no rules are still hits."""
        cache.put(CachedExtraction("empty", [], fixed_now))
        entry = cache.get("empty")
        assert entry is not None
        assert entry.rules == []

    def test_stale_entry_is_absent_and_deleted(self, cache, fixed_now):
        """Entries older than 24 hours are misses and get deleted."""
        cache.put(CachedExtraction("old", [], fixed_now - timedelta(hours=25)))

        assert cache.get("old") is None
        assert not cache.exists("old")

    def test_entry_just_inside_max_age(self, cache, fixed_now):
        """Entries just under 24 hours old are still fresh."""
        cache.put(CachedExtraction("fresh", [], fixed_now - timedelta(hours=23, minutes=59)))
        assert cache.get("fresh") is not None

    def test_corrupt_entry_is_absent(self, cache):
        """Invalid JSON is treated as a miss."""
        cache.directory.mkdir(parents=True)
        (cache.directory / "bad.json").write_text("{not json", encoding="utf-8")
        assert cache.get("bad") is None

    def test_entry_without_timestamp_is_absent(self, cache):
        """Entries without extractedAt are treated as misses."""
        cache.directory.mkdir(parents=True)
        (cache.directory / "nots.json").write_text(
            json.dumps({"sectionHash": "nots", "rules": []}), encoding="utf-8"
        )
        assert cache.get("nots") is None

    def test_delete(self, cache, fixed_now):
        """Deleting removes the entry and is safe to repeat."""
        cache.put(CachedExtraction("abc", [], fixed_now))
        cache.delete("abc")
        assert not cache.exists("abc")
        cache.delete("abc")

    def test_failed_write_leaves_no_files(self, cache, fixed_now):
        """An interrupted write leaves no temporary files behind."""
        with patch("extraction.atomic.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                cache.put(CachedExtraction("abc", [], fixed_now))

        assert list(cache.directory.iterdir()) == []

    def test_failed_write_keeps_previous_entry(self, cache, make_rule, fixed_now):
        """An interrupted write keeps the previous entry readable."""
        cache.put(CachedExtraction("abc", [make_rule("R1")], fixed_now))
        with patch("extraction.atomic.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                cache.put(CachedExtraction("abc", [], fixed_now))

        assert [r.id for r in cache.get("abc").rules] == ["R1"]

    def test_entries_ignore_temp_files(self, cache, fixed_now):
        """Entry listing skips temporary files."""
        cache.put(CachedExtraction("abc", [], fixed_now))
        (cache.directory / ".tmp123.tmp").write_text("{}", encoding="utf-8")
        assert [p.name for p in cache.entries()] == ["abc.json"]

    def test_clear_all(self, cache, fixed_now):
        """Clearing removes every entry."""
        cache.put(CachedExtraction("a", [], fixed_now))
        cache.put(CachedExtraction("b", [], fixed_now))
        assert cache.clear() == 2
        assert cache.entries() == []

    def test_clear_stale_only(self, cache, fixed_now):
        """Clearing stale entries keeps fresh ones."""
        cache.put(CachedExtraction("new", [], fixed_now))
        cache.put(CachedExtraction("old", [], fixed_now - timedelta(days=2)))

        assert cache.clear(stale_only=True) == 1
        assert [p.stem for p in cache.entries()] == ["new"]

    @pytest.mark.parametrize("payload", [
        [],
        "entrada",
        {"sectionHash": "x", "rules": ["bad"], "extractedAt": "2026-01-15T11:00:00Z"},
        {"sectionHash": "x", "rules": [{"id": "R1", "detection": "ai"}], "extractedAt": "2026-01-15T11:00:00Z"},
        {"sectionHash": "x", "rules": {"id": "R1"}, "extractedAt": "2026-01-15T11:00:00Z"},
    ])
    def test_wrong_shape_entry_is_absent_and_removed(self, cache, payload):
        """Valid JSON with the wrong shape is treated as a miss and deleted."""
        cache.directory.mkdir(parents=True)
        (cache.directory / "x.json").write_text(json.dumps(payload), encoding="utf-8")

        assert cache.get("x") is None
        assert not cache.exists("x")

    def test_wrong_shape_entry_can_be_replaced(self, cache, make_rule, fixed_now):
        """A fresh put after a corrupt entry is readable again."""
        cache.directory.mkdir(parents=True)
        (cache.directory / "x.json").write_text("[]", encoding="utf-8")
        assert cache.get("x") is None

        cache.put(CachedExtraction("x", [make_rule("R1")], fixed_now))
        assert [r.id for r in cache.get("x").rules] == ["R1"]
