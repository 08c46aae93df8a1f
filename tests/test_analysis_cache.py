"""Tests for the fingerprint-keyed result cache."""

import threading
from pathlib import Path

import pytest

from codegauge.cache import (
    ANALYZER_VERSION,
    AnalysisCache,
    cache_version,
    compute_config_hash,
)
from codegauge.config import AnalysisConfig, ThresholdConfig


class TestVersioning:
    def test_config_hash_is_stable(self):
        assert compute_config_hash({"a": 1, "b": 2}) == compute_config_hash({"b": 2, "a": 1})
        assert len(compute_config_hash({})) == 16

    def test_cache_version_tracks_result_options(self):
        base = cache_version(AnalysisConfig())
        assert base.startswith(ANALYZER_VERSION + "-")
        assert cache_version(AnalysisConfig(workers=2)) == base
        changed = AnalysisConfig(thresholds=ThresholdConfig(max_function_lines=10))
        assert cache_version(changed) != base

    def test_from_config(self):
        config = AnalysisConfig(cache_max_entries=5)
        cache = AnalysisCache.from_config(config)
        assert cache.version == cache_version(config)
        assert cache.max_entries == 5
        assert not cache.persistent


class TestGetPut:
    def test_miss(self):
        assert AnalysisCache().get("missing") is None

    def test_put_then_get(self):
        cache = AnalysisCache()
        assert cache.put("fp", "result", "a.js") is True
        assert cache.get("fp") == "result"
        assert "fp" in cache
        assert cache.entry("fp").path == "a.js"

    def test_put_same_version_is_idempotent(self):
        cache = AnalysisCache()
        cache.put("fp", "first")
        assert cache.put("fp", "second") is False
        assert cache.get("fp") == "first"
        assert len(cache) == 1

    def test_rebind_invalidates(self):
        cache = AnalysisCache(version="v1")
        cache.put("fp", "old")
        cache.rebind("v2")
        assert cache.get("fp") is None
        assert "fp" not in cache
        assert cache.put("fp", "new") is True
        assert cache.get("fp") == "new"
        assert cache.entry("fp").version == "v2"

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            AnalysisCache(max_entries=0)


class TestEviction:
    def test_least_recently_used_goes_first(self):
        cache = AnalysisCache(max_entries=2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get("a")
        cache.put("c", 3)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3
        assert len(cache) == 2


class TestGetOrCompute:
    def test_hit_and_miss(self):
        cache = AnalysisCache()
        calls = []

        def compute():
            calls.append(1)
            return "value"

        assert cache.get_or_compute("fp", compute) == ("value", True)
        assert cache.get_or_compute("fp", compute) == ("value", False)
        assert len(calls) == 1

    def test_failure_is_not_stored(self):
        cache = AnalysisCache()

        def boom():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            cache.get_or_compute("fp", boom)
        assert cache.get("fp") is None
        assert cache.get_or_compute("fp", lambda: "ok") == ("ok", True)

    def test_single_flight(self):
        """Concurrent requests for one fingerprint run the computation once."""
        cache = AnalysisCache()
        entered = threading.Event()
        release = threading.Event()
        calls = []
        results = []

        def slow():
            calls.append(1)
            entered.set()
            release.wait(timeout=5)
            return "value"

        def worker():
            results.append(cache.get_or_compute("fp", slow))

        first = threading.Thread(target=worker)
        first.start()
        assert entered.wait(timeout=5)
        others = [threading.Thread(target=worker) for _ in range(4)]
        for thread in others:
            thread.start()
        release.set()
        for thread in [first] + others:
            thread.join(timeout=5)

        assert len(calls) == 1
        assert len(results) == 5
        assert sorted(computed for _, computed in results) == [False] * 4 + [True]
        assert all(value == "value" for value, _ in results)


class TestPersistence:
    def test_round_trip(self, tmp_path: Path):
        cache = AnalysisCache(version="v1", directory=tmp_path / "cache")
        assert cache.persistent
        cache.put("fp", {"score": 95.0}, "a.js")
        cache.close()

        reopened = AnalysisCache(version="v1", directory=tmp_path / "cache")
        assert reopened.load() == 1
        assert reopened.get("fp") == {"score": 95.0}
        reopened.close()

    def test_prunes_missing_paths(self, tmp_path: Path):
        cache = AnalysisCache(version="v1", directory=tmp_path / "cache")
        cache.put("fp-a", "A", "a.js")
        cache.put("fp-b", "B", "b.js")
        cache.close()

        reopened = AnalysisCache(version="v1", directory=tmp_path / "cache")
        assert reopened.load(["a.js"]) == 1
        assert reopened.get("fp-b") is None
        assert reopened.stats()["disk_entries"] == 1
        reopened.close()

    def test_other_version_discarded(self, tmp_path: Path):
        cache = AnalysisCache(version="v1", directory=tmp_path / "cache")
        cache.put("fp", "old", "a.js")
        cache.close()

        reopened = AnalysisCache(version="v2", directory=tmp_path / "cache")
        assert reopened.load() == 0
        assert reopened.get("fp") is None
        assert reopened.stats()["disk_entries"] == 0
        reopened.close()

    def test_clear(self, tmp_path: Path):
        cache = AnalysisCache(directory=tmp_path / "cache")
        cache.put("fp", "value", "a.js")
        cache.clear()
        assert len(cache) == 0
        assert cache.stats()["disk_entries"] == 0
        cache.close()

    def test_unusable_directory_degrades(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        cache = AnalysisCache(directory=blocker / "cache")
        assert not cache.persistent
        cache.put("fp", "value")
        assert cache.get("fp") == "value"

    def test_stats(self):
        stats = AnalysisCache(version="v9", max_entries=3).stats()
        assert stats["entries"] == 0
        assert stats["capacity"] == 3
        assert stats["version"] == "v9"
        assert stats["persistent"] is False
