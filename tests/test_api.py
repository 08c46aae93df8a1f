"""Tests for the programmatic entry points."""

import threading

import pytest

import codegauge
from codegauge import AnalysisCache, ConfigurationError


class TestAnalyze:
    def test_analyze_directory(self, nine_valid_one_broken):
        result = codegauge.analyze(nine_valid_one_broken, workers=2)
        assert result.analyzed_count == 9
        assert result.failed_count == 1

    def test_overrides_validated(self, nine_valid_one_broken):
        with pytest.raises(ConfigurationError):
            codegauge.analyze(nine_valid_one_broken, workers=0)

    def test_shared_cache(self, make_project):
        root = make_project({"a.js": "export const a = 1;\n"})
        cache = AnalysisCache()
        codegauge.analyze(root, cache=cache, workers=1)
        second = codegauge.analyze(root, cache=cache, workers=1)
        assert second.cache_hits == 1

    def test_cancel_event(self, nine_valid_one_broken):
        event = threading.Event()
        event.set()
        assert codegauge.analyze(nine_valid_one_broken, cancel_event=event).complete is False

    def test_generate_report(self, make_project):
        root = make_project({"a.js": "export const a = 1;\n"})
        result = codegauge.analyze(root, workers=1)
        assert codegauge.generate_report(result, "csv").startswith("file,status,")
