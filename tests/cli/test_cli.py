"""Tests for the codegauge command line."""

import json
from pathlib import Path

from typer.testing import CliRunner

from codegauge import __version__
from codegauge.cli import app

runner = CliRunner()


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestAnalyzeCommand:
    def test_clean_project_exits_zero(self, make_project, nested_ifs, tmp_path: Path):
        root = make_project({"check.js": nested_ifs})
        report = tmp_path / "report.json"
        result = runner.invoke(
            app, ["analyze", str(root), "--format", "json", "-o", str(report), "--no-cache", "-q"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(report.read_text())
        assert data["overall_score"] == 95.0
        assert data["summary"]["analyzed"] == 1

    def test_failed_file_exits_one(self, nine_valid_one_broken, tmp_path: Path):
        report = tmp_path / "report.csv"
        result = runner.invoke(
            app,
            ["analyze", str(nine_valid_one_broken), "-f", "csv", "-o", str(report), "--no-cache", "-q"],
        )
        assert result.exit_code == 1
        text = report.read_text()
        assert "src/broken.js,failed" in text
        assert text.count(",analyzed,") == 9

    def test_report_to_stdout(self, make_project):
        root = make_project({"a.js": "export const a = 1;\n"})
        result = runner.invoke(app, ["analyze", str(root), "-f", "markdown", "--no-cache", "-q"])
        assert result.exit_code == 0
        assert "# codegauge report" in result.output

    def test_unknown_format_exits_two(self, make_project):
        root = make_project({"a.js": "let a;\n"})
        result = runner.invoke(app, ["analyze", str(root), "-f", "yaml", "--no-cache"])
        assert result.exit_code == 2

    def test_missing_path_exits_two(self, tmp_path: Path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing"), "--no-cache"])
        assert result.exit_code == 2

    def test_bad_config_file_exits_two(self, make_project, tmp_path: Path):
        root = make_project({"a.js": "let a;\n"})
        config = tmp_path / "cg.toml"
        config.write_text("workers = 0\n")
        result = runner.invoke(app, ["analyze", str(root), "-c", str(config), "--no-cache"])
        assert result.exit_code == 2

    def test_wrong_value_type_exits_two(self, make_project, tmp_path: Path):
        root = make_project({"a.js": "let a;\n"})
        config = tmp_path / "cg.toml"
        config.write_text('max_files = "many"\n')
        result = runner.invoke(app, ["analyze", str(root), "-c", str(config), "--no-cache"])
        assert result.exit_code == 2
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_config_file_thresholds(self, make_project, nested_ifs, tmp_path: Path):
        root = make_project({"check.js": nested_ifs})
        config = tmp_path / "cg.toml"
        config.write_text("[thresholds]\nmaxNestingDepth = 3\n")
        report = tmp_path / "out.json"
        result = runner.invoke(
            app,
            ["analyze", str(root), "-c", str(config), "-f", "json", "-o", str(report), "--no-cache", "-q"],
        )
        assert result.exit_code == 0
        assert json.loads(report.read_text())["overall_score"] == 100.0

    def test_cache_persists_between_runs(self, make_project, tmp_path: Path):
        root = make_project({"a.js": "export const a = 1;\n", "b.js": "export const b = 2;\n"})
        cache_dir = tmp_path / "cache"
        args = ["analyze", str(root), "-f", "json", "--cache-dir", str(cache_dir), "-q"]

        first = runner.invoke(app, args)
        assert first.exit_code == 0
        info = runner.invoke(app, ["cache-info", "--cache-dir", str(cache_dir)])
        assert "Entries: 2" in info.output

        second = runner.invoke(app, args)
        assert second.exit_code == 0
        assert second.output == first.output
        assert json.loads(second.output)["summary"]["analyzed"] == 2

    def test_default_cache_output_is_stable(self, make_project):
        root = make_project({"a.js": "export const a = 1;\n"})
        args = ["analyze", str(root), "-f", "json", "-q"]
        first = runner.invoke(app, args)
        second = runner.invoke(app, args)
        assert first.exit_code == second.exit_code == 0
        assert first.output == second.output
        assert set(json.loads(second.output)["summary"]) == {"analyzed", "failed", "skipped"}

    def test_log_file_records_run(self, make_project, tmp_path: Path):
        root = make_project({"a.js": "export const a = 1;\n"})
        log = tmp_path / "run.log"
        args = ["analyze", str(root), "-f", "json", "--cache-dir", str(tmp_path / "c"), "-q"]
        result = runner.invoke(app, args + ["--log-file", str(log)])
        assert result.exit_code == 0
        text = log.read_text()
        assert "Found 1 files to analyze" in text
        assert "Cache: 0 hits, 1 misses" in text
        assert "Cache" not in result.output


class TestCacheCommands:
    def test_info_and_clear(self, make_project, tmp_path: Path):
        root = make_project({"a.js": "export const a = 1;\n"})
        cache_dir = tmp_path / "cache"
        runner.invoke(app, ["analyze", str(root), "--cache-dir", str(cache_dir), "-q"])

        info = runner.invoke(app, ["cache-info", "--cache-dir", str(cache_dir)])
        assert info.exit_code == 0
        assert "Entries: 1" in info.output

        cleared = runner.invoke(app, ["cache-clear", "--cache-dir", str(cache_dir)])
        assert cleared.exit_code == 0

        info = runner.invoke(app, ["cache-info", "--cache-dir", str(cache_dir)])
        assert "Entries: 0" in info.output
