"""Shared test fixtures for codegauge tests."""

import os
from pathlib import Path

import pytest

from codegauge.config import AnalysisConfig
from codegauge.core.pipeline import FileAnalysisPipeline
from codegauge.scanning import FileParser, SourceFile


NESTED_IFS = """\
function check(a, b) {
  if (a) {
    if (b) {
      return true;
    }
  }
  return false;
}
"""

INVALID_SOURCE = "function broken( {\n  return ;\n"


def valid_module(index: int) -> str:
    """A small, clean module whose shape varies with ``index``."""
    return (
        f"// module {index}\n"
        f"const LIMIT_{index} = {index + 10};\n"
        f"\n"
        f"export function value{index}(x) {{\n"
        f"  return x + LIMIT_{index};\n"
        f"}}\n"
    )


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path_factory, monkeypatch):
    """Keep user config files and CODEGAUGE_* variables out of every test."""
    home = tmp_path_factory.mktemp("home")
    workdir = tmp_path_factory.mktemp("cwd")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(workdir)
    for key in list(os.environ):
        if key.startswith("CODEGAUGE_"):
            monkeypatch.delenv(key)


@pytest.fixture
def nested_ifs():
    return NESTED_IFS


@pytest.fixture
def invalid_source():
    return INVALID_SOURCE


@pytest.fixture
def file_parser():
    return FileParser()


@pytest.fixture
def parse(file_parser):
    """Parse a snippet into a SyntaxTree: ``parse(code, path="sample.js")``."""

    def _parse(code: str, path: str = "sample.js"):
        return file_parser.parse_source(SourceFile.from_text(path, code))

    return _parse


@pytest.fixture
def analyze_source(file_parser):
    """Run the full per-file pipeline on a snippet."""

    def _analyze(code: str, path: str = "sample.js", config: AnalysisConfig = None):
        pipeline = FileAnalysisPipeline(file_parser, config or AnalysisConfig())
        return pipeline.run(SourceFile.from_text(path, code))

    return _analyze


@pytest.fixture
def make_project(tmp_path):
    """Write ``{relative path: text}`` under a fresh project root."""

    def _make(files: dict, root_name: str = "project") -> Path:
        root = tmp_path / root_name
        root.mkdir(exist_ok=True)
        for rel, text in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def nine_valid_one_broken(make_project):
    files = {f"src/module{i}.js": valid_module(i) for i in range(9)}
    files["src/broken.js"] = INVALID_SOURCE
    return make_project(files)
