"""ProjectAnalyzer: enumerates files, fans analysis out, aggregates results."""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional, Union

from ..cache import AnalysisCache, cache_version
from ..config import AnalysisConfig
from ..exceptions import AnalysisError, ConfigurationError, InvalidPathError, ParseError
from ..logging_config import get_logger
from ..scanning.discovery import discover_files
from ..scanning.parser import FileParser
from ..scanning.source import SourceFile, read_source
from .aggregation import aggregate
from .models import FailedFile, FileAnalysisResult, FileState, ProjectAnalysisResult
from .pipeline import FileAnalysisPipeline

logger = get_logger(__name__)

Outcome = Union[FileAnalysisResult, FailedFile]


def validate_root(path: Path) -> Path:
    """
    Validate that a project root (directory or single file) can be analyzed.

    Returns:
        Resolved absolute path

    Raises:
        InvalidPathError: If path is invalid
    """
    try:
        resolved = path.resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidPathError(path, f"Cannot resolve path: {e}")

    if not resolved.exists():
        raise InvalidPathError(resolved, "Path does not exist")
    if not os.access(resolved, os.R_OK):
        raise InvalidPathError(resolved, "Path is not readable")
    return resolved


class ProjectAnalyzer:
    """Analyzes every source file under a root.

    Per-file failures (parse errors, unreadable files) are recorded in the
    result and never abort the run. Configuration problems are raised from
    the constructor, before any file is touched.
    """

    def __init__(
        self,
        root: Union[str, Path],
        config: Optional[AnalysisConfig] = None,
        cache: Optional[AnalysisCache] = None,
        parser: Optional[FileParser] = None,
    ):
        config = config if config is not None else AnalysisConfig()
        if not isinstance(config, AnalysisConfig):
            raise ConfigurationError(
                "Expected an AnalysisConfig", details={"type": type(config).__name__}
            )
        self.config = config
        self.root = validate_root(Path(root))
        self.base_dir = self.root if self.root.is_dir() else self.root.parent

        self.parser = parser or FileParser(self.base_dir, config.max_file_size_bytes)
        self.pipeline = FileAnalysisPipeline(self.parser, config)

        self.cache: Optional[AnalysisCache] = None
        self._owns_cache = False
        if config.cache_enabled:
            if cache is None:
                self.cache = AnalysisCache.from_config(config)
                self._owns_cache = True
            else:
                cache.rebind(cache_version(config))
                self.cache = cache

        self.states: dict[str, FileState] = {}
        self._state_lock = threading.Lock()

        logger.debug(
            f"Project root={self.root} workers={config.resolved_workers} "
            f"cache={'on' if self.cache is not None else 'off'}"
        )

    def analyze(
        self, cancel_event: Optional[threading.Event] = None, progress=None
    ) -> ProjectAnalysisResult:
        """
        Run the analysis.

        Args:
            cancel_event: Checked between files; once set, files not yet
                started stay PENDING and the result is marked incomplete
            progress: Optional rich Progress to report per-file advancement

        Returns:
            ProjectAnalysisResult built from every finished file
        """
        config = self.config
        discovery = discover_files(
            self.root,
            config.include_patterns,
            config.exclude_patterns,
            config.max_file_size_bytes,
            config.max_files,
        )
        files = discovery.files
        with self._state_lock:
            self.states = {rel: FileState.PENDING for rel in files}
        logger.info(f"Found {len(files)} files to analyze ({len(discovery.skipped)} skipped)")

        if self.cache is not None and self.cache.persistent:
            self.cache.load(files)

        task = None
        if progress is not None:
            task = progress.add_task("[cyan]Analyzing files...", total=len(files))

        results: list[FileAnalysisResult] = []
        failed: list[FailedFile] = []
        hits = misses = 0

        def record(outcome: Optional[tuple[Outcome, bool]]) -> None:
            nonlocal hits, misses
            if outcome is None:
                return
            value, computed = outcome
            if isinstance(value, FailedFile):
                failed.append(value)
            else:
                results.append(value)
                if self.cache is not None:
                    if computed:
                        misses += 1
                    else:
                        hits += 1
            if task is not None:
                progress.advance(task)

        workers = config.resolved_workers
        if workers == 1 or len(files) <= 1:
            for rel in files:
                if _cancelled(cancel_event):
                    break
                try:
                    outcome = self._analyze_file(rel, cancel_event)
                except Exception as e:
                    outcome = self._unexpected_failure(rel, e)
                record(outcome)
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {}
                for rel in files:
                    if _cancelled(cancel_event):
                        break
                    futures[executor.submit(self._analyze_file, rel, cancel_event)] = rel
                for future in as_completed(futures):
                    rel = futures[future]
                    try:
                        outcome = future.result()
                    except Exception as e:
                        outcome = self._unexpected_failure(rel, e)
                    record(outcome)

        for result in results:
            self._set_state(result.path, FileState.AGGREGATED)

        pending = sum(1 for state in self.states.values() if state == FileState.PENDING)
        complete = pending == 0
        if not complete:
            logger.warning(f"Analysis cancelled with {pending} files not analyzed")

        project = aggregate(
            root=self.root.as_posix(),
            files=results,
            failed=failed,
            skipped=discovery.skipped,
            complete=complete,
            cache_hits=hits,
            cache_misses=misses,
        )
        logger.info(
            f"Analyzed {project.analyzed_count} files, {project.failed_count} failed, "
            f"{project.skipped_count} skipped; overall score {project.overall_score}"
        )
        if self.cache is not None:
            logger.info(f"Cache: {hits} hits, {misses} misses")
        return project

    def _analyze_file(
        self, rel: str, cancel_event: Optional[threading.Event]
    ) -> Optional[tuple[Outcome, bool]]:
        if _cancelled(cancel_event):
            return None

        self._set_state(rel, FileState.PARSING)
        try:
            source = read_source(self.base_dir / rel, self.base_dir, self.config.max_file_size_bytes)
            result, computed = self._lookup(source)
        except ParseError as e:
            self._set_state(rel, FileState.FAILED)
            logger.warning(f"Failed to parse {rel}:{e.line}:{e.column}: {e.reason}")
            return FailedFile(rel, e.reason, e.line, e.column, "ParseError"), True
        except AnalysisError as e:
            self._set_state(rel, FileState.FAILED)
            reason = e.details.get("reason", e.message)
            logger.warning(f"Cannot analyze {rel}: {reason}")
            return FailedFile(rel, reason, error_type=type(e).__name__), True

        self._set_state(rel, FileState.ANALYZING)
        return result, computed

    def _unexpected_failure(self, rel: str, error: Exception) -> tuple[FailedFile, bool]:
        logger.error(f"Unexpected failure analyzing {rel}: {error}", exc_info=True)
        self._set_state(rel, FileState.FAILED)
        return FailedFile(rel, str(error), error_type=type(error).__name__), True

    def _lookup(self, source: SourceFile) -> tuple[FileAnalysisResult, bool]:
        def compute() -> FileAnalysisResult:
            return self.pipeline.run(
                source, on_parsed=lambda: self._set_state(source.path, FileState.ANALYZING)
            )

        if self.cache is None:
            return compute(), True

        result, computed = self.cache.get_or_compute(source.fingerprint, compute, source.path)
        if not computed:
            logger.debug(f"Cache hit: {source.path}")
        return result.relocated(source.path), computed

    def _set_state(self, rel: str, state: FileState) -> None:
        with self._state_lock:
            self.states[rel] = state

    def close(self) -> None:
        """Close a cache this analyzer created itself."""
        if self._owns_cache and self.cache is not None:
            self.cache.close()


def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()
