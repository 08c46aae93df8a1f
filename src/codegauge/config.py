"""Configuration loading and management for codegauge.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.codegauge.toml)
    3. Project config (./codegauge.toml)
    4. Explicit config file
    5. Environment variables (CODEGAUGE_* prefix)
    6. Keyword overrides (typically CLI flags)

The resulting AnalysisConfig is immutable and is threaded explicitly through
ProjectAnalyzer into every analyzer call; nothing reads configuration from
module-level state.

Example:
    >>> config = load_config(workers=1, thresholds={"maxNestingDepth": 3})
    >>> config.thresholds.max_nesting_depth
    3
"""

from __future__ import annotations

import math
import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

OUTPUT_FORMATS = ("csv", "github", "json", "markdown", "text")
DEFAULT_CACHE_DIR = ".codegauge-cache"
ENV_PREFIX = "CODEGAUGE_"

# Keys from the external configuration object, mapped onto field names.
_ALIASES = {
    "maxFunctionLines": "max_function_lines",
    "maxNestingDepth": "max_nesting_depth",
    "maxCyclomaticComplexity": "max_cyclomatic_complexity",
    "maxCognitiveComplexity": "max_cognitive_complexity",
    "minDuplicateNodes": "min_duplicate_nodes",
    "longFunction": "long_function",
    "deepNesting": "deep_nesting",
    "highComplexity": "high_complexity",
    "magicNumber": "magic_number",
    "duplicateStructure": "duplicate_structure",
    "magicNumberAllowList": "magic_number_allow_list",
    "outputFormat": "output_format",
    "cacheEnabled": "cache_enabled",
    "cachePath": "cache_path",
    "cacheMaxEntries": "cache_max_entries",
    "includePatterns": "include_patterns",
    "excludePatterns": "exclude_patterns",
    "maxFileSizeMb": "max_file_size_mb",
    "maxFiles": "max_files",
}


@dataclass(frozen=True)
class ThresholdConfig:
    """Rule thresholds for the quality score.

    A function violates a rule when its measured value is strictly greater
    than the threshold.

    Attributes:
        max_function_lines: Body line count allowed per function
        max_nesting_depth: Block nesting depth allowed inside a function
        max_cyclomatic_complexity: McCabe complexity allowed per function
        max_cognitive_complexity: Cognitive complexity allowed per function
        min_duplicate_nodes: Smallest function body (in syntax nodes) that
            is considered for duplicated-structure detection
    """

    max_function_lines: int = 50
    max_nesting_depth: int = 1
    max_cyclomatic_complexity: int = 10
    max_cognitive_complexity: int = 15
    min_duplicate_nodes: int = 25

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigError(f"thresholds.{f.name}", value, "must be an integer")
            if value < 0:
                raise InvalidConfigError(f"thresholds.{f.name}", value, "must be non-negative")
        if self.min_duplicate_nodes < 1:
            raise InvalidConfigError(
                "thresholds.min_duplicate_nodes", self.min_duplicate_nodes, "must be at least 1"
            )


@dataclass(frozen=True)
class PenaltyConfig:
    """Points deducted from a file's score per issue of each rule."""

    long_function: float = 5.0
    deep_nesting: float = 5.0
    high_complexity: float = 5.0
    magic_number: float = 1.0
    duplicate_structure: float = 3.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidConfigError(f"penalties.{f.name}", value, "must be a number")
            if not math.isfinite(value) or value < 0:
                raise InvalidConfigError(
                    f"penalties.{f.name}", value, "must be a finite non-negative number"
                )

    def for_rule(self, rule_id: str) -> float:
        """Penalty for a rule id such as ``deep-nesting``."""
        return getattr(self, rule_id.replace("-", "_"))


DEFAULT_THRESHOLDS = ThresholdConfig()
DEFAULT_PENALTIES = PenaltyConfig()


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for one analysis run.

    Attributes:
        Rules:
            thresholds: Per-rule thresholds
            penalties: Per-rule score deductions
            magic_number_allow_list: Numeric literals never reported

        Output:
            output_format: One of OUTPUT_FORMATS
            verbosity: Logging verbosity level

        Caching:
            cache_enabled: Reuse results for unchanged file contents
            cache_path: Directory for the persistent cache (None = memory only)
            cache_max_entries: Capacity bound; least recently used entries go first

        File selection:
            include_patterns: Glob patterns a file must match to be analyzed
            exclude_patterns: Glob patterns that skip a file or directory
            max_file_size_mb: Larger files are skipped
            max_files: Files beyond this count are skipped

        Performance:
            workers: Parallel workers (None = auto-detect, 1 = sequential)
    """

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    penalties: PenaltyConfig = field(default_factory=PenaltyConfig)
    magic_number_allow_list: tuple[float, ...] = (-1, 0, 1, 2)

    output_format: str = "text"
    verbosity: Verbosity = "normal"

    cache_enabled: bool = True
    cache_path: Optional[str] = None
    cache_max_entries: int = 10000

    include_patterns: tuple[str, ...] = (
        "*.js",
        "*.jsx",
        "*.mjs",
        "*.cjs",
        "*.ts",
        "*.tsx",
        "*.mts",
        "*.cts",
    )
    exclude_patterns: tuple[str, ...] = (
        "node_modules/*",
        "bower_components/*",
        "dist/*",
        "build/*",
        "coverage/*",
        ".git/*",
        DEFAULT_CACHE_DIR + "/*",
        "*.min.js",
        "*.bundle.js",
    )
    max_file_size_mb: float = 10.0
    max_files: int = 10000

    workers: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not isinstance(self.thresholds, ThresholdConfig):
            raise InvalidConfigError("thresholds", self.thresholds, "must be a ThresholdConfig")
        if not isinstance(self.penalties, PenaltyConfig):
            raise InvalidConfigError("penalties", self.penalties, "must be a PenaltyConfig")

        # Lists arrive from TOML and kwargs; store tuples so the value stays hashable.
        for name in ("magic_number_allow_list", "include_patterns", "exclude_patterns"):
            value = getattr(self, name)
            if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
                raise InvalidConfigError(name, value, "must be a list")
            object.__setattr__(self, name, tuple(value))

        for number in self.magic_number_allow_list:
            if isinstance(number, bool) or not isinstance(number, (int, float)):
                raise InvalidConfigError("magic_number_allow_list", number, "must contain numbers")
        for pattern in self.include_patterns + self.exclude_patterns:
            if not isinstance(pattern, str) or not pattern:
                raise InvalidConfigError("patterns", pattern, "must be non-empty strings")
        if not self.include_patterns:
            raise InvalidConfigError("include_patterns", (), "must not be empty")

        if self.output_format not in OUTPUT_FORMATS:
            raise InvalidConfigError(
                "output_format", self.output_format, f"expected one of {', '.join(OUTPUT_FORMATS)}"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError("verbosity", self.verbosity, "expected quiet/normal/verbose")

        if not isinstance(self.cache_enabled, bool):
            raise InvalidConfigError("cache_enabled", self.cache_enabled, "must be true or false")
        if isinstance(self.cache_path, os.PathLike):
            object.__setattr__(self, "cache_path", os.fspath(self.cache_path))
        if self.cache_path is not None:
            if not isinstance(self.cache_path, str):
                raise InvalidConfigError("cache_path", self.cache_path, "must be a string")
            if not self.cache_path.strip():
                raise InvalidConfigError("cache_path", self.cache_path, "must not be empty")
        _require_int("cache_max_entries", self.cache_max_entries, minimum=1)

        if self.workers is not None:
            _require_int("workers", self.workers, minimum=1)
        if isinstance(self.max_file_size_mb, bool) or not isinstance(
            self.max_file_size_mb, (int, float)
        ):
            raise InvalidConfigError("max_file_size_mb", self.max_file_size_mb, "must be a number")
        if not math.isfinite(self.max_file_size_mb) or self.max_file_size_mb <= 0:
            raise InvalidConfigError("max_file_size_mb", self.max_file_size_mb, "must be positive")
        _require_int("max_files", self.max_files, minimum=1)

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def resolved_workers(self) -> int:
        """Worker count with auto-detection applied."""
        if self.workers is not None:
            return self.workers
        return min(os.cpu_count() or 4, 8)

    def result_options(self) -> dict[str, Any]:
        """Options that change per-file results.

        Used to version cached results: two configs with equal result
        options can share cache entries.
        """
        return {
            "thresholds": asdict(self.thresholds),
            "penalties": asdict(self.penalties),
            "magic_number_allow_list": sorted(float(n) for n in self.magic_number_allow_list),
        }


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). Both
            snake_case field names and the camelCase option names are
            accepted; ``thresholds`` and ``penalties`` may be dicts.

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is missing or invalid, or any
            value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".codegauge.toml"
    if global_config.exists():
        _merge(merged, _load_toml_file(global_config))

    project_config = Path.cwd() / "codegauge.toml"
    if project_config.exists():
        _merge(merged, _load_toml_file(project_config))

    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge(merged, _load_toml_file(config_file))

    _merge(merged, _load_env_vars())

    if "verbose" in overrides:
        if overrides.pop("verbose"):
            overrides["verbosity"] = "verbose"
    if "quiet" in overrides:
        if overrides.pop("quiet"):
            overrides["verbosity"] = "quiet"

    _merge(merged, overrides)

    merged["thresholds"] = _build_section(ThresholdConfig, merged.get("thresholds"), "thresholds")
    merged["penalties"] = _build_section(PenaltyConfig, merged.get("penalties"), "penalties")

    known = {f.name for f in fields(AnalysisConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise ConfigurationError(
            "Unknown configuration options", details={"options": ", ".join(unknown)}
        )

    return AnalysisConfig(**merged)


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {_ALIASES.get(key, key): value for key, value in data.items()}


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Merge ``source`` into ``target``; nested sections merge key by key."""
    for key, value in _normalize_keys(source).items():
        if key in ("thresholds", "penalties") and isinstance(value, dict):
            section = target.get(key)
            if not isinstance(section, dict):
                section = asdict(section) if section is not None else {}
            section.update(_normalize_keys(value))
            target[key] = section
        else:
            target[key] = value


def _require_int(name: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigError(name, value, "must be an integer")
    if value < minimum:
        raise InvalidConfigError(name, value, f"must be at least {minimum}")


def _build_section(cls: type, value: Any, name: str) -> Any:
    if value is None:
        return cls()
    if isinstance(value, cls):
        return value
    if not isinstance(value, dict):
        raise InvalidConfigError(name, value, "must be a table")
    try:
        return cls(**value)
    except TypeError as e:
        raise ConfigurationError(f"Invalid [{name}] config: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from CODEGAUGE_* environment variables.

    Scalar fields only, e.g. CODEGAUGE_WORKERS=4,
    CODEGAUGE_CACHE_ENABLED=false, CODEGAUGE_OUTPUT_FORMAT=json,
    CODEGAUGE_CACHE_PATH=/tmp/cg. Threshold fields use the
    CODEGAUGE_THRESHOLDS_ prefix, e.g. CODEGAUGE_THRESHOLDS_MAX_NESTING_DEPTH=3.
    """
    result: dict[str, Any] = {}

    for cls, prefix, target in (
        (AnalysisConfig, ENV_PREFIX, None),
        (ThresholdConfig, ENV_PREFIX + "THRESHOLDS_", "thresholds"),
        (PenaltyConfig, ENV_PREFIX + "PENALTIES_", "penalties"),
    ):
        type_hints = get_type_hints(cls)
        for f in fields(cls):
            env_key = f"{prefix}{f.name.upper()}"
            env_value = os.environ.get(env_key)
            if env_value is None:
                continue
            try:
                parsed = _parse_env_value(env_value, type_hints[f.name])
            except ValueError as e:
                raise InvalidConfigError(env_key, env_value, str(e))
            if parsed is None:
                continue
            if target is None:
                result[f.name] = parsed
            else:
                result.setdefault(target, {})[f.name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that cannot be expressed as a single string
    (tuples, nested sections).

    Raises:
        ValueError: If value can't be parsed to the expected type
    """
    origin = getattr(type_hint, "__origin__", None)
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is tuple or type_hint is tuple:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file, wrapping syntax and I/O errors."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
