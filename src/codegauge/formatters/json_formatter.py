"""JSON formatter for codegauge."""

import json
from dataclasses import asdict

from ..core.models import FileAnalysisResult, ProjectAnalysisResult
from .base import BaseFormatter


def _file_dict(result: FileAnalysisResult) -> dict:
    return {
        "path": result.path,
        "language": result.language,
        "fingerprint": result.fingerprint,
        "score": result.score,
        "grade": result.grade,
        "maintainability_index": result.maintainability_index,
        "basic": asdict(result.basic),
        "functions": [asdict(m) for m in result.complexity],
        "classes": [asdict(c) for c in result.ast.classes],
        "imports": [asdict(i) for i in result.ast.imports],
        "issues": [asdict(i) for i in result.issues],
        "rule_counts": dict(result.quality.rule_counts),
    }


def result_to_dict(result: ProjectAnalysisResult) -> dict:
    """Plain-data view of a project result, as emitted by the JSON report."""
    stats = asdict(result.statistics)
    for key in ("issues_by_rule", "issues_by_severity", "complexity_histogram", "score_histogram"):
        stats[key] = dict(stats[key])

    deps = result.dependencies
    return {
        "root": result.root,
        "complete": result.complete,
        "overall_score": result.overall_score,
        "grade": result.grade,
        "summary": {
            "analyzed": result.analyzed_count,
            "failed": result.failed_count,
            "skipped": result.skipped_count,
        },
        "statistics": stats,
        "files": [_file_dict(f) for f in result.files],
        "failed": [asdict(f) for f in result.failed],
        "skipped": [asdict(s) for s in result.skipped],
        "worst_files": [asdict(f) for f in result.worst_files],
        "worst_functions": [asdict(f) for f in result.worst_functions],
        "recommendations": [asdict(r) for r in result.recommendations],
        "dependencies": {
            "edges": [list(edge) for edge in deps.edges],
            "cycles": [list(cycle) for cycle in deps.cycles],
            "orphans": list(deps.orphans),
            "external_packages": dict(deps.external_packages),
            "unresolved": [{"file": path, "specifier": spec} for path, spec in deps.unresolved],
        },
    }


class JsonFormatter(BaseFormatter):
    """Render the result as JSON with sorted keys."""

    def format(self, result: ProjectAnalysisResult) -> str:
        return json.dumps(result_to_dict(result), indent=2, sort_keys=True) + "\n"
