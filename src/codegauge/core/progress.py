"""Progress reporting: wraps Rich or runs silently."""

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressReporter:
    """Rich progress bar wrapper.

    ``run`` hands a live ``Progress`` to the callback, which
    ``ProjectAnalyzer.analyze(progress=...)`` accepts.
    """

    def __init__(self, console: Console):
        self.console = console

    def run(self, callback):
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            return callback(progress)


class SilentReporter:
    """No-op reporter for tests and --quiet mode."""

    def run(self, callback):
        return callback(None)
