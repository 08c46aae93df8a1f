"""Main analysis command."""

from pathlib import Path
from typing import Optional

import typer

from ..cache import AnalysisCache
from ..core import ProgressReporter, ProjectAnalyzer, SilentReporter
from ..exceptions import CodegaugeError, ConfigurationError
from ..formatters import ReportGenerator
from ..logging_config import setup_logging
from . import app
from ._common import (
    EXIT_CONFIG_ERROR,
    EXIT_FAILED_FILES,
    EXIT_INTERRUPTED,
    cache_directory,
    console,
    resolve_config,
)


@app.command()
def analyze(
    path: Path = typer.Argument(
        Path("."),
        help="Project root or single file to analyze",
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "-f",
        "--format",
        help="Report format: text, json, markdown, csv, github",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "-o",
        "--output",
        help="Write the report to a file instead of stdout",
        dir_okay=False,
    ),
    no_cache: bool = typer.Option(
        False,
        "--no-cache",
        help="Analyze every file without consulting the cache",
    ),
    cache_dir: Optional[Path] = typer.Option(
        None,
        "--cache-dir",
        help="Cache directory (default: .codegauge-cache)",
        file_okay=False,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel workers (default: auto-detect, 1 = sequential)",
        min=1,
        max=64,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors, no progress bar"),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Append the run log (INFO and above) to this file",
        dir_okay=False,
    ),
):
    """
    Analyze a project and print a quality report.

    Exits 1 when any file failed to parse and 2 on configuration errors.

    [bold cyan]Examples:[/bold cyan]

      codegauge analyze src

      codegauge analyze . --format json -o report.json

      codegauge analyze app.ts --no-cache
    """
    logger = setup_logging(
        verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None
    )
    cache = None

    try:
        settings = resolve_config(
            config=config,
            fmt=fmt,
            no_cache=no_cache,
            cache_dir=cache_dir,
            workers=workers,
            verbose=verbose,
            quiet=quiet,
        )
        if settings.cache_enabled:
            cache = AnalysisCache.from_config(settings, directory=cache_directory(settings))

        analyzer = ProjectAnalyzer(path, settings, cache=cache)
        reporter = SilentReporter() if quiet else ProgressReporter(console)
        result = reporter.run(lambda progress: analyzer.analyze(progress=progress))

        report = ReportGenerator().generate(result, settings.output_format)
        if output is not None:
            output.write_text(report, encoding="utf-8")
            if not quiet:
                console.print(f"[green]Report written to[/green] {output}")
        else:
            typer.echo(report, nl=False)

        if result.failed:
            raise typer.Exit(EXIT_FAILED_FILES)

    except typer.Exit:
        raise

    except ConfigurationError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    except CodegaugeError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Cannot write report:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(EXIT_INTERRUPTED)

    finally:
        if cache is not None:
            cache.close()
