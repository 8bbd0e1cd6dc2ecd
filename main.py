"""
Main entry point for the complexity estimator.
Runs one analysis from the command line and prints the JSON report.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import TypeAdapter

from complexity_estimator import AnalysisStatus, analyze
from complexity_estimator.shared.config import settings

app = typer.Typer(help="Estimate the time/space complexity of a source snippet.")

logger = logging.getLogger("complexity_estimator.cli")

_REPORT_JSON = TypeAdapter(Any)


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _parse_sizes(raw: Optional[str]):
    if raw is None:
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError as e:
        raise typer.BadParameter(f"sizes must be comma-separated integers: {e}") from e


@app.callback()
def main() -> None:
    """Complexity estimator command line interface."""
    _configure_logging()


@app.command("analyze")
def analyze_command(
    path: str = typer.Argument(..., help="Source file to analyze, or '-' for stdin"),
    no_sampling: bool = typer.Option(False, "--no-sampling", help="Skip cost sampling"),
    sizes: Optional[str] = typer.Option(
        None, "--sizes", help="Comma-separated, strictly ascending sample sizes"
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for synthetic sampling"),
    no_cases: bool = typer.Option(False, "--no-cases", help="Skip best/average/worst split"),
    ceiling_ms: Optional[float] = typer.Option(
        None, "--ceiling-ms", help="Wall-clock budget for sampling in milliseconds"
    ),
) -> None:
    """Analyze PATH and print the report as JSON."""

    if path == "-":
        source = sys.stdin.read()
    else:
        try:
            source = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            typer.echo(f"Error reading {path}: {e}", err=True)
            raise typer.Exit(code=2)

    options = {
        "enable_sampling": not no_sampling,
        "include_case_analysis": not no_cases,
    }
    parsed_sizes = _parse_sizes(sizes)
    if parsed_sizes is not None:
        options["sample_sizes"] = parsed_sizes
    if seed is not None:
        options["seed"] = seed
    if ceiling_ms is not None:
        options["sampling_time_ceiling_ms"] = ceiling_ms

    report = analyze(source, options)
    logger.info(
        "Analysis %s finished: %s (%s)",
        report.metadata.analysis_id,
        report.verdict.time_label,
        report.status.value,
    )

    payload = _REPORT_JSON.dump_python(report, mode="json")
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    if report.status is AnalysisStatus.REJECTED:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
