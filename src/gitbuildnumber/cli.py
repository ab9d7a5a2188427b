"""Command-line interface for gitbuildnumber."""

import json
import logging
import re
import sys
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from gitbuildnumber.errors import BuildNumberError
from gitbuildnumber.extraction import BuildNumberExtractor
from gitbuildnumber.extraction.extractor import to_properties
from gitbuildnumber.incremental import ResultCache
from gitbuildnumber.models import FIELD_NAMES, UNKNOWN_VALUES, ExtractionConfig

app = typer.Typer(
    name="gitbuildnumber",
    help="Build numbers from Git metadata - revision, branch, tags, commit count and dirty state",
    add_completion=False,
)
# properties go to stdout, everything else to stderr
console = Console(stderr=True)


class OutputFormat(str, Enum):
    properties = "properties"
    json = "json"
    env = "env"


class Engine(str, Enum):
    jinja = "jinja"
    node = "node"
    disabled = "disabled"


def _configure_logging(verbose: bool) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO if verbose else logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _env_name(property_name: str) -> str:
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", property_name).replace(".", "_").upper()


def render(result: Dict[str, str], namespace: str, output_format: OutputFormat) -> str:
    """Render extracted properties for a build tool to pick up."""
    properties = to_properties(result, namespace)
    if output_format is OutputFormat.json:
        return json.dumps(properties, indent=2)
    if output_format is OutputFormat.env:
        return "\n".join(f"{_env_name(name)}={value}" for name, value in properties.items())
    return "\n".join(f"{name}={value}" for name, value in properties.items())


@app.command()
def extract(
    repo_path: Path = typer.Argument(Path("."), help="Directory inside the Git repository"),
    namespace: Optional[str] = typer.Option(None, "--namespace", help="Property name prefix [default: git]"),
    dirty_value: Optional[str] = typer.Option(None, "--dirty-value", help="Value of `dirty` for a dirty tree [default: dirty]"),
    short_revision_length: Optional[int] = typer.Option(None, "--short-revision-length", help="Length of abbreviated ids, 0-40 [default: 7]"),
    git_date_format: Optional[str] = typer.Option(None, "--git-date-format", help="Pattern for authorDate/commitDate [default: yyyy-MM-dd]"),
    build_date_format: Optional[str] = typer.Option(None, "--build-date-format", help="Pattern for buildDate [default: yyyy-MM-dd HH:mm:ss]"),
    time_zone: Optional[str] = typer.Option(None, "--time-zone", help="Time zone for both date patterns [default: local]"),
    since_inclusive: Optional[str] = typer.Option(None, "--since-inclusive", help="Count commits since this tag/commit, counting it"),
    since_exclusive: Optional[str] = typer.Option(None, "--since-exclusive", help="Count commits since this tag/commit, not counting it"),
    build_number_format: Optional[str] = typer.Option(None, "--build-number-format", "-f", help="Expression composing buildNumber"),
    engine: Optional[Engine] = typer.Option(None, "--engine", help="Engine evaluating --build-number-format [default: jinja]"),
    output_format: OutputFormat = typer.Option(OutputFormat.properties, "--output-format", "-F", help="Output format"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write properties to this file"),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Reuse results while HEAD, branch, tags, dirty state and options are unchanged"),
    clear_cache: bool = typer.Option(False, "--clear-cache", help="Drop the cached result of this repository before extracting"),
    strict: bool = typer.Option(True, "--strict/--no-strict", help="Fail on errors instead of publishing UNKNOWN_* values"),
    skip: bool = typer.Option(False, "--skip", help="Skip extraction"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Extract Git metadata and print the build number properties."""
    _configure_logging(verbose)

    options = {
        "repository_directory": repo_path,
        "namespace": namespace,
        "dirty_value": dirty_value,
        "short_revision_length": short_revision_length,
        "git_date_format": git_date_format,
        "build_date_format": build_date_format,
        "date_format_time_zone": time_zone,
        "count_commits_since_inclusive": since_inclusive,
        "count_commits_since_exclusive": since_exclusive,
        "build_number_format": build_number_format,
        "build_number_engine": engine.value if engine else None,
    }
    try:
        config = ExtractionConfig(
            skip=skip,
            verbose=verbose,
            **{key: value for key, value in options.items() if value is not None},
        )
    except ValidationError as e:
        console.print(f"[bold red]Invalid options:[/bold red] {e}")
        raise typer.Exit(1)

    if config.skip:
        console.print("Extraction is skipped by configuration.")
        return

    extractor = BuildNumberExtractor(config)
    try:
        result = None
        cache = ResultCache(cache_dir) if cache_dir else None
        if cache is not None:
            repo_key = str(config.repository_directory.resolve())
            if clear_cache and cache.invalidate(repo_key):
                console.print(f"Cleared cached result for {repo_key}")
            params = config.cache_key(extractor.head_summary())
            result = cache.get(repo_key, params)

        if result is None:
            result = extractor.extract()
            if cache is not None:
                cache.put(repo_key, params, result)

    except BuildNumberError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if strict:
            raise typer.Exit(1)
        result = dict(UNKNOWN_VALUES)

    text = render(result, config.namespace, output_format)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n")
        console.print(f"[bold green]✓[/bold green] Saved to {output}")
    else:
        typer.echo(text)

    if verbose:
        console.print(f"[bold blue]BUILDNUMBER:[/bold blue] {result['buildNumber']}")


@app.command()
def fields(
    namespace: str = typer.Option("git", "--namespace", help="Property name prefix"),
) -> None:
    """List the published property names."""
    table = Table(title="Build number properties")
    table.add_column("Property", style="cyan")
    table.add_column("Value on failure", style="dim")

    for name in FIELD_NAMES:
        table.add_row(f"{namespace}.{name}", UNKNOWN_VALUES[name])

    Console().print(table)


if __name__ == "__main__":
    app()
