from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click

from .collector import scan_directory, scan_python_distributions
from .errors import CollectionError, ConfigError
from .identify import identify_file
from .reporting import FORMATS, SUMMARY_MODES, write_report
from .settings import Settings, default_settings, load_settings


def _resolve_settings(
    config: Optional[str],
    summary_mode: Optional[str],
    fmt: Optional[str],
    depth: Optional[int],
    production_only: Optional[bool],
) -> Settings:
    base = default_settings()
    if config:
        base = load_settings(Path(config), base)
    return base.merge(
        summary_mode=summary_mode.lower() if summary_mode else None,
        fmt=fmt.lower() if fmt else None,
        depth=depth,
        production_only=production_only,
    )


@click.group()
def main() -> None:
    """License finder CLI."""


@main.command()
@click.argument(
    "directory",
    required=False,
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=str),
)
@click.option(
    "--python",
    "python_env",
    is_flag=True,
    help="Scan installed Python distributions instead of a node project.",
)
@click.option(
    "--site-packages",
    multiple=True,
    type=click.Path(exists=True, file_okay=False, path_type=str),
    help="Directories to search for Python distributions (defaults to sys.path).",
)
@click.option(
    "--summary",
    "summary_mode",
    type=click.Choice(SUMMARY_MODES, case_sensitive=False),
    help="Append a license summary: off, simple (license names) or detail (modules per license).",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(FORMATS, case_sensitive=False),
    help="Output format for the report (default: standard).",
)
@click.option("--depth", type=click.IntRange(min=0), help="Maximum node_modules nesting depth to walk.")
@click.option(
    "--production/--all",
    "production_only",
    default=None,
    help="Skip modules that are only reachable through devDependencies.",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, writable=True, path_type=str),
    help="Write the report to a file instead of stdout.",
)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="YAML file with default summary, format, depth and production settings.",
)
@click.option(
    "--fail-on-license",
    multiple=True,
    help="Exit non-zero when any module carries this license (repeatable).",
)
@click.option("--verbose", is_flag=True, help="Print scan progress to stderr.")
def scan(
    directory: str,
    python_env: bool,
    site_packages: tuple[str, ...],
    summary_mode: Optional[str],
    fmt: Optional[str],
    depth: Optional[int],
    production_only: Optional[bool],
    output: Optional[str],
    config: Optional[str],
    fail_on_license: tuple[str, ...],
    verbose: bool,
) -> None:
    """Find the licenses of installed dependencies and print a report."""

    try:
        settings = _resolve_settings(config, summary_mode, fmt, depth, production_only)
    except ConfigError as exc:
        click.echo(f"Invalid configuration: {exc}", err=True)
        raise SystemExit(1)

    if verbose:
        click.echo(f"Settings: {json.dumps(settings.as_dict())}", err=True)

    try:
        if python_env:
            records = scan_python_distributions([Path(p) for p in site_packages] or None)
        else:
            records = scan_directory(
                Path(directory), depth=settings.depth, production_only=settings.production_only
            )
    except CollectionError as exc:
        click.echo(str(exc), err=True)
        raise SystemExit(1)

    if verbose:
        undetected = sum(1 for record in records if not record.summary())
        click.echo(f"Scanned {len(records)} module(s); {undetected} without a detected license.", err=True)

    destination = Path(output) if output else None
    result = write_report(records, settings.fmt, destination, settings.summary_mode)
    if not result.ok:
        click.echo(f"Unable to render report: {result.error}", err=True)
        raise SystemExit(1)

    if not destination:
        click.echo(result.output)
    elif verbose:
        click.echo(f"Report written to {destination}", err=True)

    if fail_on_license:
        blocked = set(fail_on_license)
        offenders = [record.id for record in records if blocked.intersection(record.summary())]
        if offenders:
            click.echo(f"Disallowed licenses found in: {', '.join(offenders)}", err=True)
            raise SystemExit(1)


@main.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of human text.")
def identify(files: tuple[str, ...], json_output: bool) -> None:
    """Identify the licenses mentioned in text files (LICENSE, README, ...)."""

    if not files:
        click.echo("No files supplied; nothing to identify.", err=True)
        raise SystemExit(1)

    results = {path: identify_file(Path(path)) for path in files}

    if json_output:
        click.echo(json.dumps(results, indent=2))
    else:
        for path, names in results.items():
            click.echo(f"{path}: {', '.join(names) if names else '(none)'}")


if __name__ == "__main__":
    main()
