"""CLI command implementations"""

import asyncio
import json
import logging
from typing import Annotated, Optional

import typer

from mdcite.config import Settings, load_config
from mdcite.core.models import ValidationResult
from mdcite.core.pipeline import run_extract, run_validate


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _echo_result(result: ValidationResult) -> None:
    """Print non-valid links of one file and its summary line."""
    typer.echo(result.file)
    for r in result.results:
        if r.status == 'valid':
            continue
        typer.echo(f"  line {r.link.line}: {r.status.upper()} {r.link.full_match}")
        if r.error:
            typer.echo(f"    {r.error}")
        if r.suggestion:
            typer.echo(f"    Suggestion: {r.suggestion}")
        if r.path_conversion:
            typer.echo(f"    Use: {r.path_conversion.recommended}")
    s = result.summary
    typer.echo(f"  {s.total} links - {s.valid} valid, {s.errors} errors, {s.warnings} warnings")


def validate_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to validate")],
    scope: Annotated[Optional[str], typer.Option("--scope", help="Folder indexed for bare-filename links")] = None,
    fmt: Annotated[Optional[str], typer.Option("--format", help="Output format: text or json")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
    """Validate links and anchors; exits 1 if any link has an error."""
    _setup_logging(verbose)
    settings = _settings(overrides={"scope_dir": scope, "output_format": fmt})
    try:
        results = asyncio.run(run_validate(path, settings))
    except OSError as e:
        _fail(f"Cannot validate {path}", e)

    if settings.output_format == 'json':
        typer.echo(json.dumps([r.model_dump(mode='json') for r in results], indent=2, ensure_ascii=False))
    else:
        for result in results:
            _echo_result(result)
        errors = sum(r.summary.errors for r in results)
        typer.echo(f"Validated {len(results)} file(s): {errors} error(s)")

    if any(r.has_errors for r in results):
        raise typer.Exit(1)


def extract_cmd(
    path: Annotated[str, typer.Argument(help="Source file whose links are extracted")],
    scope: Annotated[Optional[str], typer.Option("--scope", help="Folder indexed for bare-filename links")] = None,
    full_files: Annotated[bool, typer.Option("--full-files", help="Extract whole-file links")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
    """Print deduplicated content of the eligible links as JSON."""
    _setup_logging(verbose)
    settings = _settings(overrides={"scope_dir": scope, "full_files": full_files or None})
    try:
        extracted = asyncio.run(run_extract(path, settings))
    except OSError as e:
        _fail(f"Cannot extract from {path}", e)
    typer.echo(extracted.model_dump_json(indent=2))
