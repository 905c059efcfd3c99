"""CLI entry point for routegen."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from routegen.codegen import generate
from routegen.config import get_settings
from routegen.errors import GeneratorError
from routegen.loader import SPEC_PATH, load_spec


@click.command()
@click.argument(
    "doc_path",
    required=False,
    default=SPEC_PATH,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("-o", "--output", type=click.Path(file_okay=False, path_type=Path), default=None, help="Output directory for generated modules.")
@click.option("--prefix", default=None, help="Path prefix every tag router is mounted under.")
@click.option("--raw/--no-raw", default=None, help="Also write the unformatted .py.src renders.")
@click.option("--log-level", default=None, type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False), help="Diagnostic verbosity.")
def main(doc_path: Path, output: Path | None, prefix: str | None, raw: bool | None, log_level: str | None):
    """Generate FastAPI routers and handler stubs from an OpenAPI document."""
    overrides = {
        "output_dir": output,
        "mount_prefix": prefix,
        "write_raw": raw,
        "log_level": log_level.upper() if log_level else None,
    }
    base = get_settings()
    try:
        settings = base.model_validate({**base.model_dump(), **{k: v for k, v in overrides.items() if v is not None}})
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    click.echo(f"Parsing {doc_path}...")
    try:
        spec = load_spec(doc_path)
        result = generate(spec, settings)
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e

    click.echo(
        f"Generated {len(result.modules)} tag modules ({result.handler_count} handlers) in {settings.output_dir}"
    )
