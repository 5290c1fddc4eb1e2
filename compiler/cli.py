# compiler/cli.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError

from compiler.config import CompilerConfig
from compiler.drift import diff_artifacts
from compiler.errors import CompilationError, LoadError, SchemaCompilerError, SchemaValidationError
from compiler.loader import DirectorySchemaLoader
from compiler.meta_models import SchemaModel
from compiler.pipeline import CompilationResult, compile_schema
from compiler.settings import get_settings
from compiler.validate import validate_model
from compiler.writer import write_artifacts
from export.ddl import DIALECTS, export_ddl

app = typer.Typer(help="Schema compiler: JSON table/enum descriptors -> SQLAlchemy, Pydantic and type modules")
logger = logging.getLogger("compiler.cli")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides LOG_LEVEL"),
) -> None:
    settings = get_settings()
    level = (log_level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format="%(levelname)s %(name)s: %(message)s")


# ---------------------------
# Core utilities
# ---------------------------
def _config(schema_dir: Optional[Path], package: Optional[str], workers: Optional[int], only: Optional[List[str]] = None) -> CompilerConfig:
    try:
        return get_settings().to_compiler_config(
            schema_dir=schema_dir,
            output_package=package,
            max_workers=workers,
            kinds=tuple(only) if only else None,
        )
    except ValidationError as e:
        typer.echo(f"❌ Invalid options: {e}")
        raise typer.Exit(code=2)


def _load(config: CompilerConfig) -> SchemaModel:
    try:
        return DirectorySchemaLoader(config).load()
    except LoadError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=1)


def _compile(model: SchemaModel, config: CompilerConfig) -> CompilationResult:
    try:
        return compile_schema(model, config)
    except SchemaValidationError as e:
        typer.echo(f"❌ {e}")
        for issue in e.issues:
            typer.echo(f"   - {issue}")
        raise typer.Exit(code=1)
    except CompilationError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=1)


# ---------------------------
# Commands
# ---------------------------
@app.command(help="Load and validate every descriptor without emitting anything.")
def validate(
    schema_dir: Optional[Path] = typer.Option(None, help="Descriptor root (enums/ and tables/)"),
) -> None:
    config = _config(schema_dir, None, None)
    model = _load(config)
    try:
        validate_model(model)
    except SchemaValidationError as e:
        typer.echo(f"❌ {e}")
        for issue in e.issues:
            typer.echo(f"   - {issue}")
        raise typer.Exit(code=1)
    typer.echo(f"✅ {len(model.tables)} tables and {len(model.enums)} enums are valid.")


@app.command(help="Compile descriptors and write the generated package.")
def generate(
    schema_dir: Optional[Path] = typer.Option(None, help="Descriptor root (enums/ and tables/)"),
    out_dir: Optional[Path] = typer.Option(None, help="Directory that receives the generated package"),
    package: Optional[str] = typer.Option(None, help="Generated package name"),
    only: Optional[List[str]] = typer.Option(None, help="Limit to artifact kinds: validation | types | schema"),
    workers: Optional[int] = typer.Option(None, help="Emission worker pool size"),
    check: bool = typer.Option(False, "--check", help="Report drift instead of writing; exit 1 when out of date"),
) -> None:
    config = _config(schema_dir, package, workers, only)
    target = out_dir or Path(get_settings().OUTPUT_DIR)
    result = _compile(_load(config), config)

    if check:
        diff = diff_artifacts(result.artifacts, target, config.package_dir)
        typer.echo(diff.format_plan())
        if diff.has_changes:
            raise typer.Exit(code=1)
        return

    written = write_artifacts(result.artifacts, target)
    typer.echo(f"✅ {len(result.artifacts)} artifacts generated under {target} ({len(written)} written)")


@app.command(name="export-ddl", help="Export CREATE TABLE DDL for the current descriptors.")
def export_ddl_command(
    dialect: Optional[str] = typer.Option(None, help="Target dialect: sqlite | postgres | mssql"),
    out: Path = typer.Option(Path("schema.sql"), help="Output .sql file path"),
    schema_dir: Optional[Path] = typer.Option(None, help="Descriptor root (enums/ and tables/)"),
) -> None:
    dialect = (dialect or get_settings().DIALECT).lower()
    if dialect not in DIALECTS:
        typer.echo(f"❌ Unknown dialect. Use one of: {' | '.join(DIALECTS)}")
        raise typer.Exit(code=2)

    config = _config(schema_dir, None, None, ["schema"])
    result = _compile(_load(config), config)
    out.write_text(export_ddl(result.schema, dialect), encoding="utf-8")
    typer.echo(f"✅ DDL written to {out} (dialect={dialect})")


def run() -> None:
    try:
        app()
    except SchemaCompilerError as e:
        logger.error("%s", e)
        raise SystemExit(1)


if __name__ == "__main__":
    run()
