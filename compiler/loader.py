# compiler/loader.py
from __future__ import annotations
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

from jsonschema.exceptions import best_match
from jsonschema.validators import Draft7Validator
from pydantic import ValidationError

from compiler.config import CompilerConfig
from compiler.errors import LoadError
from compiler.meta_models import EnumDefinition, SchemaModel, TableDefinition

logger = logging.getLogger(__name__)

SPEC_DIR = Path(__file__).resolve().parent / "schema_definitions"
ENUM_SPEC = "enumSchema.json"
TABLE_SPEC = "tableSchema.json"


@lru_cache
def _validator(spec_name: str) -> Draft7Validator:
    spec = json.loads((SPEC_DIR / spec_name).read_text(encoding="utf-8"))
    Draft7Validator.check_schema(spec)
    return Draft7Validator(spec)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise LoadError(path, f"cannot read file: {e}") from e
    except json.JSONDecodeError as e:
        raise LoadError(path, f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}") from e


def _check_shape(path: Path, data: Any, spec_name: str) -> None:
    error = best_match(_validator(spec_name).iter_errors(data))
    if error is not None:
        where = "/".join(str(p) for p in error.absolute_path) or "<root>"
        raise LoadError(path, f"schema validation failed at {where}: {error.message}")


def _format_pydantic(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = "/".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def load_enum(path: Path, name: str | None = None, data: Any = None) -> EnumDefinition:
    if data is None:
        data = _read_json(path)
    _check_shape(path, data, ENUM_SPEC)
    try:
        return EnumDefinition.model_validate({**data, "name": name or path.stem})
    except ValidationError as e:
        raise LoadError(path, _format_pydantic(e)) from e


def load_table(path: Path) -> TableDefinition:
    data = _read_json(path)
    _check_shape(path, data, TABLE_SPEC)
    try:
        return TableDefinition.model_validate(data)
    except ValidationError as e:
        raise LoadError(path, _format_pydantic(e)) from e


def _json_files(directory: Path) -> List[Path]:
    # Sorted so the canonical load order does not depend on the filesystem.
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".json")


def load_enums(schema_dir: Path) -> Tuple[EnumDefinition, ...]:
    enums_dir = schema_dir / "enums"
    if enums_dir.is_dir():
        return tuple(load_enum(p) for p in _json_files(enums_dir))

    legacy = schema_dir / "enums.json"
    if legacy.is_file():
        logger.warning("No enums/ directory under %s, falling back to legacy enums.json", schema_dir)
        data = _read_json(legacy)
        if not isinstance(data, dict):
            raise LoadError(legacy, "expected an object mapping enum name to enum descriptor")
        entries: Dict[str, Any] = data
        return tuple(load_enum(legacy, name=name, data=cfg) for name, cfg in entries.items())

    logger.warning("No enum configurations found under %s", schema_dir)
    return ()


def load_tables(schema_dir: Path) -> Tuple[TableDefinition, ...]:
    tables_dir = schema_dir / "tables"
    if not tables_dir.is_dir():
        logger.warning("No table configurations found under %s", schema_dir)
        return ()
    return tuple(load_table(p) for p in _json_files(tables_dir))


def load_schema_model(config: CompilerConfig) -> SchemaModel:
    schema_dir = Path(config.schema_dir)
    if not schema_dir.is_dir():
        raise LoadError(schema_dir, "schema directory not found")

    enums = load_enums(schema_dir)
    tables = load_tables(schema_dir)
    logger.info("Loaded %d enums and %d tables from %s", len(enums), len(tables), schema_dir)
    return SchemaModel(enums=enums, tables=tables)


class DirectorySchemaLoader:
    """Loads enum and table descriptors from <schema_dir>/enums and <schema_dir>/tables."""

    def __init__(self, config: CompilerConfig):
        self.config = config

    def load(self) -> SchemaModel:
        return load_schema_model(self.config)
