# compiler/pipeline.py
"""
validate -> resolve + emit per table (worker pool) -> barrier -> aggregate.

Nothing is aggregated unless every table emitted; failures from all tables are
reported together.
"""
from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Sequence, Tuple

from compiler.config import CompilerConfig
from compiler.errors import CompilationError, EmissionError
from compiler.meta_models import EnumDefinition, SchemaModel, TableDefinition
from compiler.resolved import (
    ResolvedEnum,
    ResolvedSchema,
    ResolvedTable,
    check_module_names,
    resolve_enums,
    resolve_table,
)
from compiler.validate import validate_model
from core.ports import TableEmitter
from emitters import storage as storage_emitter
from emitters import types as types_emitter
from emitters import validation as validation_emitter
from emitters.aggregate import aggregate
from emitters.seed import emit_seed
from emitters.support import emit_base, emit_index, emit_utility_types

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KindEmitter:
    kind: str
    emit_table: Callable[[ResolvedTable], str]
    emit_enums: Callable[[Sequence[ResolvedEnum]], str]


EMITTERS: Dict[str, TableEmitter] = {
    "validation": KindEmitter("validation", validation_emitter.emit_table, validation_emitter.emit_enums),
    "types": KindEmitter("types", types_emitter.emit_table, types_emitter.emit_enums),
    "schema": KindEmitter("schema", storage_emitter.emit_table, storage_emitter.emit_enums),
}


@dataclass(frozen=True)
class CompilationResult:
    artifacts: Dict[str, str]
    schema: ResolvedSchema

    @property
    def paths(self) -> List[str]:
        return list(self.artifacts)


def artifact_path(config: CompilerConfig, *parts: str) -> str:
    return "/".join((config.package_dir,) + parts)


def _emit_one(
    table: TableDefinition,
    all_tables: Sequence[TableDefinition],
    enums: Mapping[str, EnumDefinition],
    kinds: Sequence[str],
) -> Tuple[ResolvedTable, Dict[str, str]]:
    resolved = resolve_table(table, all_tables, enums)
    texts = {kind: EMITTERS[kind].emit_table(resolved) for kind in kinds}
    logger.debug("Emitted %s for %s", ", ".join(kinds), table.tableName)
    return resolved, texts


def _emit_tables(
    model: SchemaModel,
    config: CompilerConfig,
) -> List[Tuple[ResolvedTable, Dict[str, str]]]:
    enums = model.enum_map()
    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        futures = [
            executor.submit(_emit_one, t, model.tables, enums, config.kinds)
            for t in model.tables
        ]
    # leaving the executor waits for every job

    results: List[Tuple[ResolvedTable, Dict[str, str]]] = []
    failures: List[EmissionError] = []
    for future in futures:
        try:
            results.append(future.result())
        except EmissionError as e:
            logger.error("Emission failed: %s", e)
            failures.append(e)
    if failures:
        raise CompilationError(failures)
    return results


def compile_schema(model: SchemaModel, config: CompilerConfig) -> CompilationResult:
    """Compile a loaded model into an ordered mapping of logical path -> generated text."""
    validate_model(model)
    try:
        check_module_names(model)
    except EmissionError as e:
        raise CompilationError([e]) from e

    emitted = _emit_tables(model, config)
    tables = tuple(resolved for resolved, _ in emitted)
    enums = resolve_enums(model)
    kinds = config.kinds

    artifacts: Dict[str, str] = {}
    artifacts[artifact_path(config, "__init__.py")] = emit_index("Generated models package.", [])
    if "schema" in kinds:
        artifacts[artifact_path(config, "base.py")] = emit_base()
    if "types" in kinds:
        artifacts[artifact_path(config, "utils", "types.py")] = emit_utility_types()
        artifacts[artifact_path(config, "utils", "__init__.py")] = emit_index("Utility exports.", ["types"])

    for kind in kinds:
        artifacts[artifact_path(config, "enums", f"{kind}.py")] = EMITTERS[kind].emit_enums(enums)
    artifacts[artifact_path(config, "enums", "__init__.py")] = emit_index("Enum exports.", kinds)

    for resolved, texts in emitted:
        module = resolved.names.module
        for kind in kinds:
            artifacts[artifact_path(config, module, f"{kind}.py")] = texts[kind]
        artifacts[artifact_path(config, module, "__init__.py")] = emit_index(
            f"{resolved.names.pascal} model exports.", kinds
        )

    for kind in kinds:
        artifacts[artifact_path(config, f"{kind}.py")] = aggregate(tables, kind)

    if config.emit_seed and "schema" in kinds:
        artifacts[artifact_path(config, "seed.py")] = emit_seed(tables)

    logger.info("Compiled %d tables into %d artifacts", len(tables), len(artifacts))
    return CompilationResult(artifacts=artifacts, schema=ResolvedSchema(enums=enums, tables=tables))
