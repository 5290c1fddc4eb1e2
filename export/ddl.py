# export/ddl.py
"""CREATE TABLE export built from the resolved schema; no database driver needed."""
from __future__ import annotations
import io
import logging
from typing import Any, Dict, List

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    false,
    func,
    text,
    true,
)
from sqlalchemy.dialects import mssql, postgresql, sqlite
from sqlalchemy.schema import CreateIndex, CreateTable

from compiler.resolved import ResolvedField, ResolvedSchema, ResolvedTable
from compiler.type_mapping import (
    AUTOINCREMENT,
    DEFAULT,
    FOREIGN_KEY,
    NOT_NULL,
    PRIMARY_KEY,
    UNIQUE,
    StorageDefault,
)

logger = logging.getLogger(__name__)

DIALECTS = {
    "sqlite": sqlite.dialect,
    "postgres": postgresql.dialect,
    "mssql": mssql.dialect,
}

_SA_TYPES = {
    "String": String,
    "Text": Text,
    "Integer": Integer,
    "Numeric": Numeric,
    "Boolean": Boolean,
    "Date": Date,
    "DateTime": DateTime,
}


def _server_default(default: StorageDefault) -> Any:
    if default.kind == "now":
        return func.now()
    if default.kind == "true":
        return true()
    if default.kind == "false":
        return false()
    if default.kind == "number":
        return text(default.literal)
    return default.literal


def _column(field: ResolvedField, enum_types: Dict[str, SAEnum]) -> Column:
    expr = field.storage
    if expr.enum_name is not None:
        sa_type: Any = enum_types[expr.enum_name]
    else:
        sa_type = _SA_TYPES[expr.type_name](*expr.type_args)

    args: List[Any] = []
    fk = expr.modifier(FOREIGN_KEY)
    if fk is not None:
        target = fk.value
        args.append(ForeignKey(
            f"{target.table}.{target.column}",
            ondelete=target.on_delete,
            onupdate=target.on_update,
        ))

    kwargs: Dict[str, Any] = {}
    kinds = expr.modifier_kinds
    if NOT_NULL in kinds:
        kwargs["nullable"] = False
    if DEFAULT in kinds:
        kwargs["server_default"] = _server_default(expr.modifier(DEFAULT).value)
    if UNIQUE in kinds:
        kwargs["unique"] = True
    if PRIMARY_KEY in kinds:
        kwargs["primary_key"] = True
    if AUTOINCREMENT in kinds:
        kwargs["autoincrement"] = True
    return Column(field.name, sa_type, *args, **kwargs)


def _table_args(table: ResolvedTable) -> List[Any]:
    out: List[Any] = []
    if table.composite_key:
        out.append(PrimaryKeyConstraint(*table.composite_key))
    for idx in table.indexes:
        kwargs: Dict[str, Any] = {"unique": idx.unique}
        if idx.using:
            kwargs["postgresql_using"] = idx.using
        if idx.where:
            kwargs["postgresql_where"] = text(idx.where)
        out.append(Index(idx.name, *idx.columns, **kwargs))
    return out


def build_metadata(schema: ResolvedSchema) -> MetaData:
    metadata = MetaData()
    enum_types = {
        e.name: SAEnum(*(value for _, value in e.members), name=e.name)
        for e in schema.enums
    }
    for t in schema.tables:
        Table(
            t.table_name,
            metadata,
            *(_column(f, enum_types) for f in t.fields),
            *_table_args(t),
        )
    return metadata


def export_ddl(schema: ResolvedSchema, dialect: str) -> str:
    """CREATE TABLE (and CREATE INDEX) statements in dependency order."""
    factory = DIALECTS.get(dialect.lower())
    if factory is None:
        raise ValueError(f"Unknown dialect {dialect!r}. Use one of: {' | '.join(DIALECTS)}")
    di = factory()

    metadata = build_metadata(schema)
    buf = io.StringIO()
    for table in metadata.sorted_tables:
        buf.write(str(CreateTable(table).compile(dialect=di)).strip())
        buf.write(";\n\n")
        for index in sorted(table.indexes, key=lambda i: i.name):
            buf.write(str(CreateIndex(index).compile(dialect=di)).strip())
            buf.write(";\n\n")
    logger.info("Exported DDL for %d tables (dialect=%s)", len(metadata.tables), dialect)
    return buf.getvalue()
