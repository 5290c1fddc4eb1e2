# emitters/storage.py
"""
Storage artifacts: SQLAlchemy declarative classes per table and the shared
`Enum` type objects. Column kwargs follow the modifier order fixed by
`compiler.type_mapping.MODIFIER_ORDER`.
"""
from __future__ import annotations
import logging
from typing import List, Sequence

from compiler.meta_models import RelationType
from compiler.naming import enum_storage_name
from compiler.resolved import DeclaredRelation, ResolvedEnum, ResolvedField, ResolvedTable
from compiler.type_mapping import (
    AUTOINCREMENT,
    DEFAULT,
    FOREIGN_KEY,
    NOT_NULL,
    PRIMARY_KEY,
    UNIQUE,
    StorageDefault,
)
from emitters.template import ImportSet, file_header, join_blocks, py_literal, render_all

logger = logging.getLogger(__name__)


def emit_enums(enums: Sequence[ResolvedEnum]) -> str:
    imports = ImportSet()
    body: List[str] = []
    if enums:
        imports.add("third_party", "sqlalchemy", "Enum")
    for e in enums:
        values = ", ".join(py_literal(v) for _, v in e.members)
        body.append(f"{e.storage_name} = Enum({values}, name={py_literal(e.name)})")
    return join_blocks(
        file_header("Database enum types."),
        imports.render(),
        "\n".join(body),
        render_all(e.storage_name for e in enums),
    )


def _render_default(default: StorageDefault, imports: ImportSet) -> str:
    if default.kind == "now":
        imports.add("third_party", "sqlalchemy", "func")
        return "func.now()"
    if default.kind in ("true", "false"):
        imports.add("third_party", "sqlalchemy", default.kind)
        return f"{default.kind}()"
    if default.kind == "number":
        imports.add("third_party", "sqlalchemy", "text")
        return f"text({py_literal(default.literal)})"
    return py_literal(default.literal)


def _render_column(field: ResolvedField, imports: ImportSet) -> str:
    expr = field.storage
    args: List[str] = []

    if expr.enum_name is not None:
        name = enum_storage_name(expr.enum_name)
        imports.add("local", "..enums.schema", name)
        args.append(name)
    else:
        imports.add("third_party", "sqlalchemy", expr.type_name)
        if expr.type_args:
            args.append(f"{expr.type_name}({', '.join(str(a) for a in expr.type_args)})")
        else:
            args.append(expr.type_name)

    fk = expr.modifier(FOREIGN_KEY)
    if fk is not None:
        imports.add("third_party", "sqlalchemy", "ForeignKey")
        target = fk.value
        fk_args = [py_literal(f"{target.table}.{target.column}")]
        if target.on_delete:
            fk_args.append(f"ondelete={py_literal(target.on_delete)}")
        if target.on_update:
            fk_args.append(f"onupdate={py_literal(target.on_update)}")
        args.append(f"ForeignKey({', '.join(fk_args)})")

    for mod in expr.modifiers:
        if mod.kind == NOT_NULL:
            args.append("nullable=False")
        elif mod.kind == DEFAULT:
            args.append(f"server_default={_render_default(mod.value, imports)}")
        elif mod.kind == UNIQUE:
            args.append("unique=True")
        elif mod.kind == PRIMARY_KEY:
            args.append("primary_key=True")
        elif mod.kind == AUTOINCREMENT:
            args.append("autoincrement=True")

    imports.add("third_party", "sqlalchemy", "Column")
    return f"    {field.name} = Column({', '.join(args)})"


def _render_table_args(table: ResolvedTable, imports: ImportSet) -> str:
    items: List[str] = []
    if table.composite_key:
        imports.add("third_party", "sqlalchemy", "PrimaryKeyConstraint")
        cols = ", ".join(py_literal(c) for c in table.composite_key)
        items.append(f"PrimaryKeyConstraint({cols})")
    for idx in table.indexes:
        imports.add("third_party", "sqlalchemy", "Index")
        parts = [py_literal(idx.name)] + [py_literal(c) for c in idx.columns]
        if idx.unique:
            parts.append("unique=True")
        if idx.using:
            parts.append(f"postgresql_using={py_literal(idx.using)}")
        if idx.where:
            imports.add("third_party", "sqlalchemy", "text")
            parts.append(f"postgresql_where=text({py_literal(idx.where)})")
        items.append(f"Index({', '.join(parts)})")
    if not items:
        return ""
    body = "".join(f"        {item},\n" for item in items)
    return f"    __table_args__ = (\n{body}    )"


def _render_relation(table: ResolvedTable, rel: DeclaredRelation, imports: ImportSet) -> str:
    target = rel.related.storage_class
    if rel.kind is RelationType.MANY_TO_MANY:
        through = rel.associative_table or "?"
        logger.warning(
            "Relationship %s.%s is many-to-many through %s; not expanded",
            table.table_name, rel.attribute, through,
        )
        return f"    # {rel.attribute}: many-to-many with {target} through {through!r} is not expanded"

    imports.add("third_party", "sqlalchemy.orm", "Mapped", "relationship")
    if rel.related.table != table.table_name:
        imports.add("stdlib", "typing", "TYPE_CHECKING")

    fk = table.definition.relationships[rel.attribute].foreignKey
    kwargs = []
    if rel.kind is RelationType.ONE_TO_MANY:
        imports.add("stdlib", "typing", "List")
        annotation = f'Mapped[List["{target}"]]'
        if fk:
            kwargs.append(f'foreign_keys="{target}.{fk}"')
    else:
        annotation = f'Mapped["{target}"]'
        kwargs.append("uselist=False")
        if fk:
            owner = table.names.storage_class if fk in table.definition.columns else target
            kwargs.append(f'foreign_keys="{owner}.{fk}"')
    kwargs.append('lazy="selectin"')
    return f"    {rel.attribute}: {annotation} = relationship({py_literal(target)}, {', '.join(kwargs)})"


def emit_table(table: ResolvedTable) -> str:
    """Render `<module>/schema.py` for one resolved table."""
    imports = ImportSet()
    imports.add("local", "..base", "Base")

    columns = [_render_column(f, imports) for f in table.fields]
    table_args = _render_table_args(table, imports)
    relations = [_render_relation(table, rel, imports) for rel in table.declared_relations]

    type_checking = ""
    related = sorted({
        rel.related for rel in table.declared_relations
        if rel.kind is not RelationType.MANY_TO_MANY and rel.related.table != table.table_name
    }, key=lambda n: n.module)
    if related:
        lines = "\n".join(f"    from ..{n.module}.schema import {n.storage_class}" for n in related)
        type_checking = f"if TYPE_CHECKING:\n{lines}\n"

    class_lines = [
        f"class {table.names.storage_class}(Base):",
        f"    __tablename__ = {py_literal(table.table_name)}",
    ]
    if table_args:
        class_lines.append(table_args)
    class_lines.append("")
    class_lines.extend(columns)
    if relations:
        class_lines.append("")
        class_lines.append("    # relations")
        class_lines.extend(relations)

    return join_blocks(
        file_header(f"SQLAlchemy table definition for {table.table_name}."),
        imports.render(),
        type_checking,
        "\n".join(class_lines),
        render_all([table.names.storage_class]),
    )
