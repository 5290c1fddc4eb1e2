# emitters/seed.py
"""Seed module: per-table row literals and a `seed(session)` entry point."""
from __future__ import annotations
from typing import Any, Dict, List, Sequence

from compiler.naming import constant_name
from compiler.resolved import ResolvedTable
from compiler.type_mapping import TypeTag
from emitters.template import ImportSet, file_header, join_blocks, py_literal, render_all

_CONVERTERS = {
    TypeTag.DATE: ("datetime", "date", "date.fromisoformat({})"),
    TypeTag.DATETIME: ("datetime", "datetime", "datetime.fromisoformat({})"),
    TypeTag.DECIMAL: ("decimal", "Decimal", "Decimal({})"),
}


def _value(tag: TypeTag, value: Any, imports: ImportSet) -> str:
    conv = _CONVERTERS.get(tag)
    if conv is None or value is None or isinstance(value, bool):
        return py_literal(value)
    if tag is TypeTag.DECIMAL:
        value = str(value)
    elif not isinstance(value, str):
        return py_literal(value)
    module, name, template = conv
    imports.add("stdlib", module, name)
    return template.format(py_literal(value))


def _rows(table: ResolvedTable, imports: ImportSet) -> str:
    tags: Dict[str, TypeTag] = {f.name: f.tag for f in table.fields}
    lines = []
    for row in table.seed_rows:
        items = ", ".join(f"{py_literal(k)}: {_value(tags[k], v, imports)}" for k, v in row.items())
        lines.append(f"    {{{items}}},")
    return "\n".join(lines)


def seed_constant(table: ResolvedTable) -> str:
    return f"{constant_name(table.table_name)}_SEED"


def emit_seed(tables: Sequence[ResolvedTable]) -> str:
    seeded = [t for t in tables if t.seed_rows]
    imports = ImportSet()
    imports.add("stdlib", "logging")
    imports.add("third_party", "sqlalchemy", "insert")
    imports.add("third_party", "sqlalchemy.orm", "Session")
    imports.add("stdlib", "typing", "Any", "Dict", "List")

    blocks: List[str] = []
    for t in seeded:
        imports.add("local", f".{t.names.module}.schema", t.names.storage_class)
        rows = _rows(t, imports)
        blocks.append(f"{seed_constant(t)}: List[Dict[str, Any]] = [\n{rows}\n]")

    order = "".join(f"    ({t.names.storage_class}, {seed_constant(t)}),\n" for t in seeded)
    seed_order = f"SEED_ORDER = [\n{order}]" if seeded else "SEED_ORDER: list = []"

    seed_fn = (
        "def seed(session: Session) -> None:\n"
        '    """Insert every seed row in table order and commit once."""\n'
        "    for model, rows in SEED_ORDER:\n"
        "        session.execute(insert(model.__table__), rows)\n"
        '        logger.info("Seeded %d row(s) into %s", len(rows), model.__tablename__)\n'
        "    session.commit()"
    )

    return join_blocks(
        file_header("Seed data for the generated tables."),
        imports.render(),
        'logger = logging.getLogger(__name__)',
        *blocks,
        seed_order,
        seed_fn,
        render_all(["SEED_ORDER", "seed"] + [seed_constant(t) for t in seeded]),
    )
