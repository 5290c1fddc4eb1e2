# emitters/types.py
"""
Type artifacts. The inferred record types are re-exported from the validation
artifact by name; this layer only adds the surface payload, API envelopes and
relation-aware extensions.
"""
from __future__ import annotations
from typing import List, Sequence

from compiler.naming import constant_name, to_pascal_case
from compiler.relations import INCOMING
from compiler.resolved import ResolvedEnum, ResolvedRelation, ResolvedTable
from emitters.template import ImportSet, file_header, join_blocks, py_literal, render_all

_SURFACE_IMPORTS = {"date": "datetime", "datetime": "datetime"}


def emit_enums(enums: Sequence[ResolvedEnum]) -> str:
    imports = ImportSet()
    exported: List[str] = []
    blocks: List[str] = []
    for e in enums:
        imports.add("local", ".validation", e.class_name)
        exported.append(e.class_name)
        for suffix, pairs in (("LABELS", e.labels), ("COLORS", e.colors), ("ICONS", e.icons)):
            if not pairs:
                continue
            imports.add("stdlib", "typing", "Dict")
            const = f"{constant_name(e.name)}_{suffix}"
            body = "".join(f"    {e.class_name}.{member}: {py_literal(value)},\n" for member, value in pairs)
            blocks.append(f"{const}: Dict[{e.class_name}, str] = {{\n{body}}}")
            exported.append(const)
    return join_blocks(
        file_header("Enum types and display metadata."),
        imports.render(),
        "\n\n".join(blocks),
        render_all(exported),
    )


def _payload(table: ResolvedTable, imports: ImportSet) -> str:
    imports.add("stdlib", "typing", "TypedDict")
    lines = [f"class {table.names.pascal}Payload(TypedDict):"]
    for f in table.fields:
        if f.surface.name in _SURFACE_IMPORTS:
            imports.add("stdlib", _SURFACE_IMPORTS[f.surface.name], f.surface.name)
        if f.surface.nullable:
            imports.add("stdlib", "typing", "Optional")
        lines.append(f"    {f.name}: {f.surface.render()}")
    return "\n".join(lines)


def _envelopes(table: ResolvedTable, imports: ImportSet) -> List[str]:
    n = table.names
    imports.add("third_party", "pydantic", "BaseModel")
    imports.add("stdlib", "typing", "List", "Optional")
    return [
        f"class {n.list_response}(BaseModel):\n"
        f"    data: List[{n.type_name}]\n"
        f"    total: int\n"
        f"    page: int\n"
        f"    limit: int",
        f"class {n.pascal}Response(BaseModel):\n"
        f"    data: {n.type_name}",
        f"class {n.pascal}CreateRequest(BaseModel):\n"
        f"    data: {n.insert_type}",
        f"class {n.pascal}UpdateRequest(BaseModel):\n"
        f"    data: {n.update_type}",
        f"class {n.pascal}DeleteResponse(BaseModel):\n"
        f"    success: bool\n"
        f"    message: Optional[str] = None",
    ]


def _related_type(table: ResolvedTable, rel: ResolvedRelation, imports: ImportSet) -> str:
    name = rel.related.type_name
    if rel.related.table != table.table_name:
        imports.add("local", f"..{rel.related.module}.validation", name)
    if rel.direction == INCOMING:
        return f"List[{name}]"
    return name


def _relation_types(table: ResolvedTable, imports: ImportSet) -> List[str]:
    if not table.relations:
        return []
    n = table.names
    lines = [f"class {n.pascal}WithRelations({n.type_name}):"]
    for rel in table.relations:
        lines.append(f"    {rel.attribute}: Optional[{_related_type(table, rel, imports)}] = None")
    blocks = ["\n".join(lines)]
    for rel in table.outgoing:
        blocks.append(
            f"class {n.pascal}With{to_pascal_case(rel.attribute)}({n.type_name}):\n"
            f"    {rel.attribute}: {_related_type(table, rel, imports)}"
        )
    return blocks


def relation_type_names(table: ResolvedTable) -> List[str]:
    if not table.relations:
        return []
    n = table.names
    return [f"{n.pascal}WithRelations"] + [
        f"{n.pascal}With{to_pascal_case(rel.attribute)}" for rel in table.outgoing
    ]


def emit_table(table: ResolvedTable) -> str:
    """Render `<module>/types.py` for one resolved table."""
    n = table.names
    imports = ImportSet()
    imports.add("local", ".validation", n.type_name, n.insert_type, n.update_type)

    payload = _payload(table, imports)
    envelopes = _envelopes(table, imports)
    relations = _relation_types(table, imports)

    exported = [
        n.type_name, n.insert_type, n.update_type,
        f"{n.pascal}Payload",
        n.list_response,
        f"{n.pascal}Response",
        f"{n.pascal}CreateRequest",
        f"{n.pascal}UpdateRequest",
        f"{n.pascal}DeleteResponse",
    ] + relation_type_names(table)

    return join_blocks(
        file_header(f"Extension types for {table.table_name}."),
        imports.render(),
        payload,
        *envelopes,
        *relations,
        render_all(exported),
    )
