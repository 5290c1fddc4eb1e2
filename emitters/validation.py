# emitters/validation.py
"""
Validation artifacts: Pydantic models for the base, insert and update variants
of every table, plus `str` enums shared by all tables.

Field rendering
  nullable  -> Optional[...] annotation, still required unless also optional
  optional  -> assigned default (the column default when one exists, else
               None, which also widens the annotation to Optional[...])
  default on a required field -> kept in the JSON schema only, the field stays required
"""
from __future__ import annotations
from typing import Any, Dict, List, Sequence, Tuple

from compiler.resolved import ResolvedEnum, ResolvedTable, VariantField
from compiler.type_mapping import ValidationExpression
from emitters.template import ImportSet, file_header, join_blocks, py_literal, render_all

_STDLIB_TYPES = {
    "date": "datetime",
    "datetime": "datetime",
    "Decimal": "decimal",
}
_PYDANTIC_TYPES = ("EmailStr", "HttpUrl")


def emit_enums(enums: Sequence[ResolvedEnum]) -> str:
    imports = ImportSet()
    blocks: List[str] = []
    if enums:
        imports.add("stdlib", "enum", "Enum")
    for e in enums:
        lines = [f"class {e.class_name}(str, Enum):"]
        if e.description:
            lines.append(f"    {py_literal(e.description)}")
            lines.append("")
        lines.extend(f"    {member} = {py_literal(value)}" for member, value in e.members)
        blocks.append("\n".join(lines))
    return join_blocks(
        file_header("Validation enums."),
        imports.render(),
        *blocks,
        render_all(e.class_name for e in enums),
    )


def _default_literal(expr: ValidationExpression, value: Any) -> str:
    if expr.get("type") == "Decimal" and value is not None and not isinstance(value, bool):
        return f"Decimal({py_literal(str(value))})"
    return py_literal(value)


def _field_kwargs(field: VariantField) -> List[Tuple[str, str]]:
    expr = field.expression
    kwargs: List[Tuple[str, str]] = []
    if field.title:
        kwargs.append(("title", py_literal(field.title)))
    if field.description:
        kwargs.append(("description", py_literal(field.description)))
    for rule in expr.constraints:
        if expr.base_type == "HttpUrl" and rule.kind == "min_length":
            continue
        kwargs.append((rule.kind, py_literal(rule.value)))
    if expr.has("default") and not expr.has("optional"):
        extra: Dict[str, Any] = {"default": expr.get("default")}
        kwargs.append(("json_schema_extra", py_literal(extra)))
    return kwargs


def render_field(field: VariantField, imports: ImportSet) -> str:
    """One `name: annotation = value` line for a model body."""
    expr = field.expression
    annotation = expr.base_type
    _import_type(expr, imports)
    if expr.has("nullable") or (expr.has("optional") and not expr.has("default")):
        imports.add("stdlib", "typing", "Optional")
        annotation = f"Optional[{annotation}]"

    kwargs = _field_kwargs(field)
    default = None
    if expr.has("optional"):
        default = _default_literal(expr, expr.get("default")) if expr.has("default") else "None"

    if kwargs:
        imports.add("third_party", "pydantic", "Field")
        args = ([default] if default is not None else []) + [f"{k}={v}" for k, v in kwargs]
        return f"    {field.name}: {annotation} = Field({', '.join(args)})"
    if default is not None:
        return f"    {field.name}: {annotation} = {default}"
    return f"    {field.name}: {annotation}"


def _import_type(expr: ValidationExpression, imports: ImportSet) -> None:
    base = expr.base_type
    if expr.enum_name is not None:
        imports.add("local", "..enums.validation", expr.get("type"))
    elif base in _STDLIB_TYPES:
        imports.add("stdlib", _STDLIB_TYPES[base], base)
    elif base in _PYDANTIC_TYPES:
        imports.add("third_party", "pydantic", base)
    if expr.get("type") == "Decimal" and expr.has("default"):
        imports.add("stdlib", "decimal", "Decimal")


def _render_model(name: str, doc: str, fields: Sequence[VariantField], imports: ImportSet, orm: bool = False) -> str:
    lines = [f"class {name}(BaseModel):", f"    {py_literal(doc)}", ""]
    if orm:
        imports.add("third_party", "pydantic", "ConfigDict")
        lines.append("    model_config = ConfigDict(from_attributes=True)")
        lines.append("")
    if fields:
        lines.extend(render_field(f, imports) for f in fields)
    else:
        lines.append("    pass")
    return "\n".join(lines).rstrip("\n")


def emit_table(table: ResolvedTable) -> str:
    """Render `<module>/validation.py` for one resolved table."""
    n = table.names
    imports = ImportSet()
    imports.add("third_party", "pydantic", "BaseModel")

    base = _render_model(n.schema, f"{table.display_name} record.", table.base_fields, imports, orm=True)
    insert = _render_model(n.insert_schema, f"Payload for creating {table.table_name}.", table.insert_fields, imports)
    update = _render_model(n.update_schema, f"Payload for updating {table.table_name}.", table.update_fields, imports)
    aliases = "\n".join([
        f"{n.type_name} = {n.schema}",
        f"{n.insert_type} = {n.insert_schema}",
        f"{n.update_type} = {n.update_schema}",
    ])
    return join_blocks(
        file_header(f"Pydantic validation schemas for {table.table_name}."),
        imports.render(),
        base,
        insert,
        update,
        aliases,
        render_all([n.schema, n.insert_schema, n.update_schema, n.type_name, n.insert_type, n.update_type]),
    )
