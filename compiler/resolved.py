# compiler/resolved.py
"""
The resolved intermediate representation every emitter consumes.

Names, per-column target expressions, the base/insert/update field variants and
relation attributes are derived here exactly once, so the storage, validation
and types artifacts cannot drift apart.
"""
from __future__ import annotations
import keyword
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from compiler.errors import EmissionError
from compiler.meta_models import EnumDefinition, RelationType, SchemaModel, TableDefinition
from compiler.naming import (
    enum_member_name,
    enum_storage_name,
    singularize,
    to_pascal_case,
)
from compiler.relations import (
    INCOMING,
    OUTGOING,
    check_references,
    resolve_incoming,
    resolve_outgoing,
)
from compiler.type_mapping import (
    StorageExpression,
    SurfaceType,
    TypeTag,
    ValidationExpression,
    resolve_enum,
    to_storage_type,
    to_surface_type,
    to_validation_expression,
    type_tag,
)


@dataclass(frozen=True)
class TableNames:
    table: str
    module: str
    pascal: str
    storage_class: str
    schema: str
    insert_schema: str
    update_schema: str
    type_name: str
    insert_type: str
    update_type: str
    list_response: str

    @classmethod
    def for_table(cls, table_name: str) -> "TableNames":
        singular = singularize(table_name)
        pascal = to_pascal_case(singular)
        return cls(
            table=table_name,
            module=singular,
            pascal=pascal,
            storage_class=to_pascal_case(table_name),
            schema=f"{pascal}Schema",
            insert_schema=f"{pascal}InsertSchema",
            update_schema=f"{pascal}UpdateSchema",
            type_name=pascal,
            insert_type=f"{pascal}Insert",
            update_type=f"{pascal}Update",
            list_response=f"{to_pascal_case(table_name)}ListResponse",
        )


@dataclass(frozen=True)
class ResolvedField:
    name: str
    tag: TypeTag
    storage: StorageExpression
    validation: ValidationExpression
    surface: SurfaceType
    is_primary_key: bool


@dataclass(frozen=True)
class VariantField:
    name: str
    expression: ValidationExpression
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class ResolvedIndex:
    name: str
    columns: Tuple[str, ...]
    unique: bool = False
    using: Optional[str] = None
    where: Optional[str] = None


@dataclass(frozen=True)
class ResolvedRelation:
    attribute: str
    direction: str
    related: TableNames
    cardinality: str
    columns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DeclaredRelation:
    attribute: str
    kind: RelationType
    related: TableNames
    associative_table: Optional[str] = None


@dataclass(frozen=True)
class ResolvedEnum:
    name: str
    class_name: str
    storage_name: str
    members: Tuple[Tuple[str, str], ...]
    labels: Tuple[Tuple[str, str], ...] = ()
    colors: Tuple[Tuple[str, str], ...] = ()
    icons: Tuple[Tuple[str, str], ...] = ()
    description: Optional[str] = None

    @classmethod
    def from_definition(cls, enum: EnumDefinition) -> "ResolvedEnum":
        def meta(mapping: Dict[str, str]) -> Tuple[Tuple[str, str], ...]:
            # metadata follows value order; keys that are not values are dropped
            return tuple((enum_member_name(v), mapping[v]) for v in enum.values if v in mapping)

        return cls(
            name=enum.name,
            class_name=to_pascal_case(enum.name),
            storage_name=enum_storage_name(enum.name),
            members=tuple((enum_member_name(v), v) for v in enum.values),
            labels=meta(enum.labels),
            colors=meta(enum.colors),
            icons=meta(enum.icons),
            description=enum.description,
        )


@dataclass(frozen=True)
class ResolvedTable:
    definition: TableDefinition
    names: TableNames
    fields: Tuple[ResolvedField, ...]
    base_fields: Tuple[VariantField, ...]
    insert_fields: Tuple[VariantField, ...]
    update_fields: Tuple[VariantField, ...]
    composite_key: Tuple[str, ...]
    indexes: Tuple[ResolvedIndex, ...]
    declared_relations: Tuple[DeclaredRelation, ...]
    outgoing: Tuple[ResolvedRelation, ...]
    incoming: Tuple[ResolvedRelation, ...]
    used_enums: Tuple[str, ...]
    seed_rows: Tuple[Dict[str, Any], ...]

    @property
    def table_name(self) -> str:
        return self.definition.tableName

    @property
    def display_name(self) -> str:
        return self.definition.displayName or self.definition.tableName.replace("_", " ").title()

    @property
    def relations(self) -> Tuple[ResolvedRelation, ...]:
        return self.outgoing + self.incoming


@dataclass(frozen=True)
class ResolvedSchema:
    enums: Tuple[ResolvedEnum, ...]
    tables: Tuple[ResolvedTable, ...]

    def enum(self, name: str) -> ResolvedEnum:
        for e in self.enums:
            if e.name == name:
                return e
        raise KeyError(name)


# ------------------------------ variant derivation ------------------------------

def _base_variant(table: TableDefinition, fields: Sequence[ResolvedField]) -> Tuple[VariantField, ...]:
    return tuple(
        VariantField(
            name=f.name,
            expression=f.validation,
            title=table.columns[f.name].ui.label,
            description=table.columns[f.name].ui.helpText,
        )
        for f in fields
    )


def _insert_variant(table: TableDefinition, fields: Sequence[ResolvedField]) -> Tuple[VariantField, ...]:
    """Drop auto-generated columns; nullable, defaulted or not-required columns become optional."""
    out: List[VariantField] = []
    for f in fields:
        col = table.columns[f.name]
        if col.is_auto_generated:
            continue
        expr = f.validation
        widen = (
            expr.has("nullable")
            or expr.has("default")
            or col.validation.required is False
        )
        if widen:
            expr = expr.with_rule("optional")
        out.append(VariantField(f.name, expr))
    return tuple(out)


def _update_variant(
    fields: Sequence[ResolvedField],
    insert_fields: Sequence[VariantField],
) -> Tuple[VariantField, ...]:
    """Every insert field optional without defaults; primary-key columns stay required."""
    inserted = {vf.name: vf for vf in insert_fields}
    out: List[VariantField] = []
    for f in fields:
        if f.is_primary_key:
            out.append(VariantField(f.name, f.validation.without("default", "optional", "nullable")))
        elif f.name in inserted:
            expr = inserted[f.name].expression.without("default").with_rule("optional")
            out.append(VariantField(f.name, expr))
    return tuple(out)


# ------------------------------ relation attributes ------------------------------

def _unique_attribute(base: str, used: Set[str]) -> str:
    name = base
    i = 2
    while name in used:
        name = f"{base}_{i}"
        i += 1
    used.add(name)
    return name


def _outgoing_relations(table: TableDefinition, used: Set[str]) -> Tuple[ResolvedRelation, ...]:
    """
    Attribute priority:
      1) singularized referenced table (bookings.guest_id -> guest)
      2) column name with trailing '_id' stripped
      3) numbered suffix
    """
    out: List[ResolvedRelation] = []
    for ref in resolve_outgoing(table):
        base = singularize(ref.target_table)
        if base in used and ref.column_name.endswith("_id") and len(ref.column_name) > 3:
            base = ref.column_name[:-3]
        attr = _unique_attribute(base, used)
        out.append(ResolvedRelation(
            attribute=attr,
            direction=OUTGOING,
            related=TableNames.for_table(ref.target_table),
            cardinality="one",
            columns=(ref.column_name,),
        ))
    return tuple(out)


def _incoming_relations(
    table: TableDefinition,
    all_tables: Sequence[TableDefinition],
    used: Set[str],
) -> Tuple[ResolvedRelation, ...]:
    return tuple(
        ResolvedRelation(
            attribute=_unique_attribute(ref.relation_name, used),
            direction=INCOMING,
            related=TableNames.for_table(ref.source_table),
            cardinality=ref.cardinality,
            columns=ref.via_columns,
        )
        for ref in resolve_incoming(table, all_tables)
    )


def _declared_relations(table: TableDefinition) -> Tuple[DeclaredRelation, ...]:
    out: List[DeclaredRelation] = []
    for name, rel in table.relationships.items():
        if not name.isidentifier():
            raise EmissionError(table.tableName, f"relationship name {name!r} is not a valid identifier")
        if name in table.columns:
            raise EmissionError(table.tableName, f"relationship {name!r} collides with a column of the same name")
        out.append(DeclaredRelation(
            attribute=name,
            kind=rel.type,
            related=TableNames.for_table(rel.table),
            associative_table=rel.associative_table,
        ))
    return tuple(out)


def _indexes(table: TableDefinition) -> Tuple[ResolvedIndex, ...]:
    out: List[ResolvedIndex] = []
    for name, idx in table.indexes.items():
        for col in idx.columns:
            if col not in table.columns:
                raise EmissionError(table.tableName, f"index {name!r} references unknown column", column=col)
        using = idx.type if idx.type and idx.type != "btree" else None
        out.append(ResolvedIndex(name, tuple(idx.columns), bool(idx.unique), using, idx.where))
    return tuple(out)


def _seed_rows(table: TableDefinition) -> Tuple[Dict[str, Any], ...]:
    for i, row in enumerate(table.seedData):
        for key in row:
            if key not in table.columns:
                raise EmissionError(table.tableName, f"seed row {i} sets unknown column", column=key)
    return tuple(dict(row) for row in table.seedData)


# ---------------------------------- public API ----------------------------------

def resolve_table(
    table: TableDefinition,
    all_tables: Sequence[TableDefinition],
    enums: Mapping[str, EnumDefinition],
) -> ResolvedTable:
    check_references(table, all_tables)

    composite = tuple(table.composite_key_columns())
    fields: List[ResolvedField] = []
    used_enums: List[str] = []
    for col in table.columns.values():
        tag = type_tag(col, enums)
        if tag is TypeTag.ENUM_REFERENCE:
            enum_name = resolve_enum(col.type, enums).name
            if enum_name not in used_enums:
                used_enums.append(enum_name)
        fields.append(ResolvedField(
            name=col.name,
            tag=tag,
            storage=to_storage_type(col, enums, composite_pk=bool(composite)),
            validation=to_validation_expression(col, enums),
            surface=to_surface_type(col, enums),
            is_primary_key=col.is_primary_key,
        ))

    base = _base_variant(table, fields)
    insert = _insert_variant(table, fields)
    update = _update_variant(fields, insert)

    used_attrs: Set[str] = set(table.columns)
    outgoing = _outgoing_relations(table, used_attrs)
    incoming = _incoming_relations(table, all_tables, used_attrs)

    return ResolvedTable(
        definition=table,
        names=TableNames.for_table(table.tableName),
        fields=tuple(fields),
        base_fields=base,
        insert_fields=insert,
        update_fields=update,
        composite_key=composite,
        indexes=_indexes(table),
        declared_relations=_declared_relations(table),
        outgoing=outgoing,
        incoming=incoming,
        used_enums=tuple(used_enums),
        seed_rows=_seed_rows(table),
    )


def resolve_enums(model: SchemaModel) -> Tuple[ResolvedEnum, ...]:
    return tuple(ResolvedEnum.from_definition(e) for e in model.enums)


def check_module_names(model: SchemaModel) -> None:
    """Generated module names must be importable and must not collide."""
    seen: Dict[str, str] = {"enums": "<enums>", "utils": "<utils>", "base": "<base>", "seed": "<seed>"}
    for kind in ("schema", "validation", "types"):
        seen[kind] = f"<{kind} barrel>"
    for t in model.tables:
        module = TableNames.for_table(t.tableName).module
        if not module.isidentifier() or keyword.iskeyword(module):
            raise EmissionError(t.tableName, f"generated module name {module!r} is not importable")
        if module in seen:
            raise EmissionError(t.tableName, f"generated module name {module!r} clashes with {seen[module]}")
        seen[module] = t.tableName


def resolve_schema(model: SchemaModel) -> ResolvedSchema:
    """Sequential resolution of the whole model (the pipeline resolves per table in workers)."""
    check_module_names(model)
    enums = model.enum_map()
    return ResolvedSchema(
        enums=resolve_enums(model),
        tables=tuple(resolve_table(t, model.tables, enums) for t in model.tables),
    )
