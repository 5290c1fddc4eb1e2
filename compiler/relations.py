# compiler/relations.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from compiler.errors import EmissionError
from compiler.meta_models import TableDefinition
from compiler.naming import pluralize

OUTGOING = "outgoing"
INCOMING = "incoming"


@dataclass(frozen=True)
class OutgoingReference:
    column_name: str
    target_table: str
    target_column: str
    on_delete: Optional[str] = None


@dataclass(frozen=True)
class IncomingReference:
    source_table: str
    relation_name: str
    cardinality: str = "many"
    via_columns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RelationDescriptor:
    name: str
    direction: str
    related_table: str
    cardinality: str


def resolve_outgoing(table: TableDefinition) -> List[OutgoingReference]:
    """One entry per column carrying a foreign key, in column order."""
    out: List[OutgoingReference] = []
    for col in table.columns.values():
        ref = col.dbConstraints.references
        if ref is None:
            continue
        out.append(OutgoingReference(
            column_name=col.name,
            target_table=ref.table,
            target_column=ref.column,
            on_delete=ref.onDelete.value if ref.onDelete else None,
        ))
    return out


def resolve_incoming(table: TableDefinition, all_tables: Sequence[TableDefinition]) -> List[IncomingReference]:
    """
    Scan every other table for foreign keys targeting `table`.
    One entry per source table, ordered like `all_tables`; the table itself is
    skipped by identity so self-references never become a self-loop relation.
    """
    found: Dict[str, List[str]] = {}
    order: List[str] = []
    for other in all_tables:
        if other is table:
            continue
        for col in other.columns.values():
            ref = col.dbConstraints.references
            if ref is None or ref.table != table.tableName:
                continue
            if other.tableName not in found:
                found[other.tableName] = []
                order.append(other.tableName)
            found[other.tableName].append(col.name)

    return [
        IncomingReference(
            source_table=name,
            relation_name=pluralize(name),
            cardinality="many",
            via_columns=tuple(found[name]),
        )
        for name in order
    ]


def describe_relations(table: TableDefinition, all_tables: Sequence[TableDefinition]) -> List[RelationDescriptor]:
    """Outgoing references (many-referencing-one) followed by inferred incoming ones."""
    descriptors = [
        RelationDescriptor(ref.column_name, OUTGOING, ref.target_table, "one")
        for ref in resolve_outgoing(table)
    ]
    descriptors.extend(
        RelationDescriptor(ref.relation_name, INCOMING, ref.source_table, ref.cardinality)
        for ref in resolve_incoming(table, all_tables)
    )
    return descriptors


def check_references(table: TableDefinition, all_tables: Sequence[TableDefinition]) -> None:
    """Raise EmissionError for dangling foreign keys or relationships to unknown tables."""
    by_name = {t.tableName: t for t in all_tables}
    for ref in resolve_outgoing(table):
        target = by_name.get(ref.target_table)
        if target is None:
            raise EmissionError(
                table.tableName,
                f"foreign key references unknown table {ref.target_table!r}",
                column=ref.column_name,
            )
        if ref.target_column not in target.columns:
            raise EmissionError(
                table.tableName,
                f"foreign key references unknown column {ref.target_table}.{ref.target_column}",
                column=ref.column_name,
            )
    for rel_name, rel in table.relationships.items():
        if rel.table not in by_name:
            raise EmissionError(
                table.tableName,
                f"relationship {rel_name!r} targets unknown table {rel.table!r}",
            )
