# core/ports.py
from __future__ import annotations
from typing import Protocol, Sequence

from compiler.meta_models import SchemaModel
from compiler.resolved import ResolvedEnum, ResolvedTable


class SchemaLoader(Protocol):
    def load(self) -> SchemaModel: ...


class TableEmitter(Protocol):
    """Renders one artifact kind: one text per table plus one for all enums."""
    kind: str

    def emit_table(self, table: ResolvedTable) -> str: ...

    def emit_enums(self, enums: Sequence[ResolvedEnum]) -> str: ...
