from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

NOW_DEFAULTS = {"now", "now()", "current_timestamp", "current_timestamp()"}


def is_now_default(val: Any) -> bool:
    """Detect 'now'/'now()' style defaults (the current-timestamp sentinel)."""
    if not isinstance(val, str):
        return False
    return val.strip().lower() in NOW_DEFAULTS


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class OnDelete(str, Enum):
    CASCADE = "cascade"
    SET_NULL = "set null"
    RESTRICT = "restrict"
    NO_ACTION = "no action"


class RelationType(str, Enum):
    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"


class EnumDefinition(_Frozen):
    name: str
    values: List[str]
    labels: Dict[str, str] = {}
    colors: Dict[str, str] = {}
    icons: Dict[str, str] = {}
    description: Optional[str] = None

    @field_validator("values")
    @classmethod
    def _unique_values(cls, values: List[str]) -> List[str]:
        if not values:
            raise ValueError("enum must declare at least one value")
        seen = set()
        for v in values:
            if not v.isidentifier():
                raise ValueError(f"enum value {v!r} is not identifier-safe")
            if v in seen:
                raise ValueError(f"duplicate enum value {v!r}")
            seen.add(v)
        return values


class Reference(_Frozen):
    table: str
    column: str
    onDelete: Optional[OnDelete] = None
    onUpdate: Optional[OnDelete] = None


class ColumnConstraints(_Frozen):
    type: str
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    nullable: Optional[bool] = None
    default: Optional[Union[bool, int, float, str]] = None
    primaryKey: Optional[bool] = None
    unique: Optional[bool] = None
    autoIncrement: Optional[bool] = None
    references: Optional[Reference] = None


class ColumnValidation(_Frozen):
    required: Optional[bool] = None
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    pattern: Optional[str] = None
    email: Optional[bool] = None
    url: Optional[bool] = None


class ColumnUI(_Frozen):
    label: Optional[str] = None
    placeholder: Optional[str] = None
    helpText: Optional[str] = None
    section: Optional[str] = None
    order: Optional[int] = None
    hidden: Optional[bool] = None
    readonly: Optional[bool] = None
    format: Optional[str] = None
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    multiline: Optional[bool] = None


class ColumnDefinition(_Frozen):
    name: str = ""
    dbConstraints: ColumnConstraints
    validation: ColumnValidation = ColumnValidation()
    ui: ColumnUI = ColumnUI()

    @property
    def type(self) -> str:
        return self.dbConstraints.type

    @property
    def is_auto_increment(self) -> bool:
        t = self.dbConstraints.type.lower()
        return t in ("serial", "integer-auto") or (t == "integer" and bool(self.dbConstraints.autoIncrement))

    @property
    def is_primary_key(self) -> bool:
        return bool(self.dbConstraints.primaryKey) or self.is_auto_increment

    @property
    def is_nullable(self) -> bool:
        return bool(self.dbConstraints.nullable) and not self.is_auto_increment

    @property
    def has_default(self) -> bool:
        return self.dbConstraints.default is not None and not self.is_auto_increment

    @property
    def has_now_default(self) -> bool:
        return is_now_default(self.dbConstraints.default)

    @property
    def is_auto_generated(self) -> bool:
        """Auto-increment and current-timestamp columns are filled by the database."""
        return self.is_auto_increment or self.has_now_default


class IndexDefinition(_Frozen):
    columns: List[str]
    unique: Optional[bool] = None
    type: Optional[str] = None
    where: Optional[str] = None


class RelationshipDefinition(_Frozen):
    type: RelationType
    table: str
    foreignKey: Optional[str] = None
    localKey: Optional[str] = None
    through: Optional[str] = None
    pivotTable: Optional[str] = None

    @property
    def associative_table(self) -> Optional[str]:
        return self.through or self.pivotTable


class TableUI(_Frozen):
    listFields: List[str] = []
    searchFields: List[str] = []
    sortField: Optional[str] = None
    sortOrder: Optional[str] = None


class TableDefinition(_Frozen):
    tableName: str = ""
    displayName: str = ""
    icon: Optional[str] = None
    description: Optional[str] = None
    seedData: List[Dict[str, Any]] = []
    columns: Dict[str, ColumnDefinition] = {}
    indexes: Dict[str, IndexDefinition] = {}
    relationships: Dict[str, RelationshipDefinition] = {}
    ui: TableUI = TableUI()

    @model_validator(mode="before")
    @classmethod
    def _name_columns(cls, data: Any) -> Any:
        # Column names come from the column-map keys.
        if isinstance(data, dict) and isinstance(data.get("columns"), dict):
            named = {}
            for key, col in data["columns"].items():
                if isinstance(col, dict):
                    col = {**col, "name": key}
                named[key] = col
            data = {**data, "columns": named}
        return data

    def primary_key_columns(self) -> List[ColumnDefinition]:
        return [c for c in self.columns.values() if c.is_primary_key]

    def composite_key_columns(self) -> List[str]:
        """Columns of a composite key: more than one non-auto-increment primary key."""
        declared = [
            c.name for c in self.columns.values()
            if c.dbConstraints.primaryKey and not c.is_auto_increment
        ]
        return declared if len(declared) > 1 else []


class SchemaModel(_Frozen):
    enums: Tuple[EnumDefinition, ...] = ()
    tables: Tuple[TableDefinition, ...] = ()

    def enum_map(self) -> Dict[str, EnumDefinition]:
        return {e.name: e for e in self.enums}

    def table(self, name: str) -> Optional[TableDefinition]:
        for t in self.tables:
            if t.tableName == name:
                return t
        return None
