# compiler/type_mapping.py
"""
Map one column's abstract type + constraints onto the three targets:

  storage    -> SQLAlchemy column type and constraint modifiers
  validation -> Pydantic rule chain (type, format, bounds, pattern, default, nullable, optional)
  surface    -> plain Python type exposed to API/UI consumers

Every tag in TypeTag has explicit handling. Unknown tags fall back to text/str in every target.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from compiler.meta_models import ColumnDefinition, EnumDefinition
from compiler.naming import to_pascal_case

DEFAULT_STRING_LENGTH = 255
MONEY_DIMENSIONS = (10, 2)


class TypeTag(str, Enum):
    SHORT_TEXT = "short-text"
    LONG_TEXT = "long-text"
    INTEGER_AUTO = "integer-auto"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    ENUM_REFERENCE = "enum-reference"
    GEOGRAPHIC = "geographic-simplified"
    UNKNOWN = "unknown"


_DESCRIPTOR_TAGS = {
    "varchar": TypeTag.SHORT_TEXT,
    "text": TypeTag.LONG_TEXT,
    "serial": TypeTag.INTEGER_AUTO,
    "integer": TypeTag.INTEGER,
    "numeric": TypeTag.DECIMAL,
    "decimal": TypeTag.DECIMAL,
    "money": TypeTag.DECIMAL,
    "boolean": TypeTag.BOOLEAN,
    "date": TypeTag.DATE,
    "timestamp": TypeTag.DATETIME,
    "geography": TypeTag.GEOGRAPHIC,
}
# the abstract spellings are accepted as well
_DESCRIPTOR_TAGS.update({t.value: t for t in TypeTag if t not in (TypeTag.ENUM_REFERENCE, TypeTag.UNKNOWN)})

TEXT_TAGS = (TypeTag.SHORT_TEXT, TypeTag.LONG_TEXT)


def resolve_enum(type_name: str, enums: Mapping[str, EnumDefinition]) -> Optional[EnumDefinition]:
    """
    Enum resolution rule: a column type names an enum either exactly or by the
    '<type>_enum' convention. Returns None when neither exists.
    """
    if type_name in enums:
        return enums[type_name]
    return enums.get(f"{type_name}_enum")


def type_tag(column: ColumnDefinition, enums: Mapping[str, EnumDefinition]) -> TypeTag:
    if column.is_auto_increment:
        return TypeTag.INTEGER_AUTO
    tag = _DESCRIPTOR_TAGS.get(column.type.lower())
    if tag is not None:
        return tag
    if resolve_enum(column.type, enums) is not None:
        return TypeTag.ENUM_REFERENCE
    return TypeTag.UNKNOWN


def numeric_dimensions(column: ColumnDefinition) -> Optional[Tuple[int, int]]:
    """(precision, scale) only when both are known; money carries fixed dimensions."""
    if column.type.lower() == "money":
        return MONEY_DIMENSIONS
    p, s = column.dbConstraints.precision, column.dbConstraints.scale
    if p is not None and s is not None:
        return (p, s)
    return None


# ----------------------------------- storage -----------------------------------

NOT_NULL = "not-null"
DEFAULT = "default"
UNIQUE = "unique"
PRIMARY_KEY = "primary-key"
AUTOINCREMENT = "autoincrement"
FOREIGN_KEY = "foreign-key"

MODIFIER_ORDER = (NOT_NULL, DEFAULT, UNIQUE, PRIMARY_KEY, AUTOINCREMENT, FOREIGN_KEY)


@dataclass(frozen=True)
class StorageDefault:
    """kind: 'now', 'true', 'false', 'number' (raw SQL text) or 'string' (quoted literal)."""
    kind: str
    literal: str = ""


@dataclass(frozen=True)
class ForeignKeyTarget:
    table: str
    column: str
    on_delete: Optional[str] = None
    on_update: Optional[str] = None


@dataclass(frozen=True)
class StorageModifier:
    kind: str
    value: Any = None


@dataclass(frozen=True)
class StorageExpression:
    type_name: str
    type_args: Tuple[Any, ...] = ()
    enum_name: Optional[str] = None
    modifiers: Tuple[StorageModifier, ...] = ()

    @property
    def modifier_kinds(self) -> Tuple[str, ...]:
        return tuple(m.kind for m in self.modifiers)

    def modifier(self, kind: str) -> Optional[StorageModifier]:
        for m in self.modifiers:
            if m.kind == kind:
                return m
        return None


def _storage_default(column: ColumnDefinition, tag: TypeTag) -> StorageDefault:
    value = column.dbConstraints.default
    if column.has_now_default:
        return StorageDefault("now")
    if isinstance(value, bool):
        return StorageDefault("true" if value else "false")
    if tag is TypeTag.DECIMAL:
        # numeric columns travel as text; keep the literal quoted
        return StorageDefault("string", str(value))
    if isinstance(value, (int, float)):
        return StorageDefault("number", str(value))
    return StorageDefault("string", str(value))


def _storage_base(column: ColumnDefinition, tag: TypeTag, enums: Mapping[str, EnumDefinition]):
    if tag is TypeTag.SHORT_TEXT:
        return "String", (column.dbConstraints.length or DEFAULT_STRING_LENGTH,), None
    if tag is TypeTag.LONG_TEXT:
        return "Text", (), None
    if tag in (TypeTag.INTEGER_AUTO, TypeTag.INTEGER):
        return "Integer", (), None
    if tag is TypeTag.DECIMAL:
        dims = numeric_dimensions(column)
        return "Numeric", dims or (), None
    if tag is TypeTag.BOOLEAN:
        return "Boolean", (), None
    if tag is TypeTag.DATE:
        return "Date", (), None
    if tag is TypeTag.DATETIME:
        return "DateTime", (), None
    if tag is TypeTag.ENUM_REFERENCE:
        enum = resolve_enum(column.type, enums)
        return "Enum", (), enum.name if enum else None
    if tag is TypeTag.GEOGRAPHIC:
        # simplified: stored as text until a PostGIS type is wired in
        return "Text", (), None
    return "Text", (), None


def to_storage_type(
    column: ColumnDefinition,
    enums: Mapping[str, EnumDefinition],
    composite_pk: bool = False,
) -> StorageExpression:
    tag = type_tag(column, enums)
    type_name, type_args, enum_name = _storage_base(column, tag, enums)
    c = column.dbConstraints
    mods = []

    if tag is TypeTag.INTEGER_AUTO:
        # identity columns: primary key is implied, nothing else applies
        mods.append(StorageModifier(PRIMARY_KEY))
        mods.append(StorageModifier(AUTOINCREMENT))
    else:
        if not column.is_nullable:
            mods.append(StorageModifier(NOT_NULL))
        if column.has_default:
            mods.append(StorageModifier(DEFAULT, _storage_default(column, tag)))
        if c.unique and not c.primaryKey:
            mods.append(StorageModifier(UNIQUE))
        if c.primaryKey and not composite_pk:
            mods.append(StorageModifier(PRIMARY_KEY))

    if c.references is not None:
        ref = c.references
        mods.append(StorageModifier(FOREIGN_KEY, ForeignKeyTarget(
            table=ref.table,
            column=ref.column,
            on_delete=ref.onDelete.value.upper() if ref.onDelete else None,
            on_update=ref.onUpdate.value.upper() if ref.onUpdate else None,
        )))

    mods.sort(key=lambda m: MODIFIER_ORDER.index(m.kind))
    return StorageExpression(type_name, tuple(type_args), enum_name, tuple(mods))


# ---------------------------------- validation ----------------------------------

RULE_ORDER = (
    "type", "format",
    "min_length", "max_length", "max_digits", "decimal_places", "ge", "le",
    "pattern", "default", "optional", "nullable",
)
BOUND_KINDS = ("min_length", "max_length", "max_digits", "decimal_places", "ge", "le")


@dataclass(frozen=True)
class ValidationRule:
    kind: str
    value: Any = None


@dataclass(frozen=True)
class ValidationExpression:
    rules: Tuple[ValidationRule, ...]
    enum_name: Optional[str] = None

    @property
    def modifiers(self) -> Tuple[str, ...]:
        return tuple(r.kind for r in self.rules)

    def has(self, kind: str) -> bool:
        return any(r.kind == kind for r in self.rules)

    def get(self, kind: str, default: Any = None) -> Any:
        for r in self.rules:
            if r.kind == kind:
                return r.value
        return default

    @property
    def base_type(self) -> str:
        return self.get("format") or self.get("type")

    @property
    def constraints(self) -> Tuple[ValidationRule, ...]:
        return tuple(r for r in self.rules if r.kind in BOUND_KINDS or r.kind == "pattern")

    def without(self, *kinds: str) -> "ValidationExpression":
        return replace(self, rules=tuple(r for r in self.rules if r.kind not in kinds))

    def with_rule(self, kind: str, value: Any = None) -> "ValidationExpression":
        rules = [r for r in self.rules if r.kind != kind] + [ValidationRule(kind, value)]
        rules.sort(key=lambda r: RULE_ORDER.index(r.kind))
        return replace(self, rules=tuple(rules))


_VALIDATION_TYPES = {
    TypeTag.SHORT_TEXT: "str",
    TypeTag.LONG_TEXT: "str",
    TypeTag.INTEGER_AUTO: "int",
    TypeTag.INTEGER: "int",
    TypeTag.DECIMAL: "Decimal",
    TypeTag.BOOLEAN: "bool",
    TypeTag.DATE: "date",
    TypeTag.DATETIME: "datetime",
    TypeTag.GEOGRAPHIC: "str",
    TypeTag.UNKNOWN: "str",
}


def to_validation_expression(column: ColumnDefinition, enums: Mapping[str, EnumDefinition]) -> ValidationExpression:
    tag = type_tag(column, enums)
    v = column.validation
    rules = []
    enum_name = None

    if tag is TypeTag.ENUM_REFERENCE:
        enum = resolve_enum(column.type, enums)
        enum_name = enum.name
        rules.append(ValidationRule("type", to_pascal_case(enum.name)))
    else:
        rules.append(ValidationRule("type", _VALIDATION_TYPES[tag]))

    if tag in TEXT_TAGS:
        # a format check replaces the plain string check
        if v.email:
            rules.append(ValidationRule("format", "EmailStr"))
        elif v.url:
            rules.append(ValidationRule("format", "HttpUrl"))
        if v.min is not None:
            rules.append(ValidationRule("min_length", int(v.min)))
        max_len = v.max if v.max is not None else column.dbConstraints.length
        if max_len is None and tag is TypeTag.SHORT_TEXT:
            max_len = DEFAULT_STRING_LENGTH
        if max_len is not None:
            rules.append(ValidationRule("max_length", int(max_len)))
        if v.pattern and not (v.email or v.url):
            rules.append(ValidationRule("pattern", v.pattern))
    elif tag in (TypeTag.INTEGER, TypeTag.INTEGER_AUTO, TypeTag.DECIMAL):
        dims = numeric_dimensions(column) if tag is TypeTag.DECIMAL else None
        if dims:
            rules.append(ValidationRule("max_digits", dims[0]))
            rules.append(ValidationRule("decimal_places", dims[1]))
        if v.min is not None:
            rules.append(ValidationRule("ge", v.min))
        if v.max is not None:
            rules.append(ValidationRule("le", v.max))
    elif tag in (TypeTag.GEOGRAPHIC, TypeTag.UNKNOWN):
        if v.pattern:
            rules.append(ValidationRule("pattern", v.pattern))

    if column.has_default and not column.has_now_default:
        rules.append(ValidationRule("default", column.dbConstraints.default))

    nullable = column.is_nullable
    if nullable:
        rules.append(ValidationRule("nullable"))
    elif v.required is False and not column.is_primary_key:
        rules.append(ValidationRule("optional"))

    rules.sort(key=lambda r: RULE_ORDER.index(r.kind))
    return ValidationExpression(tuple(rules), enum_name)


# ----------------------------------- surface ------------------------------------

_SURFACE_TYPES = {
    TypeTag.SHORT_TEXT: "str",
    TypeTag.LONG_TEXT: "str",
    TypeTag.INTEGER_AUTO: "int",
    TypeTag.INTEGER: "int",
    TypeTag.DECIMAL: "float",
    TypeTag.BOOLEAN: "bool",
    TypeTag.DATE: "date",
    TypeTag.DATETIME: "datetime",
    TypeTag.ENUM_REFERENCE: "str",
    TypeTag.GEOGRAPHIC: "str",
    TypeTag.UNKNOWN: "str",
}


@dataclass(frozen=True)
class SurfaceType:
    name: str
    nullable: bool = False

    def render(self) -> str:
        return f"Optional[{self.name}]" if self.nullable else self.name


def to_surface_type(column: ColumnDefinition, enums: Mapping[str, EnumDefinition] | None = None) -> SurfaceType:
    # enum refinement lives in the validation artifact; the surface only sees strings
    tag = type_tag(column, enums or {})
    return SurfaceType(_SURFACE_TYPES[tag], column.is_nullable)
