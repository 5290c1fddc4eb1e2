# compiler/validate.py
from __future__ import annotations
import keyword
import logging
from typing import List

from compiler.errors import SchemaValidationError, ValidationIssue
from compiler.meta_models import SchemaModel, TableDefinition

logger = logging.getLogger(__name__)


# attribute names the declarative base claims for itself
RESERVED_COLUMN_NAMES = ("metadata", "registry")


def _is_identifier(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def validate(table: TableDefinition) -> List[ValidationIssue]:
    """
    Collect every shape problem of one table. Never raises; an empty list means valid.
    Order: name, columns, primary key, identifiers.
    """
    name = (table.tableName or "").strip()
    issues: List[ValidationIssue] = []

    if not name:
        issues.append(ValidationIssue(name, "Table must have a tableName"))

    if not table.columns:
        issues.append(ValidationIssue(name, "Table must have at least one column"))

    if not any(c.is_primary_key for c in table.columns.values()):
        issues.append(ValidationIssue(name, "Table must have a primary key"))

    if name and not _is_identifier(name):
        issues.append(ValidationIssue(name, f"Table name {name!r} is not a valid identifier"))

    for col_name in table.columns:
        if not _is_identifier(col_name):
            issues.append(
                ValidationIssue(name, f"Column name {col_name!r} is not a valid identifier", column=col_name)
            )
        elif col_name in RESERVED_COLUMN_NAMES:
            issues.append(
                ValidationIssue(name, f"Column name {col_name!r} is reserved by the declarative base", column=col_name)
            )

    return issues


def validate_model(model: SchemaModel) -> None:
    """Stop at the first table with issues; relationship resolution needs a sound graph."""
    for table in model.tables:
        issues = validate(table)
        if issues:
            for issue in issues:
                logger.error("Validation issue: %s", issue)
            raise SchemaValidationError(table.tableName, issues)
    logger.debug("Validated %d tables", len(model.tables))
