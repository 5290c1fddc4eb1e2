import json
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from compiler.config import CompilerConfig
from compiler.loader import load_schema_model


def column(type_: str, validation: Optional[Dict[str, Any]] = None, ui: Optional[Dict[str, Any]] = None, **db: Any) -> Dict[str, Any]:
    desc: Dict[str, Any] = {"dbConstraints": {"type": type_, **db}}
    if validation is not None:
        desc["validation"] = validation
    if ui is not None:
        desc["ui"] = ui
    return desc


GUESTS = {
    "tableName": "guests",
    "displayName": "Guests",
    "columns": {
        "id": column("serial"),
        "name": column("varchar", length=100, nullable=False, validation={"min": 2}, ui={"label": "Full name"}),
        "email": column("varchar", length=120, nullable=False, unique=True),
        "website": column("varchar", nullable=True),
        "created_at": column("timestamp", nullable=False, default="now()"),
    },
    "seedData": [{"name": "Ada", "email": "ada@example.com"}],
}

BOOKINGS = {
    "tableName": "bookings",
    "displayName": "Bookings",
    "columns": {
        "id": column("serial"),
        "guest_id": column(
            "integer", nullable=False,
            references={"table": "guests", "column": "id", "onDelete": "cascade"},
        ),
        "status": column("booking_status", nullable=False, default="confirmed"),
        "total": column("numeric", precision=10, scale=2, nullable=False, default=9.99),
        "nights": column("integer", nullable=False, default=1, validation={"min": 1, "max": 30}),
        "notes": column("text", nullable=True, default="none"),
        "paid": column("boolean", nullable=False, default=False),
        "check_in": column("date", nullable=False),
    },
    "indexes": {
        "idx_bookings_guest": {"columns": ["guest_id"]},
        "idx_bookings_status": {"columns": ["status", "check_in"], "unique": True, "type": "hash"},
    },
    "seedData": [{"guest_id": 1, "status": "confirmed", "total": "120.00", "check_in": "2024-05-01"}],
}

USERS = {
    "tableName": "users",
    "displayName": "Users",
    "columns": {
        "id": column("serial"),
        "status": column("user_status", nullable=False, default="pending"),
    },
}

ENROLLMENTS = {
    "tableName": "enrollments",
    "displayName": "Enrollments",
    "columns": {
        "student_id": column("integer", primaryKey=True, nullable=False),
        "course_id": column("integer", primaryKey=True, nullable=False),
        "grade": column("varchar", length=2, nullable=True),
    },
}

ENUMS = {
    "booking_status": {
        "values": ["confirmed", "cancelled"],
        "labels": {"confirmed": "Confirmed", "cancelled": "Cancelled"},
        "colors": {"confirmed": "green"},
    },
    "user_status": {"values": ["active", "pending"]},
}


def write_descriptors(root: Path, tables, enums=None) -> Path:
    (root / "tables").mkdir(parents=True, exist_ok=True)
    (root / "enums").mkdir(parents=True, exist_ok=True)
    for name, desc in (enums or {}).items():
        (root / "enums" / f"{name}.json").write_text(json.dumps(desc), encoding="utf-8")
    for i, desc in enumerate(tables):
        # numeric prefix fixes the canonical load order
        (root / "tables" / f"{i:02d}_{desc['tableName']}.json").write_text(json.dumps(desc), encoding="utf-8")
    return root


@pytest.fixture
def schema_dir(tmp_path):
    return write_descriptors(tmp_path / "db", [GUESTS, BOOKINGS, USERS, ENROLLMENTS], ENUMS)


@pytest.fixture
def config(schema_dir):
    return CompilerConfig(schema_dir=schema_dir, max_workers=2)


@pytest.fixture
def model(config):
    return load_schema_model(config)
