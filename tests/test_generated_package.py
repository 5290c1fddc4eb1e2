"""Writes the compiled package to disk and imports it like application code would."""
import importlib
import sys
from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from compiler.config import CompilerConfig
from compiler.pipeline import compile_schema
from compiler.writer import write_artifacts

PACKAGE = "generated_models"


@pytest.fixture
def generated(tmp_path, model, schema_dir):
    config = CompilerConfig(schema_dir=schema_dir, output_package=PACKAGE)
    write_artifacts(compile_schema(model, config).artifacts, tmp_path / "out")
    sys.path.insert(0, str(tmp_path / "out"))
    try:
        yield importlib.import_module(PACKAGE)
    finally:
        sys.path.remove(str(tmp_path / "out"))
        for name in [m for m in sys.modules if m == PACKAGE or m.startswith(PACKAGE + ".")]:
            del sys.modules[name]


def test_barrels_import(generated):
    schema = importlib.import_module(f"{PACKAGE}.schema")
    validation = importlib.import_module(f"{PACKAGE}.validation")
    types = importlib.import_module(f"{PACKAGE}.types")
    assert schema.Bookings.__tablename__ == "bookings"
    assert validation.UserStatus.PENDING.value == "pending"
    assert types.BookingWithGuest.model_fields["guest"].is_required()


def test_validation_variants(generated):
    validation = importlib.import_module(f"{PACKAGE}.validation")
    with pytest.raises(ValidationError):
        validation.UserSchema(id=1)
    assert validation.UserInsert().status == "pending"
    assert validation.UserSchema(id=1, status="active").status is validation.UserStatus.ACTIVE
    with pytest.raises(ValidationError):
        validation.GuestInsert(name="A", email="a@example.com")
    with pytest.raises(ValidationError):
        validation.UserUpdate(status="active")
    assert validation.UserUpdate(id=3).status is None


def test_tables_create_and_seed(generated):
    schema = importlib.import_module(f"{PACKAGE}.schema")
    seed = importlib.import_module(f"{PACKAGE}.seed")
    validation = importlib.import_module(f"{PACKAGE}.validation")

    engine = create_engine("sqlite://")
    schema.Base.metadata.create_all(engine)
    assert set(schema.Base.metadata.tables) == {"guests", "bookings", "users", "enrollments"}

    with Session(engine) as session:
        seed.seed(session)
        guest = session.get(schema.Guests, 1)
        record = validation.GuestSchema.model_validate(guest)
        booking = session.get(schema.Bookings, 1)
        assert booking.nights == 1
        assert booking.check_in == date(2024, 5, 1)
    assert record.name == "Ada"
    assert record.created_at is not None
