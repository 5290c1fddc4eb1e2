from compiler.resolved import resolve_schema
from emitters import validation


def _section(text, cls):
    start = text.index(f"class {cls}(BaseModel):")
    end = text.find("\n\n\n", start)
    return text[start:end]


def test_enum_default_scenario(model):
    text = validation.emit_table(resolve_schema(model).tables[2])
    assert "from ..enums.validation import UserStatus\n" in text
    base = _section(text, "UserSchema")
    insert = _section(text, "UserInsertSchema")
    update = _section(text, "UserUpdateSchema")
    assert '    status: UserStatus = Field(json_schema_extra={"default": "pending"})' in base
    assert '    status: UserStatus = "pending"' in insert
    assert "    status: Optional[UserStatus] = None" in update
    assert "    id: int" in base and "    id: int" in update
    assert "id:" not in insert


def test_aliases_and_exports(model):
    text = validation.emit_table(resolve_schema(model).tables[2])
    assert "User = UserSchema\nUserInsert = UserInsertSchema\nUserUpdate = UserUpdateSchema\n" in text
    assert '    "UserUpdate",\n]' in text


def test_base_schema_reads_orm_objects(model):
    base = _section(validation.emit_table(resolve_schema(model).tables[0]), "GuestSchema")
    assert "    model_config = ConfigDict(from_attributes=True)" in base


def test_constraints_and_ui_metadata(model):
    text = validation.emit_table(resolve_schema(model).tables[0])
    base = _section(text, "GuestSchema")
    insert = _section(text, "GuestInsertSchema")
    assert '    name: str = Field(title="Full name", min_length=2, max_length=100)' in base
    assert "    name: str = Field(min_length=2, max_length=100)" in insert
    assert "    website: Optional[str] = Field(max_length=255)" in base
    assert "    website: Optional[str] = Field(None, max_length=255)" in insert
    assert "    created_at: datetime" in base
    assert "created_at" not in insert


def test_decimal_and_numeric_bounds(model):
    text = validation.emit_table(resolve_schema(model).tables[1])
    base = _section(text, "BookingSchema")
    insert = _section(text, "BookingInsertSchema")
    assert "from decimal import Decimal\n" in text
    assert '    total: Decimal = Field(max_digits=10, decimal_places=2, json_schema_extra={"default": 9.99})' in base
    assert '    total: Decimal = Field(Decimal("9.99"), max_digits=10, decimal_places=2)' in insert
    assert "    nights: int = Field(ge=1, le=30, json_schema_extra={\"default\": 1})" in base
    assert "    nights: int = Field(1, ge=1, le=30)" in insert
    assert "    paid: bool = False" in insert
    assert "    check_in: date" in base


def test_nullable_with_default(model):
    text = validation.emit_table(resolve_schema(model).tables[1])
    assert '    notes: Optional[str] = Field(json_schema_extra={"default": "none"})' in _section(text, "BookingSchema")
    assert '    notes: Optional[str] = "none"' in _section(text, "BookingInsertSchema")
    assert "    notes: Optional[str] = None" in _section(text, "BookingUpdateSchema")


def test_enum_classes(model):
    text = validation.emit_enums(resolve_schema(model).enums)
    assert 'class BookingStatus(str, Enum):\n    CONFIRMED = "confirmed"\n    CANCELLED = "cancelled"' in text
    assert "from enum import Enum" in text


def test_update_only_optionality_widens_annotation(model):
    update = _section(validation.emit_table(resolve_schema(model).tables[0]), "GuestUpdateSchema")
    assert "    id: int\n" in update
    assert "    name: Optional[str] = Field(None, min_length=2, max_length=100)" in update
    assert "    website: Optional[str] = Field(None, max_length=255)" in update
