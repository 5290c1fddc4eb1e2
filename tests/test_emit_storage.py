import logging

from compiler.meta_models import SchemaModel, TableDefinition
from compiler.resolved import resolve_schema
from conftest import column
from emitters import storage


def test_bookings_columns(model):
    bookings = resolve_schema(model).tables[1]
    text = storage.emit_table(bookings)
    assert "class Bookings(Base):" in text
    assert '    __tablename__ = "bookings"' in text
    assert "    id = Column(Integer, primary_key=True, autoincrement=True)" in text
    assert '    guest_id = Column(Integer, ForeignKey("guests.id", ondelete="CASCADE"), nullable=False)' in text
    assert '    status = Column(booking_status_enum, nullable=False, server_default="confirmed")' in text
    assert '    total = Column(Numeric(10, 2), nullable=False, server_default="9.99")' in text
    assert '    nights = Column(Integer, nullable=False, server_default=text("1"))' in text
    assert '    notes = Column(Text, server_default="none")' in text
    assert "    paid = Column(Boolean, nullable=False, server_default=false())" in text
    assert "    check_in = Column(Date, nullable=False)" in text


def test_imports_are_minimal(model):
    text = storage.emit_table(resolve_schema(model).tables[1])
    assert "from sqlalchemy import Boolean, Column, Date, ForeignKey, Index, Integer, Numeric, Text, false, text\n" in text
    assert "from ..base import Base\nfrom ..enums.schema import booking_status_enum\n" in text
    assert "String" not in text
    assert "TYPE_CHECKING" not in text


def test_indexes_in_table_args(model):
    text = storage.emit_table(resolve_schema(model).tables[1])
    assert '        Index("idx_bookings_guest", "guest_id"),' in text
    assert '        Index("idx_bookings_status", "status", "check_in", unique=True, postgresql_using="hash"),' in text


def test_composite_primary_key(model):
    text = storage.emit_table(resolve_schema(model).tables[3])
    assert '        PrimaryKeyConstraint("student_id", "course_id"),' in text
    assert "primary_key=True" not in text
    assert "    student_id = Column(Integer, nullable=False)" in text


def test_now_default_and_unique(model):
    text = storage.emit_table(resolve_schema(model).tables[0])
    assert "    created_at = Column(DateTime, nullable=False, server_default=func.now())" in text
    assert "    email = Column(String(120), nullable=False, unique=True)" in text
    assert "    website = Column(String(255))" in text


def test_enum_objects(model):
    text = storage.emit_enums(resolve_schema(model).enums)
    assert 'booking_status_enum = Enum("confirmed", "cancelled", name="booking_status")' in text
    assert 'user_status_enum = Enum("active", "pending", name="user_status")' in text
    assert "This file is auto-generated. Do not edit manually." in text


def test_declared_relations_block(caplog):
    tables = tuple(TableDefinition.model_validate(s) for s in (
        {
            "tableName": "authors",
            "columns": {"id": column("serial")},
            "relationships": {
                "posts": {"type": "one-to-many", "table": "posts", "foreignKey": "author_id"},
                "tags": {"type": "many-to-many", "table": "tags", "through": "author_tags"},
            },
        },
        {"tableName": "posts", "columns": {
            "id": column("serial"),
            "author_id": column("integer", references={"table": "authors", "column": "id"}),
        }},
        {"tableName": "tags", "columns": {"id": column("serial")}},
    ))
    authors = resolve_schema(SchemaModel(tables=tables)).tables[0]
    with caplog.at_level(logging.WARNING, logger="emitters.storage"):
        text = storage.emit_table(authors)
    assert "    # relations" in text
    assert '    posts: Mapped[List["Posts"]] = relationship("Posts", foreign_keys="Posts.author_id", lazy="selectin")' in text
    assert "    # tags: many-to-many with Tags through 'author_tags' is not expanded" in text
    assert "if TYPE_CHECKING:\n    from ..post.schema import Posts\n" in text
    assert "from ..tag.schema" not in text
    assert "many-to-many" in caplog.text


def test_output_is_stable(model):
    schema = resolve_schema(model)
    assert storage.emit_table(schema.tables[1]) == storage.emit_table(resolve_schema(model).tables[1])
