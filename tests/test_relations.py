import pytest

from compiler.errors import EmissionError
from compiler.meta_models import TableDefinition
from compiler.relations import (
    INCOMING,
    OUTGOING,
    check_references,
    describe_relations,
    resolve_incoming,
    resolve_outgoing,
)
from conftest import BOOKINGS, GUESTS, column


def _tables(*specs):
    return [TableDefinition.model_validate(s) for s in specs]


def test_incoming_inferred_without_back_reference():
    guests, bookings = _tables(GUESTS, BOOKINGS)
    incoming = resolve_incoming(guests, [guests, bookings])
    assert [(r.source_table, r.relation_name, r.cardinality) for r in incoming] == [("bookings", "bookings", "many")]
    assert incoming[0].via_columns == ("guest_id",)


def test_outgoing_and_incoming_agree():
    guests, bookings = _tables(GUESTS, BOOKINGS)
    outgoing = resolve_outgoing(bookings)
    assert [(r.column_name, r.target_table, r.target_column) for r in outgoing] == [("guest_id", "guests", "id")]
    assert outgoing[0].on_delete == "cascade"
    assert resolve_outgoing(guests) == []


def test_relation_name_is_pluralized():
    guests, = _tables(GUESTS)
    stay, = _tables({
        "tableName": "stay",
        "columns": {
            "id": column("serial"),
            "guest_id": column("integer", references={"table": "guests", "column": "id"}),
        },
    })
    assert resolve_incoming(guests, [guests, stay])[0].relation_name == "stays"


def test_self_reference_is_not_incoming():
    employees, = _tables({
        "tableName": "employees",
        "columns": {
            "id": column("serial"),
            "manager_id": column("integer", references={"table": "employees", "column": "id"}),
        },
    })
    assert resolve_incoming(employees, [employees]) == []
    assert len(resolve_outgoing(employees)) == 1


def test_incoming_order_follows_all_tables():
    guests, bookings = _tables(GUESTS, BOOKINGS)
    reviews, = _tables({
        "tableName": "reviews",
        "columns": {
            "id": column("serial"),
            "guest_id": column("integer", references={"table": "guests", "column": "id"}),
            "author_id": column("integer", references={"table": "guests", "column": "id"}),
        },
    })
    names = [r.source_table for r in resolve_incoming(guests, [reviews, guests, bookings])]
    assert names == ["reviews", "bookings"]
    assert resolve_incoming(guests, [reviews])[0].via_columns == ("guest_id", "author_id")


def test_describe_relations_lists_both_directions():
    guests, bookings = _tables(GUESTS, BOOKINGS)
    assert [(d.direction, d.related_table) for d in describe_relations(guests, [guests, bookings])] == [
        (INCOMING, "bookings"),
    ]
    assert [(d.direction, d.cardinality) for d in describe_relations(bookings, [guests, bookings])] == [
        (OUTGOING, "one"),
    ]


def test_dangling_foreign_key():
    bookings, = _tables(BOOKINGS)
    with pytest.raises(EmissionError) as exc:
        check_references(bookings, [bookings])
    assert exc.value.table == "bookings"
    assert exc.value.column == "guest_id"


def test_unknown_target_column():
    guests, = _tables(GUESTS)
    bad, = _tables({
        "tableName": "bad",
        "columns": {
            "id": column("serial"),
            "guest_ref": column("integer", references={"table": "guests", "column": "uuid"}),
        },
    })
    with pytest.raises(EmissionError, match="guests.uuid"):
        check_references(bad, [guests, bad])
