# compiler/naming.py
"""Name derivation shared by every emitter (singular module names, class names)."""
from __future__ import annotations

IRREGULAR_PLURALS = {
    "people": "person",
    "children": "child",
    "feet": "foot",
    "teeth": "tooth",
    "geese": "goose",
    "mice": "mouse",
    "men": "man",
    "women": "woman",
}


def to_pascal_case(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def singularize(name: str) -> str:
    """Naive English singular of the last word: bookings -> booking, amenities -> amenity."""
    head, sep, word = name.rpartition("_")
    lower = word.lower()
    if lower in IRREGULAR_PLURALS:
        single = IRREGULAR_PLURALS[lower]
    elif word.endswith("ies"):
        single = word[:-3] + "y"
    elif word.endswith("ves"):
        single = word[:-3] + "f"
    elif word.endswith(("ches", "shes", "xes", "zes")):
        single = word[:-2]
    elif word.endswith("s") and not word.endswith("ss"):
        single = word[:-1]
    else:
        single = word
    return f"{head}{sep}{single}"


def pluralize(name: str) -> str:
    """Relation-name plural: append 's' unless the name already ends with one."""
    return name if name.endswith("s") else f"{name}s"


def singular_pascal(table_name: str) -> str:
    return to_pascal_case(singularize(table_name))


def enum_member_name(value: str) -> str:
    return value.upper()


def enum_storage_name(enum_name: str) -> str:
    return enum_name if enum_name.endswith("_enum") else f"{enum_name}_enum"


def constant_name(name: str) -> str:
    return name.upper()
