# emitters/aggregate.py
"""Project-wide barrel files: one per artifact kind, enums first, then tables in canonical order."""
from __future__ import annotations
from typing import Sequence

from compiler.resolved import ResolvedTable
from emitters.template import file_header, join_blocks

DESCRIPTIONS = {
    "schema": "Database schema aggregation.",
    "validation": "Validation schemas aggregation.",
    "types": "Types aggregation.",
}


def aggregate(tables: Sequence[ResolvedTable], kind: str) -> str:
    if kind not in DESCRIPTIONS:
        raise ValueError(f"unknown artifact kind {kind!r}")
    lines = [f"from .enums.{kind} import *  # noqa: F401,F403"]
    lines.extend(f"from .{t.names.module}.{kind} import *  # noqa: F401,F403" for t in tables)
    blocks = [file_header(DESCRIPTIONS[kind]), "\n".join(lines)]
    if kind == "schema":
        blocks.append("from .base import Base  # noqa: F401")
    return join_blocks(*blocks)
