# emitters/support.py
"""Package scaffolding: declarative base, generic API types and `__init__` index files."""
from __future__ import annotations
from typing import Iterable

from emitters.template import file_header, join_blocks

UTILITY_TYPES = '''\
T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    data: T
    success: bool
    message: Optional[str] = None


class ListResponse(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    limit: int


class PaginationParams(BaseModel):
    page: Optional[int] = None
    limit: Optional[int] = None
    sort: Optional[str] = None
    order: Optional[Literal["asc", "desc"]] = None


class FilterParams(BaseModel):
    model_config = ConfigDict(extra="allow")

    search: Optional[str] = None


class QueryParams(PaginationParams, FilterParams):
    pass


class BaseEntity(BaseModel):
    id: int
    created_at: datetime
    updated_at: datetime


class ValidationState(BaseModel):
    is_valid: bool
    errors: Dict[str, List[str]] = {}


class ApiError(BaseModel):
    success: Literal[False] = False
    message: str
    errors: Optional[Dict[str, List[str]]] = None
    status_code: Optional[int] = None'''


def emit_base() -> str:
    return join_blocks(
        file_header("Declarative base shared by every generated table."),
        "from sqlalchemy.orm import declarative_base",
        "Base = declarative_base()",
        '__all__ = ["Base"]\n',
    )


def emit_utility_types() -> str:
    imports = (
        "from datetime import datetime\n"
        "from typing import Dict, Generic, List, Literal, Optional, TypeVar\n"
        "\n"
        "from pydantic import BaseModel, ConfigDict"
    )
    exported = [
        "ApiResponse", "ListResponse", "PaginationParams", "FilterParams",
        "QueryParams", "BaseEntity", "ValidationState", "ApiError",
    ]
    body = "".join(f'    "{n}",\n' for n in exported)
    return join_blocks(
        file_header("Utility types for API operations."),
        imports,
        UTILITY_TYPES,
        f"__all__ = [\n{body}]",
    )


def emit_index(description: str, submodules: Iterable[str]) -> str:
    """`__init__.py` re-exporting every listed submodule."""
    lines = "\n".join(f"from .{name} import *  # noqa: F401,F403" for name in submodules)
    return join_blocks(file_header(description), lines)
