# compiler/config.py
from __future__ import annotations
from pathlib import Path
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

ARTIFACT_KINDS: Tuple[str, ...] = ("validation", "types", "schema")


class CompilerConfig(BaseModel):
    """Explicit configuration threaded through loader, pipeline and emitters."""

    model_config = ConfigDict(frozen=True)

    schema_dir: Path = Path("db")
    output_package: str = "models"
    kinds: Tuple[str, ...] = ARTIFACT_KINDS
    max_workers: int = Field(default=4, ge=1)
    emit_seed: bool = True

    @field_validator("kinds")
    @classmethod
    def _known_kinds(cls, kinds: Tuple[str, ...]) -> Tuple[str, ...]:
        unknown = [k for k in kinds if k not in ARTIFACT_KINDS]
        if unknown:
            raise ValueError(f"unknown artifact kind(s): {', '.join(unknown)}")
        if "types" in kinds and "validation" not in kinds:
            raise ValueError("types artifacts re-export the validation artifacts; request both")
        # canonical order regardless of how they were requested
        return tuple(k for k in ARTIFACT_KINDS if k in kinds)

    @field_validator("output_package")
    @classmethod
    def _package_identifier(cls, name: str) -> str:
        if not all(part.isidentifier() for part in name.split(".")):
            raise ValueError(f"output_package {name!r} is not a dotted identifier")
        return name

    @property
    def package_dir(self) -> str:
        return self.output_package.replace(".", "/")
