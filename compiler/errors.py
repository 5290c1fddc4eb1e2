# compiler/errors.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence


class SchemaCompilerError(Exception):
    pass


class LoadError(SchemaCompilerError):
    """A descriptor file could not be read, parsed or shaped into the model."""

    def __init__(self, path: Path | str, problem: str):
        self.path = str(path)
        self.problem = problem
        super().__init__(f"{self.path}: {problem}")


@dataclass(frozen=True)
class ValidationIssue:
    table: str
    message: str
    column: Optional[str] = None

    def __str__(self) -> str:
        where = f"{self.table}.{self.column}" if self.column else (self.table or "<unnamed>")
        return f"{where}: {self.message}"


class SchemaValidationError(SchemaCompilerError):
    def __init__(self, table: str, issues: Sequence[ValidationIssue]):
        self.table = table
        self.issues = list(issues)
        super().__init__(
            f"Invalid table configuration for {table or '<unnamed>'}: "
            + "; ".join(i.message for i in self.issues)
        )


class EmissionError(SchemaCompilerError):
    def __init__(self, table: str, message: str, column: Optional[str] = None):
        self.table = table
        self.column = column
        self.message = message
        where = f"{table}.{column}" if column else table
        super().__init__(f"{where}: {message}")


class CompilationError(SchemaCompilerError):
    """Raised after the emission barrier when one or more tables failed."""

    def __init__(self, failures: List[EmissionError]):
        self.failures = list(failures)
        lines = [f"{len(self.failures)} table(s) failed to emit:"]
        lines.extend(f"  - {f}" for f in self.failures)
        super().__init__("\n".join(lines))
