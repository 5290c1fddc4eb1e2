# compiler/settings.py
from __future__ import annotations
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from compiler.config import ARTIFACT_KINDS, CompilerConfig


class Settings:
    SCHEMA_DIR: str
    OUTPUT_DIR: str
    OUTPUT_PACKAGE: str
    MAX_WORKERS: int
    DIALECT: str
    LOG_LEVEL: str

    def __init__(self) -> None:
        self.SCHEMA_DIR = os.getenv("SCHEMA_DIR", "db")
        self.OUTPUT_DIR = os.getenv("OUTPUT_DIR", "src")
        self.OUTPUT_PACKAGE = os.getenv("OUTPUT_PACKAGE", "models")
        self.MAX_WORKERS = int(os.getenv("MAX_WORKERS", "4"))
        self.DIALECT = os.getenv("DIALECT", "postgres").lower()
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    def to_compiler_config(self, **overrides) -> CompilerConfig:
        values = {
            "schema_dir": Path(self.SCHEMA_DIR),
            "output_package": self.OUTPUT_PACKAGE,
            "max_workers": self.MAX_WORKERS,
            "kinds": ARTIFACT_KINDS,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return CompilerConfig(**values)


@lru_cache
def get_settings() -> Settings:
    # Only the CLI calls this; generation code receives a CompilerConfig.
    load_dotenv()
    return Settings()
