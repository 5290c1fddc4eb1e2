from pathlib import Path

from compiler.settings import Settings


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SCHEMA_DIR", "descriptors")
    monkeypatch.setenv("OUTPUT_PACKAGE", "app.models")
    monkeypatch.setenv("MAX_WORKERS", "8")
    monkeypatch.setenv("DIALECT", "MSSQL")
    settings = Settings()
    assert settings.DIALECT == "mssql"

    config = settings.to_compiler_config()
    assert config.schema_dir == Path("descriptors")
    assert config.output_package == "app.models"
    assert config.package_dir == "app/models"
    assert config.max_workers == 8


def test_overrides_win_and_none_is_ignored(monkeypatch):
    monkeypatch.delenv("SCHEMA_DIR", raising=False)
    config = Settings().to_compiler_config(schema_dir=Path("other"), output_package=None, kinds=("validation",))
    assert config.schema_dir == Path("other")
    assert config.output_package == "models"
    assert config.kinds == ("validation",)
