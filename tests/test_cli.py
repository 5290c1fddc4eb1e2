from typer.testing import CliRunner

from compiler.cli import app
from compiler.drift import ArtifactDiff, diff_artifacts
from conftest import column, write_descriptors

runner = CliRunner()


def test_validate_ok(schema_dir):
    result = runner.invoke(app, ["validate", "--schema-dir", str(schema_dir)])
    assert result.exit_code == 0, result.output
    assert "4 tables and 2 enums are valid" in result.output


def test_validate_reports_every_issue(tmp_path):
    root = write_descriptors(tmp_path / "db", [{"tableName": "t", "columns": {"x": column("text"), "class": column("text")}}])
    result = runner.invoke(app, ["validate", "--schema-dir", str(root)])
    assert result.exit_code == 1
    assert "Table must have a primary key" in result.output
    assert "t.class" in result.output


def test_generate_then_check(tmp_path, schema_dir):
    out = tmp_path / "src"
    result = runner.invoke(app, ["generate", "--schema-dir", str(schema_dir), "--out-dir", str(out)])
    assert result.exit_code == 0, result.output
    assert (out / "models" / "booking" / "validation.py").is_file()

    check = runner.invoke(app, ["generate", "--schema-dir", str(schema_dir), "--out-dir", str(out), "--check"])
    assert check.exit_code == 0, check.output
    assert "up to date" in check.output


def test_check_reports_drift(tmp_path, schema_dir):
    out = tmp_path / "src"
    runner.invoke(app, ["generate", "--schema-dir", str(schema_dir), "--out-dir", str(out)])
    (out / "models" / "user" / "types.py").write_text("# edited\n", encoding="utf-8")
    (out / "models" / "guest" / "schema.py").unlink()

    check = runner.invoke(app, ["generate", "--schema-dir", str(schema_dir), "--out-dir", str(out), "--check"])
    assert check.exit_code == 1
    assert "Missing artifacts:\n  - models/guest/schema.py" in check.output
    assert "Out-of-date artifacts:\n  - models/user/types.py" in check.output


def test_only_flag_limits_kinds(tmp_path, schema_dir):
    out = tmp_path / "src"
    result = runner.invoke(app, ["generate", "--schema-dir", str(schema_dir), "--out-dir", str(out), "--only", "schema"])
    assert result.exit_code == 0, result.output
    assert (out / "models" / "booking" / "schema.py").is_file()
    assert not (out / "models" / "booking" / "validation.py").exists()


def test_bad_kind_is_a_usage_error(tmp_path, schema_dir):
    result = runner.invoke(app, ["generate", "--schema-dir", str(schema_dir), "--out-dir", str(tmp_path), "--only", "forms"])
    assert result.exit_code == 2


def test_dangling_reference_fails_generation(tmp_path):
    root = write_descriptors(tmp_path / "db", [{
        "tableName": "reviews",
        "columns": {"id": column("serial"), "host_id": column("integer", references={"table": "hosts", "column": "id"})},
    }])
    result = runner.invoke(app, ["generate", "--schema-dir", str(root), "--out-dir", str(tmp_path / "src")])
    assert result.exit_code == 1
    assert "reviews.host_id" in result.output
    assert not (tmp_path / "src").exists()


def test_stale_generated_files(tmp_path):
    pkg = tmp_path / "models" / "old"
    pkg.mkdir(parents=True)
    (pkg / "schema.py").write_text('"""\nx\n\nThis file is auto-generated. Do not edit manually.\n"""\n', encoding="utf-8")
    (tmp_path / "models" / "handwritten.py").write_text("x = 1\n", encoding="utf-8")
    diff = diff_artifacts({}, tmp_path, "models")
    assert diff.stale == ["models/old/schema.py"]
    assert ArtifactDiff().format_plan() == "Generated code is up to date."
