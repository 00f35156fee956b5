"""Tests for CLI commands."""

import json
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from formwork.cli import app


@pytest.fixture
def cli_runner():
    """Return a CLI test runner."""
    return CliRunner()


@pytest.fixture
def manifest(project_dir: Path) -> Path:
    return project_dir / "formwork.toml"


def write_dsl(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "app.fw"
    path.write_text(text, encoding="utf-8")
    return path


def test_version(cli_runner: CliRunner):
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("formwork ")


def test_validate_command_success(cli_runner: CliRunner, manifest: Path):
    result = cli_runner.invoke(app, ["validate", "--manifest", str(manifest)])
    assert result.exit_code == 0
    assert "OK: spec is valid." in result.stdout


def test_validate_reports_warnings(cli_runner: CliRunner, tmp_path: Path):
    dsl = write_dsl(tmp_path, "entity Tag { label: String }")
    result = cli_runner.invoke(app, ["validate", "--dsl", str(dsl)])
    assert result.exit_code == 0
    assert "WARNING: Entity 'Tag' has no primaryKey" in result.stdout


def test_validate_command_with_errors(cli_runner: CliRunner, tmp_path: Path):
    dsl = write_dsl(
        tmp_path,
        "entity User { id: UUID primaryKey, age: Integer }\n"
        "page Users { type: table, entity: Account }\n",
    )
    result = cli_runner.invoke(app, ["validate", "--dsl", str(dsl)])
    assert result.exit_code == 1
    assert "Validation failed" in result.stderr
    assert "Unknown type 'Integer' for field 'User.age'" in result.stderr
    assert "Page 'Users' references unknown entity 'Account'" in result.stderr


def test_validate_vscode_format(cli_runner: CliRunner, tmp_path: Path):
    dsl = write_dsl(tmp_path, "entity User {\n  id UUID\n}\n")
    result = cli_runner.invoke(app, ["validate", "--dsl", str(dsl), "--format", "vscode"])
    assert result.exit_code == 1
    assert f"{dsl}:2:6: error: Expected ':' after field 'id'" in result.stderr


def test_validate_unknown_format(cli_runner: CliRunner, manifest: Path):
    result = cli_runner.invoke(app, ["validate", "--manifest", str(manifest), "--format", "xml"])
    assert result.exit_code == 2


def test_validate_missing_manifest(cli_runner: CliRunner, tmp_path: Path):
    result = cli_runner.invoke(app, ["validate", "--manifest", str(tmp_path / "formwork.toml")])
    assert result.exit_code == 1
    assert "Manifest not found" in result.stderr


def test_inspect_json(cli_runner: CliRunner, manifest: Path):
    result = cli_runner.invoke(app, ["inspect", "--manifest", str(manifest), "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["name"] == "blog"
    assert [e["name"] for e in data["entities"]] == ["User", "Post"]


def test_inspect_summary(cli_runner: CliRunner, manifest: Path):
    result = cli_runner.invoke(app, ["inspect", "--manifest", str(manifest)])
    assert result.exit_code == 0
    assert "PostDetails" in result.stdout
    assert "WelcomeUser" in result.stdout


def test_generators_command(cli_runner: CliRunner):
    result = cli_runner.invoke(app, ["generators"])
    assert result.exit_code == 0
    for name in ("backend", "frontend", "infrastructure"):
        assert name in result.stdout


def test_build_command(cli_runner: CliRunner, manifest: Path):
    result = cli_runner.invoke(app, ["build", "--manifest", str(manifest)])
    assert result.exit_code == 0, result.output
    build = manifest.parent / "build"
    assert (build / "backend" / "app" / "main.py").is_file()
    assert (build / "frontend" / "src" / "routes.tsx").is_file()
    assert (build / "infrastructure" / ".env.example").is_file()


def test_build_selected_generator_and_output(cli_runner: CliRunner, manifest: Path, tmp_path: Path):
    out = tmp_path / "elsewhere"
    result = cli_runner.invoke(
        app, ["build", "--manifest", str(manifest), "-g", "infrastructure", "-o", str(out)]
    )
    assert result.exit_code == 0, result.output
    assert (out / "infrastructure" / "Dockerfile").is_file()
    assert not (out / "backend").exists()


def test_build_failure_exits_nonzero(cli_runner: CliRunner, manifest: Path):
    result = cli_runner.invoke(app, ["build", "--manifest", str(manifest), "-g", "frontend"])
    assert result.exit_code == 1
    assert "api_schema" in result.stderr


def test_build_clean_removes_stale_files(cli_runner: CliRunner, manifest: Path):
    stale = manifest.parent / "build" / "backend" / "stale.py"
    stale.parent.mkdir(parents=True)
    stale.write_text("old = True\n", encoding="utf-8")

    result = cli_runner.invoke(app, ["build", "--manifest", str(manifest), "-g", "backend", "--clean"])

    assert result.exit_code == 0, result.output
    assert not stale.exists()


def test_migration_flags_are_exclusive(cli_runner: CliRunner, manifest: Path):
    result = cli_runner.invoke(
        app, ["build", "--manifest", str(manifest), "--skip-migrations", "--migrations-only"]
    )
    assert result.exit_code == 2


def test_migrations_only_needs_backend(cli_runner: CliRunner, manifest: Path):
    result = cli_runner.invoke(app, ["build", "--manifest", str(manifest), "--migrations-only"])
    assert result.exit_code == 1
    assert "no generated backend" in result.stderr


def test_build_runs_configured_migrations(cli_runner: CliRunner, manifest: Path):
    command = json.dumps([sys.executable, "-c", "print('migrated')"])
    manifest.write_text(
        manifest.read_text(encoding="utf-8") + f"\n[migrations]\nenabled = true\ncommand = {command}\n",
        encoding="utf-8",
    )

    result = cli_runner.invoke(app, ["build", "--manifest", str(manifest), "-g", "backend"])
    assert result.exit_code == 0, result.output
    assert "Migrations applied" in result.stdout

    skipped = cli_runner.invoke(app, ["build", "--manifest", str(manifest), "-g", "backend", "--skip-migrations"])
    assert skipped.exit_code == 0
    assert "Migrations applied" not in skipped.stdout


def test_failing_migration_exits_nonzero(cli_runner: CliRunner, manifest: Path):
    command = json.dumps([sys.executable, "-c", "import sys; print('no such revision'); sys.exit(2)"])
    manifest.write_text(
        manifest.read_text(encoding="utf-8") + f"\n[migrations]\nenabled = true\ncommand = {command}\n",
        encoding="utf-8",
    )

    result = cli_runner.invoke(app, ["build", "--manifest", str(manifest), "-g", "backend"])
    assert result.exit_code == 1
    assert "exit code 2" in result.stderr
    assert "no such revision" in result.stderr


def test_init_creates_buildable_project(cli_runner: CliRunner, tmp_path: Path):
    target = tmp_path / "My Shop"
    result = cli_runner.invoke(app, ["init", str(target)])
    assert result.exit_code == 0, result.output
    assert f"Created {target / 'formwork.toml'}" in result.stdout
    assert 'name = "my-shop"' in (target / "formwork.toml").read_text(encoding="utf-8")

    manifest = target / "formwork.toml"
    validated = cli_runner.invoke(app, ["validate", "--manifest", str(manifest)])
    assert validated.exit_code == 0, validated.output
    assert "WARNING" not in validated.stdout

    built = cli_runner.invoke(app, ["build", "--manifest", str(manifest)])
    assert built.exit_code == 0, built.output
    assert (target / "build" / "backend" / "app" / "models.py").is_file()


def test_init_with_name(cli_runner: CliRunner, tmp_path: Path):
    result = cli_runner.invoke(app, ["init", str(tmp_path), "--name", "inventory"])
    assert result.exit_code == 0, result.output
    assert 'config { name: "inventory", db: sqlite }' in (tmp_path / "app.fw").read_text(encoding="utf-8")


def test_init_refuses_to_overwrite(cli_runner: CliRunner, tmp_path: Path):
    (tmp_path / "app.fw").write_text("entity Keep { id: UUID primaryKey }\n", encoding="utf-8")

    result = cli_runner.invoke(app, ["init", str(tmp_path)])
    assert result.exit_code == 1
    assert "already contains app.fw" in result.stderr
    assert not (tmp_path / "formwork.toml").exists()
    assert (tmp_path / "app.fw").read_text(encoding="utf-8") == "entity Keep { id: UUID primaryKey }\n"

    forced = cli_runner.invoke(app, ["init", str(tmp_path), "--force"])
    assert forced.exit_code == 0, forced.output
    assert "entity Item" in (tmp_path / "app.fw").read_text(encoding="utf-8")
