"""Tests for formwork.toml loading."""

from pathlib import Path

import pytest

from formwork.core.errors import ConfigError
from formwork.core.manifest import load_manifest


def write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "formwork.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults(tmp_path: Path):
    manifest = load_manifest(write(tmp_path, ""))

    assert manifest.name == tmp_path.resolve().name
    assert manifest.dsl == tmp_path / "app.fw"
    assert manifest.generate.output == tmp_path / "build"
    assert manifest.generate.generators == ["backend", "infrastructure", "frontend"]
    assert manifest.generate.options == {}
    assert manifest.migrations.enabled is False
    assert manifest.migrations.command == ["alembic", "upgrade", "head"]
    assert manifest.migrations.timeout == 120.0


def test_full_manifest(tmp_path: Path):
    manifest = load_manifest(
        write(
            tmp_path,
            """
[project]
name = "blog"
dsl = "spec/blog.fw"

[generate]
output = "out"
generators = ["backend"]

[generate.options]
integrations = ["email"]

[migrations]
enabled = true
command = ["alembic", "upgrade", "+1"]
timeout = 30
""",
        )
    )

    assert manifest.name == "blog"
    assert manifest.dsl == tmp_path / "spec" / "blog.fw"
    assert manifest.generate.output == tmp_path / "out"
    assert manifest.generate.generators == ["backend"]
    assert manifest.generate.options == {"integrations": ["email"]}
    assert manifest.migrations.enabled is True
    assert manifest.migrations.command == ["alembic", "upgrade", "+1"]
    assert manifest.migrations.timeout == 30.0


def test_missing_manifest(tmp_path: Path):
    with pytest.raises(ConfigError, match="Manifest not found"):
        load_manifest(tmp_path / "formwork.toml")


@pytest.mark.parametrize(
    "text,message",
    [
        ("[project\n", "invalid TOML"),
        ('generate = "build"\n', r"\[generate\] must be a table"),
        ('[generate]\ngenerators = ["mobile"]\n', r"unknown generator\(s\) mobile"),
        ('[generate]\ngenerators = "backend"\n', "generate.generators must be a list of strings"),
        ("[generate.options]\ncache = true\n", r"unknown generator option\(s\) cache"),
        ("[migrations]\ncommand = [1, 2]\n", "migrations.command must be a list of strings"),
        ("[migrations]\ntimeout = 0\n", "migrations.timeout must be a positive number"),
        ("[migrations]\ntimeout = true\n", "migrations.timeout must be a positive number"),
    ],
)
def test_malformed_manifest(tmp_path: Path, text: str, message: str):
    with pytest.raises(ConfigError, match=message):
        load_manifest(write(tmp_path, text))
