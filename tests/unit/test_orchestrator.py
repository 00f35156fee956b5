"""Tests for the generation orchestrator."""

from pathlib import Path

import pytest

from formwork.core.errors import ConfigError
from formwork.stacks import REGISTRY
from formwork.stacks.base import Generator
from formwork.stacks.orchestrator import generate

ALL = ["backend", "infrastructure", "frontend"]


class ExplodingGenerator(Generator):
    name = "backend"
    description = "always fails"
    provides = ("api_schema",)

    def render(self, spec, options, artifacts):
        raise RuntimeError("boom")


class TestGenerate:
    def test_writes_every_tree(self, blog_spec, tmp_path: Path):
        report = generate(blog_spec, tmp_path, ALL)

        assert report.ok
        assert set(report.successes) == set(ALL)
        assert (tmp_path / "backend" / "app" / "models.py").is_file()
        assert (tmp_path / "frontend" / "src" / "api" / "client.ts").is_file()
        assert (tmp_path / "infrastructure" / "docker-compose.yml").is_file()
        assert (tmp_path / "backend" / "openapi.json") in report.successes["backend"]

    def test_second_run_writes_nothing(self, blog_spec, tmp_path: Path):
        generate(blog_spec, tmp_path, ALL)
        report = generate(blog_spec, tmp_path, ALL)

        assert report.ok
        assert all(paths == [] for paths in report.successes.values())
        assert report.unchanged["backend"]

    def test_custom_region_survives_regeneration(self, blog_spec, tmp_path: Path):
        generate(blog_spec, tmp_path, ["backend"])
        resolvers = tmp_path / "backend" / "app" / "resolvers.py"
        original = "    return _add(_add(obj.firstName, ' '), obj.lastName)\n"
        edited = "    return f'{obj.firstName} {obj.lastName}'.strip()\n"
        text = resolvers.read_text(encoding="utf-8")
        assert original in text
        resolvers.write_text(text.replace(original, edited), encoding="utf-8")

        report = generate(blog_spec, tmp_path, ["backend"])

        assert resolvers in report.successes["backend"] or resolvers in report.unchanged["backend"]
        assert edited in resolvers.read_text(encoding="utf-8")

    def test_warnings_are_prefixed(self, minimal_spec, tmp_path: Path):
        report = generate(minimal_spec, tmp_path, ["backend"])
        assert report.warnings == [
            "[backend] Page 'Posts' declares permissions but no auth is configured; "
            "its endpoints will reject every request"
        ]

    def test_failure_does_not_stop_other_generators(self, blog_spec, tmp_path: Path, monkeypatch):
        monkeypatch.setitem(REGISTRY, "backend", ExplodingGenerator)

        report = generate(blog_spec, tmp_path, ALL)

        assert not report.ok
        assert report.failures["backend"].message == "RuntimeError: boom"
        assert "infrastructure" in report.successes
        # the frontend needs the schema the backend never produced
        assert "api_schema" in report.failures["frontend"].message
        assert not (tmp_path / "backend").exists()

    def test_frontend_alone_needs_api_schema(self, blog_spec, tmp_path: Path):
        report = generate(blog_spec, tmp_path, ["frontend"])

        assert report.failures["frontend"].message == (
            "Required artifact(s) api_schema not available; enable the generator that provides them"
        )

    def test_unknown_generator(self, blog_spec, tmp_path: Path):
        with pytest.raises(ConfigError, match="Unknown generator\\(s\\) mobile"):
            generate(blog_spec, tmp_path, ["backend", "mobile"])

    def test_options_are_checked(self, blog_spec, tmp_path: Path):
        with pytest.raises(ConfigError, match="contradicts the app config"):
            generate(blog_spec, tmp_path, ALL, {"db": "postgresql"})
