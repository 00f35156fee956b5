"""
Infrastructure generator.

Generates deployment scaffolding for the backend:
- Dockerfile
- docker-compose.yml, with a postgres service when the app uses postgresql
- .env.example listing every env() variable the app reads
- .github/workflows/ci.yml
- .github/workflows/deploy.yml, building and pushing the backend image
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import yaml

from formwork.core import ir
from formwork.core.naming import kebab_case, snake_case

from ..base import Generator, GeneratorOptions, GeneratorResult, render_template

logger = logging.getLogger(__name__)

TEMPLATE_DIR = "infrastructure"

POSTGRES_IMAGE = "postgres:16-alpine"
PYTHON_VERSION = "3.12"
NODE_VERSION = "20"
IMAGE_REGISTRY = "ghcr.io"


def env_variables(spec: ir.AppSpec) -> list[str]:
    """Sorted names of every env() reference in config and field defaults."""
    names = {ref.env for ref in spec.config.secret_refs()}
    for entity in spec.entities:
        for f in entity.fields:
            if isinstance(f.default, ir.SecretRef):
                names.add(f.default.env)
    names.discard("DATABASE_URL")
    return sorted(names)


def _dump(document: dict[str, Any]) -> str:
    return yaml.dump(document, default_flow_style=False, sort_keys=False)


class InfrastructureGenerator(Generator):
    """Generate Docker, compose and CI configuration."""

    name = "infrastructure"
    description = "Dockerfile, docker-compose, .env.example and CI/CD workflows"

    def render(
        self,
        spec: ir.AppSpec,
        options: GeneratorOptions,
        artifacts: Mapping[str, Any],
    ) -> GeneratorResult:
        result = GeneratorResult(self.name)
        variables = env_variables(spec)

        result.add_file("Dockerfile", render_template(TEMPLATE_DIR, "Dockerfile.j2", app_name=spec.name))
        result.add_file("docker-compose.yml", _dump(self._compose(spec, options, variables)))
        result.add_file(
            ".env.example",
            render_template(
                TEMPLATE_DIR,
                "env.example.j2",
                app_name=spec.name,
                variables=variables,
                database_url=self._database_url(spec, options, host="localhost"),
            ),
        )
        result.add_file(".github/workflows/ci.yml", _dump(self._ci_workflow(spec, options)))
        result.add_file(".github/workflows/deploy.yml", _dump(self._deploy_workflow(spec, options)))

        logger.debug("Rendered %d infrastructure files", len(result.files))
        return result

    def _database_url(self, spec: ir.AppSpec, options: GeneratorOptions, host: str) -> str:
        name = snake_case(spec.name)
        if options.db == ir.DatabaseKind.POSTGRESQL:
            return f"postgresql+psycopg://app:app@{host}:5432/{name}"
        return f"sqlite:///./{name}.db"

    def _compose(self, spec: ir.AppSpec, options: GeneratorOptions, variables: list[str]) -> dict[str, Any]:
        postgres = options.db == ir.DatabaseKind.POSTGRESQL
        environment = [f"DATABASE_URL={self._database_url(spec, options, host='db')}"]
        environment.extend(f"{name}=${{{name}}}" for name in variables)

        backend: dict[str, Any] = {
            "build": {"context": "../backend", "dockerfile": "../infrastructure/Dockerfile"},
            "ports": ["8000:8000"],
            "environment": environment,
        }
        services: dict[str, Any] = {"backend": backend}
        document: dict[str, Any] = {"name": kebab_case(spec.name), "services": services}

        if postgres:
            name = snake_case(spec.name)
            backend["depends_on"] = {"db": {"condition": "service_healthy"}}
            services["db"] = {
                "image": POSTGRES_IMAGE,
                "environment": ["POSTGRES_USER=app", "POSTGRES_PASSWORD=app", f"POSTGRES_DB={name}"],
                "volumes": ["postgres_data:/var/lib/postgresql/data"],
                "healthcheck": {
                    "test": ["CMD-SHELL", f"pg_isready -U app -d {name}"],
                    "interval": "5s",
                    "timeout": "5s",
                    "retries": 5,
                },
            }
            document["volumes"] = {"postgres_data": None}
        return document

    def _ci_workflow(self, spec: ir.AppSpec, options: GeneratorOptions) -> dict[str, Any]:
        backend_job: dict[str, Any] = {
            "runs-on": "ubuntu-latest",
            "defaults": {"run": {"working-directory": "backend"}},
            "env": {"DATABASE_URL": self._database_url(spec, options, host="localhost")},
            "steps": [
                {"uses": "actions/checkout@v4"},
                {"uses": "actions/setup-python@v5", "with": {"python-version": PYTHON_VERSION}},
                {"name": "Install dependencies", "run": "pip install -r requirements.txt"},
                {"name": "Run migrations", "run": "alembic upgrade head"},
                {"name": "Import application", "run": 'python -c "import app.main"'},
            ],
        }
        if options.db == ir.DatabaseKind.POSTGRESQL:
            backend_job["services"] = {
                "postgres": {
                    "image": POSTGRES_IMAGE,
                    "env": {
                        "POSTGRES_USER": "app",
                        "POSTGRES_PASSWORD": "app",
                        "POSTGRES_DB": snake_case(spec.name),
                    },
                    "ports": ["5432:5432"],
                    "options": "--health-cmd pg_isready --health-interval 5s --health-retries 5",
                }
            }

        frontend_job = {
            "runs-on": "ubuntu-latest",
            "if": "hashFiles('frontend/package.json') != ''",
            "defaults": {"run": {"working-directory": "frontend"}},
            "steps": [
                {"uses": "actions/checkout@v4"},
                {"uses": "actions/setup-node@v4", "with": {"node-version": NODE_VERSION}},
                {"name": "Install dependencies", "run": "npm install"},
                {"name": "Build", "run": "npm run build"},
            ],
        }

        return {
            "name": "CI",
            "on": {"push": {"branches": ["main"]}, "pull_request": None},
            "jobs": {"backend": backend_job, "frontend": frontend_job},
        }

    def _deploy_workflow(self, spec: ir.AppSpec, options: GeneratorOptions) -> dict[str, Any]:
        """Build the backend image on main and version tags; tags also migrate a postgres database."""
        image = f"{IMAGE_REGISTRY}/${{{{ github.repository_owner }}}}/{kebab_case(spec.name)}-backend"
        build_job: dict[str, Any] = {
            "runs-on": "ubuntu-latest",
            "permissions": {"contents": "read", "packages": "write"},
            "steps": [
                {"uses": "actions/checkout@v4"},
                {"uses": "docker/setup-buildx-action@v3"},
                {
                    "uses": "docker/login-action@v3",
                    "with": {
                        "registry": IMAGE_REGISTRY,
                        "username": "${{ github.actor }}",
                        "password": "${{ secrets.GITHUB_TOKEN }}",
                    },
                },
                {
                    "id": "meta",
                    "uses": "docker/metadata-action@v5",
                    "with": {
                        "images": image,
                        "tags": "type=ref,event=branch\ntype=semver,pattern={{version}}\ntype=sha\n",
                    },
                },
                {
                    "name": "Build and push backend image",
                    "uses": "docker/build-push-action@v6",
                    "with": {
                        "context": "backend",
                        "file": "infrastructure/Dockerfile",
                        "push": True,
                        "tags": "${{ steps.meta.outputs.tags }}",
                        "labels": "${{ steps.meta.outputs.labels }}",
                        "cache-from": "type=gha",
                        "cache-to": "type=gha,mode=max",
                    },
                },
            ],
        }
        jobs: dict[str, Any] = {"build": build_job}

        if options.db == ir.DatabaseKind.POSTGRESQL:
            jobs["migrate"] = {
                "needs": "build",
                "if": "startsWith(github.ref, 'refs/tags/v')",
                "runs-on": "ubuntu-latest",
                "defaults": {"run": {"working-directory": "backend"}},
                "env": {"DATABASE_URL": "${{ secrets.DATABASE_URL }}"},
                "steps": [
                    {"uses": "actions/checkout@v4"},
                    {"uses": "actions/setup-python@v5", "with": {"python-version": PYTHON_VERSION}},
                    {"name": "Install dependencies", "run": "pip install -r requirements.txt"},
                    {"name": "Run migrations", "run": "alembic upgrade head"},
                ],
            }

        return {
            "name": "Deploy",
            "on": {"push": {"branches": ["main"], "tags": ["v*"]}},
            "jobs": jobs,
        }
