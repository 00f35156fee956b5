"""Shared pytest fixtures for formwork tests."""

from pathlib import Path

import pytest

from formwork.core import ir
from formwork.core.parser import build_source

BLOG_DSL = """\
// A small blog
config { name: "blog", db: sqlite }

config auth {
  provider: jwt
  userEntity: User
  secret: env(JWT_SECRET)
  roles: Role
}

config integrations {
  email: { provider: sendgrid, apiKey: env(SENDGRID_API_KEY), defaultFrom: "hi@example.com" }
}

enum Role { ADMIN, EDITOR, READER }
enum Status { DRAFT, PUBLISHED }

entity User {
  id: UUID primaryKey
  email: String unique
  firstName: String
  lastName: String
  role: Role default(READER)
  posts: Post[]
  fullName: String @virtual(from: "firstName + ' ' + lastName")
}

entity Post {
  id: UUID primaryKey
  title: String
  body: Text optional
  status: Status default(DRAFT)
  author: User
  createdAt: DateTime default(now)
}

page Posts {
  type: table
  entity: Post
  permissions: [ADMIN, EDITOR]
  columns: [title, { field: author, label: "Author" }, status]
}

page PostForm { type: form, entity: Post, permissions: [EDITOR] }
page PostDetails { type: details, entity: Post }
page Dashboard { type: custom, component: "./components/Dashboard" }

view UserSummary {
  from: User
  fields: [email, { name: displayName, expression: "fullName + ' <' + email + '>'" }]
}

workflow WelcomeUser {
  trigger: "user.created"
  steps: [{ action: sendEmail, inputs: { to: trigger.user.email, subject: "Welcome" } }]
}
"""

MINIMAL_DSL = """\
entity User { id: UUID primaryKey, email: String unique }
entity Post { id: UUID primaryKey, author: User }
page Posts { type: table, entity: Post, permissions: ["ADMIN"] }
"""


@pytest.fixture
def blog_dsl() -> str:
    return BLOG_DSL


@pytest.fixture
def minimal_dsl() -> str:
    return MINIMAL_DSL


@pytest.fixture
def blog_spec() -> ir.AppSpec:
    """AppSpec for the blog DSL."""
    return build_source(BLOG_DSL, Path("blog.fw"))


@pytest.fixture
def minimal_spec() -> ir.AppSpec:
    return build_source(MINIMAL_DSL, Path("app.fw"), default_name="minimal")


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project directory holding formwork.toml and the blog DSL."""
    (tmp_path / "app.fw").write_text(BLOG_DSL, encoding="utf-8")
    (tmp_path / "formwork.toml").write_text(
        '[project]\nname = "blog"\ndsl = "app.fw"\n\n[generate]\noutput = "build"\n',
        encoding="utf-8",
    )
    return tmp_path
