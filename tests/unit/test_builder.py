"""Tests for the IR builder."""

from pathlib import Path

import pydantic
import pytest

from formwork.core import ir
from formwork.core.parser import build_source, load_appspec

FILE = Path("test.fw")


class TestMinimalApp:
    def test_entities_in_declaration_order(self, minimal_spec):
        assert [e.name for e in minimal_spec.entities] == ["User", "Post"]

    def test_author_relation(self, minimal_spec):
        author = minimal_spec.get_entity("Post").get_field("author")
        assert author.is_relation
        assert author.type.ref_entity == "User"
        assert author.relation.target == "User"
        assert author.relation.cardinality == ir.Cardinality.MANY_TO_ONE
        assert author.relation.owns_key

    def test_one_to_many_from_user_side(self, minimal_spec):
        user = minimal_spec.get_entity("User")
        (edge,) = user.relations
        assert edge.is_inverse
        assert edge.target == "Post"
        assert edge.cardinality == ir.Cardinality.ONE_TO_MANY
        assert edge.inverse_field == "author"

    def test_page_defaults(self, minimal_spec):
        page = minimal_spec.pages[0]
        assert page.entity == "Post"
        assert page.permissions == ["ADMIN"]
        assert page.route == "/posts"
        assert page.title == "Posts"
        assert page.kind == ir.PageKind.TABLE

    def test_config_defaults(self, minimal_spec):
        assert minimal_spec.name == "minimal"
        assert minimal_spec.config.db == ir.DatabaseKind.SQLITE
        assert minimal_spec.config.auth is None
        assert minimal_spec.config.integrations.enabled == []


class TestRelations:
    def test_declared_pair(self, blog_spec):
        posts = blog_spec.get_entity("User").get_field("posts")
        author = blog_spec.get_entity("Post").get_field("author")
        assert posts.relation.cardinality == ir.Cardinality.ONE_TO_MANY
        assert author.relation.cardinality == ir.Cardinality.MANY_TO_ONE
        assert posts.relation.name == author.relation.name == "UserToPost"
        assert posts.relation.inverse_field == "author"
        assert author.relation.inverse_field == "posts"
        assert author.relation.owns_key and not posts.relation.owns_key

    def test_declared_pair_has_no_inverse_edges(self, blog_spec):
        user = blog_spec.get_entity("User")
        assert [edge.field for edge in user.relations] == ["posts"]

    def test_many_to_many(self):
        spec = build_source(
            "entity Post { id: UUID primaryKey, tags: Tag[] }\nentity Tag { id: UUID primaryKey, posts: Post[] }",
            FILE,
        )
        tags = spec.get_entity("Post").get_field("tags")
        posts = spec.get_entity("Tag").get_field("posts")
        assert tags.relation.cardinality == ir.Cardinality.MANY_TO_MANY
        assert posts.relation.cardinality == ir.Cardinality.MANY_TO_MANY
        assert not tags.is_stored

    def test_one_to_one_key_on_first_declared_side(self):
        spec = build_source(
            "entity User { id: UUID primaryKey, profile: Profile }\n"
            "entity Profile { id: UUID primaryKey, user: User }",
            FILE,
        )
        profile = spec.get_entity("User").get_field("profile")
        user = spec.get_entity("Profile").get_field("user")
        assert profile.relation.cardinality == ir.Cardinality.ONE_TO_ONE
        assert user.relation.cardinality == ir.Cardinality.ONE_TO_ONE
        assert profile.relation.owns_key
        assert not user.relation.owns_key

    def test_named_relations(self):
        spec = build_source(
            "entity User { id: UUID primaryKey }\n"
            "entity Post {\n"
            "  id: UUID primaryKey\n"
            '  author: User @relation(name: "Authored")\n'
            '  editor: User @relation(name: "Edited")\n'
            "}",
            FILE,
        )
        user = spec.get_entity("User")
        assert [(edge.name, edge.inverse_field) for edge in user.relations] == [
            ("Authored", "author"),
            ("Edited", "editor"),
        ]


class TestFields:
    def test_implicit_primary_key(self):
        spec = build_source("entity Tag { label: String }", FILE)
        tag = spec.get_entity("Tag")
        assert [f.name for f in tag.fields] == ["id", "label"]
        assert tag.primary_key.name == "id"
        assert tag.primary_key.type.kind == ir.FieldTypeKind.UUID
        assert tag.primary_key.default == "uuid"

    def test_uuid_primary_key_defaults_to_generated(self, minimal_spec):
        assert minimal_spec.get_entity("User").primary_key.default == "uuid"

    def test_virtual_field(self, blog_spec):
        full_name = blog_spec.get_entity("User").get_field("fullName")
        assert full_name.is_virtual
        assert not full_name.is_stored
        assert full_name.is_readonly
        virtual = full_name.virtual
        assert virtual.resolver == "resolve_user_full_name"
        assert virtual.depends_on == ["firstName", "lastName"]
        assert virtual.source == "firstName + ' ' + lastName"
        assert isinstance(virtual.expression, ir.BinaryExpr)

    def test_defaults(self, blog_spec):
        post = blog_spec.get_entity("Post")
        assert post.get_field("status").default == "DRAFT"
        assert post.get_field("status").type.enum_name == "Status"
        assert post.get_field("createdAt").default == "now"
        assert post.get_field("body").is_optional

    def test_enums(self, blog_spec):
        assert blog_spec.get_enum("Role").values == ["ADMIN", "EDITOR", "READER"]


class TestPagesViewsWorkflows:
    def test_columns(self, blog_spec):
        page = blog_spec.get_page("Posts")
        assert [(c.field, c.label) for c in page.columns] == [
            ("title", "title"),
            ("author", "Author"),
            ("status", "status"),
        ]

    def test_custom_page(self, blog_spec):
        page = blog_spec.get_page("Dashboard")
        assert page.kind == ir.PageKind.CUSTOM
        assert page.entity is None
        assert page.component == "./components/Dashboard"
        assert page.route == "/dashboard"
        assert page.is_public

    def test_roles(self, blog_spec):
        assert blog_spec.roles == ["ADMIN", "EDITOR"]

    def test_view(self, blog_spec):
        view = blog_spec.get_view("UserSummary")
        assert view.source_entity == "User"
        email, display = view.fields
        assert (email.name, email.field, email.type) == ("email", "email", "String")
        assert display.is_computed
        assert display.resolver == "resolve_user_summary_display_name"

    def test_workflow(self, blog_spec):
        (workflow,) = blog_spec.workflows
        assert workflow.trigger.event == "user.created"
        (step,) = workflow.steps
        assert step.action == "sendEmail"
        assert step.inputs["to"] == ir.TriggerRef(path=["user", "email"])
        assert step.inputs["subject"] == ir.LiteralInput(value="Welcome")

    def test_auth_config(self, blog_spec):
        auth = blog_spec.config.auth
        assert isinstance(auth, ir.JwtAuth)
        assert auth.user_entity == "User"
        assert auth.secret == ir.SecretRef(env="JWT_SECRET")


class TestDeterminism:
    def test_same_source_same_ir(self, blog_dsl):
        first = build_source(blog_dsl, FILE)
        second = build_source(blog_dsl, FILE)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_appspec_is_frozen(self, blog_spec):
        with pytest.raises(pydantic.ValidationError):
            blog_spec.name = "other"

    def test_load_appspec_uses_file_stem(self, tmp_path, minimal_dsl):
        path = tmp_path / "shop.fw"
        path.write_text(minimal_dsl, encoding="utf-8")
        assert load_appspec(path).name == "shop"
