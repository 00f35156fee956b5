"""Tests for the DSL parser."""

from pathlib import Path

import pytest

from formwork.core import syntax
from formwork.core.errors import DSLSyntaxError
from formwork.core.parser import parse_source

FILE = Path("test.fw")


class TestBlocks:
    def test_entity_fields(self):
        program = parse_source("entity User { id: UUID primaryKey, email: String unique optional }", FILE)
        (entity,) = program.entities
        assert entity.name == "User"
        assert [f.name for f in entity.fields] == ["id", "email"]
        assert entity.fields[0].modifiers == ("primaryKey",)
        assert entity.fields[1].modifiers == ("unique", "optional")

    def test_fields_separated_by_newlines(self):
        program = parse_source("entity User {\n  id: UUID primaryKey\n  posts: Post[]\n}", FILE)
        fields = program.entities[0].fields
        assert [f.name for f in fields] == ["id", "posts"]
        assert fields[1].type_name == "Post"
        assert fields[1].is_list

    def test_attributes(self):
        program = parse_source(
            'entity User {\n'
            '  role: Role default(READER)\n'
            '  fullName: String @virtual(from: "a + b")\n'
            '  manager: User @relation(name: "Manages")\n'
            '}',
            FILE,
        )
        role, full_name, manager = program.entities[0].fields
        default = role.attribute("default")
        assert default is not None
        assert not default.is_annotation
        assert isinstance(default.args[0].value, syntax.NameValue)
        assert default.args[0].value.name == "READER"

        virtual = full_name.attribute("virtual")
        assert virtual.get("from").value.value == "a + b"
        assert manager.attribute("relation").get("name").value.value == "Manages"

    def test_enum(self):
        program = parse_source("enum Status { DRAFT, PUBLISHED ARCHIVED }", FILE)
        assert [v.name for v in program.enums[0].values] == ["DRAFT", "PUBLISHED", "ARCHIVED"]

    def test_page_properties(self):
        program = parse_source(
            'page Posts { type: table, entity: Post, route: "/all", permissions: [ADMIN, "EDITOR"] }',
            FILE,
        )
        page = program.pages[0]
        assert page.name == "Posts"
        assert [p.key for p in page.properties] == ["type", "entity", "route", "permissions"]
        permissions = page.get("permissions").value
        assert isinstance(permissions, syntax.ArrayValue)
        assert len(permissions.items) == 2

    def test_anonymous_and_named_config(self):
        program = parse_source(
            "config { name: blog }\nconfig auth { provider: jwt, secret: env(JWT_SECRET) }",
            FILE,
        )
        anonymous, auth = program.configs
        assert anonymous.name is None
        assert auth.name == "auth"
        secret = auth.get("secret").value
        assert isinstance(secret, syntax.EnvValue)
        assert secret.var == "JWT_SECRET"

    def test_workflow_trigger_reference(self):
        program = parse_source(
            'workflow Welcome { trigger: "user.created", steps: [{ action: sendEmail, inputs: { to: trigger.user.email } }] }',
            FILE,
        )
        step = program.workflows[0].get("steps").value.items[0]
        to = step.get("inputs").value.get("to").value
        assert isinstance(to, syntax.NameValue)
        assert to.parts == ("trigger", "user", "email")
        assert to.is_qualified

    def test_blocks_keep_source_order(self, blog_dsl):
        program = parse_source(blog_dsl, FILE)
        kinds = [type(block).__name__ for block in program.blocks]
        assert kinds[:5] == ["ConfigBlock", "ConfigBlock", "ConfigBlock", "EnumBlock", "EnumBlock"]
        assert kinds[-1] == "WorkflowBlock"


class TestSyntaxErrors:
    def test_missing_colon(self):
        with pytest.raises(DSLSyntaxError) as exc_info:
            parse_source("entity User {\n  id UUID\n}", FILE)
        error = exc_info.value
        assert error.expected == "':' after field 'id'"
        assert error.position.line == 2
        assert error.position.column == 6
        assert str(error.message).startswith("Expected ':' after field 'id', got")

    def test_unknown_modifier(self):
        with pytest.raises(DSLSyntaxError) as exc_info:
            parse_source("entity User { id: UUID primary }", FILE)
        assert "field modifier" in exc_info.value.expected

    def test_unclosed_block(self):
        with pytest.raises(DSLSyntaxError) as exc_info:
            parse_source("entity User { id: UUID", FILE)
        assert exc_info.value.found == "end of file"

    def test_unknown_top_level(self):
        with pytest.raises(DSLSyntaxError):
            parse_source("model User {}", FILE)

    def test_no_partial_tree(self):
        # the first malformed block aborts the parse
        with pytest.raises(DSLSyntaxError):
            parse_source("entity A { id: UUID primaryKey }\npage { }", FILE)


class TestIdempotence:
    def test_same_source_same_tree(self, blog_dsl):
        assert parse_source(blog_dsl, FILE) == parse_source(blog_dsl, FILE)
