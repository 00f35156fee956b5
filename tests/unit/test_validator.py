"""Tests for semantic validation."""

from pathlib import Path

import pytest

from formwork.core.errors import ValidationError
from formwork.core.parser import validate_source

FILE = Path("test.fw")

USER = "entity User { id: UUID primaryKey, email: String unique }\n"


def errors_for(text: str) -> list:
    with pytest.raises(ValidationError) as exc_info:
        validate_source(text, FILE)
    return exc_info.value.errors


def messages_for(text: str) -> list[str]:
    return [err.message for err in errors_for(text)]


class TestValidPrograms:
    def test_blog_is_valid(self, blog_dsl):
        validated = validate_source(blog_dsl, FILE)
        assert validated.app_name == "blog"
        assert validated.warnings == ()
        assert validated.config.auth.provider == "jwt"
        assert validated.config.integrations.enabled == ["email"]

    def test_role_enum_extends_roles(self, blog_dsl):
        validated = validate_source(blog_dsl, FILE)
        assert {"ADMIN", "USER", "GUEST", "EDITOR", "READER"} <= validated.symbols.roles
        assert validated.symbols.roles_enum == "Role"

    def test_missing_primary_key_is_a_warning(self):
        validated = validate_source("entity Tag { label: String }", FILE)
        assert validated.warnings == ("Entity 'Tag' has no primaryKey; an 'id: UUID' key will be added",)

    def test_named_relations_disambiguate(self):
        validate_source(
            USER
            + "entity Post {\n"
            + '  id: UUID primaryKey\n'
            + '  author: User @relation(name: "Authored")\n'
            + '  editor: User @relation(name: "Edited")\n'
            + "}\n",
            FILE,
        )


class TestRelations:
    def test_two_unnamed_relations_name_both_fields(self):
        errors = errors_for(USER + "entity Post { id: UUID primaryKey, author: User, editor: User }")
        assert len(errors) == 1
        error = errors[0]
        assert "author" in error.message and "editor" in error.message
        assert error.subject == ("Post", "author", "editor")
        assert error.position.line == 2

    def test_one_named_one_unnamed_still_ambiguous(self):
        messages = messages_for(
            USER + 'entity Post { id: UUID primaryKey, author: User @relation(name: "Authored"), editor: User }'
        )
        assert any("2 relations to 'User'" in m for m in messages)

    def test_relation_name_reused_across_pairs(self):
        messages = messages_for(
            USER
            + 'entity Post { id: UUID primaryKey, author: User @relation(name: "Owns") }\n'
            + 'entity Blog { id: UUID primaryKey, owner: User @relation(name: "Owns") }\n'
        )
        assert any("Relation name 'Owns' must name exactly one pair" in m for m in messages)

    def test_relation_attribute_on_scalar(self):
        messages = messages_for('entity Post { id: UUID primaryKey, title: String @relation(name: "X") }')
        assert messages == ["@relation on 'Post.title' requires an entity type, got 'String'"]


class TestAuthConfig:
    def test_jwt_without_user_entity(self):
        errors = errors_for(USER + "config auth { provider: jwt }")
        assert len(errors) == 1
        assert errors[0].message == "Auth config for provider 'jwt' is missing required property 'userEntity'"
        assert "userEntity" in errors[0].subject

    def test_unknown_provider(self):
        messages = messages_for(USER + "config auth { provider: okta, userEntity: User }")
        assert len(messages) == 1
        assert messages[0].startswith("Unknown auth provider 'okta'")

    def test_unknown_user_entity(self):
        messages = messages_for(USER + "config auth { provider: jwt, userEntity: Account }")
        assert messages == ["Auth config userEntity references unknown entity 'Account'"]

    def test_unknown_property_rejected(self):
        messages = messages_for(USER + "config auth { provider: jwt, userEntity: User, ttl: 5 }")
        assert messages == ["Auth config for provider 'jwt' has unknown property 'ttl'"]

    def test_integration_missing_api_key(self):
        messages = messages_for(USER + "config integrations { email: { provider: sendgrid } }")
        assert messages == ["Integrations config for provider 'sendgrid' is missing required property 'apiKey'"]

    def test_bad_db(self):
        messages = messages_for(USER + "config { db: mysql }")
        assert messages == ["Config 'db' must be one of: postgresql, sqlite (got mysql)"]

    def test_unknown_section(self):
        messages = messages_for(USER + "config cache { ttl: 5 }")
        assert messages == ["Unknown config section 'cache' (expected one of: auth, integrations)"]


class TestPages:
    def test_unknown_entity_reports_exactly_one_error(self):
        errors = errors_for(USER + "page Posts { type: table, entity: Article }")
        assert len(errors) == 1
        assert errors[0].message == "Page 'Posts' references unknown entity 'Article'"
        assert errors[0].subject == ("Posts", "Article")

    def test_duplicate_page_name(self):
        messages = messages_for(
            USER + "page Users { type: table, entity: User }\npage Users { type: form, entity: User }"
        )
        assert messages == ["Duplicate page name 'Users'"]

    def test_unknown_role(self):
        messages = messages_for(USER + "page Users { type: table, entity: User, permissions: [OWNER] }")
        assert messages == ["Page 'Users' references unknown role 'OWNER' (known roles: ADMIN, GUEST, USER)"]

    def test_column_must_be_entity_field(self):
        messages = messages_for(USER + "page Users { type: table, entity: User, columns: [email, name] }")
        assert messages == ["Page 'Users' column 'name' is not a field of entity 'User'"]

    def test_route_must_start_with_slash(self):
        messages = messages_for(USER + 'page Users { type: table, entity: User, route: "users" }')
        assert messages == ["Page 'Users' route must be a string starting with '/'"]

    def test_custom_page_needs_component(self):
        messages = messages_for("page Home { type: custom }")
        assert messages == ["Custom page 'Home' requires a 'component' path string"]


class TestEntities:
    def test_duplicate_field(self):
        messages = messages_for("entity User { id: UUID primaryKey, email: String, email: String }")
        assert messages == ["Entity 'User' has duplicate field 'email'"]

    def test_multiple_primary_keys(self):
        messages = messages_for("entity User { id: UUID primaryKey, email: String primaryKey }")
        assert messages == ["Entity 'User' has multiple primary keys: id, email"]

    def test_unknown_type(self):
        messages = messages_for("entity User { id: UUID primaryKey, age: Integer }")
        assert messages == ["Unknown type 'Integer' for field 'User.age'"]

    def test_id_without_primary_key(self):
        messages = messages_for("entity User { id: UUID, email: String }")
        assert len(messages) == 1
        assert "has a field 'id' but no primaryKey" in messages[0]

    def test_default_must_match_type(self):
        messages = messages_for("entity Post { id: UUID primaryKey, views: Int default(\"many\") }")
        assert messages == ["Default 'many' does not match type Int of 'Post.views'"]

    def test_enum_default_must_be_member(self):
        messages = messages_for(
            "enum Status { DRAFT }\nentity Post { id: UUID primaryKey, status: Status default(LIVE) }"
        )
        assert len(messages) == 1
        assert "must be a member of enum 'Status'" in messages[0]

    def test_virtual_cycle(self):
        messages = messages_for(
            "entity Box {\n"
            "  id: UUID primaryKey\n"
            '  a: Int @virtual(from: "b + 1")\n'
            '  b: Int @virtual(from: "a + 1")\n'
            "}"
        )
        assert any(m.startswith("Circular virtual field dependency in entity 'Box'") for m in messages)

    def test_virtual_unknown_reference(self):
        messages = messages_for('entity User { id: UUID primaryKey, full: String @virtual(from: "first + last") }')
        assert messages == [
            "Virtual field 'User.full' references first: 'first' is not a field of entity 'User'",
            "Virtual field 'User.full' references last: 'last' is not a field of entity 'User'",
        ]

    def test_virtual_over_unicode_field(self):
        validate_source(
            'entity U { id: UUID primaryKey, naïve: String, s: String @virtual(from: "naïve + \'!\'") }', FILE
        )

    def test_virtual_with_superscript_is_reported(self):
        messages = messages_for('entity U { id: UUID primaryKey, x: Int, s: Int @virtual(from: "x²") }')
        assert messages == ["Invalid @virtual expression on 'U.s': Unexpected character '²' at offset 1"]


class TestViewsAndWorkflows:
    def test_view_unknown_entity(self):
        messages = messages_for("view Summary { from: Account, fields: [email] }")
        assert messages == ["View 'Summary' references unknown entity 'Account'"]

    def test_view_field_through_relation(self):
        validate_source(
            USER
            + "entity Post { id: UUID primaryKey, author: User }\n"
            + "view PostRow { from: Post, fields: [{ name: authorEmail, field: author.email }] }",
            FILE,
        )

    def test_workflow_requires_steps(self):
        messages = messages_for('workflow Noop { trigger: "user.created" }')
        assert messages == ["Workflow 'Noop' requires a non-empty 'steps' array"]

    def test_workflow_input_must_be_trigger_reference(self):
        messages = messages_for(
            'workflow W { trigger: "user.created", steps: [{ action: notify, inputs: { to: user.email } }] }'
        )
        assert len(messages) == 1
        assert "must be a literal or a trigger.* reference" in messages[0]


class TestAggregation:
    def test_all_errors_are_collected(self):
        errors = errors_for(
            "entity User { id: UUID primaryKey, age: Integer }\n"
            "page Posts { type: table, entity: Article }\n"
            "config auth { provider: jwt }\n"
        )
        assert len(errors) == 3

    def test_error_carries_position(self):
        errors = errors_for(USER + "page Posts { type: table, entity: Article }")
        assert errors[0].position.line == 2
        assert errors[0].format(FILE).startswith("test.fw:2:")
