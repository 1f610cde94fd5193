"""
tests/test_templates.py
Unit tests for entitygen.templates (EntityTemplate, build_entity_definition).

Tests cover:
- Bookkeeping column exclusion and column ordering
- Import collection (used class types only, sorted, de-duplicated)
- Data / Resource base class selection
- Exact layout of the rendered class
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from entitygen.models import BaseClassKind, EntityDefinition
from entitygen.templates import EntityTemplate, build_entity_definition

CARBON: str = "\\Illuminate\\Support\\Carbon"


def _definition(
    columns: List[str],
    types: Optional[Dict[str, str]] = None,
    resource: bool = False,
) -> EntityDefinition:
    return build_entity_definition(
        namespace="App\\Entities",
        class_name="UserEntity",
        columns=columns,
        column_types=types or {},
        base_class=BaseClassKind.RESOURCE if resource else BaseClassKind.DATA,
    )


@pytest.fixture(scope="module")
def template() -> EntityTemplate:
    return EntityTemplate()


# ---------------------------------------------------------------------------
# Definition building
# ---------------------------------------------------------------------------


class TestBuildEntityDefinition:

    def test_bookkeeping_columns_are_dropped_anywhere(self) -> None:
        definition = _definition(["created_at", "id", "deleted_at", "name", "updated_at"])
        assert definition.property_names == ["id", "name"]

    def test_column_order_is_kept(self) -> None:
        definition = _definition(["zeta", "alpha", "mid"])
        assert definition.property_names == ["zeta", "alpha", "mid"]

    def test_missing_types_default_to_string(self) -> None:
        definition = _definition(["id", "age"], {"age": "int"})
        assert [p.type_name for p in definition.properties] == ["string", "int"]

    def test_types_for_unknown_columns_are_ignored(self) -> None:
        definition = _definition(["id"], {"ghost": CARBON})
        assert definition.imports == ["use Spatie\\LaravelData\\Data;"]

    def test_shared_class_type_is_imported_once(self) -> None:
        definition = _definition(
            ["email_verified_at", "last_login_at"],
            {"email_verified_at": CARBON, "last_login_at": CARBON},
        )
        assert definition.imports == [
            "use Illuminate\\Support\\Carbon;",
            "use Spatie\\LaravelData\\Data;",
        ]

    def test_imports_are_sorted(self) -> None:
        definition = _definition(
            ["a", "b", "c"],
            {"a": "\\Zed\\Type", "b": CARBON, "c": "\\App\\Support\\Money"},
        )
        assert definition.imports == sorted(definition.imports)
        assert len(definition.imports) == 4

    def test_resource_base_class(self) -> None:
        definition = _definition(["id"], resource=True)
        assert definition.base_class is BaseClassKind.RESOURCE
        assert definition.imports == ["use Spatie\\LaravelData\\Resource;"]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestEntityTemplate:

    def test_full_layout(self, template: EntityTemplate) -> None:
        definition = _definition(
            ["id", "name", "email_verified_at", "created_at", "updated_at"],
            {"email_verified_at": CARBON},
        )
        assert template.render(definition) == (
            "<?php\n"
            "\n"
            "declare(strict_types=1);\n"
            "\n"
            "namespace App\\Entities;\n"
            "\n"
            "use Illuminate\\Support\\Carbon;\n"
            "use Spatie\\LaravelData\\Data;\n"
            "\n"
            "final class UserEntity extends Data\n"
            "{\n"
            "    public function __construct(\n"
            "        public readonly string $id,\n"
            "        public readonly string $name,\n"
            "        public readonly Carbon $email_verified_at\n"
            "    ) {\n"
            "    }\n"
            "}\n"
        )

    def test_no_trailing_comma(self, template: EntityTemplate) -> None:
        rendered = template.render(_definition(["id", "name"]))
        assert "$name\n    ) {" in rendered
        assert ",\n    )" not in rendered

    def test_builtin_types_are_not_imported(self, template: EntityTemplate) -> None:
        rendered = template.render(_definition(["flag", "tags"], {"flag": "bool", "tags": "array"}))
        assert "public readonly bool $flag," in rendered
        assert "public readonly array $tags\n" in rendered
        assert rendered.count("use ") == 1

    def test_resource_class(self, template: EntityTemplate) -> None:
        rendered = template.render(_definition(["id"], resource=True))
        assert "final class UserEntity extends Resource\n" in rendered

    def test_render_is_deterministic(self, template: EntityTemplate) -> None:
        definition = _definition(["id", "at"], {"at": CARBON})
        assert template.render(definition) == template.render(definition)

    def test_short_name_collision_is_reported(self, template: EntityTemplate, caplog) -> None:
        definition = _definition(
            ["a", "b"], {"a": "\\App\\Support\\Money", "b": "\\Brick\\Money"}
        )
        with caplog.at_level("WARNING", logger="entitygen.templates"):
            rendered = template.render(definition)
        assert "share the short name Money" in caplog.text
        assert "public readonly Money $a," in rendered
        assert "public readonly Money $b\n" in rendered
