# File: entitygen/templates.py
"""
entitygen - Entity Template Engine
====================================
Turns a model's column list and per-column PHP types into the source of a
Spatie ``laravel-data`` class::

    <?php

    declare(strict_types=1);

    namespace App\\Entities;

    use Illuminate\\Support\\Carbon;
    use Spatie\\LaravelData\\Data;

    final class UserEntity extends Data
    {
        public function __construct(
            public readonly string $name,
            public readonly Carbon $email_verified_at
        ) {
        }
    }

Class types are imported and referenced by their last segment.  Two types
sharing a last segment would collide; that case is not handled.

String assembly uses the ``List[str]`` + ``"\\n".join()`` pattern and the
engine keeps no state between calls.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from entitygen.casts import DEFAULT_TYPE
from entitygen.models import (
    BOOKKEEPING_COLUMNS,
    BaseClassKind,
    EntityDefinition,
    EntityField,
)
from entitygen.utils import build_use_block

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INDENT: str = "    "
_DOUBLE_INDENT: str = "        "


def build_entity_definition(
    namespace: str,
    class_name: str,
    columns: Sequence[str],
    column_types: Mapping[str, str],
    base_class: BaseClassKind = BaseClassKind.DATA,
) -> EntityDefinition:
    """
    Assemble an ``EntityDefinition`` from the database column list.

    Columns drive the property list, in order; bookkeeping timestamps are
    dropped wherever they appear.  Types missing from *column_types*
    default to ``string``.  Imports cover the class types actually used
    plus *base_class*.
    """
    properties: List[EntityField] = [
        EntityField(name=column, type_name=column_types.get(column) or DEFAULT_TYPE)
        for column in columns
        if column not in BOOKKEEPING_COLUMNS
    ]

    import_names: List[str] = [p.import_name for p in properties if p.import_name]
    import_names.append(base_class.import_name)

    return EntityDefinition(
        namespace=namespace,
        class_name=class_name,
        base_class=base_class,
        properties=properties,
        imports=build_use_block(import_names),
    )


class EntityTemplate:
    """Render an ``EntityDefinition`` as PHP source."""

    __slots__ = ()

    def render_constructor_parameters(self, definition: EntityDefinition) -> str:
        params: List[str] = [
            f"{_DOUBLE_INDENT}public readonly {p.php_type} ${p.name}"
            for p in definition.properties
        ]
        return ",\n".join(params)

    def render(self, definition: EntityDefinition) -> str:
        short_names: Dict[str, str] = {}
        for prop in definition.properties:
            if prop.import_name is None:
                continue
            other: Optional[str] = short_names.setdefault(prop.php_type, prop.import_name)
            if other != prop.import_name:
                logger.warning(
                    "Types %s and %s share the short name %s in %s",
                    other,
                    prop.import_name,
                    prop.php_type,
                    definition.class_name,
                )

        lines: List[str] = [
            "<?php",
            "",
            "declare(strict_types=1);",
            "",
            f"namespace {definition.namespace};",
            "",
        ]
        lines.extend(definition.imports)
        lines.extend([
            "",
            f"final class {definition.class_name} extends {definition.base_class.value}",
            "{",
            f"{_INDENT}public function __construct(",
            self.render_constructor_parameters(definition),
            f"{_INDENT}) {{",
            f"{_INDENT}}}",
            "}",
        ])
        return "\n".join(lines) + "\n"


__all__: List[str] = [
    "EntityTemplate",
    "build_entity_definition",
]
