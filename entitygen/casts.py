# File: entitygen/casts.py
"""
entitygen - Cast Analysis & Type Mapping
==========================================
Reads an Eloquent model's ``casts`` declaration out of its syntax tree and
turns cast descriptors into PHP type names.

Pipeline::

    ┌───────────────┐   ┌─────────────────────┐   ┌────────────────┐
    │ locate_casts  │──▶│ extract_literal_map │──▶│ CastTypeMapper │──▶ ColumnTypeMap
    └───────────────┘   └─────────────────────┘   └───────┬────────┘
                                                          │ \\App\\Casts\\...
                                                          ▼
                                                 CustomCastResolver

Both declaration styles are understood::

    protected $casts = ['is_admin' => 'boolean'];

    protected function casts(): array
    {
        return ['email_verified_at' => 'datetime', 'id' => AsUuid::class];
    }

When both exist the method wins on key collisions.

Type mapping is total: every descriptor, including an empty one, maps to
exactly one type name, and anything unknown becomes ``string``.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

from tree_sitter import Node, Tree

from entitygen.imports import ImportMap, resolve_class_name
from entitygen.php_parser import (
    find_nodes,
    find_property_default,
    first_direct_return,
    has_token,
    method_name,
    method_parameters,
    named_children,
    name_text,
    node_text,
    of_type,
    string_literal_value,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.casts")

CastMap = Dict[str, str]
ColumnTypeMap = Dict[str, str]

# ---------------------------------------------------------------------------
# Type names
# ---------------------------------------------------------------------------

DEFAULT_TYPE: str = "string"
INT_TYPE: str = "int"
FLOAT_TYPE: str = "float"
BOOL_TYPE: str = "bool"
ARRAY_TYPE: str = "array"
COLLECTION_TYPE: str = "\\Illuminate\\Support\\Collection"
DATETIME_TYPE: str = "\\Illuminate\\Support\\Carbon"

# Eloquent cast keyword -> PHP type
_CAST_KEYWORD_MAP: Dict[str, str] = {
    "int": INT_TYPE,
    "integer": INT_TYPE,
    "real": FLOAT_TYPE,
    "float": FLOAT_TYPE,
    "double": FLOAT_TYPE,
    "bool": BOOL_TYPE,
    "boolean": BOOL_TYPE,
    "array": ARRAY_TYPE,
    "json": ARRAY_TYPE,
    "object": ARRAY_TYPE,
    "collection": COLLECTION_TYPE,
    "date": DATETIME_TYPE,
    "datetime": DATETIME_TYPE,
    "immutable_date": DATETIME_TYPE,
    "immutable_datetime": DATETIME_TYPE,
    "timestamp": INT_TYPE,
    "decimal": DEFAULT_TYPE,
}

# PHP built-in return type -> PHP type
_BUILTIN_TYPE_MAP: Dict[str, str] = {
    "int": INT_TYPE,
    "bool": BOOL_TYPE,
    "boolean": BOOL_TYPE,
    "float": FLOAT_TYPE,
    "double": FLOAT_TYPE,
    "string": DEFAULT_TYPE,
    "array": ARRAY_TYPE,
}


# ---------------------------------------------------------------------------
# Literal-map extraction
# ---------------------------------------------------------------------------


def class_constant_reference(node: Node, imports: ImportMap) -> Optional[str]:
    """
    Resolve ``Name::class`` to ``\\Fully\\Qualified\\Name``.

    Returns ``None`` for any other class constant (``Foo::BAR``).
    """
    if node.type != "class_constant_access_expression":
        return None

    parts: List[Node] = named_children(node)
    if len(parts) < 2 or node_text(parts[-1]).lower() != "class":
        return None

    scope: str = name_text(parts[0])
    if not scope or scope.lower() in ("self", "static", "parent"):
        return None

    return resolve_class_name(scope, imports)


def extract_literal_map(node: Optional[Node], imports: ImportMap) -> Dict[str, str]:
    """
    Extract ``'key' => value`` pairs from a PHP array literal.

    Only string-literal keys are kept.  Values must be string literals or
    ``Name::class`` references; other values are dropped without error.
    A missing node or any non-array expression yields ``{}``.
    """
    if node is None or node.type != "array_creation_expression":
        return {}

    result: Dict[str, str] = {}
    for item in node.named_children:
        if item.type != "array_element_initializer" or not has_token(item, "=>"):
            continue

        parts: List[Node] = named_children(item)
        if len(parts) != 2:
            continue

        key: Optional[str] = string_literal_value(parts[0])
        if key is None:
            continue

        value: Optional[str] = string_literal_value(parts[1])
        if value is None:
            value = class_constant_reference(parts[1], imports)

        if value is not None:
            result[key] = value

    return result


# ---------------------------------------------------------------------------
# Cast declaration locator
# ---------------------------------------------------------------------------


def _casts_method(tree: Tree) -> Optional[Node]:
    for method in find_nodes(tree.root_node, of_type("method_declaration")):
        if method_name(method) == "casts" and not method_parameters(method):
            return method
    return None


def locate_casts(tree: Tree, imports: ImportMap) -> CastMap:
    """
    Find the model's cast declaration and return it as a ``CastMap``.

    Property entries are merged first, then ``casts()`` method entries, so
    the method wins on collisions.  A model without casts yields ``{}``.
    """
    property_casts: CastMap = extract_literal_map(
        find_property_default(tree.root_node, "casts"), imports
    )

    method_casts: CastMap = {}
    method: Optional[Node] = _casts_method(tree)
    if method is not None:
        method_casts = extract_literal_map(first_direct_return(method), imports)

    casts: CastMap = {**property_casts, **method_casts}
    logger.debug(
        "Located %d cast(s) (%d from property, %d from method)",
        len(casts),
        len(property_casts),
        len(method_casts),
    )
    return casts


# ---------------------------------------------------------------------------
# Type mapping table
# ---------------------------------------------------------------------------


def map_cast_keyword(descriptor: Optional[str]) -> str:
    """
    Map a built-in cast keyword to a PHP type.

    Matching ignores case, surrounding whitespace and any ``:parameter``
    suffix, so ``'Decimal:2'`` and ``'decimal'`` map alike.
    """
    if not descriptor:
        return DEFAULT_TYPE
    base: str = descriptor.split(":", 1)[0].strip().lower()
    return _CAST_KEYWORD_MAP.get(base, DEFAULT_TYPE)


def map_builtin_type(type_name: str) -> str:
    """Map a PHP built-in return type (``int``, ``?string`` inner, ...)."""
    return _BUILTIN_TYPE_MAP.get(type_name.lower(), DEFAULT_TYPE)


class CustomCastLookup(Protocol):
    def resolve(self, class_name: str) -> Optional[str]: ...


class CastTypeMapper:
    """
    Turn cast descriptors into PHP type names.

    Class references (descriptors starting with ``\\``) are handed to the
    custom cast resolver; when it cannot work out a type the column falls
    back to ``string``.
    """

    __slots__ = ("_custom",)

    def __init__(self, custom: Optional[CustomCastLookup] = None) -> None:
        self._custom: Optional[CustomCastLookup] = custom

    def map(self, descriptor: Optional[str]) -> str:
        if not descriptor:
            return DEFAULT_TYPE

        if descriptor.startswith("\\"):
            resolved: Optional[str] = None
            if self._custom is not None:
                resolved = self._custom.resolve(descriptor)
            if not resolved:
                logger.debug("No type for custom cast %s, using %s", descriptor, DEFAULT_TYPE)
                return DEFAULT_TYPE
            return resolved

        return map_cast_keyword(descriptor)

    def map_all(self, casts: CastMap) -> ColumnTypeMap:
        return {column: self.map(descriptor) for column, descriptor in casts.items()}


__all__: List[str] = [
    "CastMap",
    "ColumnTypeMap",
    "DEFAULT_TYPE",
    "INT_TYPE",
    "FLOAT_TYPE",
    "BOOL_TYPE",
    "ARRAY_TYPE",
    "COLLECTION_TYPE",
    "DATETIME_TYPE",
    "CastTypeMapper",
    "CustomCastLookup",
    "class_constant_reference",
    "extract_literal_map",
    "locate_casts",
    "map_builtin_type",
    "map_cast_keyword",
]
