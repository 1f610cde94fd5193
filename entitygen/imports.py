# File: entitygen/imports.py
"""
entitygen - Import Resolver
=============================
Builds the per-file map of short class names to fully-qualified names
from PHP ``use`` statements.

Handled shapes::

    use App\\Casts\\AsUuid;                  # AsUuid  -> App\\Casts\\AsUuid
    use App\\Casts\\AsUuid as Uuid;          # Uuid    -> App\\Casts\\AsUuid
    use App\\Casts\\{AsMoney, AsJson as J};  # AsMoney -> App\\Casts\\AsMoney
                                            # J       -> App\\Casts\\AsJson

``use function`` / ``use const`` imports are skipped since they never name
a class.  Later declarations overwrite earlier ones for the same short
name.  Nothing here raises: an unreadable clause is simply ignored.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from tree_sitter import Node, Tree

from entitygen.php_parser import find_nodes, name_text, named_children, of_type

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.imports")

ImportMap = Dict[str, str]

_CLAUSE_TYPES = ("namespace_use_clause", "namespace_use_group_clause")
_NON_CLASS_KINDS = frozenset({"function", "const"})


def _is_non_class_import(node: Node) -> bool:
    return any(not c.is_named and c.type.lower() in _NON_CLASS_KINDS for c in node.children)


def _last_segment(qualified: str) -> str:
    return qualified.rsplit("\\", 1)[-1]


def _split_clause(clause: Node) -> Optional[Tuple[str, Optional[str]]]:
    """Return ``(qualified name, alias)`` for a single use clause."""
    parts: List[Node] = named_children(clause)
    if not parts:
        return None

    name: str = name_text(parts[0]).lstrip("\\")
    if not name:
        return None

    alias: Optional[str] = None
    if len(parts) > 1:
        alias_node: Node = parts[-1]
        if alias_node.type == "namespace_aliasing_clause":
            inner: List[Node] = named_children(alias_node)
            alias_node = inner[-1] if inner else alias_node
        alias = name_text(alias_node) or None

    return name, alias


def collect_imports(tree: Tree) -> ImportMap:
    """
    Collect every class import in *tree*.

    Returns:
        Mapping of short name (alias, else last path segment) to the
        fully-qualified name without a leading backslash.
    """
    imports: ImportMap = {}

    for declaration in find_nodes(tree.root_node, of_type("namespace_use_declaration")):
        if _is_non_class_import(declaration):
            continue

        group: Optional[Node] = None
        prefix: str = ""
        for child in declaration.named_children:
            if child.type == "namespace_use_group":
                group = child
            elif child.type == "namespace_name":
                prefix = name_text(child).lstrip("\\")

        if group is not None:
            # use App\Casts\{AsUuid, AnotherCast};
            for clause in group.named_children:
                if clause.type not in _CLAUSE_TYPES or _is_non_class_import(clause):
                    continue
                split = _split_clause(clause)
                if split is None:
                    continue
                name, alias = split
                segment: str = _last_segment(name)
                imports[alias or segment] = f"{prefix}\\{segment}" if prefix else segment
            continue

        # use App\Casts\AsUuid;
        for clause in declaration.named_children:
            if clause.type not in _CLAUSE_TYPES or _is_non_class_import(clause):
                continue
            split = _split_clause(clause)
            if split is None:
                continue
            name, alias = split
            imports[alias or _last_segment(name)] = name

    logger.debug("Collected %d import(s)", len(imports))
    return imports


def qualify(class_name: str) -> str:
    """Normalise a class name to exactly one leading backslash."""
    return "\\" + class_name.lstrip("\\")


def resolve_class_name(class_name: str, imports: ImportMap) -> str:
    """
    Resolve a class reference as written in source to its qualified form.

    Short names found in *imports* are expanded; anything else is taken
    to be qualified already.  The result always starts with ``\\``.
    """
    bare: str = class_name.lstrip("\\")
    if bare in imports:
        return qualify(imports[bare])
    return qualify(bare)


__all__: List[str] = [
    "ImportMap",
    "collect_imports",
    "qualify",
    "resolve_class_name",
]
