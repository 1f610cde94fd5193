# File: entitygen/custom_casts.py
"""
entitygen - Custom Cast Type Resolver
=======================================
Works out the PHP type a custom Eloquent cast produces by reading the
cast class's own source.

For ``\\App\\Casts\\AsMoney`` the resolver:

    1. maps the class to ``<project>/app/Casts/AsMoney.php``;
    2. parses it and takes the first class declaration;
    3. checks that the class implements ``CastsAttributes`` (resolving the
       ``implements`` list through that file's own imports);
    4. reads the declared return type of ``get()``, unwrapping ``?T``.

A class implementing ``Castable`` is followed through ``castUsing()`` to
the cast class it returns, which is resolved the same way.

Only classes under the application namespace (``App\\``) are considered.
Every failure returns ``None``; the caller then falls back to ``string``.
Results are memoised per class, and a class that is already being
resolved further up the stack yields ``None`` so cast cycles terminate.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set

from tree_sitter import Node, Tree

from entitygen.casts import class_constant_reference, map_builtin_type
from entitygen.filestore import SourceFileStore
from entitygen.imports import ImportMap, collect_imports, qualify, resolve_class_name
from entitygen.models import APP_DIRECTORY, APP_NAMESPACE
from entitygen.php_parser import (
    PhpParseError,
    PhpSourceParser,
    class_members,
    first_class,
    first_direct_return,
    is_static,
    method_name,
    name_text,
    named_children,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.custom_casts")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CASTS_ATTRIBUTES_INTERFACE: str = "Illuminate\\Contracts\\Database\\Eloquent\\CastsAttributes"
CASTABLE_INTERFACE: str = "Illuminate\\Contracts\\Database\\Eloquent\\Castable"

_NAME_NODES = frozenset({"name", "qualified_name"})
_NAMED_TYPE_NODES = frozenset({"named_type", "type_name"})


# ---------------------------------------------------------------------------
# Syntax helpers
# ---------------------------------------------------------------------------


def implemented_interfaces(class_node: Node, imports: ImportMap) -> List[str]:
    """Fully-qualified names (no leading ``\\``) the class implements."""
    clause: Optional[Node] = None
    for child in class_node.named_children:
        if child.type == "class_interface_clause":
            clause = child
            break
    if clause is None:
        return []

    interfaces: List[str] = []
    for name_node in named_children(clause):
        written: str = name_text(name_node).lstrip("\\")
        interfaces.append(imports.get(written, written))
    return interfaces


def find_method(class_node: Node, name: str) -> Optional[Node]:
    for method in class_members(class_node, "method_declaration"):
        if method_name(method) == name:
            return method
    return None


def resolve_return_type(type_node: Optional[Node], imports: ImportMap) -> Optional[str]:
    """
    Translate a declared return type into a PHP type name.

    Built-in types go through the builtin table, imported short names are
    expanded, fully-qualified names are kept.  Unions, intersections and
    unknown short names yield ``None``.
    """
    if type_node is None:
        return None

    if type_node.type == "union_type":
        members: List[Node] = named_children(type_node)
        if len(members) != 1:
            return None
        type_node = members[0]

    if type_node.type == "optional_type":
        inner: List[Node] = named_children(type_node)
        if not inner:
            return None
        type_node = inner[0]

    if type_node.type == "primitive_type":
        return map_builtin_type(name_text(type_node))

    if type_node.type in _NAMED_TYPE_NODES:
        inner = named_children(type_node)
        if not inner:
            return None
        type_node = inner[0]

    if type_node.type not in _NAME_NODES:
        return None

    written: str = name_text(type_node)
    if written.startswith("\\"):
        return qualify(written)
    if written in imports:
        return qualify(imports[written])
    return None


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class CustomCastResolver:
    """
    Resolve custom cast classes of a Laravel project to PHP types.

    Args:
        project_path: Root of the Laravel project.
        parser: Shared PHP parser.
        store: File store used to read cast sources.
    """

    def __init__(
        self,
        project_path: Path,
        parser: Optional[PhpSourceParser] = None,
        store: Optional[SourceFileStore] = None,
    ) -> None:
        self.project_path: Path = project_path
        self._parser: PhpSourceParser = parser or PhpSourceParser()
        self._store: SourceFileStore = store or SourceFileStore()
        self._cache: Dict[str, Optional[str]] = {}
        self._in_progress: Set[str] = set()

    def source_path(self, class_name: str) -> Optional[Path]:
        """
        Map an application class to its source file.

        ``App\\Casts\\AsUuid`` -> ``<project>/app/Casts/AsUuid.php``;
        classes outside ``App\\`` return ``None``.
        """
        bare: str = class_name.lstrip("\\")
        prefix: str = APP_NAMESPACE + "\\"
        if not bare.startswith(prefix):
            return None
        relative: str = bare[len(prefix):].replace("\\", "/") + ".php"
        return self.project_path / APP_DIRECTORY / relative

    def resolve(self, class_name: str) -> Optional[str]:
        """Return the PHP type the cast class produces, or ``None``."""
        bare: str = class_name.lstrip("\\")

        if bare in self._cache:
            return self._cache[bare]

        if bare in self._in_progress:
            logger.debug("Cast cycle detected at %s", bare)
            return None

        self._in_progress.add(bare)
        try:
            result: Optional[str] = self._resolve_uncached(bare)
        finally:
            self._in_progress.discard(bare)

        self._cache[bare] = result
        logger.debug("Custom cast %s resolved to %s", bare, result)
        return result

    # -- Internals ----------------------------------------------------------

    def _load(self, path: Path) -> Optional[Tree]:
        if not self._store.exists(path):
            logger.debug("Cast source %s does not exist", path)
            return None
        try:
            return self._parser.parse(self._store.read(path))
        except PhpParseError as exc:
            logger.debug("Cannot parse cast source %s: %s", path, exc)
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Cannot read cast source %s: %s", path, exc)
        return None

    def _resolve_uncached(self, class_name: str) -> Optional[str]:
        path: Optional[Path] = self.source_path(class_name)
        if path is None:
            logger.debug("%s is outside the %s namespace", class_name, APP_NAMESPACE)
            return None

        tree: Optional[Tree] = self._load(path)
        if tree is None:
            return None

        class_node: Optional[Node] = first_class(tree.root_node)
        if class_node is None:
            logger.debug("No class declaration in %s", path)
            return None

        imports: ImportMap = collect_imports(tree)
        interfaces: List[str] = implemented_interfaces(class_node, imports)

        if CASTS_ATTRIBUTES_INTERFACE in interfaces:
            get_method: Optional[Node] = find_method(class_node, "get")
            if get_method is None:
                logger.debug("%s has no get() method", class_name)
                return None
            return resolve_return_type(get_method.child_by_field_name("return_type"), imports)

        if CASTABLE_INTERFACE in interfaces:
            target: Optional[str] = self._cast_using_target(class_node, imports)
            if target is None:
                return None
            return self.resolve(target)

        logger.debug("%s does not implement CastsAttributes", class_name)
        return None

    def _cast_using_target(self, class_node: Node, imports: ImportMap) -> Optional[str]:
        """Cast class named by ``castUsing()``'s first direct return."""
        method: Optional[Node] = find_method(class_node, "castUsing")
        if method is None or not is_static(method):
            return None

        returned: Optional[Node] = first_direct_return(method)
        if returned is None:
            return None

        if returned.type == "object_creation_expression":
            parts: List[Node] = named_children(returned)
            if parts and parts[0].type in _NAME_NODES:
                return resolve_class_name(name_text(parts[0]), imports)
            return None

        if returned.type == "class_constant_access_expression":
            return class_constant_reference(returned, imports)

        return None


__all__: List[str] = [
    "APP_DIRECTORY",
    "APP_NAMESPACE",
    "CASTABLE_INTERFACE",
    "CASTS_ATTRIBUTES_INTERFACE",
    "CustomCastResolver",
    "find_method",
    "implemented_interfaces",
    "resolve_return_type",
]
