# File: entitygen/php_parser.py
"""
entitygen - PHP Source Parser
===============================
Thin wrapper around tree-sitter's PHP grammar.  Everything else in the
analysis pipeline talks to the syntax tree through the helpers in this
module, so grammar-specific node names live in one place.

The tree is walked with a plain pre-order search (``find_nodes`` /
``find_first``) plus a handful of small accessors for the PHP constructs
the generator cares about: string literals, properties, methods and
their return types.

tree-sitter never refuses input; it produces ``ERROR`` / ``MISSING``
nodes instead.  ``PhpSourceParser.parse`` turns those into a
``PhpParseError`` so callers get the same contract as a classic parser.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterator, List, Optional

import tree_sitter_php
from tree_sitter import Language, Node, Parser, Tree

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.php_parser")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PHP_LANGUAGE: Language = Language(tree_sitter_php.language_php())

NodePredicate = Callable[[Node], bool]

_SINGLE_QUOTED_ESCAPE_RE: re.Pattern[str] = re.compile(r"\\([\\'])")
_DOUBLE_QUOTED_ESCAPE_RE: re.Pattern[str] = re.compile(r"\\([\\\"$nrtvef0])")
_DOUBLE_QUOTED_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "$": "$",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "0": "\0",
}

# Children of a double-quoted string that keep it a plain literal
_PLAIN_STRING_PARTS = frozenset({"string", "string_content", "string_value", "escape_sequence"})

# Heredoc bodies: as above, minus \" which heredocs keep verbatim
_HEREDOC_ESCAPE_RE: re.Pattern[str] = re.compile(r"\\([\\$nrtvef0])")
_PLAIN_HEREDOC_PARTS = _PLAIN_STRING_PARTS | frozenset(
    {"heredoc", "heredoc_start", "heredoc_end", "heredoc_body", "nowdoc", "nowdoc_body", "nowdoc_string"}
)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class PhpParseError(Exception):
    """Raised when a PHP source file contains syntax errors."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.line: Optional[int] = line


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class PhpSourceParser:
    """
    Parse PHP source text into a tree-sitter ``Tree``.

    A single instance can be reused for any number of files.
    """

    __slots__ = ("_parser",)

    def __init__(self) -> None:
        self._parser: Parser = Parser(PHP_LANGUAGE)

    def parse(self, text: str) -> Tree:
        """
        Parse *text* and return the syntax tree.

        Raises:
            PhpParseError: If the source contains a syntax error.
        """
        tree: Tree = self._parser.parse(text.encode("utf-8"))
        root: Node = tree.root_node

        if root.has_error:
            bad: Optional[Node] = find_first(
                root, lambda n: n.is_error or n.is_missing
            )
            if bad is None:
                raise PhpParseError("Syntax error")
            line: int = bad.start_point[0] + 1
            column: int = bad.start_point[1] + 1
            if bad.is_missing:
                message = f"Syntax error, missing '{bad.type}' on line {line}, column {column}"
            else:
                snippet: str = node_text(bad).strip().split("\n", 1)[0][:40]
                message = f"Syntax error, unexpected '{snippet}' on line {line}, column {column}"
            raise PhpParseError(message, line=line)

        return tree


# ---------------------------------------------------------------------------
# Tree search
# ---------------------------------------------------------------------------


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield *node* and all of its descendants in document (pre-)order."""
    stack: List[Node] = [node]
    while stack:
        current: Node = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def find_nodes(node: Node, predicate: NodePredicate) -> List[Node]:
    """Return every node under *node* (inclusive) matching *predicate*."""
    return [n for n in iter_nodes(node) if predicate(n)]


def find_first(node: Node, predicate: NodePredicate) -> Optional[Node]:
    """Return the first node under *node* (inclusive) matching *predicate*."""
    for n in iter_nodes(node):
        if predicate(n):
            return n
    return None


def of_type(*types: str) -> NodePredicate:
    """Build a predicate matching any of the given node types."""
    wanted = frozenset(types)
    return lambda n: n.type in wanted


# ---------------------------------------------------------------------------
# Node accessors
# ---------------------------------------------------------------------------


def node_text(node: Optional[Node]) -> str:
    """Source text covered by *node* (empty string for ``None``)."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def named_children(node: Node) -> List[Node]:
    """Named children of *node*, comments excluded."""
    return [c for c in node.named_children if c.type != "comment"]


def has_token(node: Node, token: str) -> bool:
    """True when *node* has a direct anonymous child spelled *token*."""
    return any(not c.is_named and c.type == token for c in node.children)


def name_text(node: Node) -> str:
    """Text of a (possibly qualified) name node with whitespace removed."""
    return "".join(node_text(node).split())


def string_literal_value(node: Optional[Node]) -> Optional[str]:
    """
    Return the value of a plain PHP string literal, or ``None``.

    Single-quoted strings, nowdocs, and double-quoted strings or heredocs
    without interpolation qualify.
    """
    if node is None:
        return None

    raw: str = node_text(node)
    if raw[:1] in ("b", "B"):
        raw = raw[1:]

    if node.type == "string":
        if len(raw) < 2 or raw[0] != "'" or raw[-1] != "'":
            return None
        return _SINGLE_QUOTED_ESCAPE_RE.sub(r"\1", raw[1:-1])

    if node.type == "encapsed_string":
        if any(c.type not in _PLAIN_STRING_PARTS for c in named_children(node)):
            return None
        if len(raw) < 2 or raw[0] != '"' or raw[-1] != '"':
            return None
        return _DOUBLE_QUOTED_ESCAPE_RE.sub(
            lambda m: _DOUBLE_QUOTED_ESCAPES[m.group(1)], raw[1:-1]
        )

    if node.type in ("heredoc", "nowdoc"):
        if find_first(node, lambda n: n.is_named and n.type not in _PLAIN_HEREDOC_PARTS):
            return None
        body: Optional[str] = _heredoc_body(raw)
        if body is None or node.type == "nowdoc":
            return body
        return _HEREDOC_ESCAPE_RE.sub(lambda m: _DOUBLE_QUOTED_ESCAPES[m.group(1)], body)

    return None


def _heredoc_body(raw: str) -> Optional[str]:
    """Body of ``<<<EOT ... EOT`` with the closing marker's indentation removed."""
    lines: List[str] = raw.replace("\r\n", "\n").split("\n")
    if len(lines) < 2 or not lines[0].startswith("<<<"):
        return None
    closing: str = lines[-1]
    indent: int = len(closing) - len(closing.lstrip(" \t"))
    return "\n".join(line[indent:] for line in lines[1:-1])


def first_class(root: Node) -> Optional[Node]:
    """First ``class`` declaration in the file."""
    return find_first(root, of_type("class_declaration"))


def class_members(class_node: Node, member_type: str) -> List[Node]:
    """Direct members of a class body with the given node type."""
    body: Optional[Node] = class_node.child_by_field_name("body")
    if body is None:
        return []
    return [c for c in body.named_children if c.type == member_type]


def method_name(method: Node) -> str:
    return node_text(method.child_by_field_name("name"))


def method_parameters(method: Node) -> List[Node]:
    params: Optional[Node] = method.child_by_field_name("parameters")
    if params is None:
        return []
    return named_children(params)


def is_static(declaration: Node) -> bool:
    return any(c.type == "static_modifier" for c in declaration.children)


def first_direct_return(method: Node) -> Optional[Node]:
    """
    Expression of the first ``return`` statement sitting directly in the
    method body (nested blocks and closures are not searched).
    """
    body: Optional[Node] = method.child_by_field_name("body")
    if body is None:
        return None
    for stmt in body.named_children:
        if stmt.type == "return_statement":
            values: List[Node] = named_children(stmt)
            return values[0] if values else None
    return None


def property_elements(declaration: Node) -> List[Node]:
    return [c for c in declaration.named_children if c.type == "property_element"]


def property_element_name(element: Node) -> str:
    """Property name without the leading ``$``."""
    for child in element.named_children:
        if child.type == "variable_name":
            return node_text(child).lstrip("$")
    return ""


def property_element_default(element: Node) -> Optional[Node]:
    """Initializer expression of a property element, if any."""
    default: Optional[Node] = element.child_by_field_name("default_value")
    if default is not None:
        return default

    seen_equals: bool = False
    for child in element.children:
        if child.type == "property_initializer":
            values: List[Node] = named_children(child)
            return values[0] if values else None
        if not child.is_named and child.type == "=":
            seen_equals = True
            continue
        if seen_equals and child.is_named and child.type != "comment":
            return child
    return None


def find_property_default(root: Node, name: str, allow_static: bool = False) -> Optional[Node]:
    """
    Initializer of the first property named *name* anywhere in the tree.

    Returns ``None`` when no such property exists or it has no default.
    """
    for declaration in find_nodes(root, of_type("property_declaration")):
        if is_static(declaration) and not allow_static:
            continue
        for element in property_elements(declaration):
            if property_element_name(element) == name:
                return property_element_default(element)
    return None


__all__: List[str] = [
    "PHP_LANGUAGE",
    "PhpParseError",
    "PhpSourceParser",
    "NodePredicate",
    "iter_nodes",
    "find_nodes",
    "find_first",
    "of_type",
    "node_text",
    "named_children",
    "has_token",
    "name_text",
    "string_literal_value",
    "first_class",
    "class_members",
    "method_name",
    "method_parameters",
    "is_static",
    "first_direct_return",
    "property_elements",
    "property_element_name",
    "property_element_default",
    "find_property_default",
]
