"""
Go Parser — tree-sitter adapter for Go source files.

  • parse_file / parse_source — text to syntax tree, or GoParseError
  • extract_imports           — the file's alias → import path table
  • builtin tables            — predeclared types, functions, constants

tree-sitter always produces a tree, recovering from syntax errors with
ERROR/MISSING nodes.  This adapter turns any such recovery into a
GoParseError so callers never see a partially parsed file.
"""

import posixpath
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

import tree_sitter_go as tsgo
from tree_sitter import Language, Node, Parser, Tree

from .errors import GoParseError, SourceReadError

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tsgo.language())

_BINARY_SNIFF_BYTES = 8192
_SNIPPET_CHARS = 40


@dataclass
class SyntaxTree:
    """A successfully parsed Go file."""
    path: str
    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return node_text(node, self.source)


# ═══════════════════════════════════════════════════════════════════════
#  Node helpers
# ═══════════════════════════════════════════════════════════════════════

def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def node_line(node: Node) -> int:
    """1-indexed line of a node."""
    return node.start_point[0] + 1


def walk_nodes(node: Node) -> Iterator[Node]:
    """Pre-order traversal of ``node`` and all its descendants."""
    cursor = node.walk()
    visited = False
    while True:
        if not visited:
            yield cursor.node
            if cursor.goto_first_child():
                continue
        if cursor.goto_next_sibling():
            visited = False
            continue
        if cursor.goto_parent():
            visited = True
            continue
        break


def _first_error(root: Node) -> Optional[Node]:
    for node in walk_nodes(root):
        if node.is_error or node.is_missing:
            return node
    return None


# ═══════════════════════════════════════════════════════════════════════
#  Parsing
# ═══════════════════════════════════════════════════════════════════════

def parse_source(source: bytes, path: str = "<source>") -> SyntaxTree:
    """Parse Go source text.

    Raises:
        GoParseError: the source is binary, has a syntax error, or lacks
                      a package clause.
    """
    if isinstance(source, str):
        source = source.encode("utf-8")

    if b"\x00" in source[:_BINARY_SNIFF_BYTES]:
        raise GoParseError(path, 1, 1, "binary content, not Go source")

    # A fresh Parser per call keeps this safe to use from worker threads
    tree = Parser(GO_LANGUAGE).parse(source)
    root = tree.root_node

    if root.has_error:
        bad = _first_error(root) or root
        line, column = bad.start_point[0] + 1, bad.start_point[1] + 1
        if bad.is_missing:
            message = f"expected {bad.type!r}"
        else:
            snippet = node_text(bad, source).strip().splitlines()
            found = snippet[0][:_SNIPPET_CHARS] if snippet else "end of file"
            message = f"syntax error near {found!r}"
        raise GoParseError(path, line, column, message)

    if not any(child.type == "package_clause" for child in root.children):
        raise GoParseError(path, 1, 1, "expected 'package' clause")

    return SyntaxTree(path=path, source=source, tree=tree)


def parse_file(path: str) -> SyntaxTree:
    """Read and parse one Go file.

    Raises:
        SourceReadError: the file cannot be read.
        GoParseError:    the file is not valid Go.
    """
    try:
        with open(path, "rb") as f:
            source = f.read()
    except OSError as e:
        raise SourceReadError(path, e.strerror or str(e)) from e
    logger.debug("Parsing %s (%d bytes)", path, len(source))
    return parse_source(source, path)


# ═══════════════════════════════════════════════════════════════════════
#  Imports
# ═══════════════════════════════════════════════════════════════════════

def extract_imports(tree: SyntaxTree) -> Dict[str, str]:
    """
    Map each import alias to its import path.

    Explicit aliases (including "." and "_") are used as-is; otherwise the
    last path component is the alias, e.g. ``"github.com/x/schema"`` is
    keyed as ``schema``.
    """
    imports: Dict[str, str] = {}
    for decl in tree.root.children:
        if decl.type != "import_declaration":
            continue
        for spec in walk_nodes(decl):
            if spec.type != "import_spec":
                continue
            path_node = spec.child_by_field_name("path")
            if path_node is None:
                continue
            import_path = tree.text(path_node).strip('"`')
            name_node = spec.child_by_field_name("name")
            if name_node is not None:
                alias = tree.text(name_node)
            else:
                alias = posixpath.basename(import_path)
            imports[alias] = import_path
    return imports


# ═══════════════════════════════════════════════════════════════════════
#  Predeclared identifiers
# ═══════════════════════════════════════════════════════════════════════

BUILTIN_TYPES = frozenset({
    "string", "bool", "byte", "rune", "error", "any",
    "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
    "float32", "float64", "complex64", "complex128",
})

BUILTIN_FUNCS = frozenset({
    "len", "cap", "make", "new", "append", "copy", "delete", "close",
    "panic", "recover", "print", "println", "complex", "real", "imag",
    "clear", "min", "max",
})

BUILTIN_CONSTS = frozenset({"true", "false", "nil", "iota"})

KEYWORDS = frozenset({
    "break", "case", "chan", "const", "continue", "default", "defer",
    "else", "fallthrough", "for", "func", "go", "goto", "if", "import",
    "interface", "map", "package", "range", "return", "select", "struct",
    "switch", "type", "var",
})


def is_builtin_type(name: str) -> bool:
    return name in BUILTIN_TYPES


def is_builtin_ident(name: str) -> bool:
    """Predeclared type, function or constant."""
    return name in BUILTIN_TYPES or name in BUILTIN_FUNCS or name in BUILTIN_CONSTS


def is_keyword(name: str) -> bool:
    return name in KEYWORDS
