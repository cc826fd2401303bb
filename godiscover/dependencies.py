"""
Dependency Extractor — same-file names referenced by an initializer.
"""

from typing import AbstractSet, Dict, List, Optional

from tree_sitter import Node

from .go_parser import SyntaxTree, walk_nodes

# Every flavour of Go identifier tree-sitter distinguishes; a known name
# can show up as any of them (e.g. a composite literal key is parsed as
# a plain identifier, a selector operand as an identifier, etc.).
_IDENTIFIER_TYPES = frozenset({
    "identifier",
    "type_identifier",
    "field_identifier",
    "package_identifier",
})


def extract_dependencies(
    value: Optional[Node],
    tree: SyntaxTree,
    known_names: AbstractSet[str],
) -> List[str]:
    """
    Names from ``known_names`` referenced anywhere inside ``value``.

    First-occurrence order, duplicates removed.  ``known_names`` is the set
    of names tracked *so far* in the file, so a binding can only depend on
    bindings declared before it (or on itself).
    """
    if value is None:
        return []
    deps: Dict[str, None] = {}
    for node in walk_nodes(value):
        if node.type not in _IDENTIFIER_TYPES:
            continue
        name = tree.text(node)
        if name in known_names and name not in deps:
            deps[name] = None
    return list(deps)
