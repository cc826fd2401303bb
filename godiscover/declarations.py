"""
Declaration Extractor — top-level ``var`` bindings and their apparent types.

Only package-scope ``var`` declarations are considered.  Functions,
methods, ``const`` and ``type`` declarations are skipped.

A binding's type descriptor is resolved from its explicit type when one
is written, otherwise inferred from the shape of its initializer:

    var A schema.NodeType                 → ("schema", "NodeType")
    var B = schema.NodeType{...}          → ("schema", "NodeType")
    var C = &schema.NodeType{...}         → ("schema", "NodeType")
    var D = []*schema.NodeType{...}       → ("schema", "NodeType")
    var E = schema.NodeType(other)        → ("schema", "NodeType")

Bindings with no resolvable descriptor are still returned so their names
can be tracked.
"""

from typing import Iterator, List, NamedTuple, Optional

from tree_sitter import Node

from .go_parser import SyntaxTree, node_line


class TypeDescriptor(NamedTuple):
    qualifier: str      # package name as written, "" when unqualified
    type_name: str

    def __str__(self) -> str:
        if self.qualifier:
            return f"{self.qualifier}.{self.type_name}"
        return self.type_name


class Declaration(NamedTuple):
    name: str
    type: Optional[TypeDescriptor]
    value: Optional[Node]
    line: int


# Wrappers whose element type is the interesting one
_ELEMENT_FIELD = {
    "slice_type": "element",
    "array_type": "element",
    "implicit_length_array_type": "element",
    "channel_type": "value",
    "generic_type": "type",
}

_SINGLE_CHILD_WRAPPERS = {"pointer_type", "parenthesized_type", "parenthesized_expression"}


def _named(node: Node) -> List[Node]:
    return [c for c in node.named_children if c.type != "comment"]


def resolve_type(node: Optional[Node], tree: SyntaxTree) -> Optional[TypeDescriptor]:
    """Type descriptor named by a type (or type-like expression) node."""
    if node is None:
        return None
    kind = node.type

    if kind in ("type_identifier", "identifier"):
        return TypeDescriptor("", tree.text(node))

    if kind == "qualified_type":
        package = node.child_by_field_name("package")
        name = node.child_by_field_name("name")
        if package is None or name is None:
            return None
        return TypeDescriptor(tree.text(package), tree.text(name))

    if kind == "selector_expression":
        operand = node.child_by_field_name("operand")
        field = node.child_by_field_name("field")
        if operand is None or field is None or operand.type != "identifier":
            return None
        return TypeDescriptor(tree.text(operand), tree.text(field))

    if kind in _ELEMENT_FIELD:
        return resolve_type(node.child_by_field_name(_ELEMENT_FIELD[kind]), tree)

    if kind in _SINGLE_CHILD_WRAPPERS:
        children = _named(node)
        return resolve_type(children[0], tree) if children else None

    # (*T)(x) — a dereference in expression position names a pointer type
    if kind == "unary_expression" and _operator(node) == "*":
        return resolve_type(node.child_by_field_name("operand"), tree)

    # map, struct, interface and function types carry no single type name
    return None


def infer_type(value: Optional[Node], tree: SyntaxTree) -> Optional[TypeDescriptor]:
    """Type descriptor implied by an initializer expression's shape."""
    if value is None:
        return None
    kind = value.type

    if kind == "composite_literal":
        return resolve_type(value.child_by_field_name("type"), tree)

    if kind == "unary_expression" and _operator(value) == "&":
        return infer_type(value.child_by_field_name("operand"), tree)

    if kind == "call_expression":
        # Conversion form T(x); the classifier decides whether T is a type
        return resolve_type(value.child_by_field_name("function"), tree)

    if kind == "type_conversion_expression":
        # []T(x), (*T)(x): forms the grammar cannot read as a call
        return resolve_type(value.child_by_field_name("type"), tree)

    return None


def _operator(node: Node) -> Optional[str]:
    op = node.child_by_field_name("operator")
    return op.type if op is not None else None


def _var_specs(decl: Node) -> Iterator[Node]:
    # var x = 1           → var_declaration > var_spec
    # var ( x = 1; y = 2) → var_declaration > var_spec_list > var_spec
    #                       (older grammars put the specs directly under the declaration)
    for child in decl.children:
        if child.type == "var_spec":
            yield child
        elif child.type == "var_spec_list":
            for spec in child.children:
                if spec.type == "var_spec":
                    yield spec


def extract_declarations(tree: SyntaxTree) -> List[Declaration]:
    """All top-level ``var`` bindings in declaration order."""
    declarations: List[Declaration] = []
    for decl in tree.root.children:
        if decl.type != "var_declaration":
            continue
        for spec in _var_specs(decl):
            names = spec.children_by_field_name("name")
            explicit = spec.child_by_field_name("type")
            value_list = spec.child_by_field_name("value")
            values = _named(value_list) if value_list is not None else []
            explicit_type = resolve_type(explicit, tree) if explicit is not None else None

            for i, name_node in enumerate(names):
                value = values[i] if i < len(values) else None
                if explicit is not None:
                    descriptor = explicit_type
                else:
                    descriptor = infer_type(value, tree)
                declarations.append(Declaration(
                    name=tree.text(name_node),
                    type=descriptor,
                    value=value,
                    line=node_line(name_node),
                ))
    return declarations
