"""
Swift structure provider.

Maps the tree-sitter parse tree to ``StructureNode`` (closures, calls, array
and dictionary literals, statement and declaration bodies), addressed in UTF-8
bytes. Nodes of any other type are not reported; their mapped descendants are
hoisted to the nearest reported ancestor.

A closure's capture list is never reported as substructure itself; only
brackets, calls or closures nested in its initializer expressions are.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .node_types import ExpressionKind, StructureNode

NODE_KINDS = {
    "lambda_literal": ExpressionKind.CLOSURE,
    "call_expression": ExpressionKind.CALL,
    "constructor_expression": ExpressionKind.CALL,
    "array_literal": ExpressionKind.ARRAY,
    "dictionary_literal": ExpressionKind.DICTIONARY,
}
BLOCK_TYPES = frozenset(
    {
        "function_body", "class_body", "enum_class_body", "protocol_body", "computed_property",
        "if_statement", "guard_statement", "for_statement", "while_statement",
        "repeat_while_statement", "switch_statement", "do_statement",
    }
)


def _is_subscript(node) -> bool:
    """``values[0]`` parses as a call whose arguments are bracketed."""
    suffix = node.children[-1] if node.child_count else None
    if suffix is None or suffix.type != "call_suffix" or suffix.child_count != 1:
        return False
    arguments = suffix.children[0]
    return arguments.type == "value_arguments" and arguments.child_count > 0 and arguments.children[0].type == "["


def _kind_of(node) -> Optional[ExpressionKind]:
    ntype = node.type
    if ntype in BLOCK_TYPES:
        return ExpressionKind.BLOCK
    if ntype == "call_expression" and _is_subscript(node):
        return None
    return NODE_KINDS.get(ntype)


def _convert(node) -> List[StructureNode]:
    children: List[StructureNode] = []
    for child in node.children:
        if not child.is_missing:
            children.extend(_convert(child))
    kind = _kind_of(node)
    if kind is None:
        return children
    return [
        StructureNode(
            kind=kind,
            offset=node.start_byte,
            length=node.end_byte - node.start_byte,
            substructure=tuple(children),
        )
    ]


def parse_structure(file) -> Tuple[StructureNode, ...]:
    """Top-level structure nodes of ``file`` in source order."""
    return tuple(_convert(file.tree.root_node))
