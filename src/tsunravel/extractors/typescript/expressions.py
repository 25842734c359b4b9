"""Find the bindings an initializer expression evaluates at load time.

Only a small set of expression forms is understood; anything else (literals,
arrow functions, template strings, ...) contributes no dependency.
"""

from __future__ import annotations

from typing import Callable

from tree_sitter import Node

from tsunravel.extractors.typescript import node_text

RecordDependency = Callable[[str], object]


def walk_expression(node: Node | None, record: RecordDependency) -> None:
    """Call *record* with every identifier *node* reads in value position."""
    if node is None:
        return
    match node.type:
        case "identifier":
            name = node_text(node)
            if name != "undefined":
                record(name)
        case "member_expression":
            _record_root(node, record)
        case "call_expression" | "new_expression":
            _record_root(node, record)
            arguments = node.child_by_field_name("arguments")
            if arguments is not None and arguments.type == "arguments":
                for argument in arguments.named_children:
                    walk_expression(argument, record)
        case "array":
            for element in node.named_children:
                walk_expression(element, record)
        case "object":
            for prop in node.named_children:
                if prop.type == "pair":
                    walk_expression(prop.child_by_field_name("value"), record)
                elif prop.type == "shorthand_property_identifier":
                    record(node_text(prop))
        case _:
            pass


def root_name(node: Node | None) -> str | None:
    """Left-most identifier of a property/call/new chain (``a`` in ``a.b().c``)."""
    while node is not None:
        match node.type:
            case "identifier":
                return node_text(node)
            case "member_expression":
                node = node.child_by_field_name("object")
            case "call_expression":
                node = node.child_by_field_name("function")
            case "new_expression":
                node = node.child_by_field_name("constructor")
            case _:
                return None
    return None


def _record_root(node: Node, record: RecordDependency) -> None:
    name = root_name(node)
    if name:
        record(name)
