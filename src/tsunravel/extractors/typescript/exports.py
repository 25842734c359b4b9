"""Extract exported declarations and import lines from TypeScript via tree-sitter."""

from __future__ import annotations

import logging
from typing import Callable

from tree_sitter import Node

from tsunravel.extractors.typescript import get_parser, has_keyword, node_text
from tsunravel.extractors.typescript.expressions import root_name, walk_expression
from tsunravel.model import ExportedSymbol, ExportKind, FileExportRecord, ImportLine
from tsunravel.paths import resolve_import_path, standardize
from tsunravel.source import read_source

logger = logging.getLogger(__name__)

ExportCallback = Callable[[str, ExportedSymbol], None]
PathResolver = Callable[[str, str], str | None]

# tree-sitter node types for each declaration kind.  The expression forms
# (``class``, ``function_expression``, ...) show up under ``export default``.
_CLASS_TYPES = {"class_declaration", "abstract_class_declaration", "class"}
_FUNCTION_TYPES = {
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
}
_VARIABLE_TYPES = {"lexical_declaration", "variable_declaration"}
_FIELD_TYPES = {"public_field_definition", "field_definition"}


def parse_exports(
    path: str,
    text: str | None = None,
    *,
    on_export: ExportCallback | None = None,
    resolve: PathResolver = resolve_import_path,
) -> FileExportRecord:
    """Parse one source file into a :class:`FileExportRecord`.

    Imports are collected first so that the second pass over declarations can
    match the identifiers found in initializers and ``extends`` clauses
    against imported names.  *on_export* is called for every exported symbol
    as soon as it is found.
    """
    path = standardize(path)
    if text is None:
        text = read_source(path)
    data = text.encode("utf-8")
    tree = get_parser(path).parse(data)
    root = tree.root_node
    if root.has_error:
        logger.warning("%s: syntax errors, extracting from the recovered tree", path)

    record = FileExportRecord(path=path)

    for node in root.named_children:
        if node.type == "import_statement":
            line = _parse_import(node, path, data, resolve)
            if line is not None:
                record.imports.append(line)

    for node in root.named_children:
        _classify_statement(node, record, on_export)

    logger.debug(
        "%s: %d exports, %d imports, %d strong dependencies",
        path,
        len(record.exports),
        len(record.imports),
        len(record.depends),
    )
    return record


def parse_exports_from_file(path: str, on_export: ExportCallback | None = None) -> FileExportRecord:
    return parse_exports(path, on_export=on_export)


def parse_exports_from_content(
    text: str, path: str, on_export: ExportCallback | None = None
) -> FileExportRecord:
    return parse_exports(path, text, on_export=on_export)


# ---------------------------------------------------------------------------
# imports
# ---------------------------------------------------------------------------


def _parse_import(node: Node, path: str, data: bytes, resolve: PathResolver) -> ImportLine | None:
    source = node.child_by_field_name("source")
    clause = None
    require = None
    type_only = False
    for child in node.children:
        if child.type == "import_clause":
            clause = child
        elif child.type == "import_require_clause":
            require = child
        elif child.type == "from_clause" and source is None:
            source = child.child_by_field_name("source")
        elif child.type == "type" and not child.is_named:
            type_only = True
    if require is not None:
        source = require.child_by_field_name("source") or next(
            (c for c in require.named_children if c.type == "string"), None
        )
    if source is None:
        source = next((c for c in node.named_children if c.type == "string"), None)
    if source is None:
        logger.warning("%s: import without module specifier: %s", path, node_text(node))
        return None

    specifier = node_text(source)
    module_path = specifier[1:-1]
    line = ImportLine(
        module_path=module_path,
        resolved_path=resolve(path, module_path),
        text=node_text(node),
        offset=len(data[: node.start_byte].decode("utf-8")),
        specifier=specifier,
        type_only=type_only,
    )

    if require is not None:
        name = next((c for c in require.named_children if c.type == "identifier"), None)
        if name is None:
            logger.warning("%s: parse require line failed: %s", path, line.text)
            return None
        line.imported_names.append(node_text(name))
        line.has_default_import = True
        line.is_require = True
    elif clause is not None:
        _read_import_clause(clause, line)
    return line


def _read_import_clause(clause: Node, line: ImportLine) -> None:
    for child in clause.named_children:
        match child.type:
            case "identifier":
                line.imported_names.insert(0, node_text(child))
                line.has_default_import = True
            case "namespace_import":
                ident = next((c for c in child.named_children if c.type == "identifier"), None)
                line.namespace = node_text(ident) or None
            case "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    name_node = spec.child_by_field_name("name")
                    alias_node = spec.child_by_field_name("alias")
                    exported = node_text(name_node)
                    if name_node is not None and name_node.type == "string":
                        exported = exported[1:-1]
                    local = node_text(alias_node) if alias_node is not None else exported
                    line.imported_names.append(local)
                    if local != exported:
                        line.aliases[local] = exported
            case _:
                pass


# ---------------------------------------------------------------------------
# declarations
# ---------------------------------------------------------------------------


def _classify_statement(
    node: Node, record: FileExportRecord, on_export: ExportCallback | None
) -> None:
    exported = False
    is_default = False
    decl: Node | None = node
    if node.type == "export_statement":
        exported = True
        is_default = has_keyword(node, "default")
        decl = node.child_by_field_name("declaration") or node.child_by_field_name("value")
    ambient = decl is not None and decl.type == "ambient_declaration"
    if ambient:
        # ``declare class ...`` and friends wrap an ordinary declaration
        decl = next((c for c in decl.named_children if c.type != "comment"), None)
    if decl is None:
        return

    def emit(name_node: Node | None, kind: ExportKind, default: bool = is_default) -> None:
        name = node_text(name_node)
        if not exported or not name:
            return
        symbol = ExportedSymbol(name=name, kind=kind, is_default=default)
        if on_export is not None:
            on_export(record.path, symbol)
        record.add_export(symbol)

    kind = decl.type
    if kind in _CLASS_TYPES:
        emit(decl.child_by_field_name("name"), ExportKind.CLASS)
        _scan_class(decl, record)
    elif kind in _FUNCTION_TYPES or (ambient and kind == "function_signature"):
        emit(decl.child_by_field_name("name"), ExportKind.FUNC)
    elif kind == "enum_declaration":
        emit(decl.child_by_field_name("name"), ExportKind.ENUM)
        body = decl.child_by_field_name("body")
        if body is not None:
            for member in body.named_children:
                if member.type == "enum_assignment":
                    walk_expression(member.child_by_field_name("value"), record.add_dependency)
    elif kind in _VARIABLE_TYPES:
        declarators = [c for c in decl.named_children if c.type == "variable_declarator"]
        for i, declarator in enumerate(declarators):
            name_node = declarator.child_by_field_name("name")
            if name_node is not None and name_node.type == "identifier":
                emit(name_node, ExportKind.VAR, i == 0 and is_default)
            walk_expression(declarator.child_by_field_name("value"), record.add_dependency)
    elif kind == "interface_declaration":
        emit(decl.child_by_field_name("name"), ExportKind.INTERFACE)
    elif kind == "type_alias_declaration":
        emit(decl.child_by_field_name("name"), ExportKind.TYPE)


def _scan_class(decl: Node, record: FileExportRecord) -> None:
    """Record the base class and static field initializers as dependencies."""
    for child in decl.children:
        if child.type != "class_heritage":
            continue
        for clause in child.named_children:
            if clause.type == "extends_clause":
                base = root_name(clause.child_by_field_name("value"))
            elif clause.type == "implements_clause":
                continue
            else:
                # JavaScript grammar: the heritage holds the expression directly
                base = root_name(clause)
            if base:
                record.add_dependency(base)

    body = decl.child_by_field_name("body")
    if body is None:
        return
    for member in body.named_children:
        if member.type in _FIELD_TYPES and has_keyword(member, "static"):
            walk_expression(member.child_by_field_name("value"), record.add_dependency)
