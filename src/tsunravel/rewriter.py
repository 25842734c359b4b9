"""Rewrite import statements to go through the generated index module."""

from __future__ import annotations

import logging

from tsunravel.model import FileExportRecord, ImportLine, SymbolTable
from tsunravel.paths import relative_import_path
from tsunravel.source import Section, split_sections

logger = logging.getLogger(__name__)

SAFEGUARD_BEGIN = "[tsunravel.safeguard.begin]"
SAFEGUARD_END = "[tsunravel.safeguard.end]"


def build_import_body(line: ImportLine) -> str:
    """``{ A, B as C }`` for the names of *line*, default import included."""
    names = []
    for local in line.imported_names:
        exported = line.exported_name(local)
        names.append(local if exported == local else f"{exported} as {local}")
    return "{ " + ", ".join(names) + " }"


def build_index_import(line: ImportLine, index_specifier: str) -> str:
    keyword = "import type" if line.type_only else "import"
    return f'{keyword} {build_import_body(line)} from "{index_specifier}";'


def routes_to_index(line: ImportLine, symbols: SymbolTable) -> bool:
    """True if every name of *line* is exported by some tracked file.

    A default import only qualifies when the imported module itself exports
    a declaration of that name.  Namespace, ``require`` and side-effect
    imports never qualify.
    """
    if line.namespace is not None or line.is_require or not line.imported_names:
        return False
    for local in line.imported_names:
        owner = symbols.owner(line.exported_name(local))
        if owner is None:
            return False
        if line.is_default_binding(local) and owner != line.resolved_path:
            return False
    return True


def rewrite_imports(
    text: str, record: FileExportRecord, index_path: str, symbols: SymbolTable
) -> str:
    """Return *text* with its imports redirected to *index_path* where possible.

    The result is ``header + imports + body``: import statements are gathered
    after the leading comment block, in their original order.  A statement is
    only replaced when all of its names are covered by *symbols*; any other
    import is kept exactly as written.
    """
    specifier = relative_import_path(record.path, index_path)
    by_offset = {line.offset: line for line in record.imports}

    def _rewrite(section: Section, chunk: str) -> str:
        line = by_offset.get(section.begin)
        if line is None or not chunk.startswith(line.text):
            logger.debug("%s: unmatched import at offset %d", record.path, section.begin)
            return chunk
        if not routes_to_index(line, symbols):
            return chunk
        return build_index_import(line, specifier) + chunk[len(line.text) :]

    header, imports, body = split_sections(text, record.path, rewrite_import=_rewrite)
    if imports and body and not imports.endswith(("\n", "\r")):
        imports += "\n"
    return header + imports + body


def rewrite_entry(text: str, require_path: str) -> str:
    """Place ``require(<index>)`` inside the entry file's safeguard block.

    The lines strictly between the begin and end marker lines are replaced.
    Without markers a new block is put at the top of the file.
    """
    statement = f"require('{require_path}');\n"
    begin = text.find(SAFEGUARD_BEGIN)
    end = text.find(SAFEGUARD_END, begin + len(SAFEGUARD_BEGIN)) if begin != -1 else -1
    if begin != -1 and end != -1:
        region_start = text.find("\n", begin, end)
        if region_start != -1:
            region_end = text.rfind("\n", 0, end) + 1
            if region_end <= region_start:
                region_end = region_start + 1
            return text[: region_start + 1] + statement + text[region_end:]
        logger.warning("safeguard markers share one line, adding a new block")
    elif begin != -1:
        logger.warning("safeguard end marker missing, adding a new block")
    return f"// {SAFEGUARD_BEGIN}\n{statement}// {SAFEGUARD_END}\n" + text
