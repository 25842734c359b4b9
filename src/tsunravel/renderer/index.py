"""Render the generated index modules (declaration re-exports and runtime JS)."""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from string import Template
from typing import Iterable, Sequence

from tsunravel.model import ExportedSymbol, FileExportRecord
from tsunravel.paths import relative_import_path, standardize, strip_extension
from tsunravel.source import write_source

logger = logging.getLogger(__name__)

_TEMPLATE_PATH = Path(__file__).with_name("runtime_index.js.tmpl")

DECLARATION_HEADER = "// This file is generated by tsunravel, do not edit it by hand."


@dataclass
class RuntimeIndexOptions:
    """Parameters of the companion runtime (JavaScript) index module."""

    dist_path: str  # path of the index module at runtime, embedded verbatim
    relative_index_path: str  # declaration index path relative to the project
    output_path: str | None = None
    module_id: str | None = None

    def resolve_output(self, index_path: str) -> str:
        if self.output_path:
            return standardize(self.output_path)
        return strip_extension(standardize(index_path)) + ".js"

    def resolve_module_id(self) -> str:
        if self.module_id:
            return self.module_id
        return hashlib.md5(self.dist_path.encode("utf-8")).hexdigest()[:23]


def _unique(symbols: Iterable[ExportedSymbol]) -> list[ExportedSymbol]:
    seen: set[str] = set()
    result: list[ExportedSymbol] = []
    for sym in symbols:
        if sym.name not in seen:
            seen.add(sym.name)
            result.append(sym)
    return result


def render_declaration_index(records: Sequence[FileExportRecord], index_path: str) -> str:
    """One ``export { ... } from '...'`` line per record that exports anything."""
    index_path = standardize(index_path)
    lines = [DECLARATION_HEADER]
    for record in records:
        symbols = _unique(record.exports)
        if not symbols:
            continue
        body = ", ".join(
            f"default as {sym.name}" if sym.is_default else sym.name for sym in symbols
        )
        lines.append(
            f"export {{ {body} }} from '{relative_import_path(index_path, record.path)}';"
        )
    return "\n".join(lines) + "\n"


def _module_alias(path: str, used: dict[str, int]) -> str:
    stem = PurePosixPath(path).name.split(".", 1)[0]
    ident = re.sub(r"\W", "_", stem) or "_"
    if ident[0].isdigit():
        ident = "_" + ident
    used[ident] = used.get(ident, 0) + 1
    return f"{ident}_{used[ident]}"


def _render_runtime_body(records: Sequence[FileExportRecord], index_path: str) -> str:
    used: dict[str, int] = {}
    blocks: list[str] = []
    for record in records:
        if record.solid_export_count <= 0:
            continue
        alias = _module_alias(record.path, used)
        block = [f'var {alias} = require("{relative_import_path(index_path, record.path)}");']
        for sym in _unique(record.exports):
            if sym.kind.is_virtual:
                continue
            if sym.is_default:
                block.append(f"exports.{sym.name} = {alias}.default;")
            else:
                block.append(
                    f'Object.defineProperty(exports, "{sym.name}", '
                    f"{{ enumerable: true, get: function () {{ return {alias}.{sym.name}; }} }});"
                )
        blocks.append("\n".join(block))
    return "\n\n".join(blocks)


def render_runtime_index(
    records: Sequence[FileExportRecord], index_path: str, options: RuntimeIndexOptions
) -> str:
    """Fill the runtime wrapper template with a require/re-export block per file."""
    index_path = standardize(index_path)
    template = Template(_TEMPLATE_PATH.read_text(encoding="utf-8"))
    relative_index = PurePosixPath(options.relative_index_path.replace("\\", "/"))
    return template.safe_substitute(
        DIST_INDEX_PATH=options.dist_path.replace("\\", "/"),
        MODULE_ID=options.resolve_module_id(),
        INDEX_FILE_NAME=strip_extension(relative_index.name),
        INDEX_TS_PATH=relative_index.as_posix(),
        BODY=_render_runtime_body(records, index_path),
    )


def write_index(
    records: Sequence[FileExportRecord],
    index_path: str,
    runtime: RuntimeIndexOptions | None = None,
) -> list[str]:
    """Write the declaration index (and the runtime index if requested)."""
    index_path = standardize(index_path)
    write_source(index_path, render_declaration_index(records, index_path))
    written = [index_path]
    logger.info("index written: %s", index_path)

    if runtime is not None:
        runtime_path = runtime.resolve_output(index_path)
        write_source(runtime_path, render_runtime_index(records, index_path, runtime))
        written.append(runtime_path)
        logger.info("runtime index written: %s", runtime_path)
    return written
