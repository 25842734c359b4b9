"""Orchestrator: collect → extract → sort → rewrite → generate index."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from tsunravel.analysis import find_cycles, sort_records
from tsunravel.errors import CircularDependencyError, DuplicateSourceError, TsUnravelError
from tsunravel.extractors.typescript.exports import parse_exports
from tsunravel.model import FileExportRecord, SymbolTable
from tsunravel.paths import relative_import_path, standardize
from tsunravel.renderer.index import RuntimeIndexOptions, write_index
from tsunravel.rewriter import rewrite_entry, rewrite_imports
from tsunravel.source import read_source, write_source

logger = logging.getLogger(__name__)

SourceFilter = Callable[[str, str], bool]


@dataclass
class BreakOptions:
    """Parameters of one circular-break run."""

    source_root: str
    index_path: str
    patterns: Sequence[str] = ("*.ts",)
    # (absolute path, path relative to root) -> keep?
    source_filter: SourceFilter | None = None
    exclude: Sequence[str] = field(default_factory=tuple)
    entry_path: str | None = None
    runtime: RuntimeIndexOptions | None = None

    def __post_init__(self) -> None:
        self.source_root = standardize(self.source_root)
        self.index_path = standardize(self.index_path)
        if self.entry_path:
            self.entry_path = standardize(self.entry_path)
        if isinstance(self.patterns, str):
            self.patterns = (self.patterns,)

    def accepts(self, path: str, relative: str) -> bool:
        if self.source_filter is not None:
            return self.source_filter(path, relative)
        return self.default_filter(path, relative)

    def default_filter(self, path: str, relative: str) -> bool:
        """Skip declaration files, the entry file, the index and excluded paths."""
        if path.endswith(".d.ts"):
            return False
        if path in (self.entry_path, self.index_path):
            return False
        return not any(fnmatch.fnmatch(relative, pattern) for pattern in self.exclude)


def collect_sources(options: BreakOptions) -> list[str]:
    """All files under the source root matching the patterns and the filter, sorted."""
    root = Path(options.source_root)
    if not root.is_dir():
        raise TsUnravelError(f"source root is not a directory: {options.source_root}")
    found: set[str] = set()
    for pattern in options.patterns:
        for file in root.rglob(pattern):
            if not file.is_file():
                continue
            path = standardize(file)
            relative = file.relative_to(root).as_posix()
            if options.accepts(path, relative):
                found.add(path)
    return sorted(found)


def extract_records(paths: Sequence[str], symbols: SymbolTable) -> list[FileExportRecord]:
    """Parse every source, claiming exported names in *symbols* as they appear."""
    records: list[FileExportRecord] = []
    seen: set[str] = set()
    for path in paths:
        if path in seen:
            raise DuplicateSourceError(path)
        seen.add(path)
        logger.debug("process source: %s", path)
        records.append(parse_exports(path, on_export=symbols.claim))
    return records


def run(options: BreakOptions) -> list[FileExportRecord]:
    """Break circular imports under ``options.source_root``.

    Returns the records in dependency order.  Every source is read and parsed
    before anything is written; once writing starts, files are written one by
    one and an error part-way leaves the earlier writes in place.
    """
    sources = collect_sources(options)
    logger.info("circular breaker start..")
    logger.info("typescript source count: %d", len(sources))
    logger.info("index file: %s", options.index_path)
    if options.entry_path:
        logger.info("entry file: %s", options.entry_path)

    symbols = SymbolTable()
    records = extract_records(sources, symbols)
    records.sort(key=lambda r: r.path)
    try:
        ordered = sort_records(records, symbols)
    except CircularDependencyError:
        for group in find_cycles(records, symbols):
            logger.error("dependency tangle:\n  %s", "\n  ".join(group))
        raise

    # Prepare everything in memory before the first write.
    rewritten: list[tuple[str, str, str]] = []
    for record in ordered:
        original = read_source(record.path)
        updated = rewrite_imports(original, record, options.index_path, symbols)
        rewritten.append((record.path, original, updated))

    entry_update: str | None = None
    if options.entry_path:
        entry_text = read_source(options.entry_path)
        entry_update = rewrite_entry(
            entry_text, relative_import_path(options.entry_path, options.index_path)
        )
        if entry_update == entry_text:
            entry_update = None

    changed = 0
    for path, original, updated in rewritten:
        if updated != original:
            write_source(path, updated)
            changed += 1
    logger.info("sources rewritten: %d of %d", changed, len(rewritten))

    write_index(ordered, options.index_path, options.runtime)

    if options.entry_path and entry_update is not None:
        write_source(options.entry_path, entry_update)
        logger.info("entry file updated: %s", options.entry_path)

    return ordered


def circular_break(options: BreakOptions) -> bool:
    """Run :func:`run` and report failure as ``False`` instead of raising."""
    try:
        run(options)
    except TsUnravelError as e:
        logger.error("%s", e)
        return False
    return True
