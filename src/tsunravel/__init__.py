"""Break circular imports in TypeScript sources through a generated index module."""

from tsunravel.errors import (
    CircularDependencyError,
    DuplicateSourceError,
    NameCollisionError,
    SourceParseError,
    SourceReadError,
    SourceWriteError,
    TsUnravelError,
)
from tsunravel.model import ExportedSymbol, ExportKind, FileExportRecord, ImportLine, SymbolTable
from tsunravel.pipeline import BreakOptions, circular_break, run

__all__ = [
    "BreakOptions",
    "CircularDependencyError",
    "DuplicateSourceError",
    "ExportKind",
    "ExportedSymbol",
    "FileExportRecord",
    "ImportLine",
    "NameCollisionError",
    "SourceParseError",
    "SourceReadError",
    "SourceWriteError",
    "SymbolTable",
    "TsUnravelError",
    "circular_break",
    "run",
]
