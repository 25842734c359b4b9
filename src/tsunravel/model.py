"""Data model for exported symbols, import lines and per-file records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from tsunravel.errors import NameCollisionError


class ExportKind(Enum):
    VAR = "var"
    FUNC = "func"
    ENUM = "enum"
    CLASS = "class"
    INTERFACE = "interface"  # virtual
    TYPE = "type"  # virtual

    @property
    def is_virtual(self) -> bool:
        """True for kinds that are erased at runtime and produce no binding."""
        return self in (ExportKind.INTERFACE, ExportKind.TYPE)


@dataclass(frozen=True)
class ExportedSymbol:
    """One exported top-level declaration."""

    name: str
    kind: ExportKind
    is_default: bool = False


@dataclass
class ImportLine:
    """One top-level import statement of a source file."""

    module_path: str
    resolved_path: str | None = None
    imported_names: list[str] = field(default_factory=list)
    has_default_import: bool = False
    is_strong_dependency: bool = False
    # Where and how the statement was written, for lossless rewriting.
    text: str = ""
    offset: int = -1
    specifier: str = ""
    aliases: dict[str, str] = field(default_factory=dict)  # local -> exported
    namespace: str | None = None
    type_only: bool = False
    is_require: bool = False

    def exported_name(self, local: str) -> str:
        return self.aliases.get(local, local)

    def is_default_binding(self, local: str) -> bool:
        """True if *local* is the default import (``import D from ...``)."""
        return (
            self.has_default_import
            and not self.is_require
            and bool(self.imported_names)
            and self.imported_names[0] == local
            and local not in self.aliases
        )

    def source_of(self, local: str, symbols: SymbolTable) -> str | None:
        """Path of the file that provides the binding *local*.

        Default and ``require`` bindings come from the imported module itself;
        named bindings from whichever file owns the exported name.
        """
        if self.is_require or self.is_default_binding(local):
            return self.resolved_path
        return symbols.owner(self.exported_name(local))


@dataclass
class FileExportRecord:
    """Extraction result for a single source file."""

    path: str
    exports: list[ExportedSymbol] = field(default_factory=list)
    solid_export_count: int = 0
    imports: list[ImportLine] = field(default_factory=list)
    depends: dict[str, ImportLine] = field(default_factory=dict)

    def add_export(self, symbol: ExportedSymbol) -> None:
        if symbol.is_default:
            self.exports.insert(0, symbol)
        else:
            self.exports.append(symbol)
        if not symbol.kind.is_virtual:
            self.solid_export_count += 1

    def add_dependency(self, name: str) -> bool:
        """Record *name* as a strong dependency if some import brings it in."""
        if name in self.depends:
            return True
        for line in self.imports:
            if name in line.imported_names:
                line.is_strong_dependency = True
                self.depends[name] = line
                return True
        return False


class SymbolTable:
    """Exported name -> owning file path, shared by one resolution run."""

    def __init__(self) -> None:
        self._owners: dict[str, str] = {}

    def claim(self, path: str, symbol: ExportedSymbol) -> None:
        owner = self._owners.get(symbol.name)
        if owner is not None and owner != path:
            raise NameCollisionError(symbol.name, owner, path)
        self._owners.setdefault(symbol.name, path)

    def owner(self, name: str) -> str | None:
        return self._owners.get(name)

    def covers(self, names: Iterable[str]) -> bool:
        return all(name in self._owners for name in names)

    def __contains__(self, name: object) -> bool:
        return name in self._owners

    def __len__(self) -> int:
        return len(self._owners)
