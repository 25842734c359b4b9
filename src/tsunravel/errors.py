"""Exceptions raised while resolving and rewriting a source tree."""

from __future__ import annotations


class TsUnravelError(Exception):
    """Base class for every fatal resolution failure."""


class SourceReadError(TsUnravelError):
    def __init__(self, path: str, reason: object = None) -> None:
        self.path = str(path)
        message = f"file read failed: {self.path}"
        if reason is not None:
            message += f" ({reason})"
        super().__init__(message)


class SourceWriteError(TsUnravelError):
    def __init__(self, path: str, reason: object = None) -> None:
        self.path = str(path)
        message = f"file write failed: {self.path}"
        if reason is not None:
            message += f" ({reason})"
        super().__init__(message)


class SourceParseError(TsUnravelError):
    def __init__(self, path: str | None, reason: str) -> None:
        self.path = str(path) if path is not None else None
        prefix = f"{self.path}: " if self.path else ""
        super().__init__(f"{prefix}{reason}")


class NameCollisionError(TsUnravelError):
    """Two files export the same top-level name."""

    def __init__(self, name: str, first_path: str, second_path: str) -> None:
        self.name = name
        self.first_path = first_path
        self.second_path = second_path
        super().__init__(
            f"export name conflict: {name}\n{first_path}\n{second_path}"
        )


class DuplicateSourceError(TsUnravelError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"source path duplicated: {path}")


class CircularDependencyError(TsUnravelError):
    """The strong-dependency graph has a cycle; *cycle* ends where it starts."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        super().__init__("circular dependencies: " + " ->\n".join(self.cycle))
