"""Import specifier resolution and relative-path computation."""

from __future__ import annotations

import os
from pathlib import Path

# Suffixes that make a specifier "already carry an extension".
_KNOWN_SUFFIXES = (".ts", ".tsx", ".d.ts", ".js", ".jsx", ".mjs", ".cjs", ".json")

DEFAULT_EXTENSION = ".ts"


def standardize(path: str | os.PathLike[str]) -> str:
    """Absolute, normalized, forward-slash form of *path*."""
    return Path(os.path.abspath(path)).as_posix()


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(("./", "../"))


def has_known_extension(specifier: str) -> bool:
    return specifier.endswith(_KNOWN_SUFFIXES)


def resolve_import_path(from_path: str, specifier: str) -> str | None:
    """Resolve *specifier* as written in *from_path* to an absolute path.

    Bare module names (``lodash``, ``fs``) are external and resolve to None.
    A specifier without a known extension gets ``.ts`` appended.
    """
    if not (is_relative_specifier(specifier) or os.path.isabs(specifier)):
        return None
    if not has_known_extension(specifier):
        specifier += DEFAULT_EXTENSION
    base = os.path.dirname(from_path)
    return standardize(os.path.join(base, specifier))


def strip_extension(path: str) -> str:
    if path.endswith(".d.ts"):
        return path[: -len(".d.ts")]
    return os.path.splitext(path)[0]


def relative_import_path(base: str, target: str, *, keep_extension: bool = False) -> str:
    """Specifier for importing *target* from *base*.

    *base* may be a file (its directory is used) or a directory ending with
    a slash.  The result always starts with ``./`` or ``../``.
    """
    base_dir = base if base.endswith("/") else os.path.dirname(base)
    relative = Path(os.path.relpath(target, base_dir or ".")).as_posix()
    if not keep_extension:
        relative = strip_extension(relative)
    if not relative.startswith(("./", "../")):
        relative = "./" + relative
    return relative
