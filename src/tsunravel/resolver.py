"""Retarget import specifiers, and move a folder of sources without breaking imports."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

from tsunravel.errors import SourceWriteError, TsUnravelError
from tsunravel.extractors.typescript.exports import parse_exports
from tsunravel.model import FileExportRecord, ImportLine
from tsunravel.paths import has_known_extension, relative_import_path, standardize
from tsunravel.source import read_source, write_source

logger = logging.getLogger(__name__)

# Called once per import line; may assign a new ``module_path``.
ImportResolver = Callable[[ImportLine], object]


def resolve_imports(
    path: str | os.PathLike[str],
    resolver: ImportResolver,
    dest: str | os.PathLike[str] | None = None,
    *,
    text: str | None = None,
) -> str:
    """Let *resolver* rewrite the import specifiers of one file.

    Only the specifier literal of a line whose ``module_path`` changed is
    replaced; everything else stays byte-for-byte.  The result is written to
    *dest* when given, and returned.
    """
    path = standardize(path)
    if text is None:
        text = read_source(path)
    record = parse_exports(path, text)
    result = retarget_imports(text, record, resolver)
    if dest is not None:
        write_source(dest, result)
    return result


def retarget_imports(text: str, record: FileExportRecord, resolver: ImportResolver) -> str:
    """Apply *resolver* to the imports of *record*, whose source is *text*."""
    changed: list[tuple[ImportLine, str]] = []
    for line in record.imports:
        before = line.module_path
        resolver(line)
        if line.module_path != before:
            logger.debug("%s: %s -> %s", record.path, before, line.module_path)
            changed.append((line, before))

    # Back to front so earlier offsets stay valid.
    for line, before in sorted(changed, key=lambda item: item[0].offset, reverse=True):
        end = line.offset + len(line.text)
        if line.offset < 0 or text[line.offset : end] != line.text:
            logger.warning("%s: import moved under us, skipped: %s", record.path, before)
            continue
        at = line.text.rfind(line.specifier)
        if at == -1:
            continue
        quote = line.specifier[0]
        replaced = (
            line.text[:at]
            + f"{quote}{line.module_path}{quote}"
            + line.text[at + len(line.specifier) :]
        )
        text = text[: line.offset] + replaced + text[end:]
    return text


def move_sources(
    root: str | os.PathLike[str],
    src: str | os.PathLike[str],
    dst: str | os.PathLike[str],
    pattern: str = "*.ts",
) -> dict[str, str]:
    """Move the sources under *src* to *dst*, keeping every import working.

    Relative imports inside the moved files are recomputed from their new
    location, and files elsewhere under *root* that import a moved file are
    pointed at its new path.  All output is prepared before anything is
    written.  Returns the old -> new path mapping.
    """
    root = standardize(root)
    src = standardize(src)
    dst = standardize(dst)
    if not Path(src).is_dir():
        raise TsUnravelError(f"source folder is not a directory: {src}")
    if dst == src or dst.startswith(src + "/"):
        raise TsUnravelError(f"cannot move {src} into itself: {dst}")

    moved: dict[str, str] = {}
    for file in sorted(Path(src).rglob(pattern)):
        if file.is_file():
            old = standardize(file)
            moved[old] = dst + old[len(src) :]
    for new in moved.values():
        if Path(new).exists():
            raise TsUnravelError(f"move target already exists: {new}")

    others = sorted(
        standardize(file)
        for file in Path(root).rglob(pattern)
        if file.is_file() and standardize(file) not in moved
    )
    logger.info("move %d sources: %s -> %s", len(moved), src, dst)

    outputs: list[tuple[str, str]] = []
    for path in [*moved, *others]:
        base = moved.get(path, path)
        text = read_source(path)

        def _retarget(line: ImportLine, base: str = base, path: str = path) -> None:
            if line.resolved_path is None:
                return
            target = moved.get(line.resolved_path, line.resolved_path)
            if path not in moved and target == line.resolved_path:
                return
            line.module_path = relative_import_path(
                base, target, keep_extension=has_known_extension(line.module_path)
            )

        result = retarget_imports(text, parse_exports(path, text), _retarget)
        if path in moved or result != text:
            outputs.append((base, result))

    for target, result in outputs:
        write_source(target, result)
    for old in moved:
        try:
            os.remove(old)
        except OSError as e:
            raise SourceWriteError(old, e.strerror) from e
    _prune_empty_dirs(src)
    logger.info("sources updated: %d", len(outputs))
    return moved


def _prune_empty_dirs(top: str) -> None:
    for dirpath, _, _ in os.walk(top, topdown=False):
        if not os.listdir(dirpath):
            os.rmdir(dirpath)
