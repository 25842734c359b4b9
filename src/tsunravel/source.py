"""Split TypeScript source text into header, import block and body.

The scanner is lexical: it only knows about whitespace, ``//`` and ``/* */``
comments, quoted strings (``'``, ``"`` and backtick, with backslash escapes)
and lines that start with ``import ``.  The three parts always concatenate
back to the original text.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, NamedTuple

from tsunravel.errors import SourceParseError, SourceReadError, SourceWriteError

logger = logging.getLogger(__name__)

_IMPORT = "import "
_NEWLINES = "\r\n"
_SPACES = " \t\r\n\ufeff"
_QUOTES = "'\"`"


class SectionKind(Enum):
    COMMENT = "comment"  # whitespace and comments
    IMPORT = "import"
    CODE = "code"


class Section(NamedTuple):
    kind: SectionKind
    begin: int
    end: int


class Trinity(NamedTuple):
    """The three consecutive parts of a source file."""

    header: str
    imports: str
    body: str


# ---------------------------------------------------------------------------
# File access
# ---------------------------------------------------------------------------


def read_source(path: str | os.PathLike[str]) -> str:
    """Read a source file as text, keeping its line endings untouched."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise SourceReadError(str(path), e.strerror) from e
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SourceParseError(str(path), f"not valid UTF-8: {e}") from e


def write_source(path: str | os.PathLike[str], text: str) -> None:
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(text.encode("utf-8"))
    except OSError as e:
        raise SourceWriteError(str(path), e.strerror) from e


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


def iter_sections(text: str, path: str | None = None) -> Iterator[Section]:
    """Yield consecutive sections covering *text* from start to end."""
    pos = 0
    length = len(text)
    while pos < length:
        c = text[pos]
        if c in _SPACES:
            end = _skip_space_and_comment(text, pos)
            yield Section(SectionKind.COMMENT, pos, end)
            pos = end
            continue

        if c == "i" and text.startswith(_IMPORT, pos):
            end = _skip_import(text, pos)
            yield Section(SectionKind.IMPORT, pos, end)
            pos = end
            continue

        if c == "/":
            end = _skip_space_and_comment(text, pos)
            if end > pos:
                yield Section(SectionKind.COMMENT, pos, end)
                pos = end
                continue

        end = _skip_code(text, pos)
        if end == pos:
            raise SourceParseError(path, f"scanner made no progress at offset {pos}")
        yield Section(SectionKind.CODE, pos, end)
        pos = end


def split_sections(
    text: str,
    path: str | None = None,
    *,
    rewrite_import: Callable[[Section, str], str] | None = None,
) -> Trinity:
    """Partition *text* so that ``header + imports + body == text``.

    Comments and whitespace belong to the header only until the first import
    or code section has been seen.  Every import section goes to *imports*;
    everything else goes to *body*.  *rewrite_import*, if given, maps each
    import section's text before it is collected.
    """
    header: list[str] = []
    imports: list[str] = []
    body: list[str] = []
    for section in iter_sections(text, path):
        chunk = text[section.begin : section.end]
        if section.kind is SectionKind.IMPORT:
            if rewrite_import is not None:
                chunk = rewrite_import(section, chunk)
            imports.append(chunk)
        elif section.kind is SectionKind.COMMENT and not imports and not body:
            header.append(chunk)
        else:
            body.append(chunk)
    return Trinity("".join(header), "".join(imports), "".join(body))


def extract_sections(path: str | os.PathLike[str]) -> Trinity:
    """Read *path* and split it into header, imports and body."""
    logger.debug("extract sections: %s", path)
    content = read_source(path)
    if not content:
        logger.debug("empty source file: %s", path)
    return split_sections(content, str(path))


def swin_imports(
    path: str | os.PathLike[str], dest: str | os.PathLike[str] | None = None
) -> str:
    """Hoist every import line of *path* to the top of the file.

    The result is written to *dest* (default: *path*) and returned.
    """
    logger.info("swin imports: %s", path)
    content = read_source(path)
    if not content:
        logger.debug("empty source file: %s", path)
        return content
    imports: list[str] = []
    rest: list[str] = []
    for section in iter_sections(content, str(path)):
        chunk = content[section.begin : section.end]
        if section.kind is SectionKind.IMPORT:
            imports.append(chunk)
        else:
            rest.append(chunk)
    if imports and rest and not imports[-1].endswith(("\n", "\r")):
        # an import at end of file must not run into the hoisted body
        imports[-1] += "\n"
    result = "".join(imports) + "".join(rest)
    write_source(dest if dest is not None else path, result)
    return result


def _skip_space_and_comment(text: str, pos: int) -> int:
    length = len(text)
    while pos < length:
        pos = _skip_space(text, pos)
        if pos >= length:
            break
        end = _skip_comment(text, pos)
        if end == pos:
            break
        pos = end
    return pos


def _skip_space(text: str, pos: int) -> int:
    length = len(text)
    while pos < length and text[pos] in _SPACES:
        pos += 1
    return pos


def _skip_comment(text: str, pos: int) -> int:
    if text.startswith("//", pos):
        return _skip_line(text, pos)
    if text.startswith("/*", pos):
        end = text.find("*/", pos + 2)
        return len(text) if end == -1 else end + 2
    return pos


def _skip_line(text: str, pos: int) -> int:
    """Skip to the end of the line and over the line breaks that follow."""
    length = len(text)
    while pos < length and text[pos] not in _NEWLINES:
        pos += 1
    while pos < length and text[pos] in _NEWLINES:
        pos += 1
    return pos


def _skip_string(text: str, pos: int) -> int:
    """Skip a quoted literal starting at *pos*; no-op if *pos* is not a quote."""
    if pos >= len(text) or text[pos] not in _QUOTES:
        return pos
    quote = text[pos]
    pos += 1
    escaped = False
    length = len(text)
    while pos < length:
        c = text[pos]
        pos += 1
        if escaped:
            escaped = False
        elif c == "\\":
            escaped = True
        elif c == quote:
            break
    return pos


def _skip_code(text: str, pos: int) -> int:
    length = len(text)
    prev: str | None = None
    while pos < length:
        c = text[pos]
        if c in _QUOTES:
            pos = _skip_string(text, pos)
            prev = text[pos - 1]
            continue
        if c == "i" and text.startswith(_IMPORT, pos) and (prev is None or prev in _NEWLINES):
            break
        if c == "/" and pos + 1 < length and text[pos + 1] in "/*":
            break
        pos += 1
        prev = c
    return pos


def _skip_import(text: str, pos: int) -> int:
    """Skip an import statement line, following ``{`` ... ``}`` across lines."""
    length = len(text)
    depth = 0
    while pos < length:
        c = text[pos]
        if c in _QUOTES:
            pos = _skip_string(text, pos)
            continue
        if text.startswith("//", pos):
            while pos < length and text[pos] not in _NEWLINES:
                pos += 1
            continue
        if text.startswith("/*", pos):
            end = text.find("*/", pos + 2)
            pos = length if end == -1 else end + 2
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
        elif c in _NEWLINES and depth <= 0:
            break
        pos += 1
    while pos < length and text[pos] in _NEWLINES:
        pos += 1
    return pos
