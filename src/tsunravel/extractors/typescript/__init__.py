"""TypeScript extractors: parser access and node helpers."""

from __future__ import annotations

from functools import lru_cache

import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser


@lru_cache(maxsize=None)
def _language(tsx: bool) -> Language:
    return Language(tsts.language_tsx() if tsx else tsts.language_typescript())


def get_parser(path: str | None = None) -> Parser:
    """Return a parser for *path*; ``.tsx`` files get the TSX grammar."""
    tsx = path is not None and path.endswith(".tsx")
    return Parser(_language(tsx))


def node_text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def has_keyword(node: Node, keyword: str) -> bool:
    """True if *node* has an anonymous child token spelled *keyword*."""
    return any(child.type == keyword for child in node.children)
