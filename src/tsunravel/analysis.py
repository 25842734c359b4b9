"""Dependency ordering over file records (topological sort, cycle detection)."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Sequence

from tsunravel.errors import CircularDependencyError, DuplicateSourceError
from tsunravel.model import FileExportRecord, SymbolTable

logger = logging.getLogger(__name__)


class _Mark(Enum):
    NEW = 0
    ACTIVE = 1
    DONE = 2


def _build_edges(
    records: Sequence[FileExportRecord], symbols: SymbolTable
) -> list[list[int]]:
    """Adjacency lists by record index, in ``depends`` order."""
    index: dict[str, int] = {}
    for i, record in enumerate(records):
        if record.path in index:
            raise DuplicateSourceError(record.path)
        index[record.path] = i

    edges: list[list[int]] = []
    for record in records:
        targets: list[int] = []
        for name, line in record.depends.items():
            owner = line.source_of(name, symbols)
            target = index.get(owner) if owner is not None else None
            if target is None:
                logger.debug("dependent not found: %s -> %s", record.path, name)
                continue
            targets.append(target)
        edges.append(targets)
    return edges


def sort_records(
    records: Sequence[FileExportRecord], symbols: SymbolTable
) -> list[FileExportRecord]:
    """Order *records* so every file comes after the files it strongly depends on.

    Entry points are visited in the given order; callers sort by path to get
    a deterministic result.  The first cycle met aborts the sort with
    :class:`CircularDependencyError`, whose ``cycle`` runs from the repeated
    file back to itself.
    """
    edges = _build_edges(records, symbols)
    marks = [_Mark.NEW] * len(records)
    path: list[int] = []
    order: list[int] = []

    def _visit(v: int) -> None:
        if marks[v] is _Mark.ACTIVE:
            start = path.index(v)
            raise CircularDependencyError([records[i].path for i in path[start:] + [v]])
        if marks[v] is _Mark.DONE:
            return
        marks[v] = _Mark.ACTIVE
        path.append(v)
        for w in edges[v]:
            _visit(w)
        path.pop()
        marks[v] = _Mark.DONE
        order.append(v)

    for v in range(len(records)):
        _visit(v)

    return [records[i] for i in order]


def find_cycles(
    records: Sequence[FileExportRecord], symbols: SymbolTable
) -> list[list[str]]:
    """Return strongly-connected components of size ≥ 2 using Tarjan's algorithm.

    Each returned list is a group of file paths that are mutually reachable
    via strong dependencies, i.e. every tangle that has to be untied before
    :func:`sort_records` can succeed.
    """
    edges = _build_edges(records, symbols)
    index: dict[int, int] = {}
    lowlink: dict[int, int] = {}
    on_stack: set[int] = set()
    stack: list[int] = []
    sccs: list[list[str]] = []
    counter = [0]

    def _visit(v: int) -> None:
        index[v] = lowlink[v] = counter[0]
        counter[0] += 1
        stack.append(v)
        on_stack.add(v)

        for w in edges[v]:
            if w not in index:
                _visit(w)
                lowlink[v] = min(lowlink[v], lowlink[w])
            elif w in on_stack:
                lowlink[v] = min(lowlink[v], index[w])

        if lowlink[v] == index[v]:
            scc: list[str] = []
            while True:
                w = stack.pop()
                on_stack.discard(w)
                scc.append(records[w].path)
                if w == v:
                    break
            if len(scc) >= 2:
                sccs.append(scc)

    for v in range(len(records)):
        if v not in index:
            _visit(v)

    return sccs
