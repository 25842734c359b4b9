"""Command-line interface for tsunravel."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from tsunravel.config import load_config
from tsunravel.errors import TsUnravelError
from tsunravel.pipeline import BreakOptions, circular_break
from tsunravel.renderer.index import RuntimeIndexOptions
from tsunravel.resolver import move_sources
from tsunravel.source import swin_imports

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsunravel",
        description="Break circular imports in a TypeScript source tree by routing them through one index module.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    brk = commands.add_parser("break", help="Rewrite imports and generate the index module")
    brk.add_argument("root", type=Path, help="Root folder of the TypeScript sources")
    brk.add_argument("--index", default=None, help="Declaration index file to generate")
    brk.add_argument("--entry", default=None, help="Entry file that should require the index")
    brk.add_argument(
        "--runtime-index",
        default=None,
        help="Runtime JavaScript index file (default: next to --index, with .js)",
    )
    brk.add_argument("--dist-path", default=None, help="Path of the index module at runtime")
    brk.add_argument(
        "--relative-index",
        default=None,
        help="Index path relative to the project (default: relative to ROOT)",
    )
    brk.add_argument(
        "--pattern",
        action="append",
        dest="patterns",
        default=None,
        help="Glob of source files to process (repeatable, default: *.ts)",
    )

    swin = commands.add_parser("swin", help="Hoist all import lines of a file to its top")
    swin.add_argument("file", type=Path, help="Source file")
    swin.add_argument("-o", "--output", type=Path, default=None, help="Write here instead of in place")

    move = commands.add_parser("move", help="Move a folder of sources and fix every import")
    move.add_argument("root", type=Path, help="Root folder of the TypeScript sources")
    move.add_argument("src", type=Path, help="Folder to move")
    move.add_argument("dst", type=Path, help="New location of the folder")
    move.add_argument("--pattern", default="*.ts", help="Glob of source files (default: *.ts)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    logging.getLogger("tsunravel").setLevel(logging.DEBUG if args.verbose else logging.INFO)

    if args.command == "break":
        return _run_break(args)
    try:
        if args.command == "swin":
            swin_imports(args.file, args.output)
        else:
            move_sources(args.root, args.src, args.dst, args.pattern)
    except TsUnravelError as e:
        logger.error("%s", e)
        return 1
    return 0


def _run_break(args: argparse.Namespace) -> int:
    config = load_config(args.root)
    index = args.index or config.index
    if not index:
        logger.error("no index file given (--index or 'index' in config)")
        return 1

    runtime = None
    runtime_index = args.runtime_index or config.runtime_index
    dist_path = args.dist_path or config.dist_path
    if runtime_index or dist_path:
        if not dist_path:
            logger.error("a runtime index needs --dist-path")
            return 1
        relative_index = args.relative_index or config.relative_index
        if not relative_index:
            relative_index = Path(os.path.relpath(index, args.root)).as_posix()
        runtime = RuntimeIndexOptions(
            dist_path=dist_path,
            relative_index_path=relative_index,
            output_path=runtime_index,
        )

    options = BreakOptions(
        source_root=str(args.root),
        index_path=index,
        patterns=tuple(args.patterns or config.patterns),
        exclude=tuple(config.exclude),
        entry_path=args.entry or config.entry,
        runtime=runtime,
    )
    return 0 if circular_break(options) else 1
