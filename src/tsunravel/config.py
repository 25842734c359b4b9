"""Read tsunravel settings from .tsunravel.toml or pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILE = ".tsunravel.toml"


@dataclass
class Config:
    index: str | None = None
    entry: str | None = None
    patterns: list[str] = field(default_factory=lambda: ["*.ts"])
    exclude: list[str] = field(default_factory=list)
    runtime_index: str | None = None
    dist_path: str | None = None
    relative_index: str | None = None


def load_config(root: str | Path) -> Config:
    """Settings for the source tree at *root*.

    ``[tsunravel]`` in ``.tsunravel.toml`` wins over ``[tool.tsunravel]`` in
    ``pyproject.toml``.  Relative ``index``, ``entry`` and ``runtime_index``
    paths are taken relative to *root*.
    """
    root = Path(root)
    table = _read_table(root / CONFIG_FILE, ("tsunravel",))
    if table is None:
        table = _read_table(root / "pyproject.toml", ("tool", "tsunravel"))
    if table is None:
        return Config()

    known = {f.name for f in fields(Config)}
    values = {}
    for key, value in table.items():
        name = key.replace("-", "_")
        if name not in known:
            logger.warning("unknown config key ignored: %s", key)
            continue
        values[name] = value
    for name in ("patterns", "exclude"):
        if isinstance(values.get(name), str):
            values[name] = [values[name]]
    for name in ("index", "entry", "runtime_index"):
        if values.get(name):
            values[name] = str(root / values[name])
    return Config(**values)


def _read_table(path: Path, keys: tuple[str, ...]) -> dict | None:
    if not path.exists():
        return None
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("ignoring unreadable config %s: %s", path, e)
        return None
    for key in keys:
        data = data.get(key)
        if not isinstance(data, dict):
            return None
    logger.debug("config loaded from %s", path)
    return data
