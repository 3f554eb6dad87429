"""Classpath assembly for native-image."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

CLASSPATH_SEPARATOR = ":"


def collect_classpath(*sources: Iterable[str | Path]) -> tuple[Path, ...]:
    """Union *sources* into absolute paths, keeping the first occurrence of each."""
    seen: dict[Path, None] = {}
    for source in sources:
        for entry in source:
            seen.setdefault(Path(entry).absolute(), None)
    return tuple(seen)


def classpath_argument(entries: Iterable[Path]) -> str:
    return CLASSPATH_SEPARATOR.join(str(entry) for entry in entries)


__all__ = ["CLASSPATH_SEPARATOR", "classpath_argument", "collect_classpath"]
