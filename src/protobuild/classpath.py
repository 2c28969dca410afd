"""Lookups from dependency coordinates to their packaged archives."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


class DependencyLookup(Protocol):
    def archive_for(self, coordinate: str) -> Path | None:
        """Return the archive for a ``group/artifact`` coordinate, if resolved."""


@dataclass(frozen=True, slots=True)
class DependencyArchives:
    """Structured coordinate-to-archive mapping supplied by the dependency resolver."""

    archives: Mapping[str, Path] = field(default_factory=dict)

    def archive_for(self, coordinate: str) -> Path | None:
        archive = self.archives.get(coordinate)
        return Path(archive) if archive is not None else None


@dataclass(frozen=True, slots=True)
class ClasspathEntries:
    """Legacy lookup matching coordinates against plain classpath entries.

    A coordinate ``com.example/protos`` matches any entry containing the path
    segments ``com/example/protos/`` with either separator style, the layout
    used by Maven-style local repositories.
    """

    entries: tuple[str, ...] = ()

    @classmethod
    def of(cls, entries: Iterable[str | Path]) -> ClasspathEntries:
        return cls(entries=tuple(str(entry) for entry in entries))

    def archive_for(self, coordinate: str) -> Path | None:
        pattern = coordinate_pattern(coordinate)
        for entry in self.entries:
            if pattern.fullmatch(entry):
                return Path(entry)
        return None


def coordinate_pattern(coordinate: str) -> re.Pattern[str]:
    group, _, artifact = coordinate.partition("/")
    components = [*group.split("."), artifact] if artifact else group.split(".")
    separator = r"[/\\]"
    body = "".join(re.escape(component) + separator for component in components)
    return re.compile(f".*{separator}{body}.*")
