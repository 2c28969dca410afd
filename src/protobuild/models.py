"""Core typed dataclasses for compiler resolution, source sets and results."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from protobuild.classpath import DependencyLookup

LATEST = "latest"


@dataclass(frozen=True, slots=True)
class ArtifactCoordinate:
    """A platform-specific binary published to a Maven-layout repository."""

    group: str
    name: str
    version: str
    classifier: str
    extension: str = "exe"

    @property
    def is_latest(self) -> bool:
        return self.version == LATEST

    @property
    def group_path(self) -> tuple[str, ...]:
        return tuple(self.group.split("."))

    @property
    def file_name(self) -> str:
        return f"{self.name}-{self.version}-{self.classifier}.{self.extension}"

    def with_version(self, version: str) -> ArtifactCoordinate:
        return replace(self, version=version)

    def __str__(self) -> str:
        return f"{self.group}:{self.name}:{self.extension}:{self.classifier}:{self.version}"


@dataclass(frozen=True, slots=True)
class ResolvedBinary:
    path: Path
    made_executable: bool


@dataclass(frozen=True, slots=True)
class CompilerDetails:
    protoc: ResolvedBinary | None
    grpc_plugin: ResolvedBinary | None = None


@dataclass(frozen=True, slots=True)
class SourcePathSet:
    user_paths: tuple[Path, ...]
    dependency_paths: tuple[Path, ...] = ()
    builtin_path: Path | None = None

    def include_paths(self) -> tuple[Path, ...]:
        """Import roots in compiler lookup order: dependencies, user sources, builtin."""
        builtin = (self.builtin_path,) if self.builtin_path is not None else ()
        return (*self.dependency_paths, *self.user_paths, *builtin)


@dataclass(frozen=True, slots=True)
class TargetPathSet:
    proto_dir: Path
    grpc_dir: Path


@dataclass(frozen=True, slots=True)
class Project:
    """The slice of the host project model the orchestrator consumes."""

    root: Path
    build_dir: Path
    dependencies: DependencyLookup | None = None


@dataclass(frozen=True, slots=True)
class BuildCommand:
    argv: tuple[str, ...]
    proto_files: tuple[Path, ...]


class CompileStatus(StrEnum):
    COMPILED = "compiled"
    UP_TO_DATE = "up_to_date"
    NO_SOURCES = "no_sources"
    NO_COMPILER = "no_compiler"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"


@dataclass(slots=True)
class CompileResult:
    status: CompileStatus
    command: tuple[str, ...] = ()
    proto_files: tuple[Path, ...] = ()
    returncode: int | None = None
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.status in {
            CompileStatus.COMPILED,
            CompileStatus.UP_TO_DATE,
            CompileStatus.NO_SOURCES,
        }


__all__ = [
    "LATEST",
    "ArtifactCoordinate",
    "BuildCommand",
    "CompileResult",
    "CompileStatus",
    "CompilerDetails",
    "Project",
    "ResolvedBinary",
    "SourcePathSet",
    "TargetPathSet",
]
