"""Resolution of versioned, platform-specific compiler executables."""

from __future__ import annotations

import stat
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from protobuild.errors import ResolutionError
from protobuild.models import ArtifactCoordinate, ResolvedBinary
from protobuild.observability import StructuredLogger
from protobuild.platforms import platform_classifier
from protobuild.resolve.versions import highest_version

PROTOC = ("com.google.protobuf", "protoc")
GRPC_JAVA_PLUGIN = ("io.grpc", "protoc-gen-grpc-java")

LATEST_RANGE = ">0"
BINARY_EXTENSION = "exe"


class RepositoryClient(Protocol):
    local_root: Path

    def resolve_artifact(self, coordinate: ArtifactCoordinate) -> object:
        """Ensure the artifact is in local storage, downloading it if absent."""

    def resolve_versions(self, group: str, name: str, version_range: str) -> Sequence[str]:
        """Return the versions available for ``group:name`` within the range."""


def default_local_repository() -> Path:
    return Path.home() / ".m2" / "repository"


def local_artifact_path(coordinate: ArtifactCoordinate, *, root: Path) -> Path:
    """Where a Maven-layout repository stores ``coordinate`` below ``root``."""
    return root.joinpath(
        *coordinate.group_path,
        coordinate.name,
        coordinate.version,
        coordinate.file_name,
    )


@dataclass(slots=True)
class ArtifactResolver:
    repository: RepositoryClient
    local_root: Path | None = None
    classifier: str | None = None
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def resolve(self, group: str, name: str, version: str) -> ResolvedBinary | None:
        """Resolve an executable for ``group:name:version`` or ``None`` on failure.

        Failures are logged as warnings; callers skip compilation for the run.
        """
        classifier = self.classifier or platform_classifier()
        coordinate = ArtifactCoordinate(
            group=group,
            name=name,
            version=version,
            classifier=classifier,
            extension=BINARY_EXTENSION,
        )
        try:
            if coordinate.is_latest:
                coordinate = coordinate.with_version(self.latest_version(group, name))
            self.repository.resolve_artifact(coordinate)
            binary_path = local_artifact_path(coordinate, root=self.artifact_root)
            _make_executable(binary_path)
        except Exception as exc:  # noqa: BLE001 - resolution failures degrade to a skipped compile
            self.logger.warning(
                operation="resolve_artifact",
                stage="resolve",
                message=f"Failed to resolve {coordinate}: {exc}",
                coordinate=str(coordinate),
            )
            return None

        self.logger.info(
            operation="resolve_artifact",
            stage="resolve",
            message=f"Resolved {coordinate}.",
            coordinate=str(coordinate),
            path=str(binary_path),
        )
        return ResolvedBinary(path=binary_path.absolute(), made_executable=True)

    @property
    def artifact_root(self) -> Path:
        """Local root the repository client stores artifacts under, unless overridden."""
        if self.local_root is not None:
            return self.local_root
        return self.repository.local_root

    def latest_version(self, group: str, name: str) -> str:
        versions = self.repository.resolve_versions(group, name, LATEST_RANGE)
        latest = highest_version(versions)
        if latest is None:
            raise ResolutionError(
                "No versions available for artifact.",
                hint="Pin an explicit version or check repository connectivity.",
                context={
                    "operation": "latest_version",
                    "artifact": f"{group}:{name}",
                    "range": LATEST_RANGE,
                },
            )
        return latest

    def resolve_protoc(self, version: str) -> ResolvedBinary | None:
        return self.resolve(*PROTOC, version)

    def resolve_grpc_plugin(self, version: str) -> ResolvedBinary | None:
        return self.resolve(*GRPC_JAVA_PLUGIN, version)


def _make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
