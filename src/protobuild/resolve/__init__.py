"""Compiler artifact and version resolution."""

from .artifacts import (
    GRPC_JAVA_PLUGIN,
    PROTOC,
    ArtifactResolver,
    RepositoryClient,
    default_local_repository,
    local_artifact_path,
)
from .maven import MavenRepository
from .versions import highest_version, matches_range, sort_versions, version_key

__all__ = [
    "GRPC_JAVA_PLUGIN",
    "PROTOC",
    "ArtifactResolver",
    "MavenRepository",
    "RepositoryClient",
    "default_local_repository",
    "highest_version",
    "local_artifact_path",
    "matches_range",
    "sort_versions",
    "version_key",
]
