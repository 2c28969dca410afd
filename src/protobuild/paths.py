"""Source and target path resolution for a compile run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from protobuild.archive import ARCHIVES, ArchiveRegistry, StagingArea, extract_protos
from protobuild.classpath import DependencyArchives, DependencyLookup
from protobuild.config import ProtoSourceDep, ProtocConfig, target_path_default
from protobuild.errors import MissingDependencyError
from protobuild.models import Project, SourcePathSet, TargetPathSet
from protobuild.observability import StructuredLogger

BUILTIN_PROTO_DEP = "com.google.protobuf/protobuf-java"
BUILTIN_PROTO_PREFIX = "/google"


def qualify_path(root: Path, path: str | Path) -> Path:
    """Absolute form of ``path``, relative paths being taken from ``root``."""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return (root / candidate).absolute()


def resolve_target_path(target_path: Path) -> Path:
    target_path.mkdir(parents=True, exist_ok=True)
    return target_path.absolute()


@dataclass(slots=True)
class PathResolver:
    project: Project
    staging: StagingArea
    registry: ArchiveRegistry = ARCHIVES
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    @property
    def dependencies(self) -> DependencyLookup:
        return self.project.dependencies or DependencyArchives()

    def source_paths(self, config: ProtocConfig) -> SourcePathSet:
        return SourcePathSet(
            user_paths=self.user_source_paths(config),
            dependency_paths=tuple(self.dependency_path(dep) for dep in config.source_deps),
            builtin_path=self.builtin_proto_path(),
        )

    def user_source_paths(self, config: ProtocConfig) -> tuple[Path, ...]:
        return tuple(qualify_path(self.project.root, path) for path in config.source_paths)

    def dependency_path(self, dep: ProtoSourceDep) -> Path:
        archive = self.dependencies.archive_for(dep.coordinate)
        if archive is None:
            raise MissingDependencyError(
                f"Unable to include proto files for missing dependency {dep.coordinate}",
                hint="Declare the dependency in the project so its archive is resolved.",
                context={"operation": "dependency_path", "dependency": dep.coordinate},
            )
        staged = extract_protos(archive, dep.subpath, staging=self.staging, registry=self.registry)
        self.logger.info(
            operation="dependency_path",
            stage="paths",
            message=f"Staged proto files from {dep.coordinate}.",
            archive=str(archive),
            prefix=dep.subpath,
            staging=str(staged),
        )
        return staged.absolute()

    def builtin_proto_path(self) -> Path | None:
        archive = self.dependencies.archive_for(BUILTIN_PROTO_DEP)
        if archive is None:
            self.logger.info(
                operation="builtin_proto_path",
                stage="paths",
                message=(
                    f"The `{BUILTIN_PROTO_DEP}` dependency is not available so any Google "
                    "standard proto files will not be available to imports in source protos."
                ),
            )
            return None
        staged = extract_protos(
            archive,
            BUILTIN_PROTO_PREFIX,
            staging=self.staging,
            registry=self.registry,
        )
        return staged.absolute()

    def target_paths(self, config: ProtocConfig) -> TargetPathSet:
        if config.target_path is not None:
            proto_dir = qualify_path(self.project.root, config.target_path)
        else:
            proto_dir = qualify_path(self.project.root, target_path_default(self.project.build_dir))
        grpc_target = config.grpc.target_path if config.grpc is not None else None
        grpc_dir = qualify_path(self.project.root, grpc_target) if grpc_target else proto_dir
        return TargetPathSet(proto_dir=proto_dir, grpc_dir=grpc_dir)
