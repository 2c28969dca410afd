from pathlib import Path

import pytest

from protobuild.archive import ArchiveRegistry, StagingArea
from protobuild.classpath import DependencyArchives
from protobuild.config import ProtocConfig
from protobuild.errors import MissingDependencyError
from protobuild.models import Project
from protobuild.observability import StructuredLogger
from protobuild.paths import PathResolver, qualify_path, resolve_target_path


def _resolver(project: Project, staging: StagingArea) -> PathResolver:
    return PathResolver(
        project=project,
        staging=staging,
        registry=ArchiveRegistry(),
        logger=StructuredLogger(),
    )


def test_qualify_path_keeps_absolute_and_anchors_relative(tmp_path: Path) -> None:
    assert qualify_path(tmp_path, "/abs/protos") == Path("/abs/protos")
    assert qualify_path(tmp_path, "src/proto") == tmp_path / "src" / "proto"


def test_resolve_target_path_creates_directory(tmp_path: Path) -> None:
    target = resolve_target_path(tmp_path / "gen" / "java")

    assert target.is_dir()
    assert target.is_absolute()


def test_source_paths_default_and_order(make_archive, tmp_path: Path) -> None:
    dep_jar = make_archive("protos.jar", {"schemas/user.proto": b"message User {}"})
    builtin_jar = make_archive(
        "protobuf-java.jar",
        {"google/protobuf/any.proto": b"any", "com/google/protobuf/Any.class": b"\xca\xfe"},
    )
    project = Project(
        root=tmp_path,
        build_dir=tmp_path / "target",
        dependencies=DependencyArchives(
            {"com.example/protos": dep_jar, "com.google.protobuf/protobuf-java": builtin_jar}
        ),
    )
    config = ProtocConfig.from_options({"proto_source_deps": [["com.example/protos", "schemas/"]]})

    with StagingArea(parent=tmp_path / "staging") as staging:
        sources = _resolver(project, staging).source_paths(config)

        assert sources.user_paths == (tmp_path / "src" / "proto",)
        (dep_path,) = sources.dependency_paths
        assert (dep_path / "schemas" / "user.proto").read_bytes() == b"message User {}"
        assert sources.builtin_path is not None
        assert (sources.builtin_path / "google" / "protobuf" / "any.proto").exists()
        assert not (sources.builtin_path / "com").exists()
        assert sources.include_paths() == (dep_path, tmp_path / "src" / "proto", sources.builtin_path)


def test_missing_declared_dependency_is_fatal(tmp_path: Path) -> None:
    project = Project(root=tmp_path, build_dir=tmp_path / "target")
    config = ProtocConfig.from_options({"proto_source_deps": ["com.example/protos"]})

    with StagingArea(parent=tmp_path / "staging") as staging:
        with pytest.raises(MissingDependencyError) as excinfo:
            _resolver(project, staging).source_paths(config)

    assert "com.example/protos" in str(excinfo.value)


def test_missing_builtin_archive_is_informational(tmp_path: Path) -> None:
    project = Project(root=tmp_path, build_dir=tmp_path / "target")

    with StagingArea(parent=tmp_path / "staging") as staging:
        resolver = _resolver(project, staging)
        sources = resolver.source_paths(ProtocConfig.from_options({}))

    assert sources.builtin_path is None
    assert resolver.logger.records_at("warning") == []
    (notice,) = resolver.logger.records_at("info")
    assert "com.google.protobuf/protobuf-java" in notice["message"]


def test_target_paths_default_and_grpc_override(tmp_path: Path) -> None:
    project = Project(root=tmp_path, build_dir=tmp_path / "target")

    with StagingArea(parent=tmp_path / "staging") as staging:
        resolver = _resolver(project, staging)
        defaults = resolver.target_paths(ProtocConfig.from_options({"protoc_grpc": True}))
        custom = resolver.target_paths(
            ProtocConfig.from_options(
                {"proto_target_path": "gen/java", "protoc_grpc": {"target_path": "gen/grpc"}}
            )
        )

    expected = tmp_path / "target" / "generated-sources" / "protobuf"
    assert defaults.proto_dir == expected
    assert defaults.grpc_dir == expected
    assert custom.proto_dir == tmp_path / "gen" / "java"
    assert custom.grpc_dir == tmp_path / "gen" / "grpc"
