"""Assembly of the protoc argument vector."""

from __future__ import annotations

from pathlib import Path

from protobuild.models import BuildCommand, CompilerDetails, SourcePathSet, TargetPathSet
from protobuild.observability import StructuredLogger
from protobuild.paths import resolve_target_path
from protobuild.staleness import outdated_protos, proto_files

GRPC_PLUGIN_NAME = "protoc-gen-grpc-java"


def include_arg(path: Path) -> str:
    return f"-I={path.absolute()}"


def compile_targets(sources: SourcePathSet) -> tuple[Path, ...]:
    """Protos passed to the compiler; dependency and builtin protos are only importable."""
    return tuple(proto for source in sources.user_paths for proto in proto_files(source))


def build_command(
    compiler: CompilerDetails,
    sources: SourcePathSet,
    targets: TargetPathSet,
    *,
    logger: StructuredLogger | None = None,
) -> BuildCommand | None:
    """Build the compiler invocation, or ``None`` when there is nothing to compile.

    Output directories are created as a side effect. The include order is
    significant because protoc resolves imports by first match.
    """
    if compiler.protoc is None:
        return None
    logger = logger if logger is not None else StructuredLogger()

    argv = [
        str(compiler.protoc.path),
        f"--java_out={resolve_target_path(targets.proto_dir)}",
    ]
    if compiler.grpc_plugin is not None:
        argv.extend(
            [
                f"--plugin={GRPC_PLUGIN_NAME}={compiler.grpc_plugin.path}",
                f"--grpc-java_out={resolve_target_path(targets.grpc_dir)}",
            ]
        )

    protos = compile_targets(sources)
    if not protos:
        logger.info(
            operation="build_command",
            stage="command",
            message="No proto files found in source paths.",
            source_paths=[str(path) for path in sources.user_paths],
        )
        return None
    if not outdated_protos(sources.user_paths, targets.proto_dir):
        logger.info(
            operation="build_command",
            stage="command",
            message="Generated sources are up to date.",
            target=str(targets.proto_dir),
        )
        return None

    argv.extend(include_arg(path) for path in sources.include_paths())
    argv.extend(str(proto) for proto in protos)
    logger.info(
        operation="build_command",
        stage="command",
        message=f"Compiling {len(protos)} proto files.",
        proto_files=[str(proto) for proto in protos],
    )
    return BuildCommand(argv=tuple(argv), proto_files=protos)
