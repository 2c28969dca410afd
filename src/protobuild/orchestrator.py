"""Top-level compile entry point tying resolution, staging and execution together."""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from typing import Any, ParamSpec, TypeVar

from protobuild.archive import ARCHIVES, ArchiveRegistry, StagingArea
from protobuild.command import build_command, compile_targets
from protobuild.config import ProtocConfig
from protobuild.models import CompileResult, CompilerDetails, CompileStatus, Project
from protobuild.observability import StructuredLogger
from protobuild.paths import PathResolver
from protobuild.resolve import ArtifactResolver, MavenRepository, RepositoryClient
from protobuild.supervisor import run_compiler

P = ParamSpec("P")
R = TypeVar("R")


def compiler_details(config: ProtocConfig, resolver: ArtifactResolver) -> CompilerDetails:
    return CompilerDetails(
        protoc=resolver.resolve_protoc(config.protoc_version),
        grpc_plugin=(
            resolver.resolve_grpc_plugin(config.grpc.version) if config.grpc is not None else None
        ),
    )


def compile_protos(
    project: Project,
    options: Mapping[str, Any],
    *,
    repository: RepositoryClient | None = None,
    resolver: ArtifactResolver | None = None,
    registry: ArchiveRegistry = ARCHIVES,
    logger: StructuredLogger | None = None,
) -> CompileResult:
    """Compile the project's proto files to Java sources.

    Raises ``ConfigurationError`` for invalid options and
    ``MissingDependencyError`` / ``ExtractionError`` when a declared
    dependency cannot be staged. Every other problem is logged and reflected
    in the returned status.
    """
    logger = logger if logger is not None else StructuredLogger()
    config = ProtocConfig.from_options(options)
    if resolver is None:
        resolver = ArtifactResolver(
            repository=repository if repository is not None else MavenRepository(),
            logger=logger,
        )

    compiler = compiler_details(config, resolver)
    with StagingArea() as staging:
        paths = PathResolver(project=project, staging=staging, registry=registry, logger=logger)
        sources = paths.source_paths(config)
        targets = paths.target_paths(config)

        if compiler.protoc is None:
            logger.warning(
                operation="compile_protos",
                stage="compile",
                message="Skipping proto compilation: protoc executable could not be resolved.",
            )
            return CompileResult(status=CompileStatus.NO_COMPILER)

        command = build_command(compiler, sources, targets, logger=logger)
        if command is None:
            protos = compile_targets(sources)
            status = CompileStatus.UP_TO_DATE if protos else CompileStatus.NO_SOURCES
            return CompileResult(status=status, proto_files=protos)
        return run_compiler(command, timeout=config.timeout, logger=logger)


def protoc_hook(
    project: Project,
    options: Mapping[str, Any],
    **kwargs: Any,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorate a build step so proto sources are generated before it runs."""

    def decorator(step: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(step)
        def wrapper(*args: P.args, **step_kwargs: P.kwargs) -> R:
            compile_protos(project, options, **kwargs)
            return step(*args, **step_kwargs)

        return wrapper

    return decorator
