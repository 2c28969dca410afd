"""Option defaults, validation, and the immutable compile configuration."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from protobuild.errors import ConfigurationError
from protobuild.models import LATEST

PROTOC_VERSION_DEFAULT = "3.4.0"
PROTOC_GRPC_VERSION_DEFAULT = "1.6.1"
PROTO_SOURCE_PATHS_DEFAULT = ("src/proto",)
PROTOC_TIMEOUT_DEFAULT = 60
GENERATED_SOURCES_DIR = Path("generated-sources") / "protobuf"

GRPC_KEYS = frozenset({"version", "target_path"})

VERSION_PATTERN = re.compile(r"^\d+(\.\d+)*([.-][0-9A-Za-z]+([.-][0-9A-Za-z]+)*)?$")
COORDINATE_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


def target_path_default(build_dir: Path) -> Path:
    return build_dir / GENERATED_SOURCES_DIR


def validate_version(version: Any, key: str) -> str | None:
    if version is None or version == LATEST:
        return None
    if isinstance(version, str) and VERSION_PATTERN.fullmatch(version):
        return None
    return f"{key} value must be a valid version string or {LATEST!r}"


def validate_source_paths(source_paths: Any) -> str | None:
    if source_paths is None:
        return None
    if _is_collection(source_paths) and all(isinstance(item, str) for item in source_paths):
        return None
    return "proto_source_paths value must be a collection of valid filepath strings"


def validate_target_path(target_path: Any, key: str) -> str | None:
    if target_path is None or isinstance(target_path, str):
        return None
    return f"{key} value must be a valid filepath string"


def validate_grpc(grpc: Any) -> list[str]:
    if grpc is None or isinstance(grpc, bool):
        return []
    if not isinstance(grpc, Mapping):
        return [
            "protoc_grpc value must be either a boolean or a mapping with optional keys "
            "'version' and 'target_path'"
        ]
    errors: list[str] = []
    unknown = sorted(str(key) for key in grpc if key not in GRPC_KEYS)
    if unknown:
        errors.append(
            f"protoc_grpc has unsupported keys: {', '.join(unknown)} "
            "(allowed: 'version', 'target_path')"
        )
    for error in (
        validate_version(grpc.get("version"), "protoc_grpc.version"),
        validate_target_path(grpc.get("target_path"), "protoc_grpc.target_path"),
    ):
        if error is not None:
            errors.append(error)
    return errors


def validate_source_deps(deps: Any) -> str | None:
    if deps is None:
        return None
    message = (
        "proto_source_deps value must be a list of 'group/artifact' strings or "
        "['group/artifact', 'subpath'] pairs"
    )
    if not _is_collection(deps):
        return message
    for dep in deps:
        if isinstance(dep, str):
            coordinate, subpath = dep, None
        elif isinstance(dep, (list, tuple)) and len(dep) in (1, 2):
            coordinate, subpath = dep[0], dep[1] if len(dep) == 2 else None
        else:
            return message
        if not isinstance(coordinate, str) or not COORDINATE_PATTERN.fullmatch(coordinate):
            return message
        if subpath is not None and not isinstance(subpath, str):
            return message
    return None


def validate_timeout(timeout: Any) -> str | None:
    if timeout is None:
        return None
    if isinstance(timeout, int) and not isinstance(timeout, bool):
        return None
    return "protoc_timeout value must be an integer"


def validate_options(options: Mapping[str, Any]) -> list[str]:
    """Validate raw options and return every error message found."""
    errors = [
        validate_version(options.get("protoc_version"), "protoc_version"),
        *validate_grpc(options.get("protoc_grpc")),
        validate_source_paths(options.get("proto_source_paths")),
        validate_source_deps(options.get("proto_source_deps")),
        validate_target_path(options.get("proto_target_path"), "proto_target_path"),
        validate_timeout(options.get("protoc_timeout")),
    ]
    return [error for error in errors if error is not None]


@dataclass(frozen=True, slots=True)
class ProtoSourceDep:
    coordinate: str
    subpath: str = "/"


@dataclass(frozen=True, slots=True)
class GrpcConfig:
    version: str = PROTOC_GRPC_VERSION_DEFAULT
    target_path: str | None = None


@dataclass(frozen=True, slots=True)
class ProtocConfig:
    protoc_version: str = PROTOC_VERSION_DEFAULT
    grpc: GrpcConfig | None = None
    source_paths: tuple[str, ...] = PROTO_SOURCE_PATHS_DEFAULT
    source_deps: tuple[ProtoSourceDep, ...] = ()
    target_path: str | None = None
    timeout: int = PROTOC_TIMEOUT_DEFAULT

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> ProtocConfig:
        """Build a configuration, raising with all violations if any rule fails."""
        errors = validate_options(options)
        if errors:
            raise ConfigurationError(
                f"Invalid configurations received: {', '.join(errors)}",
                errors=errors,
                hint="Fix the listed options; nothing was resolved or compiled.",
                context={"operation": "validate"},
            )

        source_paths = options.get("proto_source_paths")
        timeout = options.get("protoc_timeout")
        return cls(
            protoc_version=options.get("protoc_version") or PROTOC_VERSION_DEFAULT,
            grpc=_grpc_from(options.get("protoc_grpc")),
            source_paths=(
                tuple(source_paths) if source_paths is not None else PROTO_SOURCE_PATHS_DEFAULT
            ),
            source_deps=tuple(_dep_from(dep) for dep in options.get("proto_source_deps") or ()),
            target_path=options.get("proto_target_path"),
            timeout=timeout if timeout is not None else PROTOC_TIMEOUT_DEFAULT,
        )


def _grpc_from(grpc: bool | Mapping[str, Any] | None) -> GrpcConfig | None:
    if grpc is None or grpc is False:
        return None
    if grpc is True:
        return GrpcConfig()
    return GrpcConfig(
        version=grpc.get("version") or PROTOC_GRPC_VERSION_DEFAULT,
        target_path=grpc.get("target_path"),
    )


def _dep_from(dep: str | Sequence[str]) -> ProtoSourceDep:
    if isinstance(dep, str):
        return ProtoSourceDep(coordinate=dep)
    if len(dep) == 2 and dep[1]:
        return ProtoSourceDep(coordinate=dep[0], subpath=dep[1])
    return ProtoSourceDep(coordinate=dep[0])


def _is_collection(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))
