"""Public package entrypoint for the protoc build orchestrator."""

from .archive import ARCHIVES, ArchiveRegistry, StagingArea, extract_protos
from .classpath import ClasspathEntries, DependencyArchives
from .config import ProtocConfig, validate_options
from .errors import (
    CompilerProcessError,
    ConfigurationError,
    ErrorCode,
    ExtractionError,
    MissingDependencyError,
    ProtobuildError,
    ResolutionError,
)
from .models import (
    ArtifactCoordinate,
    BuildCommand,
    CompileResult,
    CompilerDetails,
    CompileStatus,
    Project,
    ResolvedBinary,
    SourcePathSet,
    TargetPathSet,
)
from .observability import StructuredLogger
from .orchestrator import compile_protos, protoc_hook

__all__ = [
    "ARCHIVES",
    "ArchiveRegistry",
    "ArtifactCoordinate",
    "BuildCommand",
    "ClasspathEntries",
    "CompileResult",
    "CompileStatus",
    "CompilerDetails",
    "CompilerProcessError",
    "ConfigurationError",
    "DependencyArchives",
    "ErrorCode",
    "ExtractionError",
    "MissingDependencyError",
    "Project",
    "ProtobuildError",
    "ProtocConfig",
    "ResolutionError",
    "ResolvedBinary",
    "SourcePathSet",
    "StagingArea",
    "StructuredLogger",
    "TargetPathSet",
    "compile_protos",
    "extract_protos",
    "protoc_hook",
    "validate_options",
]
