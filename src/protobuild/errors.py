"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across the orchestrator."""

    CONFIGURATION = "E_CONFIGURATION"
    RESOLUTION = "E_RESOLUTION"
    MISSING_DEPENDENCY = "E_MISSING_DEPENDENCY"
    EXTRACTION = "E_EXTRACTION"
    COMPILER_PROCESS = "E_COMPILER_PROCESS"


class ProtobuildError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        lines = [super().__str__()]
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        lines.extend(f"  {key}: {value}" for key, value in self.context.items() if value)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        """JSON-ready form attached to structured log records."""
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ConfigurationError(ProtobuildError):
    """Raised when the supplied options fail validation.

    ``errors`` keeps every individual violation so callers can report them all.
    """

    errors: tuple[str, ...]

    def __init__(
        self,
        message: str,
        *,
        errors: Sequence[str] = (),
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CONFIGURATION, hint=hint, context=context)
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["errors"] = list(self.errors)
        return payload


class ResolutionError(ProtobuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.RESOLUTION, hint=hint, context=context)


class MissingDependencyError(ProtobuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.MISSING_DEPENDENCY, hint=hint, context=context)


class ExtractionError(ProtobuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.EXTRACTION, hint=hint, context=context)


class CompilerProcessError(ProtobuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.COMPILER_PROCESS, hint=hint, context=context)


__all__ = [
    "CompilerProcessError",
    "ConfigurationError",
    "ErrorCode",
    "ExtractionError",
    "MissingDependencyError",
    "ProtobuildError",
    "ResolutionError",
]
