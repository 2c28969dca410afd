"""Bounded-time execution of the compiler process."""

from __future__ import annotations

import subprocess

from protobuild.errors import CompilerProcessError
from protobuild.models import BuildCommand, CompileResult, CompileStatus
from protobuild.observability import StructuredLogger

STDERR_LIMIT = 4000


def run_compiler(
    command: BuildCommand,
    *,
    timeout: int,
    logger: StructuredLogger | None = None,
) -> CompileResult:
    """Run protoc and classify the outcome.

    Compiler failures are reported as warnings and never raised. The child is
    killed if it outlives ``timeout`` seconds and is always reaped.
    """
    logger = logger if logger is not None else StructuredLogger()
    try:
        with subprocess.Popen(
            command.argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        ) as process:
            try:
                _, stderr = process.communicate(timeout=timeout)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
                _report(
                    logger,
                    CompilerProcessError(
                        f"Proto file compilation took more than {timeout} seconds.",
                        hint="Raise protoc_timeout or reduce the number of proto files.",
                        context={"operation": "run_compiler", "timeout": str(timeout)},
                    ),
                )
                return CompileResult(
                    status=CompileStatus.TIMED_OUT,
                    command=command.argv,
                    proto_files=command.proto_files,
                )
            finally:
                if process.poll() is None:
                    process.kill()
    except Exception as exc:  # noqa: BLE001 - compiler errors must not abort the host build
        _report(
            logger,
            CompilerProcessError(
                f"Failed to compile proto file(s): {exc}",
                context={"operation": "run_compiler", "executable": command.argv[0]},
            ),
        )
        return CompileResult(
            status=CompileStatus.ERRORED,
            command=command.argv,
            proto_files=command.proto_files,
        )

    if process.returncode != 0:
        _report(
            logger,
            CompilerProcessError(
                f"Failed to compile proto file(s):\n{stderr[:STDERR_LIMIT]}",
                context={"operation": "run_compiler", "returncode": str(process.returncode)},
            ),
        )
        return CompileResult(
            status=CompileStatus.FAILED,
            command=command.argv,
            proto_files=command.proto_files,
            returncode=process.returncode,
            stderr=stderr,
        )

    logger.info(
        operation="run_compiler",
        stage="compile",
        message=f"Successfully compiled {len(command.proto_files)} proto files.",
    )
    return CompileResult(
        status=CompileStatus.COMPILED,
        command=command.argv,
        proto_files=command.proto_files,
        returncode=process.returncode,
        stderr=stderr,
    )


def _report(logger: StructuredLogger, error: CompilerProcessError) -> None:
    logger.warning(
        operation="run_compiler",
        stage="compile",
        message=str(error),
        error=error.to_dict(),
    )
