"""Command-line front end for compiling a project's proto files."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from protobuild.classpath import DependencyArchives
from protobuild.errors import ConfigurationError, ProtobuildError
from protobuild.models import Project
from protobuild.observability import StructuredLogger
from protobuild.orchestrator import compile_protos
from protobuild.resolve import MavenRepository
from protobuild.resolve.maven import MAVEN_CENTRAL


def _read_options(path: str | None) -> dict[str, Any]:
    if path is None:
        return {}
    try:
        parsed = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(
            "Unable to read options file.",
            errors=[str(exc)],
            hint="Pass a JSON object of protoc options with --config.",
            context={"operation": "read_options", "path": path},
        ) from exc
    if not isinstance(parsed, dict):
        raise ConfigurationError(
            "Options file must contain a JSON object.",
            context={"operation": "read_options", "path": path},
        )
    return parsed


def _parse_dependencies(values: Sequence[str]) -> dict[str, Path]:
    archives: dict[str, Path] = {}
    for value in values:
        coordinate, separator, archive = value.partition("=")
        if not separator or not coordinate or not archive:
            raise ConfigurationError(
                "Dependency mappings must look like group/artifact=/path/to/archive.jar.",
                context={"operation": "parse_dependencies", "value": value},
            )
        archives[coordinate] = Path(archive).absolute()
    return archives


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="protobuild",
        description="Compile .proto files to Java sources with a resolved protoc.",
    )
    parser.add_argument("--config", help="JSON file holding protoc options")
    parser.add_argument("--project-root", default=".")
    parser.add_argument("--build-dir", default="target")
    parser.add_argument(
        "--dependency",
        action="append",
        default=[],
        metavar="COORD=ARCHIVE",
        help="archive resolved for a dependency coordinate (repeatable)",
    )
    parser.add_argument("--repository", default=MAVEN_CENTRAL)
    parser.add_argument("--log-json", help="write structured log records to this file")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = StructuredLogger()
    root = Path(args.project_root).absolute()
    try:
        project = Project(
            root=root,
            build_dir=root / args.build_dir,
            dependencies=DependencyArchives(_parse_dependencies(args.dependency)),
        )
        result = compile_protos(
            project,
            _read_options(args.config),
            repository=MavenRepository(base_url=args.repository),
            logger=logger,
        )
    except ProtobuildError as exc:
        _print_records(logger)
        logger.log(
            operation="main",
            stage="fatal",
            message=exc.args[0],
            level="error",
            extra={"error": exc.to_dict()},
        )
        print(f"error: {exc}", file=sys.stderr)
        return 2
    finally:
        if args.log_json:
            logger.to_json_lines(args.log_json)

    _print_records(logger)
    print(result.status.value)
    return 0


def _print_records(logger: StructuredLogger) -> None:
    for record in logger.records:
        print(f"[{record['level']}] {record['message']}", file=sys.stderr)


if __name__ == "__main__":
    raise SystemExit(main())
