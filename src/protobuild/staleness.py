"""Proto discovery and timestamp-based regeneration checks."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

PROTO_SUFFIX = ".proto"
GENERATED_SUFFIX = ".java"


def _files_with_suffix(root: Path, suffix: str) -> list[Path]:
    if not root.is_dir():
        return []
    return sorted(
        path.absolute()
        for path in root.rglob(f"*{suffix}")
        if path.is_file() and len(path.name) > len(suffix)
    )


def proto_files(source_directory: str | Path) -> list[Path]:
    """All ``.proto`` files below a source directory, as absolute paths."""
    return _files_with_suffix(Path(source_directory), PROTO_SUFFIX)


def generated_files(target_directory: str | Path) -> list[Path]:
    return _files_with_suffix(Path(target_directory), GENERATED_SUFFIX)


def outdated_protos(source_paths: Iterable[Path], target_path: Path) -> bool:
    """Whether the generated sources in ``target_path`` must be regenerated.

    Compares the newest proto input against the newest generated file. A
    target without generated files is always outdated.
    """
    outputs = generated_files(target_path)
    if not outputs:
        return True
    inputs = [proto for source in source_paths for proto in proto_files(source)]
    if not inputs:
        return False
    newest_input = max(path.stat().st_mtime_ns for path in inputs)
    newest_output = max(path.stat().st_mtime_ns for path in outputs)
    return newest_input > newest_output
