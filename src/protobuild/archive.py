"""Dependency archive access and proto extraction into staging directories."""

from __future__ import annotations

import shutil
import tempfile
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from types import TracebackType

from protobuild.errors import ExtractionError

PROTO_SUFFIX = ".proto"
STAGING_PREFIX = "protobuild-"


@dataclass(slots=True)
class _OpenArchive:
    archive: zipfile.ZipFile
    refs: int


class ArchiveRegistry:
    """Reference-counted archive handles keyed by canonical path.

    Opening an archive that is already open reuses the existing handle; the
    handle is closed when its last holder releases it.
    """

    def __init__(self) -> None:
        self._handles: dict[Path, _OpenArchive] = {}

    def acquire(self, path: str | Path) -> zipfile.ZipFile:
        key = Path(path).resolve()
        entry = self._handles.get(key)
        if entry is not None:
            entry.refs += 1
            return entry.archive
        try:
            archive = zipfile.ZipFile(key)
        except (zipfile.BadZipFile, OSError) as exc:
            raise ExtractionError(
                "Unable to open dependency archive.",
                hint="Check the archive exists and is a valid jar/zip file.",
                context={"operation": "open_archive", "archive": str(key), "error": str(exc)},
            ) from exc
        self._handles[key] = _OpenArchive(archive=archive, refs=1)
        return archive

    def release(self, path: str | Path) -> None:
        key = Path(path).resolve()
        entry = self._handles.get(key)
        if entry is None:
            return
        entry.refs -= 1
        if entry.refs <= 0:
            del self._handles[key]
            entry.archive.close()

    @contextmanager
    def open(self, path: str | Path) -> Iterator[zipfile.ZipFile]:
        archive = self.acquire(path)
        try:
            yield archive
        finally:
            self.release(path)

    def is_open(self, path: str | Path) -> bool:
        return Path(path).resolve() in self._handles

    def __len__(self) -> int:
        return len(self._handles)


ARCHIVES = ArchiveRegistry()


class StagingArea:
    """Temporary directories owned by a single build invocation.

    Every directory handed out is removed recursively when the area closes.
    """

    def __init__(self, *, prefix: str = STAGING_PREFIX, parent: str | Path | None = None) -> None:
        self.prefix = prefix
        self.parent = Path(parent) if parent is not None else None
        self._directories: list[Path] = []
        self._closed = False

    @property
    def directories(self) -> tuple[Path, ...]:
        return tuple(self._directories)

    def new_directory(self) -> Path:
        if self._closed:
            raise RuntimeError("staging area is already closed")
        if self.parent is not None:
            self.parent.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.parent))
        self._directories.append(path)
        return path

    def close(self) -> None:
        for path in reversed(self._directories):
            shutil.rmtree(path, ignore_errors=True)
        self._directories.clear()
        self._closed = True

    def __enter__(self) -> StagingArea:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def extract_protos(
    archive_path: str | Path,
    prefix: str,
    *,
    staging: StagingArea,
    registry: ArchiveRegistry = ARCHIVES,
) -> Path:
    """Copy every ``{prefix}**.proto`` entry of an archive into a new staging directory.

    Entry paths are preserved relative to the archive root, so ``prefix`` only
    selects entries and does not strip them. Directories under ``prefix`` are
    mirrored even when they hold no proto files.
    """
    name_prefix = prefix.lstrip("/")
    dir_prefix = PurePosixPath(name_prefix) if name_prefix.strip("/") else None
    target = staging.new_directory()
    target_root = target.resolve()

    with registry.open(archive_path) as archive:
        try:
            for info in sorted(archive.infolist(), key=lambda item: item.filename):
                entry = info.filename.lstrip("/")
                if not entry:
                    continue
                entry_path = PurePosixPath(entry.rstrip("/"))
                directory = entry_path if info.is_dir() else entry_path.parent
                if directory.parts and (dir_prefix is None or directory.is_relative_to(dir_prefix)):
                    _destination(target_root, directory, archive_path).mkdir(
                        parents=True, exist_ok=True
                    )
                if info.is_dir():
                    continue
                if not (entry.startswith(name_prefix) and entry.endswith(PROTO_SUFFIX)):
                    continue
                destination = _destination(target_root, PurePosixPath(entry), archive_path)
                destination.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as source, destination.open("wb") as sink:
                    shutil.copyfileobj(source, sink)
        except (zipfile.BadZipFile, OSError) as exc:
            raise ExtractionError(
                "Failed to extract proto files from dependency archive.",
                hint="The archive may be corrupt or the staging directory not writable.",
                context={
                    "operation": "extract_protos",
                    "archive": str(archive_path),
                    "prefix": prefix,
                    "error": str(exc),
                },
            ) from exc
    return target


def _destination(root: Path, entry: PurePosixPath, archive_path: str | Path) -> Path:
    destination = root.joinpath(*entry.parts).resolve()
    if not destination.is_relative_to(root):
        raise ExtractionError(
            "Archive entry escapes the staging directory.",
            hint="Refuse to use archives containing absolute or parent-relative entries.",
            context={
                "operation": "extract_protos",
                "archive": str(archive_path),
                "entry": str(entry),
            },
        )
    return destination
