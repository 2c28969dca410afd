"""Shared test fixtures."""

from __future__ import annotations

import json
import stat
import sys
import zipfile
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from protobuild.errors import ResolutionError
from protobuild.models import ArtifactCoordinate
from protobuild.resolve import local_artifact_path

_DRIVER = """\
import json
import os
import pathlib
import sys
import time

args = sys.argv[1:]
pathlib.Path({pid_file!r}).write_text(str(os.getpid()))
with open({log!r}, "a", encoding="utf-8") as handle:
    handle.write(json.dumps(args) + "\\n")
time.sleep({sleep!r})
if {exit_code!r}:
    sys.stderr.write("user.proto:3:1: Expected top-level statement.\\n")
    sys.exit({exit_code!r})
out = next(arg.split("=", 1)[1] for arg in args if arg.startswith("--java_out="))
for arg in args:
    if arg.endswith(".proto"):
        name = pathlib.Path(arg).stem.title().replace("_", "") + ".java"
        (pathlib.Path(out) / name).write_text("// generated\\n", encoding="utf-8")
"""


@dataclass(slots=True)
class FakeCompiler:
    script: str
    log: Path
    pid_file: Path

    def install(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.script, encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR)
        return path

    def invocations(self) -> list[list[str]]:
        if not self.log.exists():
            return []
        return [json.loads(line) for line in self.log.read_text(encoding="utf-8").splitlines()]

    def pid(self) -> int:
        return int(self.pid_file.read_text(encoding="utf-8"))


@dataclass(slots=True)
class FakeRepository:
    """Repository client that "downloads" by writing a script into the local root."""

    local_root: Path
    script: str = "#!/bin/sh\nexit 0\n"
    versions: list[str] = field(default_factory=list)
    fail: bool = False
    resolved: list[ArtifactCoordinate] = field(default_factory=list)
    range_queries: list[tuple[str, str, str]] = field(default_factory=list)

    def resolve_artifact(self, coordinate: ArtifactCoordinate) -> object:
        self.resolved.append(coordinate)
        if self.fail:
            raise ResolutionError("Repository is unreachable.")
        path = local_artifact_path(coordinate, root=self.local_root)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.script, encoding="utf-8")
        return f"[{coordinate}] resolved"

    def resolve_versions(self, group: str, name: str, version_range: str) -> list[str]:
        self.range_queries.append((group, name, version_range))
        return list(self.versions)


@pytest.fixture
def fake_compiler(tmp_path: Path) -> Callable[..., FakeCompiler]:
    """Build protoc stand-ins that log their argv and emit one .java per proto."""
    counter = iter(range(1000))

    def make(*, exit_code: int = 0, sleep: float = 0) -> FakeCompiler:
        index = next(counter)
        workdir = tmp_path / "fake-protoc" / str(index)
        workdir.mkdir(parents=True)
        log = workdir / "invocations.jsonl"
        pid_file = workdir / "pid"
        driver = workdir / "driver.py"
        driver.write_text(
            _DRIVER.format(log=str(log), pid_file=str(pid_file), sleep=sleep, exit_code=exit_code),
            encoding="utf-8",
        )
        script = f'#!/bin/sh\nexec "{sys.executable}" "{driver}" "$@"\n'
        return FakeCompiler(script=script, log=log, pid_file=pid_file)

    return make


@pytest.fixture
def fake_repository(tmp_path: Path) -> FakeRepository:
    return FakeRepository(local_root=tmp_path / "m2")


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    def make(name: str, entries: Mapping[str, bytes | str]) -> Path:
        path = tmp_path / "archives" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as archive:
            for entry, content in entries.items():
                if entry.endswith("/"):
                    archive.writestr(zipfile.ZipInfo(entry), b"")
                else:
                    archive.writestr(entry, content)
        return path

    return make
