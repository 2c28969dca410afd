from pathlib import Path

import pytest

from protobuild.archive import ArchiveRegistry, StagingArea, extract_protos
from protobuild.errors import ExtractionError


def _files(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in root.rglob("*")
        if path.is_file()
    }


def test_extract_copies_only_matching_protos_with_relative_paths(make_archive, tmp_path: Path) -> None:
    archive = make_archive(
        "deps.jar",
        {
            "a/x.proto": b"message X {}",
            "a/b/y.proto": b"message Y {}",
            "a/z.txt": b"not a proto",
            "other/w.proto": b"message W {}",
        },
    )

    with StagingArea(parent=tmp_path / "staging") as staging:
        staged = extract_protos(archive, "a/", staging=staging, registry=ArchiveRegistry())
        assert _files(staged) == {
            "a/x.proto": b"message X {}",
            "a/b/y.proto": b"message Y {}",
        }


def test_root_prefix_extracts_every_proto(make_archive, tmp_path: Path) -> None:
    archive = make_archive(
        "deps.jar",
        {
            "META-INF/": b"",
            "META-INF/MANIFEST.MF": b"Manifest-Version: 1.0",
            "schemas/user.proto": b"message User {}",
            "google/protobuf/empty.proto": b"message Empty {}",
        },
    )

    with StagingArea(parent=tmp_path / "staging") as staging:
        staged = extract_protos(archive, "/", staging=staging, registry=ArchiveRegistry())
        assert set(_files(staged)) == {"schemas/user.proto", "google/protobuf/empty.proto"}
        assert (staged / "META-INF").is_dir()


def test_prefix_without_matches_yields_empty_directory(make_archive, tmp_path: Path) -> None:
    archive = make_archive("deps.jar", {"a/x.proto": b"message X {}"})

    with StagingArea(parent=tmp_path / "staging") as staging:
        staged = extract_protos(archive, "/google", staging=staging, registry=ArchiveRegistry())
        assert staged.is_dir()
        assert list(staged.iterdir()) == []


def test_directories_under_prefix_are_mirrored(make_archive, tmp_path: Path) -> None:
    archive = make_archive(
        "deps.jar",
        {"google/": b"", "google/type/": b"", "google/protobuf/any.proto": b"any", "other/": b""},
    )

    with StagingArea(parent=tmp_path / "staging") as staging:
        staged = extract_protos(archive, "/google", staging=staging, registry=ArchiveRegistry())
        assert (staged / "google" / "type").is_dir()
        assert (staged / "google" / "protobuf" / "any.proto").read_bytes() == b"any"
        assert not (staged / "other").exists()


def test_directories_are_mirrored_without_explicit_directory_entries(make_archive, tmp_path: Path) -> None:
    archive = make_archive(
        "deps.jar",
        {
            "google/type/README.txt": b"docs",
            "google/protobuf/any.proto": b"any",
            "other/notes.txt": b"",
        },
    )

    with StagingArea(parent=tmp_path / "staging") as staging:
        staged = extract_protos(archive, "/google", staging=staging, registry=ArchiveRegistry())
        assert (staged / "google" / "type").is_dir()
        assert not (staged / "google" / "type" / "README.txt").exists()
        assert not (staged / "other").exists()

def test_staging_area_removes_directories_on_exit(make_archive, tmp_path: Path) -> None:
    archive = make_archive("deps.jar", {"a/x.proto": b"x"})

    with StagingArea(parent=tmp_path / "staging") as staging:
        first = extract_protos(archive, "/", staging=staging, registry=ArchiveRegistry())
        second = extract_protos(archive, "/", staging=staging, registry=ArchiveRegistry())
        assert first != second
        assert staging.directories == (first, second)

    assert not first.exists()
    assert not second.exists()
    with pytest.raises(RuntimeError):
        staging.new_directory()


def test_registry_reuses_open_handle_and_closes_on_last_release(make_archive) -> None:
    archive = make_archive("deps.jar", {"a/x.proto": b"x"})
    registry = ArchiveRegistry()

    first = registry.acquire(archive)
    second = registry.acquire(archive.parent / ".." / archive.parent.name / archive.name)
    assert first is second
    assert len(registry) == 1

    registry.release(archive)
    assert registry.is_open(archive)
    registry.release(archive)
    assert not registry.is_open(archive)
    assert first.fp is None


def test_registry_handle_is_released_after_extraction(make_archive, tmp_path: Path) -> None:
    archive = make_archive("deps.jar", {"a/x.proto": b"x"})
    registry = ArchiveRegistry()

    with StagingArea(parent=tmp_path / "staging") as staging:
        with registry.open(archive):
            extract_protos(archive, "/", staging=staging, registry=registry)
            assert registry.is_open(archive)
        assert len(registry) == 0


def test_malformed_archive_raises_extraction_error(tmp_path: Path) -> None:
    broken = tmp_path / "broken.jar"
    broken.write_bytes(b"definitely not a zip file")

    with StagingArea(parent=tmp_path / "staging") as staging:
        with pytest.raises(ExtractionError) as excinfo:
            extract_protos(broken, "/", staging=staging, registry=ArchiveRegistry())

    assert excinfo.value.context["archive"] == str(broken.resolve())


def test_entries_escaping_staging_directory_are_rejected(make_archive, tmp_path: Path) -> None:
    archive = make_archive("evil.jar", {"../../escape.proto": b"boom"})

    with StagingArea(parent=tmp_path / "staging") as staging:
        with pytest.raises(ExtractionError):
            extract_protos(archive, "/", staging=staging, registry=ArchiveRegistry())

    assert not (tmp_path / "escape.proto").exists()
