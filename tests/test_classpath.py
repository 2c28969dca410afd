from pathlib import Path

from protobuild.classpath import ClasspathEntries, DependencyArchives, coordinate_pattern


def test_dependency_archives_is_a_structured_lookup(tmp_path: Path) -> None:
    jar = tmp_path / "protos-1.0.jar"
    lookup = DependencyArchives({"com.example/protos": jar})

    assert lookup.archive_for("com.example/protos") == jar
    assert lookup.archive_for("com.example/other") is None


def test_classpath_entries_match_either_separator() -> None:
    unix = "/home/dev/.m2/repository/com/google/protobuf/protobuf-java/3.4.0/protobuf-java-3.4.0.jar"
    windows = r"C:\Users\dev\.m2\repository\com\example\protos\1.0\protos-1.0.jar"
    lookup = ClasspathEntries.of(["/project/src", unix, windows])

    assert lookup.archive_for("com.google.protobuf/protobuf-java") == Path(unix)
    assert lookup.archive_for("com.example/protos") == Path(windows)
    assert lookup.archive_for("com.example/missing") is None


def test_coordinate_pattern_requires_whole_segments() -> None:
    pattern = coordinate_pattern("com.example/protos")

    assert pattern.fullmatch("/repo/com/example/protos/1.0/protos-1.0.jar")
    assert not pattern.fullmatch("/repo/com/example/protos-extra/1.0/protos-extra-1.0.jar")
    assert not pattern.fullmatch("/repo/xcom/example/protos/1.0/protos-1.0.jar")
