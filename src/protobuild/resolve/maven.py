"""Maven-layout repository client with checksum-verified downloads."""

from __future__ import annotations

import hashlib
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO
from urllib.error import HTTPError
from urllib.request import urlopen
from xml.etree import ElementTree

from protobuild.errors import ResolutionError
from protobuild.models import ArtifactCoordinate
from protobuild.resolve.artifacts import default_local_repository, local_artifact_path
from protobuild.resolve.versions import matches_range, sort_versions

MAVEN_CENTRAL = "https://repo.maven.apache.org/maven2"

Opener = Callable[[str], IO[bytes]]


@dataclass(slots=True)
class MavenRepository:
    base_url: str = MAVEN_CENTRAL
    local_root: Path = field(default_factory=default_local_repository)
    opener: Opener = urlopen

    def resolve_artifact(self, coordinate: ArtifactCoordinate) -> Path:
        """Return the cached artifact path, downloading and verifying it if absent."""
        artifact_path = local_artifact_path(coordinate, root=self.local_root)
        if artifact_path.exists():
            return artifact_path

        url = self._artifact_url(coordinate)
        payload = self._read(url, operation="resolve_artifact")
        expected_sha1 = self._published_sha1(url)
        if expected_sha1 is not None:
            actual_sha1 = hashlib.sha1(payload).hexdigest()
            if actual_sha1 != expected_sha1:
                raise ResolutionError(
                    "Downloaded artifact checksum mismatch.",
                    hint="Retry the download or check the repository mirror.",
                    context={
                        "operation": "resolve_artifact",
                        "url": url,
                        "expected": expected_sha1,
                        "actual": actual_sha1,
                    },
                )

        artifact_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = artifact_path.with_suffix(artifact_path.suffix + ".tmp")
        temp_path.write_bytes(payload)
        os.replace(temp_path, artifact_path)
        return artifact_path

    def resolve_versions(self, group: str, name: str, version_range: str) -> list[str]:
        """Versions published for ``group:name`` within the range, highest first."""
        url = "/".join([self.base_url.rstrip("/"), *group.split("."), name, "maven-metadata.xml"])
        payload = self._read(url, operation="resolve_versions")
        try:
            root = ElementTree.fromstring(payload)
        except ElementTree.ParseError as exc:
            raise ResolutionError(
                "Repository metadata is not valid XML.",
                hint="Check the repository URL points at a Maven-layout repository.",
                context={"operation": "resolve_versions", "url": url},
            ) from exc
        versions = [
            element.text.strip()
            for element in root.iterfind("./versioning/versions/version")
            if element.text and element.text.strip()
        ]
        return sort_versions(version for version in versions if matches_range(version, version_range))

    def _artifact_url(self, coordinate: ArtifactCoordinate) -> str:
        return "/".join(
            [
                self.base_url.rstrip("/"),
                *coordinate.group_path,
                coordinate.name,
                coordinate.version,
                coordinate.file_name,
            ]
        )

    def _published_sha1(self, url: str) -> str | None:
        try:
            with self.opener(f"{url}.sha1") as response:
                content = response.read().decode("ascii", errors="replace").strip()
        except HTTPError as exc:
            if exc.code == 404:
                return None
            raise
        # Some publishers append the file name after the digest.
        return content.split()[0].lower() if content else None

    def _read(self, url: str, *, operation: str) -> bytes:
        try:
            with self.opener(url) as response:
                return response.read()
        except HTTPError as exc:
            raise ResolutionError(
                "Repository request failed.",
                hint="Verify the coordinate exists in the configured repository.",
                context={"operation": operation, "url": url, "status": str(exc.code)},
            ) from exc
