"""Pytest configuration and fixtures for ext-dep-verifier tests."""
from __future__ import annotations

import zipfile
from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

from ext_dep_verifier.scanner import DEPLOYMENT_MARKER, EXTENSION_MARKER


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep EXTDEP_* settings from the developer's shell out of the tests."""
    for key in (
        "EXTDEP_GROUP",
        "EXTDEP_NAME",
        "EXTDEP_VERSION",
        "EXTDEP_HAS_SPI",
        "EXTDEP_BUILD_DIR",
        "EXTDEP_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


MakeArchive = Callable[..., Path]


@pytest.fixture
def make_archive(tmp_path: Path) -> MakeArchive:
    """Create a jar under tmp_path/repo with the given entries.

    `coordinate` ("g:a:v") adds the embedded `pom.properties` the archive
    builder writes.
    """

    def _make(
        name: str,
        entries: Mapping[str, str] | None = None,
        *,
        coordinate: str | None = None,
    ) -> Path:
        path = tmp_path / "repo" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
            for entry, content in (entries or {}).items():
                zf.writestr(entry, content)
            if coordinate:
                group, artifact, version = coordinate.split(":")
                zf.writestr(
                    f"META-INF/maven/{group}/{artifact}/pom.properties",
                    f"groupId={group}\nartifactId={artifact}\nversion={version}\n",
                )
        return path

    return _make


@pytest.fixture
def extension_archive(make_archive: MakeArchive) -> Callable[[str, str], Path]:
    """Create a runtime artifact of an extension naming its deployment artifact."""

    def _make(name: str, deployment: str) -> Path:
        escaped = deployment.replace(":", "\\:")
        return make_archive(
            name,
            {
                EXTENSION_MARKER: f"deployment-artifact={escaped}\n",
                "com/acme/Runtime.class": "",
            },
        )

    return _make


@pytest.fixture
def deployment_archive(make_archive: MakeArchive) -> Callable[[str], Path]:
    """Create a deployment artifact (carries the build-steps list)."""

    def _make(name: str) -> Path:
        return make_archive(name, {DEPLOYMENT_MARKER: "com.acme.deployment.Processor\n"})

    return _make
