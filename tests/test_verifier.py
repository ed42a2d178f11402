from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ext_dep_verifier.exceptions import ConsistencyError
from ext_dep_verifier.models import Coordinate, ResolvedDependency
from ext_dep_verifier.verifier import (
    extensions_on_classpath,
    missing_runtime_extensions,
    run_verification,
    verify_deployment,
)


CATALOG = {"g:ext:1.0": "g:ext-deployment:1.0"}


def _dep(coordinate: str, file: Path, type: str = "") -> ResolvedDependency:
    return ResolvedDependency(coordinate=Coordinate.parse(coordinate), file=file, type=type)


def test_extension_missing_from_catalog_fails(extension_archive) -> None:
    deps = [_dep("g:other:2.0", extension_archive("other-2.0.jar", "g:other-deployment:2.0"))]

    with pytest.raises(ConsistencyError) as excinfo:
        verify_deployment(CATALOG, deps)

    assert "g:other:2.0" in str(excinfo.value)
    assert excinfo.value.coordinates == ("g:other:2.0",)


def test_extension_present_in_catalog_passes(extension_archive, make_archive) -> None:
    deps = [
        _dep("g:ext:1.0", extension_archive("ext-1.0.jar", "g:ext-deployment:1.0")),
        _dep("g:ext-deployment:1.0", make_archive("ext-deployment-1.0.jar")),
    ]
    verify_deployment(CATALOG, deps)


def test_all_violations_reported_together(extension_archive) -> None:
    deps = [
        _dep("g:zeta:1", extension_archive("zeta.jar", "g:zeta-deployment:1")),
        _dep("g:ext:1.0", extension_archive("ext.jar", "g:ext-deployment:1.0")),
        _dep("g:alpha:1", extension_archive("alpha.jar", "g:alpha-deployment:1")),
    ]

    with pytest.raises(ConsistencyError) as excinfo:
        verify_deployment(CATALOG, deps)

    assert excinfo.value.coordinates == ("g:alpha:1", "g:zeta:1")


def test_version_mismatch_is_reported_with_runtime_version(extension_archive) -> None:
    deps = [_dep("g:ext:1.1", extension_archive("ext-1.1.jar", "g:ext-deployment:1.1"))]

    with pytest.raises(ConsistencyError) as excinfo:
        verify_deployment(CATALOG, deps)

    assert "g:ext:1.1 (runtime classpath has g:ext:1.0)" in str(excinfo.value)


def test_non_archives_are_ignored(tmp_path: Path) -> None:
    deps = [_dep("g:bom:1", tmp_path / "missing.pom", type="pom")]
    assert extensions_on_classpath(deps) == set()
    assert missing_runtime_extensions(CATALOG, deps) == []


def test_successful_verification_touches_output(extension_archive, tmp_path: Path) -> None:
    output = tmp_path / "build" / "tmp" / "verifyQuarkusDependencies.txt"
    run_verification(CATALOG, [_dep("g:ext:1.0", extension_archive("ext.jar", "g:ext-deployment:1.0"))], output)
    assert output.exists()


def test_failed_verification_does_not_touch_output(extension_archive, tmp_path: Path) -> None:
    output = tmp_path / "verify.txt"
    with pytest.raises(ConsistencyError):
        run_verification(CATALOG, [_dep("g:x:1", extension_archive("x.jar", "g:x-deployment:1"))], output)
    assert not output.exists()


def test_output_touch_failure_is_only_a_warning(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where a directory is expected", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="ext_dep_verifier.fsutil"):
        run_verification(CATALOG, [], blocker / "verify.txt")

    assert "Unable to create output file" in caplog.text
