from __future__ import annotations

import copy
import json
import os
from pathlib import Path

import pytest

from ext_dep_verifier.exceptions import DocumentParseError
from ext_dep_verifier.models import Coordinate
from ext_dep_verifier.module_metadata import (
    add_variant_dependency,
    adjust_document,
    adjust_module_file,
    canonical_variant_name,
    rename_variant,
)


OLD_MTIME_NS = 1_600_000_000_000_000_000

DEPLOYMENT_MODULE = {
    "formatVersion": "1.1",
    "component": {"group": "com.acme", "module": "widget-deployment", "version": "1.0.0"},
    "createdBy": {"gradle": {"version": "8.5"}},
    "variants": [
        {
            "name": "deploymentApiElements",
            "attributes": {"org.gradle.usage": "java-api"},
            "files": [{"name": "widget-deployment-1.0.0.jar"}],
        },
        {
            "name": "deploymentRuntimeElements",
            "attributes": {"org.gradle.usage": "java-runtime"},
            "dependencies": [
                {
                    "group": "io.quarkus",
                    "module": "quarkus-core-deployment",
                    "version": {"requires": "3.8.1"},
                }
            ],
        },
    ],
}


def _write_json(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "module.json"
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.mark.parametrize(
    ("publication", "variant", "expected"),
    [
        ("deployment", "deploymentApiElements", "apiElements"),
        ("deployment", "deploymentRuntimeElements", "runtimeElements"),
        ("deployment", "deploymentJavadocElements", "javadocElements"),
        ("deployment", "deploymentSourcesElements", "sourcesElements"),
        ("spi", "spiApiElements", "apiElements"),
        ("deployment", "deploymentFooBar", "fooBar"),
        ("spi", "spiTestFixtures", "testFixtures"),
        ("deployment", "FooBar", "fooBar"),
    ],
)
def test_canonical_variant_name(publication: str, variant: str, expected: str) -> None:
    assert canonical_variant_name(publication, variant) == expected


def test_document_without_variants_is_left_alone() -> None:
    assert adjust_document({"formatVersion": "1.1"}, [rename_variant("deployment")]) is None


def test_adjust_document_does_not_mutate_input() -> None:
    original = copy.deepcopy(DEPLOYMENT_MODULE)
    adjust_document(
        DEPLOYMENT_MODULE,
        [rename_variant("deployment"), add_variant_dependency(Coordinate.parse("com.acme:widget:1.0.0"))],
    )
    assert DEPLOYMENT_MODULE == original


def test_adjust_module_file_renames_and_adds_dependency(tmp_path: Path) -> None:
    path = _write_json(tmp_path, DEPLOYMENT_MODULE)

    changed = adjust_module_file(
        path,
        [rename_variant("deployment"), add_variant_dependency(Coordinate.parse("com.acme:widget:1.0.0"))],
    )

    assert changed is True
    adjusted = json.loads(path.read_text(encoding="utf-8"))
    assert [v["name"] for v in adjusted["variants"]] == ["apiElements", "runtimeElements"]

    injected = {"group": "com.acme", "module": "widget", "version": {"requires": "1.0.0"}}
    assert adjusted["variants"][0]["dependencies"] == [injected]
    assert adjusted["variants"][1]["dependencies"] == [
        {"group": "io.quarkus", "module": "quarkus-core-deployment", "version": {"requires": "3.8.1"}},
        injected,
    ]

    # untouched fields pass through
    assert adjusted["component"] == DEPLOYMENT_MODULE["component"]
    assert adjusted["createdBy"] == DEPLOYMENT_MODULE["createdBy"]
    assert adjusted["variants"][0]["files"] == DEPLOYMENT_MODULE["variants"][0]["files"]


def test_adjust_module_file_pretty_prints(tmp_path: Path) -> None:
    path = tmp_path / "module.json"
    path.write_text(json.dumps(DEPLOYMENT_MODULE), encoding="utf-8")

    adjust_module_file(path, [rename_variant("deployment")])

    text = path.read_text(encoding="utf-8")
    assert text.startswith('{\n  "formatVersion": "1.1",\n')
    assert text.endswith("}\n")


def test_file_without_variants_is_not_rewritten(tmp_path: Path) -> None:
    path = tmp_path / "module.json"
    path.write_text('{"formatVersion":"1.1"}', encoding="utf-8")

    assert adjust_module_file(path, [rename_variant("spi")]) is False
    assert path.read_text(encoding="utf-8") == '{"formatVersion":"1.1"}'


def test_adjust_module_file_preserves_modification_time(tmp_path: Path) -> None:
    path = _write_json(tmp_path, DEPLOYMENT_MODULE)
    os.utime(path, ns=(OLD_MTIME_NS, OLD_MTIME_NS))

    adjust_module_file(path, [rename_variant("deployment")])

    assert path.stat().st_mtime_ns == OLD_MTIME_NS


def test_invalid_json_fails(tmp_path: Path) -> None:
    path = tmp_path / "module.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(DocumentParseError, match="module.json"):
        adjust_module_file(path, [rename_variant("spi")])
