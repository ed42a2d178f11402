from __future__ import annotations

from pathlib import Path

import pytest

from ext_dep_verifier.models import Coordinate, ResolvedDependency


def test_parse_three_part_coordinate() -> None:
    c = Coordinate.parse("com.acme:widget:1.0.0")
    assert (c.group, c.artifact, c.version) == ("com.acme", "widget", "1.0.0")
    assert str(c) == "com.acme:widget:1.0.0"
    assert c.group_artifact() == "com.acme:widget"


def test_parse_two_part_coordinate() -> None:
    c = Coordinate.parse("com.acme:widget")
    assert c.version is None
    assert c.compact() == "com.acme:widget"


@pytest.mark.parametrize("value", ["", "widget", "a:b:c:d", "a::1", ":b:1"])
def test_parse_rejects_malformed(value: str) -> None:
    with pytest.raises(ValueError):
        Coordinate.parse(value)


def test_coordinates_are_hashable_and_compare_by_value() -> None:
    a = Coordinate.parse("g:a:1")
    assert a == Coordinate(group="g", artifact="a", version="1")
    assert len({a, Coordinate.parse("g:a:1"), Coordinate.parse("g:a:2")}) == 2
    assert a.sibling("a-deployment") == Coordinate.parse("g:a-deployment:1")


def test_resolved_dependency_type_defaults_to_suffix() -> None:
    dep = ResolvedDependency(coordinate=Coordinate.parse("g:a:1"), file=Path("repo/a-1.JAR"))
    assert dep.type == "jar"
    assert dep.is_archive is True
    assert dep.label() == "g:a:1 (a-1.JAR)"

    pom = ResolvedDependency(coordinate=Coordinate.parse("g:a:1"), file=Path("a.pom"), type="pom")
    assert pom.is_archive is False
