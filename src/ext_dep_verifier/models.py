"""Pydantic models for artifact coordinates and resolved dependencies."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator


ARCHIVE_TYPES = frozenset({"jar"})


class Coordinate(BaseModel):
    """Artifact coordinates (group, artifact, optional version)."""

    model_config = ConfigDict(frozen=True)

    group: str = Field(..., min_length=1)
    artifact: str = Field(..., min_length=1)
    version: str | None = None

    @classmethod
    def parse(cls, value: str) -> "Coordinate":
        """Parse a `group:artifact` or `group:artifact:version` string.

        Raises:
            ValueError: If the string does not have two or three non-empty parts.
        """
        parts = (value or "").strip().split(":")
        if len(parts) not in (2, 3) or not all(parts):
            raise ValueError(f"Invalid coordinate: {value!r}")
        if len(parts) == 2:
            return cls(group=parts[0], artifact=parts[1])
        return cls(group=parts[0], artifact=parts[1], version=parts[2])

    def group_artifact(self) -> str:
        """Return the two-part form `group:artifact`."""
        return f"{self.group}:{self.artifact}"

    def compact(self) -> str:
        """Return the canonical string form.

        Returns:
            `group:artifact:version` when a version is known, else `group:artifact`.
        """
        if self.version is None:
            return self.group_artifact()
        return f"{self.group}:{self.artifact}:{self.version}"

    def sibling(self, artifact: str) -> "Coordinate":
        """Return a coordinate in the same group and version with another artifact id."""
        return Coordinate(group=self.group, artifact=artifact, version=self.version)

    def __str__(self) -> str:
        return self.compact()


class ResolvedDependency(BaseModel):
    """A coordinate plus the local file the resolver produced for it."""

    coordinate: Coordinate
    file: Path
    type: str = ""

    @model_validator(mode="after")
    def _default_type(self) -> "ResolvedDependency":
        if not self.type:
            self.type = self.file.suffix.lstrip(".").lower()
        return self

    @property
    def is_archive(self) -> bool:
        return self.type in ARCHIVE_TYPES

    def label(self) -> str:
        """Return a user-facing label including the file name."""
        return f"{self.coordinate.compact()} ({self.file.name})"


class ProjectCoordinates(BaseModel):
    """Identity of the project whose publications are being adjusted."""

    group: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    has_spi: bool = False

    def coordinate(self, suffix: str | None = None) -> Coordinate:
        """Return the coordinate of the runtime artifact or of a `<name>-<suffix>` sibling."""
        artifact = self.name if not suffix else f"{self.name}-{suffix}"
        return Coordinate(group=self.group, artifact=artifact, version=self.version)
