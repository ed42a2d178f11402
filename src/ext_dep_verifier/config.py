"""Project configuration module.

Describes the extension project being verified and where build outputs live.
Configuration is read from environment variables; CLI options override it.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from ext_dep_verifier.catalog import CATALOG_RELATIVE_PATH
from ext_dep_verifier.models import ProjectCoordinates
from ext_dep_verifier.verifier import VERIFICATION_OUTPUT_RELATIVE_PATH


_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ProjectConfig:
    """Project configuration container.

    Attributes:
        group: Group of the extension project
        name: Project name; also the runtime artifact id
        version: Project version
        has_spi: Whether the project publishes an spi artifact
        build_dir: Root of the build outputs
        log_level: Logging level name used by the CLI
    """

    group: str | None = None
    name: str | None = None
    version: str | None = None
    has_spi: bool = False
    build_dir: Path = field(default_factory=lambda: Path("build"))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ProjectConfig":
        """Create configuration from environment variables.

        Environment variables:
            EXTDEP_GROUP: Project group
            EXTDEP_NAME: Project name
            EXTDEP_VERSION: Project version
            EXTDEP_HAS_SPI: "true" when an spi artifact is published (default: "false")
            EXTDEP_BUILD_DIR: Build output directory (default: "build")
            EXTDEP_LOG_LEVEL: Logging level (default: "INFO")
        """
        return cls(
            group=os.getenv("EXTDEP_GROUP") or None,
            name=os.getenv("EXTDEP_NAME") or None,
            version=os.getenv("EXTDEP_VERSION") or None,
            has_spi=os.getenv("EXTDEP_HAS_SPI", "false").strip().lower() in _TRUE_VALUES,
            build_dir=Path(os.getenv("EXTDEP_BUILD_DIR", "build")),
            log_level=os.getenv("EXTDEP_LOG_LEVEL", "INFO").upper(),
        )

    @property
    def catalog_path(self) -> Path:
        return self.build_dir / CATALOG_RELATIVE_PATH

    @property
    def verification_output_path(self) -> Path:
        return self.build_dir / VERIFICATION_OUTPUT_RELATIVE_PATH

    @property
    def extension_properties_path(self) -> Path:
        return self.build_dir / "quarkus" / "quarkus-extension.properties"

    def validate(self) -> None:
        """Validate the project identity.

        Raises:
            ValueError: If group, name or version is missing.
        """
        if not self.group:
            raise ValueError("EXTDEP_GROUP (or --group) is required")
        if not self.name:
            raise ValueError("EXTDEP_NAME (or --name) is required")
        if not self.version:
            raise ValueError("EXTDEP_VERSION (or --version) is required")

    def project(self) -> ProjectCoordinates:
        """Return the validated project identity."""
        self.validate()
        return ProjectCoordinates(
            group=self.group,
            name=self.name,
            version=self.version,
            has_spi=self.has_spi,
        )
