"""Per-publication adjustment plans for the runtime, deployment and spi artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ext_dep_verifier.descriptor import inject_dependency
from ext_dep_verifier.models import Coordinate, ProjectCoordinates
from ext_dep_verifier.module_metadata import (
    VariantAdjuster,
    add_variant_dependency,
    adjust_module_file,
    rename_variant,
)


logger = logging.getLogger(__name__)


class Publication(str, Enum):
    RUNTIME = "runtime"
    DEPLOYMENT = "deployment"
    SPI = "spi"


@dataclass(frozen=True)
class AdjustmentPlan:
    """What to change in one publication's descriptor and module metadata.

    Attributes:
        companion: Coordinate injected as a dependency, or None.
        rename_prefix: Publication prefix stripped from variant names, or None.
    """

    companion: Coordinate | None
    rename_prefix: str | None

    def variant_adjusters(self) -> list[VariantAdjuster]:
        adjusters: list[VariantAdjuster] = []
        if self.rename_prefix:
            adjusters.append(rename_variant(self.rename_prefix))
        if self.companion is not None:
            adjusters.append(add_variant_dependency(self.companion))
        return adjusters


def plan_for(publication: Publication, project: ProjectCoordinates) -> AdjustmentPlan:
    """Return the adjustments for `publication` of `project`.

    runtime    -> depends on `<name>-spi` when the project has an spi artifact
    deployment -> depends on `<name>`, variants renamed
    spi        -> variants renamed only
    """
    if publication is Publication.RUNTIME:
        companion = project.coordinate("spi") if project.has_spi else None
        return AdjustmentPlan(companion=companion, rename_prefix=None)
    if publication is Publication.DEPLOYMENT:
        return AdjustmentPlan(companion=project.coordinate(), rename_prefix=publication.value)
    return AdjustmentPlan(companion=None, rename_prefix=publication.value)


def adjust_publication(
    publication: Publication,
    project: ProjectCoordinates,
    *,
    pom: Path | None = None,
    module: Path | None = None,
) -> AdjustmentPlan:
    """Apply the plan for `publication` to whichever documents are given.

    Each document must be freshly generated; re-applying duplicates the
    injected dependency.
    """
    plan = plan_for(publication, project)

    if pom is not None:
        if plan.companion is not None:
            inject_dependency(pom, plan.companion)
            logger.info("Adjusted %s descriptor %s", publication.value, pom)
        else:
            logger.debug("Nothing to adjust in %s descriptor %s", publication.value, pom)

    if module is not None:
        adjusters = plan.variant_adjusters()
        if adjusters and adjust_module_file(module, adjusters):
            logger.info("Adjusted %s module metadata %s", publication.value, module)

    return plan
