"""StructureStore abstract base class.

The persistence boundary of the subsystem.  The coordinator and the
drawing save activity depend only on this interface; concrete stores
decide where documents live.

Semantics every store must honour:

- ``replace_structures`` replaces the site's entire structure set (one
  current set per site; re-running detection never accumulates).
- ``save_drawing`` stores edges and transform together, in one write.
- Nothing is written implicitly: callers persist on success or explicit
  save only.
- Failures raise ``StoreError`` (step ``persistence``).
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from roof_outline.core.constants import FailureStep
from roof_outline.core.exceptions import PipelineError

if TYPE_CHECKING:
    from roof_outline.models.imagery import AerialImage
    from roof_outline.models.records import DrawingRecord, RoofSummary, SiteRecord, StructureRecord


class StoreError(PipelineError):
    """A persistence operation failed."""

    default_stage = FailureStep.PERSISTENCE.value
    default_code = "STORE_WRITE_FAILED"


class StructureStore(abc.ABC):
    """Persistence for sites, structure sets, summaries and drawings."""

    @abc.abstractmethod
    def get_site(self, site_id: str) -> SiteRecord | None:
        """Look up a site; ``None`` when it does not exist."""

    @abc.abstractmethod
    def save_image(self, site_id: str, image: AerialImage) -> str:
        """Persist a source image and return its reference."""

    @abc.abstractmethod
    def replace_structures(self, site_id: str, records: list[StructureRecord]) -> None:
        """Replace the site's structure set with *records*."""

    @abc.abstractmethod
    def save_summary(self, summary: RoofSummary) -> None:
        """Write the site aggregate, overwriting the previous one."""

    @abc.abstractmethod
    def save_drawing(self, drawing: DrawingRecord) -> str:
        """Write an operator drawing and return its reference."""

    @abc.abstractmethod
    def get_drawing(self, site_id: str) -> DrawingRecord | None:
        """Return the last saved drawing of a site, if any."""
