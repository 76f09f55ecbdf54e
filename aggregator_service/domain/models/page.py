from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from aggregator_service.core.exceptions import UpstreamUnavailable


@dataclass
class Page:
    """A single upstream listing page."""

    items: List[Dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[str] = None


@dataclass
class PaginationResult:
    """
    Records collected from one listing endpoint.

    ``fault`` holds the failure that stopped pagination early, if any; the
    records gathered before it are still returned.
    """

    records: List[Dict[str, Any]] = field(default_factory=list)
    pages: int = 0
    fault: Optional[UpstreamUnavailable] = None

    @property
    def complete(self) -> bool:
        return self.fault is None
