from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Optional


class DeliveryStatus(str, Enum):
    """Delivery outcome, valued with the labels used in the source exports."""

    DELIVERED = "Livré"
    NOT_DELIVERED = "Non livré"
    PARTIALLY_DELIVERED = "Partiellement livré"
    PENDING = "En attente"

    @property
    def is_closed(self) -> bool:
        return self is not DeliveryStatus.PENDING


# ±15 minutes around the promised time
PUNCTUALITY_WINDOW_SECONDS = 900

CLOSED_STATUSES: frozenset[DeliveryStatus] = frozenset(
    s for s in DeliveryStatus if s.is_closed)


class CompletionChannel(str, Enum):
    WEB = "web"
    MOBILE = "mobile"


@dataclass(frozen=True)
class Delivery:
    # identity/context
    date: str                          # yyyy-mm-dd, or the raw value when unparseable
    status: DeliveryStatus
    task_id: str
    tour_id: str
    sequence: int
    warehouse: str
    driver: str                        # "<raw driver> (<depot>)"
    depot: str
    carrier: str

    # punctuality, signed seconds against the promised window
    delay_seconds: float = 0.0

    # customer feedback
    failure_reason: Optional[str] = None
    comment: Optional[str] = None
    rating: Optional[int] = None

    # completion flags
    forced_no_contact: bool = False
    no_contact_reason: Optional[str] = None
    forced_on_site: bool = False
    completed_by: CompletionChannel = CompletionChannel.MOBILE

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_STATUSES

    @property
    def is_on_time(self) -> bool:
        return -PUNCTUALITY_WINDOW_SECONDS <= self.delay_seconds <= PUNCTUALITY_WINDOW_SECONDS

    def to_dict(self) -> dict[str, Any]:
        """Plain values only (enums flattened), for sidecars/logging/tests."""
        out = asdict(self)
        out["status"] = self.status.value
        out["completed_by"] = self.completed_by.value
        return out
