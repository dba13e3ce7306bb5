from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class AggregatedStats:
    """
    KPIs for one group of deliveries (or all of them).

    Rates are percentages over closed deliveries. `average_rating` is on the /5
    scale and `average_sentiment` on the /10 scale; both are None when there is
    nothing to average, which is not the same as a zero score. For sentiment
    that means no comment longer than five characters, so a group without
    usable comments is never reported as "very negative".
    """

    total_deliveries: int = 0
    success_rate: float = 0.0
    average_rating: Optional[float] = None
    punctuality_rate: float = 0.0
    rating_rate: float = 0.0
    forced_on_site_rate: float = 0.0
    forced_no_contact_rate: float = 0.0
    web_completion_rate: float = 0.0
    average_sentiment: Optional[float] = None

    # provenance counts
    successful_deliveries: int = 0
    failed_deliveries: int = 0
    pending_deliveries: int = 0
    rated_deliveries: int = 0
    on_time_deliveries: int = 0
    forced_on_site_count: int = 0
    forced_no_contact_count: int = 0
    web_completion_count: int = 0
    commented_deliveries: int = 0
    failure_reasons: dict[str, int] = field(default_factory=dict)

    @property
    def failure_rate(self) -> float:
        if self.total_deliveries == 0:
            return 0.0
        return 100.0 - self.success_rate

    @property
    def late_deliveries(self) -> int:
        return self.total_deliveries - self.on_time_deliveries

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalDeliveries": self.total_deliveries,
            "successRate": self.success_rate,
            "averageRating": self.average_rating,
            "punctualityRate": self.punctuality_rate,
            "ratingRate": self.rating_rate,
            "forcedOnSiteRate": self.forced_on_site_rate,
            "forcedNoContactRate": self.forced_no_contact_rate,
            "webCompletionRate": self.web_completion_rate,
            "averageSentiment": self.average_sentiment,
            "failureRate": self.failure_rate,
            "successfulDeliveries": self.successful_deliveries,
            "failedDeliveries": self.failed_deliveries,
            "pendingDeliveries": self.pending_deliveries,
            "ratedDeliveries": self.rated_deliveries,
            "onTimeDeliveries": self.on_time_deliveries,
            "lateDeliveries": self.late_deliveries,
            "forcedOnSiteCount": self.forced_on_site_count,
            "forcedNoContactCount": self.forced_no_contact_count,
            "webCompletionCount": self.web_completion_count,
            "commentedDeliveries": self.commented_deliveries,
            "failureReasons": dict(self.failure_reasons),
        }
