from __future__ import annotations
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Objectives:
    """Targets the synthesis compares against. Defaults are the dashboard's."""
    average_rating: float = 4.8           # target, /5
    average_sentiment: float = 8.0        # target, /10
    punctuality_rate: float = 95.0        # target, %
    failure_rate: float = 2.0             # max, %
    forced_on_site_rate: float = 10.0     # max, %
    forced_no_contact_rate: float = 10.0  # max, %
    web_completion_rate: float = 1.0      # max, %

    def to_dict(self) -> dict[str, Any]:
        return {
            "averageRating": self.average_rating,
            "averageSentiment": self.average_sentiment,
            "punctualityRate": self.punctuality_rate,
            "failureRate": self.failure_rate,
            "forcedOnSiteRate": self.forced_on_site_rate,
            "forcedNoContactRate": self.forced_no_contact_rate,
            "webCompletionRate": self.web_completion_rate,
        }
