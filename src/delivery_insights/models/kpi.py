from __future__ import annotations

from enum import Enum


class Kpi(str, Enum):
    """KPI identifiers; values are the field names used in the report output."""

    SUCCESS_RATE = "successRate"
    AVERAGE_RATING = "averageRating"
    AVERAGE_SENTIMENT = "averageSentiment"
    PUNCTUALITY_RATE = "punctualityRate"
    FAILURE_RATE = "failureRate"
    FORCED_ON_SITE_RATE = "forcedOnSiteRate"
    FORCED_NO_CONTACT_RATE = "forcedNoContactRate"
    WEB_COMPLETION_RATE = "webCompletionRate"


# KPIs ranked per driver and per carrier in every report section
RANKED_KPIS: tuple[Kpi, ...] = (
    Kpi.AVERAGE_RATING,
    Kpi.AVERAGE_SENTIMENT,
    Kpi.PUNCTUALITY_RATE,
    Kpi.SUCCESS_RATE,
)
