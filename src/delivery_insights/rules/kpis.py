from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from delivery_insights.models import AggregatedStats, Kpi, Objectives


@dataclass(frozen=True)
class KpiDefinition:
    kpi: Kpi
    label: str
    unit: str
    higher_is_better: bool
    value: Callable[[AggregatedStats], Optional[float]]
    objective: Callable[[Objectives], float]
    # KPI reporting the same statistic from the other side (success vs failure)
    complement_of: Optional[Kpi] = None

    def meets(self, value: float, objective: float) -> bool:
        return value >= objective if self.higher_is_better else value <= objective


KPI_DEFINITIONS: Mapping[Kpi, KpiDefinition] = {
    d.kpi: d
    for d in (
        KpiDefinition(
            Kpi.SUCCESS_RATE, "Success rate", "%", True,
            lambda s: s.success_rate,
            lambda o: 100.0 - o.failure_rate,
        ),
        KpiDefinition(
            Kpi.AVERAGE_RATING, "Average rating", "/5", True,
            lambda s: s.average_rating,
            lambda o: o.average_rating,
        ),
        KpiDefinition(
            Kpi.AVERAGE_SENTIMENT, "Comment sentiment", "/10", True,
            lambda s: s.average_sentiment,
            lambda o: o.average_sentiment,
        ),
        KpiDefinition(
            Kpi.PUNCTUALITY_RATE, "Punctuality", "%", True,
            lambda s: s.punctuality_rate,
            lambda o: o.punctuality_rate,
        ),
        KpiDefinition(
            Kpi.FAILURE_RATE, "Failure rate", "%", False,
            lambda s: s.failure_rate,
            lambda o: o.failure_rate,
            complement_of=Kpi.SUCCESS_RATE,
        ),
        KpiDefinition(
            Kpi.FORCED_ON_SITE_RATE, 'Forced "on site" rate', "%", False,
            lambda s: s.forced_on_site_rate,
            lambda o: o.forced_on_site_rate,
        ),
        KpiDefinition(
            Kpi.FORCED_NO_CONTACT_RATE, 'Forced "no contact" rate', "%", False,
            lambda s: s.forced_no_contact_rate,
            lambda o: o.forced_no_contact_rate,
        ),
        KpiDefinition(
            Kpi.WEB_COMPLETION_RATE, "Web completion rate", "%", False,
            lambda s: s.web_completion_rate,
            lambda o: o.web_completion_rate,
        ),
    )
}

