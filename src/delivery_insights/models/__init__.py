from .delivery import (
    CLOSED_STATUSES,
    PUNCTUALITY_WINDOW_SECONDS,
    CompletionChannel,
    Delivery,
    DeliveryStatus,
)
from .kpi import RANKED_KPIS, Kpi
from .objectives import Objectives
from .report import (
    CommentExample,
    DepotSection,
    IssueDriver,
    KpiRankings,
    Ranking,
    RankingEntity,
    RatedDriver,
    Report,
    Section,
)
from .stats import AggregatedStats
from .synthesis import (
    Classification,
    KpiAssessment,
    OverallStatus,
    ScopeSynthesis,
    SynthesisResult,
)

__all__ = [
    "CLOSED_STATUSES",
    "PUNCTUALITY_WINDOW_SECONDS",
    "CompletionChannel",
    "Delivery",
    "DeliveryStatus",
    "RANKED_KPIS",
    "Kpi",
    "Objectives",
    "CommentExample",
    "DepotSection",
    "IssueDriver",
    "KpiRankings",
    "Ranking",
    "RankingEntity",
    "RatedDriver",
    "Report",
    "Section",
    "AggregatedStats",
    "Classification",
    "KpiAssessment",
    "OverallStatus",
    "ScopeSynthesis",
    "SynthesisResult",
]
