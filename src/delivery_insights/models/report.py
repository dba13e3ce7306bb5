from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .kpi import Kpi
from .objectives import Objectives
from .stats import AggregatedStats


@dataclass(frozen=True)
class RankingEntity:
    name: str
    value: float
    total_deliveries: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "totalDeliveries": self.total_deliveries}


@dataclass(frozen=True)
class Ranking:
    top: tuple[RankingEntity, ...] = ()
    flop: tuple[RankingEntity, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "top": [e.to_dict() for e in self.top],
            "flop": [e.to_dict() for e in self.flop],
        }


@dataclass(frozen=True)
class KpiRankings:
    """Top/flop rankings per KPI for the two entity families."""
    drivers: dict[Kpi, Ranking] = field(default_factory=dict)
    carriers: dict[Kpi, Ranking] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "drivers": {k.value: r.to_dict() for k, r in self.drivers.items()},
            "carriers": {k.value: r.to_dict() for k, r in self.carriers.items()},
        }


@dataclass(frozen=True)
class CommentExample:
    comment: str
    score: float
    driver: str

    def to_dict(self) -> dict[str, Any]:
        return {"comment": self.comment, "score": self.score, "driver": self.driver}


@dataclass(frozen=True)
class RatedDriver:
    """A driver with how many strong (or poor) ratings they collected."""
    name: str
    count: int
    average_rating: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "count": self.count, "averageRating": self.average_rating}


@dataclass(frozen=True)
class IssueDriver:
    name: str
    recurrence: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "recurrence": self.recurrence}


@dataclass(frozen=True)
class Section:
    stats: AggregatedStats
    kpi_rankings: KpiRankings
    top_comments: tuple[CommentExample, ...] = ()
    flop_comments: tuple[CommentExample, ...] = ()
    best_rated_drivers: tuple[RatedDriver, ...] = ()
    worst_rated_drivers: tuple[RatedDriver, ...] = ()
    issue_categories: dict[str, tuple[IssueDriver, ...]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "kpiRankings": self.kpi_rankings.to_dict(),
            "topComments": [c.to_dict() for c in self.top_comments],
            "flopComments": [c.to_dict() for c in self.flop_comments],
            "bestRatedDrivers": [d.to_dict() for d in self.best_rated_drivers],
            "worstRatedDrivers": [d.to_dict() for d in self.worst_rated_drivers],
            "issueCategories": {
                cat: [d.to_dict() for d in drivers]
                for cat, drivers in self.issue_categories.items()
            },
        }


@dataclass(frozen=True)
class DepotSection(Section):
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, **super().to_dict()}


@dataclass(frozen=True)
class Report:
    global_section: Section
    depots: tuple[DepotSection, ...] = ()
    objectives: Optional[Objectives] = None

    def depot(self, name: str) -> Optional[DepotSection]:
        return next((d for d in self.depots if d.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "global": self.global_section.to_dict(),
            "depots": [d.to_dict() for d in self.depots],
        }
        if self.objectives is not None:
            out["objectives"] = self.objectives.to_dict()
        return out
