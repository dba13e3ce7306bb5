from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping, Optional, Sequence

from delivery_insights.models import (
    RANKED_KPIS,
    AggregatedStats,
    Delivery,
    DepotSection,
    KpiRankings,
    Objectives,
    RatedDriver,
    Report,
    Section,
)
from delivery_insights.rules.aggregator import GroupKey, aggregate, group_records, overall_stats
from delivery_insights.rules.categorizer import categorize_complaints
from delivery_insights.rules.ranker import MIN_SAMPLE_SIZE, rank
from delivery_insights.rules.sentiment import (
    CommentPolarity,
    SentimentScorer,
    default_scorer,
    get_top_comments,
)

COMMENT_EXAMPLES = 3
RATED_DRIVERS = 3
GOOD_RATING = 4   # ratings >= this count as praise
POOR_RATING = 2   # ratings <= this count as complaints


def _kpi_rankings(stats_by_entity: Mapping[str, AggregatedStats], min_sample_size: int):
    return {
        kpi: rank(stats_by_entity, kpi, min_sample_size=min_sample_size)
        for kpi in RANKED_KPIS
    }


def rated_drivers(
    records: Iterable[Delivery],
    driver_stats: Mapping[str, AggregatedStats],
    *,
    size: int = RATED_DRIVERS,
) -> tuple[tuple[RatedDriver, ...], tuple[RatedDriver, ...]]:
    """
    (best, worst): drivers with the most ratings >= 4, and with the most
    ratings <= 2. Drivers without any such rating are not listed.
    """
    good: Counter[str] = Counter()
    poor: Counter[str] = Counter()
    for d in records:
        if d.rating is None:
            continue
        if d.rating >= GOOD_RATING:
            good[d.driver] += 1
        elif d.rating <= POOR_RATING:
            poor[d.driver] += 1

    def _top(counts: Counter[str]) -> tuple[RatedDriver, ...]:
        ordered = sorted(counts.items(), key=lambda kv: -kv[1])[:size]
        return tuple(
            RatedDriver(
                name=name,
                count=n,
                average_rating=driver_stats[name].average_rating if name in driver_stats else None,
            )
            for name, n in ordered
        )

    return _top(good), _top(poor)


class ReportBuilder:
    """Builds the global section plus one section per depot (busiest first)."""

    def __init__(
        self,
        logger=None,
        *,
        scorer: Optional[SentimentScorer] = None,
        min_sample_size: int = MIN_SAMPLE_SIZE,
    ) -> None:
        self.logger = logger
        self.scorer = scorer or default_scorer()
        self.min_sample_size = min_sample_size

    def build_section(self, records: Sequence[Delivery]) -> Section:
        return Section(**self._section_fields(records))

    def _section_fields(self, records: Sequence[Delivery]) -> dict:
        drivers = aggregate(records, GroupKey.DRIVER, scorer=self.scorer)
        carriers = aggregate(records, GroupKey.CARRIER, scorer=self.scorer)
        best, worst = rated_drivers(records, drivers)
        return dict(
            stats=overall_stats(records, scorer=self.scorer),
            kpi_rankings=KpiRankings(
                drivers=_kpi_rankings(drivers, self.min_sample_size),
                carriers=_kpi_rankings(carriers, self.min_sample_size),
            ),
            top_comments=tuple(get_top_comments(
                records, CommentPolarity.POSITIVE, COMMENT_EXAMPLES, scorer=self.scorer)),
            flop_comments=tuple(get_top_comments(
                records, CommentPolarity.NEGATIVE, COMMENT_EXAMPLES, scorer=self.scorer)),
            best_rated_drivers=best,
            worst_rated_drivers=worst,
            issue_categories=categorize_complaints(records, scorer=self.scorer),
        )

    def build(self, records: Iterable[Delivery], objectives: Optional[Objectives] = None) -> Report:
        records = list(records)
        global_section = self.build_section(records)

        depots = [
            DepotSection(name=name, **self._section_fields(depot_records))
            for name, depot_records in group_records(records, GroupKey.DEPOT).items()
        ]
        depots.sort(key=lambda s: s.stats.total_deliveries, reverse=True)

        if self.logger:
            self.logger.info(
                "report: %d deliveries (%d closed), %d depot section(s)",
                len(records), global_section.stats.total_deliveries, len(depots))
        return Report(global_section=global_section, depots=tuple(depots), objectives=objectives)


def build_report(
    records: Iterable[Delivery],
    objectives: Optional[Objectives] = None,
    *,
    scorer: Optional[SentimentScorer] = None,
    logger=None,
) -> Report:
    return ReportBuilder(logger, scorer=scorer).build(records, objectives)
