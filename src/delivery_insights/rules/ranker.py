from __future__ import annotations

from typing import Iterable, Mapping, Optional, Union

from delivery_insights.models import AggregatedStats, Kpi, Ranking, RankingEntity
from delivery_insights.rules.kpis import KPI_DEFINITIONS

# Groups with this many closed deliveries or fewer are too noisy to rank
MIN_SAMPLE_SIZE = 10
RANKING_SIZE = 3

Entities = Union[Mapping[str, AggregatedStats], Iterable[tuple[str, AggregatedStats]]]


def _pairs(entities: Entities) -> list[tuple[str, AggregatedStats]]:
    if isinstance(entities, Mapping):
        return list(entities.items())
    return list(entities)


def rank(
    entities: Entities,
    kpi: Kpi | str,
    higher_is_better: Optional[bool] = None,
    *,
    size: int = RANKING_SIZE,
    min_sample_size: int = MIN_SAMPLE_SIZE,
) -> Ranking:
    """
    Top/flop lists for one KPI.

    Entities with `total_deliveries <= min_sample_size` or no value for the KPI
    are left out. The sort is stable, so ties keep input order. `flop` is the
    tail of the sorted list reversed (worst first). `higher_is_better`
    defaults to the KPI's own polarity.
    """
    definition = KPI_DEFINITIONS[Kpi(kpi)]
    if higher_is_better is None:
        higher_is_better = definition.higher_is_better

    candidates: list[RankingEntity] = []
    for name, stats in _pairs(entities):
        if stats.total_deliveries <= min_sample_size:
            continue
        value = definition.value(stats)
        if value is None:
            continue
        candidates.append(RankingEntity(
            name=name, value=value, total_deliveries=stats.total_deliveries))

    ordered = sorted(candidates, key=lambda e: e.value, reverse=higher_is_better)
    if size <= 0:
        return Ranking()
    return Ranking(
        top=tuple(ordered[:size]),
        flop=tuple(reversed(ordered[-size:])),
    )
