from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, fields
from enum import Enum
from functools import reduce
from typing import Iterable, Mapping, Optional

import pandas as pd

from delivery_insights.io.schema import UNKNOWN
from delivery_insights.models import AggregatedStats, CompletionChannel, Delivery, DeliveryStatus
from delivery_insights.rules.sentiment import SentimentScorer, default_scorer

# Comments this short carry no usable sentiment ("ok", "bien")
MIN_SENTIMENT_COMMENT_LENGTH = 5


class GroupKey(str, Enum):
    DEPOT = "depot"
    CARRIER = "carrier"
    DRIVER = "driver"
    WAREHOUSE = "warehouse"

    def of(self, delivery: Delivery) -> str:
        return getattr(delivery, self.value) or UNKNOWN


def _percent(part: int, total: int) -> float:
    return part / total * 100 if total else 0.0


@dataclass
class _Tally:
    """Running sums over deliveries; `finalize` turns them into rates."""
    closed: int = 0
    successful: int = 0
    failed: int = 0
    pending: int = 0
    on_time: int = 0
    rated: int = 0
    rating_sum: float = 0.0
    forced_on_site: int = 0
    forced_no_contact: int = 0
    web: int = 0
    commented: int = 0
    sentiment_sum: float = 0.0
    failure_reasons: Counter = field(default_factory=Counter)

    def add(self, d: Delivery, scorer: SentimentScorer) -> "_Tally":
        if not d.is_closed:
            self.pending += 1
            return self

        self.closed += 1
        if d.status is DeliveryStatus.NOT_DELIVERED:
            self.failed += 1
            if d.failure_reason:
                self.failure_reasons[d.failure_reason.strip()] += 1
        else:
            self.successful += 1

        if d.is_on_time:
            self.on_time += 1
        if d.rating is not None:
            self.rated += 1
            self.rating_sum += d.rating
        if d.forced_on_site:
            self.forced_on_site += 1
        if d.forced_no_contact:
            self.forced_no_contact += 1
        if d.completed_by is CompletionChannel.WEB:
            self.web += 1
        if d.comment and len(d.comment.strip()) > MIN_SENTIMENT_COMMENT_LENGTH:
            self.commented += 1
            self.sentiment_sum += scorer.score(d.comment, d.rating).score
        return self

    def merge(self, other: "_Tally") -> "_Tally":
        """Combine two partial tallies (e.g. from separate chunks of an export)."""
        merged = _Tally(failure_reasons=self.failure_reasons + other.failure_reasons)
        for f in fields(self):
            if f.name != "failure_reasons":
                setattr(merged, f.name, getattr(self, f.name) + getattr(other, f.name))
        return merged

    def finalize(self) -> AggregatedStats:
        total = self.closed
        return AggregatedStats(
            total_deliveries=total,
            success_rate=100.0 - _percent(self.failed, total) if total else 0.0,
            average_rating=self.rating_sum / self.rated if self.rated else None,
            punctuality_rate=_percent(self.on_time, total),
            rating_rate=_percent(self.rated, total),
            forced_on_site_rate=_percent(self.forced_on_site, total),
            forced_no_contact_rate=_percent(self.forced_no_contact, total),
            web_completion_rate=_percent(self.web, total),
            average_sentiment=self.sentiment_sum / self.commented if self.commented else None,
            successful_deliveries=self.successful,
            failed_deliveries=self.failed,
            pending_deliveries=self.pending,
            rated_deliveries=self.rated,
            on_time_deliveries=self.on_time,
            forced_on_site_count=self.forced_on_site,
            forced_no_contact_count=self.forced_no_contact,
            web_completion_count=self.web,
            commented_deliveries=self.commented,
            failure_reasons=dict(self.failure_reasons),
        )


def _tally(records: Iterable[Delivery], scorer: SentimentScorer) -> _Tally:
    return reduce(lambda acc, d: acc.add(d, scorer), records, _Tally())


def overall_stats(
    records: Iterable[Delivery],
    *,
    scorer: Optional[SentimentScorer] = None,
) -> AggregatedStats:
    """KPIs over every closed delivery; pending ones are only counted."""
    return _tally(records, scorer or default_scorer()).finalize()


def aggregate(
    records: Iterable[Delivery],
    group_key: GroupKey | str,
    *,
    scorer: Optional[SentimentScorer] = None,
) -> dict[str, AggregatedStats]:
    """
    KPIs per value of `group_key`, in first-seen order.

    Every record lands in exactly one group; an empty key value groups under
    "Inconnu". A group holding only pending deliveries is kept with zero totals.
    """
    key = GroupKey(group_key)
    scorer = scorer or default_scorer()
    tallies: dict[str, _Tally] = {}
    for d in records:
        tallies.setdefault(key.of(d), _Tally()).add(d, scorer)
    return {name: t.finalize() for name, t in tallies.items()}


def group_records(records: Iterable[Delivery], group_key: GroupKey | str) -> dict[str, list[Delivery]]:
    key = GroupKey(group_key)
    groups: dict[str, list[Delivery]] = {}
    for d in records:
        groups.setdefault(key.of(d), []).append(d)
    return groups


def stats_frame(stats_by_group: Mapping[str, AggregatedStats], *, index_name: str = "name") -> pd.DataFrame:
    """One row per group with the camelCase KPI columns; failure reasons flattened to text."""
    rows = []
    for name, stats in stats_by_group.items():
        row = stats.to_dict()
        reasons = row.pop("failureReasons")
        row["failureReasons"] = "; ".join(
            f"{reason} ({count})" for reason, count in sorted(reasons.items(), key=lambda kv: -kv[1]))
        rows.append({index_name: name, **row})
    columns = [index_name] + list(AggregatedStats().to_dict().keys())
    return pd.DataFrame(rows, columns=columns)
