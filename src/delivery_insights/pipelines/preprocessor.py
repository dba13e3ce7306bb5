from __future__ import annotations

import datetime as dt
from typing import Iterable, Optional, Sequence, Tuple

from delivery_insights.models import Delivery

ALL_DEPOTS = "all"

# Period codes accepted by the dashboard filters
PERIOD_DAYS: dict[str, int] = {"1d": 1, "7d": 7, "30d": 30}


def _parse_date(value: str) -> Optional[dt.date]:
    try:
        return dt.date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


class Preprocessor:
    """Record filtering ahead of reporting: depot exclusion, depot and period."""

    def __init__(self, reference_date: Optional[dt.date] = None, logger=None) -> None:
        # resolved once so a run never straddles midnight
        self.reference_date = reference_date or dt.date.today()
        self.logger = logger

    def period_range(self, period: str, *, previous: bool = False) -> Tuple[dt.date, dt.date]:
        """[start, end) for a period code; `previous` shifts back by one period."""
        if period not in PERIOD_DAYS:
            raise ValueError(f"Unknown period {period!r}; expected one of {sorted(PERIOD_DAYS)}")
        days = dt.timedelta(days=PERIOD_DAYS[period])
        end = self.reference_date
        start = end - days
        if previous:
            start, end = start - days, start
        return start, end

    def filter_by_period(
        self, records: Sequence[Delivery], period: Optional[str], *, previous: bool = False
    ) -> list[Delivery]:
        if period is None:
            return list(records)
        start, end = self.period_range(period, previous=previous)
        out = []
        for r in records:
            day = _parse_date(r.date)
            if day is not None and start <= day < end:
                out.append(r)
        return out

    def filter_by_depot(self, records: Sequence[Delivery], depot: str = ALL_DEPOTS) -> list[Delivery]:
        if not depot or depot == ALL_DEPOTS:
            return list(records)
        return [r for r in records if r.depot == depot]

    def exclude_depots(self, records: Sequence[Delivery], depots: Iterable[str] = ()) -> list[Delivery]:
        excluded = set(depots)
        if not excluded:
            return list(records)
        return [r for r in records if r.depot not in excluded]

    def _log_delta(self, label: str, before: int, after: int) -> None:
        if self.logger:
            self.logger.info("%s: %d -> %d (Δ %d)", label,
                             before, after, after - before)

    def prepare(
        self,
        records: Sequence[Delivery],
        *,
        depot: str = ALL_DEPOTS,
        period: Optional[str] = None,
        previous: bool = False,
        exclude_depots: Iterable[str] = (),
    ) -> list[Delivery]:
        before = len(records)
        r1 = self.exclude_depots(records, exclude_depots)
        self._log_delta("exclude_depots", before, len(r1))

        before = len(r1)
        r2 = self.filter_by_depot(r1, depot)
        self._log_delta("filter_by_depot" + ("" if depot and depot != ALL_DEPOTS else " (skipped)"),
                        before, len(r2))

        before = len(r2)
        r3 = self.filter_by_period(r2, period, previous=previous)
        self._log_delta("filter_by_period" + ("" if period else " (skipped)"), before, len(r3))
        return r3
