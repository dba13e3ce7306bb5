from __future__ import annotations

import datetime as dt
import warnings
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd

from delivery_insights.models import Report, Section, SynthesisResult
from delivery_insights.rules.aggregator import stats_frame

GLOBAL_SCOPE = "global"

SHEETS: tuple[str, ...] = (
    "Global",
    "Depots",
    "Driver Rankings",
    "Carrier Rankings",
    "Comments",
    "Synthesis",
    "Marker",
)


def read_rows(path: Path, *, sheet_name: Any = 0) -> list[dict[str, Any]]:
    """First sheet of an export as row dicts; empty cells come back as None."""
    df = pd.read_excel(path, sheet_name=sheet_name, engine="openpyxl")
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def _scoped(report: Report) -> Iterable[tuple[str, Section]]:
    yield GLOBAL_SCOPE, report.global_section
    for depot in report.depots:
        yield depot.name, depot


def _rankings_frame(report: Report, family: str) -> pd.DataFrame:
    columns = ["scope", "kpi", "side", "rank", "name", "value", "totalDeliveries"]
    rows = []
    for scope, section in _scoped(report):
        rankings = getattr(section.kpi_rankings, family)
        for kpi, ranking in rankings.items():
            for side, entities in (("top", ranking.top), ("flop", ranking.flop)):
                for i, e in enumerate(entities, start=1):
                    rows.append({
                        "scope": scope,
                        "kpi": kpi.value,
                        "side": side,
                        "rank": i,
                        "name": e.name,
                        "value": e.value,
                        "totalDeliveries": e.total_deliveries,
                    })
    return pd.DataFrame(rows, columns=columns)


def _comments_frame(report: Report) -> pd.DataFrame:
    columns = ["scope", "polarity", "comment", "score", "driver"]
    rows = []
    for scope, section in _scoped(report):
        for polarity, examples in (("positive", section.top_comments), ("negative", section.flop_comments)):
            for c in examples:
                rows.append({"scope": scope, "polarity": polarity, **c.to_dict()})
    return pd.DataFrame(rows, columns=columns)


def _synthesis_frame(synthesis: SynthesisResult) -> pd.DataFrame:
    columns = ["scope", "kind", "text"]
    rows = []
    for scope in (synthesis.global_scope, *synthesis.depots):
        rows.append({"scope": scope.name, "kind": "overall", "text": scope.overall.value})
        rows.extend({"scope": scope.name, "kind": "strength", "text": s} for s in scope.strengths)
        rows.extend({"scope": scope.name, "kind": "weakness", "text": w} for w in scope.weaknesses)
    rows.append({"scope": GLOBAL_SCOPE, "kind": "conclusion", "text": synthesis.conclusion})
    return pd.DataFrame(rows, columns=columns)


def write_report_workbook(
    path: Path,
    report: Report,
    synthesis: SynthesisResult,
    *,
    marker: Optional[dict[str, Any]] = None,
) -> Path:
    """Write the report as one sheet per view, plus a Marker sheet for provenance."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    marker_row = {
        "_di_marker": "ok",
        "timestamp_utc": dt.datetime.now(dt.timezone.utc).isoformat(),
        "depots": len(report.depots),
        **(marker or {}),
    }

    frames = {
        "Global": stats_frame({GLOBAL_SCOPE: report.global_section.stats}, index_name="scope"),
        "Depots": stats_frame({d.name: d.stats for d in report.depots}, index_name="depot"),
        "Driver Rankings": _rankings_frame(report, "drivers"),
        "Carrier Rankings": _rankings_frame(report, "carriers"),
        "Comments": _comments_frame(report),
        "Synthesis": _synthesis_frame(synthesis),
        "Marker": pd.DataFrame([marker_row]),
    }

    # openpyxl emits cosmetic warnings on save
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        with pd.ExcelWriter(path, engine="openpyxl", mode="w") as xw:
            for name in SHEETS:
                frames[name].to_excel(xw, sheet_name=name, index=False, na_rep="")
    return path
