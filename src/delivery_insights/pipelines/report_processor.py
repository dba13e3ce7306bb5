from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import Any, Iterable, Optional

from delivery_insights.io.workbook import read_rows, write_report_workbook
from delivery_insights.models import Objectives, Report, SynthesisResult
from delivery_insights.pipelines.normalizer import Normalizer
from delivery_insights.pipelines.preprocessor import ALL_DEPOTS, Preprocessor
from delivery_insights.pipelines.report_builder import ReportBuilder
from delivery_insights.rules.synthesis import synthesize


class ReportProcessor:
    """Orchestrates reading, normalization, filtering, reporting and synthesis."""

    def __init__(
        self,
        logger,
        *,
        objectives: Optional[Objectives] = None,
        reference_date: dt.date | None = None,
        depot: str = ALL_DEPOTS,
        period: Optional[str] = None,
        previous: bool = False,
        exclude_depots: Iterable[str] = (),
    ) -> None:
        self.logger = logger
        self.objectives = objectives or Objectives()
        self.reference_date = reference_date
        self.depot = depot
        self.period = period
        self.previous = previous
        self.exclude_depots = tuple(exclude_depots)
        self.last_report: Optional[Report] = None
        self.last_synthesis: Optional[SynthesisResult] = None

    def process(
        self,
        input_path: Path,
        output_path: Path,
        json_path: Optional[Path] = None,
    ) -> dict[str, Any]:
        input_path = Path(input_path)
        output_path = Path(output_path)

        if not input_path.exists():
            self.logger.error("Input file does not exist: %s", input_path)
            raise FileNotFoundError(input_path)

        rows = read_rows(input_path)
        self.logger.debug("Opened input workbook: %s (rows=%d)", input_path.name, len(rows))

        report, synthesis = self.run(rows)
        now_utc = dt.datetime.now(dt.timezone.utc).isoformat()

        write_report_workbook(
            output_path,
            report,
            synthesis,
            marker={
                "input_name": input_path.name,
                "input_dir": str(input_path.parent),
                "output_name": output_path.name,
                "input_rows": len(rows),
                "depot_filter": self.depot,
                "period_filter": self.period or "",
                "previous_period": self.previous,
            },
        )
        self.logger.info("Wrote report workbook → %s", output_path)

        if json_path is not None:
            json_path = Path(json_path)
            json_path.parent.mkdir(parents=True, exist_ok=True)
            payload = {**report.to_dict(), "synthesis": synthesis.to_dict()}
            json_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            self.logger.info("Wrote report JSON → %s", json_path)

        stats = report.global_section.stats
        return {
            "output_path": str(output_path),
            "json_path": str(json_path) if json_path is not None else None,
            "timestamp_utc": now_utc,
            "input_rows": len(rows),
            "total_deliveries": stats.total_deliveries,
            "depots": [d.name for d in report.depots],
            "overall": synthesis.global_scope.overall.value,
        }

    def run(self, rows: Iterable[Any]) -> tuple[Report, SynthesisResult]:
        """In-memory pipeline: rows -> (report, synthesis)."""
        records = Normalizer(self.logger).normalize(rows)
        records = Preprocessor(self.reference_date, logger=self.logger).prepare(
            records,
            depot=self.depot,
            period=self.period,
            previous=self.previous,
            exclude_depots=self.exclude_depots,
        )
        report = ReportBuilder(self.logger).build(records, self.objectives)
        synthesis = synthesize(report, self.objectives)
        self.last_report, self.last_synthesis = report, synthesis
        return report, synthesis
