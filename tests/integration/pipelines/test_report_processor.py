# tests/integration/pipelines/test_report_processor.py
from pathlib import Path
import datetime as dt
import json

import pandas as pd

from delivery_insights.models import Objectives
from delivery_insights.pipelines.report_processor import ReportProcessor

COMMENT_COL = "Qu'avez vous pensé de la livraison de votre commande?"


class QuietLogger:
    def debug(self, *a, **k): pass
    def info(self, *a, **k): pass
    def warning(self, *a, **k): pass
    def error(self, *a, **k): pass


def _export_rows():
    rows = []
    for i in range(14):
        rows.append({
            "Date": "08/03/2025",
            "Statut": "Livré",
            "ID de la tâche": 5000 + i,
            "Entrepôt": "Vitry SC",
            "Livreur": "Jean STEF" if i % 2 else "Ali ID LOG",
            "Tournée": 77,
            "Séquence": i + 1,
            "Retard (s)": 30 if i < 12 else 1800,
            "Notez votre livraison": 5 if i % 2 else 4,
            COMMENT_COL: "Rien à signaler" if i % 3 == 0 else None,
            "Sans contact forcé": "false",
            "Sur place forcé": "true" if i == 0 else "false",
            "Complété par": "mobile",
        })
    for i in range(4):
        rows.append({
            "Date": "01/03/2025",
            "Statut": "Non livré",
            "Raison d'échec de livraison": "Client absent",
            "Entrepôt": "Aix",
            "Livreur": "Marc GPL",
            "Retard (s)": 3600,
            "Notez votre livraison": 1,
            COMMENT_COL: "Produit cassé, livreur désagréable",
            "Sans contact forcé": "oui",
            "Complété par": "web",
        })
    return rows


def _write_export(path: Path) -> Path:
    pd.DataFrame(_export_rows()).to_excel(path, index=False)
    return path


def test_report_processor_end_to_end(tmp_path: Path):
    src = _write_export(tmp_path / "export.xlsx")
    out = tmp_path / "export_report.xlsx"
    out_json = tmp_path / "export_report.json"

    proc = ReportProcessor(QuietLogger(), objectives=Objectives())
    result = proc.process(src, out, out_json)

    assert out.exists() and out_json.exists()
    assert result["input_rows"] == 18
    assert result["total_deliveries"] == 18
    assert result["depots"] == ["Vitry", "Aix"]
    assert result["output_path"].endswith("export_report.xlsx")

    payload = json.loads(out_json.read_text(encoding="utf-8"))
    stats = payload["global"]["stats"]
    assert round(stats["successRate"], 2) == round(14 / 18 * 100, 2)
    assert stats["failureReasons"] == {"Client absent": 4}
    assert payload["objectives"]["punctualityRate"] == 95.0

    vitry = payload["depots"][0]
    assert vitry["stats"]["totalDeliveries"] == 14
    assert vitry["stats"]["forcedOnSiteCount"] == 1
    # 7 deliveries per driver is below the ranking threshold
    assert vitry["kpiRankings"]["drivers"]["averageRating"]["top"] == []

    aix = payload["depots"][1]
    assert aix["issueCategories"]["casse articles"] == [{"name": "Marc GPL (Aix)", "recurrence": 4}]
    assert payload["synthesis"]["depots"][1]["overall"] == "negative"


def test_report_processor_period_filter(tmp_path: Path):
    src = _write_export(tmp_path / "export.xlsx")
    proc = ReportProcessor(
        QuietLogger(), reference_date=dt.date(2025, 3, 9), period="7d")

    result = proc.process(src, tmp_path / "out.xlsx")

    # window [2025-03-02, 2025-03-09): only the Vitry rows remain
    assert result["total_deliveries"] == 14
    assert result["depots"] == ["Vitry"]
    assert result["json_path"] is None
    assert proc.last_synthesis is not None


def test_report_processor_previous_period_and_exclusion(tmp_path: Path):
    src = _write_export(tmp_path / "export.xlsx")
    proc = ReportProcessor(
        QuietLogger(), reference_date=dt.date(2025, 3, 9), period="7d", previous=True,
        exclude_depots=["Vitry"])

    report, synthesis = proc.run(pd.read_excel(src, engine="openpyxl").to_dict(orient="records"))

    # previous window [2025-02-23, 2025-03-02) holds the Aix failures
    assert [d.name for d in report.depots] == ["Aix"]
    assert report.global_section.stats.success_rate == 0.0
    assert synthesis.global_scope.weaknesses
