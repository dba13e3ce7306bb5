from pathlib import Path
import logging
import json

import pandas as pd
import pytest

from delivery_insights import cli
from delivery_insights.api.summary import SummaryError
from delivery_insights.config.env import OBJECTIVE_KEYS

COMMENT_COL = "Qu'avez vous pensé de la livraison de votre commande?"


def run_cli(args):
    return cli.main(args)


def _fake_df():
    rows = [{
        "Date": "09/03/2025",
        "Statut": "Livré",
        "ID de la tâche": 1000 + i,
        "Entrepôt": "Vitry",
        "Livreur": "Jean STEF",
        "Tournée": "R1",
        "Séquence": i,
        "Retard (s)": 60,
        "Notez votre livraison": 5,
        COMMENT_COL: "Livreur aimable, rapide",
    } for i in range(12)]
    rows.append({"Date": "09/03/2025", "Statut": "Non livré", "Entrepôt": "Aix",
                 "Livreur": "Paul 6", "Raison d’échec de livraison": "Client absent"})
    return pd.DataFrame(rows)


@pytest.fixture
def src(tmp_path: Path, monkeypatch):
    # isolated cwd and objectives so no project .env leaks in
    monkeypatch.chdir(tmp_path)
    for k in (*OBJECTIVE_KEYS.values(), "SUMMARY_API_URL", "SUMMARY_API_KEY", "LOG_LEVEL"):
        monkeypatch.setenv(k, "placeholder")
        monkeypatch.delenv(k)
    monkeypatch.setattr("pandas.read_excel", lambda *a, **k: _fake_df())

    p = tmp_path / "abc.xlsx"
    p.write_text("x")  # exists so CLI path checks pass
    return p


def test_cli_happy_path_writes_report_and_json(src: Path):
    code = run_cli([str(src), "--no-console", "--log-level=DEBUG"])

    assert code == 0
    assert (src.parent / "abc_report.xlsx").exists()
    payload = json.loads((src.parent / "abc_report.json").read_text(encoding="utf-8"))
    assert payload["global"]["stats"]["totalDeliveries"] == 13
    assert [d["name"] for d in payload["depots"]] == ["Vitry", "Aix"]
    assert "conclusion" in payload["synthesis"]


def test_cli_no_json_and_depot_filter(src: Path):
    code = run_cli([str(src), "--no-console", "--no-json", "--depot", "Aix"])

    assert code == 0
    assert (src.parent / "abc_report.xlsx").exists()
    assert not (src.parent / "abc_report.json").exists()


def test_cli_period_filter_with_reference_date(src: Path):
    code = run_cli([str(src), "--no-console", "--period", "7d", "--reference-date", "2025-03-09"])
    assert code == 0
    payload = json.loads((src.parent / "abc_report.json").read_text(encoding="utf-8"))
    # 2025-03-09 is the (exclusive) end of the window
    assert payload["global"]["stats"]["totalDeliveries"] == 0


def test_cli_missing_input_returns_2(tmp_path: Path):
    code = run_cli([str(tmp_path / "nope.xlsx"), "--no-console"])
    assert code == 2


def test_cli_invalid_reference_date_returns_2(src: Path):
    assert run_cli([str(src), "--no-console", "--reference-date", "09/03/2025"]) == 2


def test_cli_strict_env_bad_objective_returns_2(src: Path, monkeypatch):
    monkeypatch.setenv("OBJECTIVE_AVERAGE_RATING", "high")
    assert run_cli([str(src), "--no-console", "--strict-env"]) == 2
    # non-strict only warns
    assert run_cli([str(src), "--no-console"]) == 0


def test_cli_summary_without_settings_still_succeeds(src: Path):
    assert run_cli([str(src), "--no-console", "--summary"]) == 0
    assert not (src.parent / "abc_summary.txt").exists()


def test_cli_summary_strict_without_settings_returns_2(src: Path):
    assert run_cli([str(src), "--no-console", "--summary", "--strict-env"]) == 2


def test_cli_summary_written_next_to_report(src: Path, monkeypatch):
    monkeypatch.setenv("SUMMARY_API_URL", "http://svc/summary")
    monkeypatch.setenv("SUMMARY_API_KEY", "secret")
    monkeypatch.setattr(
        "delivery_insights.api.summary.SummaryClient.summarize",
        lambda self, report: "Semaine solide.",
    )

    assert run_cli([str(src), "--no-console", "--summary"]) == 0
    assert (src.parent / "abc_summary.txt").read_text(encoding="utf-8") == "Semaine solide.\n"


def test_cli_summary_failure_is_not_fatal(src: Path, monkeypatch):
    monkeypatch.setenv("SUMMARY_API_URL", "http://svc/summary")
    monkeypatch.setenv("SUMMARY_API_KEY", "secret")

    def _boom(self, report):
        raise SummaryError("service down")

    monkeypatch.setattr("delivery_insights.api.summary.SummaryClient.summarize", _boom)

    assert run_cli([str(src), "--no-console", "--summary"]) == 0


def test_cli_unexpected_failure_returns_1(src: Path, monkeypatch):
    def _boom(self, *a, **k):
        raise RuntimeError("disk full")

    monkeypatch.setattr(
        "delivery_insights.pipelines.report_processor.ReportProcessor.process", _boom)
    assert run_cli([str(src), "--no-console"]) == 1


def test_cli_log_level_falls_back_to_env(src: Path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    assert run_cli([str(src), "--no-console"]) == 0
    assert logging.getLogger("delivery_insights").level == logging.WARNING

    # explicit flag wins over LOG_LEVEL
    assert run_cli([str(src), "--no-console", "--log-level", "DEBUG"]) == 0
    assert logging.getLogger("delivery_insights").level == logging.DEBUG
