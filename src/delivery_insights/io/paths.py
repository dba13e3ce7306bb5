from __future__ import annotations

from pathlib import Path
from typing import Tuple

from delivery_insights.config.logging_config import default_log_path_for_input

REPORT_SUFFIX = "_report.xlsx"
JSON_SUFFIX = "_report.json"


def derive_output_paths(input_file: Path) -> Tuple[Path, Path, Path]:
    """
    Given an input Excel path, return (report_xlsx_path, report_json_path, log_path)
    in the same directory.

    Raises FileNotFoundError if input_file doesn't exist (explicit early signal for CLI).
    """
    p = Path(input_file)
    if not p.exists():
        raise FileNotFoundError(p)

    stem = p.stem
    report = p.with_name(f"{stem}{REPORT_SUFFIX}")
    report_json = p.with_name(f"{stem}{JSON_SUFFIX}")
    log = default_log_path_for_input(p)
    return report, report_json, log
