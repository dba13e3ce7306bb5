# src/delivery_insights/cli.py
from __future__ import annotations

import argparse
import datetime as dt
import sys
from pathlib import Path

from .config.env import EnvError, get_objectives, get_summary_env
from .config.logging_config import get_logger, quiet_loggers
from .io.paths import derive_output_paths
from .pipelines.preprocessor import ALL_DEPOTS, PERIOD_DAYS
from .pipelines.report_processor import ReportProcessor

SUMMARY_SUFFIX = "_summary.txt"


def _parse_reference_date(value: str | None) -> dt.date | None:
    return dt.date.fromisoformat(value) if value else None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="delivery-insights",
        description="Analyze a delivery export and emit a *_report.xlsx (and JSON) next to the input.",
    )
    p.add_argument("input", type=Path, help="Path to input .xlsx export.")
    p.add_argument(
        "--no-console",
        action="store_true",
        help="Log to the .log file next to the input only, not to stderr.",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="DEBUG, INFO, WARNING or ERROR. Default: LOG_LEVEL, else INFO",
    )
    p.add_argument(
        "--depot",
        default=ALL_DEPOTS,
        help="Only report on this depot (e.g. 'Vitry'). Default: all",
    )
    p.add_argument(
        "--period",
        choices=sorted(PERIOD_DAYS),
        default=None,
        help="Only keep deliveries from the last 1, 7 or 30 days before the reference date.",
    )
    p.add_argument(
        "--previous",
        action="store_true",
        help="With --period, report on the period just before it instead.",
    )
    p.add_argument(
        "--reference-date",
        type=str,
        default=None,
        help="YYYY-MM-DD anchor date for --period (exclusive). Default: today.",
    )
    p.add_argument(
        "--exclude-depot",
        action="append",
        default=[],
        metavar="DEPOT",
        help="Drop deliveries of this depot before reporting (repeatable).",
    )
    p.add_argument(
        "--strict-env",
        action="store_true",
        help="Fail (exit 2) on malformed OBJECTIVE_* values or missing summary settings.",
    )
    p.add_argument(
        "--summary",
        action="store_true",
        help="Request a text summary from SUMMARY_API_URL (failures are logged, not fatal).",
    )
    p.add_argument(
        "--json",
        dest="json",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Also write *_report.json. Default: on",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Resolve derived paths (also validates input exists)
    try:
        report_path, json_path, log_path = derive_output_paths(args.input)
    except FileNotFoundError:
        print(f"error: input file not found: {args.input}", file=sys.stderr)
        return 2

    logger = get_logger(
        "delivery_insights",
        level=args.log_level,
        console=not args.no_console,
        log_file=log_path,
    )
    logger.info("Input: %s (report: %s, log: %s)", args.input, report_path.name, log_path.name)

    try:
        objectives = get_objectives(strict=args.strict_env, logger=logger)
        logger.debug("Objectives: %s", objectives.to_dict())
    except EnvError as e:
        logger.error("Environment error: %s", e)
        return 2

    summary_env = None
    if args.summary:
        try:
            summary_env = get_summary_env(strict=args.strict_env)
        except EnvError as e:
            logger.error("Environment error: %s", e)
            return 2
        if summary_env is None:
            logger.warning("--summary requested but SUMMARY_API_URL/SUMMARY_API_KEY are not set; skipping.")
        else:
            quiet_loggers()

    try:
        reference_date = _parse_reference_date(args.reference_date)
    except ValueError:
        logger.error("--reference-date must be YYYY-MM-DD, got %r", args.reference_date)
        return 2

    if args.previous and not args.period:
        logger.warning("--previous has no effect without --period.")

    try:
        processor = ReportProcessor(
            logger,
            objectives=objectives,
            reference_date=reference_date,
            depot=args.depot,
            period=args.period,
            previous=args.previous,
            exclude_depots=args.exclude_depot,
        )
        processor.process(args.input, report_path, json_path if args.json else None)
    except FileNotFoundError as e:
        logger.error("Input missing: %s", e)
        return 2
    except Exception as e:
        logger.exception("Failed to build report: %s", e)
        return 1

    if summary_env is not None and processor.last_report is not None:
        from .api.summary import SummaryClient, SummaryError

        client = SummaryClient(summary_env.SUMMARY_API_URL, summary_env.SUMMARY_API_KEY, logger=logger)
        try:
            text = client.summarize(processor.last_report)
        except SummaryError as e:
            logger.warning("Summary unavailable: %s", e)
        else:
            summary_path = report_path.with_name(f"{args.input.stem}{SUMMARY_SUFFIX}")
            summary_path.write_text(text + "\n", encoding="utf-8")
            logger.info("Wrote summary → %s", summary_path)

    logger.info("Done: %s", report_path)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
