from __future__ import annotations

import datetime as dt
import math
from collections import Counter
from typing import Any, Iterable, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from delivery_insights.io.schema import (
    CARRIERS,
    HEADER_MAPPING,
    NOT_AVAILABLE,
    STATUS_LABELS,
    TRUTHY_FLAGS,
    UNKNOWN,
    UNKNOWN_DEPOT,
    UNKNOWN_DRIVER,
    WAREHOUSE_DEPOT_MAP,
)
from delivery_insights.models import CompletionChannel, Delivery, DeliveryStatus

# Spreadsheet serial day 0 (Excel's 1900 leap-year bug already folded in)
EXCEL_EPOCH = dt.datetime(1899, 12, 30)
_DATE_INPUT_FORMAT = "%d/%m/%Y"
_DATE_OUTPUT_FORMAT = "%Y-%m-%d"


def _is_blank(val: Any) -> bool:
    """True if value is None/NaN/NaT/empty/"nan"/"none" (case-insensitive)."""
    if val is None or val is pd.NaT:
        return True
    if isinstance(val, float) and np.isnan(val):
        return True
    s = str(val).strip()
    return s == "" or s.lower() in {"nan", "none", "nat"}


def _to_float(val: Any) -> Optional[float]:
    """Permissive numeric coercion; None when the value isn't a finite number."""
    if _is_blank(val):
        return None
    if isinstance(val, (bool, np.bool_)):
        return float(val)
    try:
        out = float(val)
    except (TypeError, ValueError):
        try:
            out = float(str(val).strip().replace(",", "."))
        except ValueError:
            return None
    return out if math.isfinite(out) else None


def coerce_date(value: Any) -> str:
    """
    Normalize a date cell to yyyy-mm-dd.

    Accepts native dates/datetimes (pandas Timestamps included), spreadsheet
    serial days and dd/mm/yyyy strings. Anything else comes back as its raw
    string form; a missing value becomes "N/A".
    """
    if _is_blank(value):
        return NOT_AVAILABLE
    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)
    if isinstance(value, (dt.datetime, dt.date)):
        return value.strftime(_DATE_OUTPUT_FORMAT)
    if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, (bool, np.bool_)):
        if value > 1:
            try:
                return (EXCEL_EPOCH + dt.timedelta(days=float(value))).strftime(_DATE_OUTPUT_FORMAT)
            except (OverflowError, ValueError):
                pass
        return str(value)
    raw = str(value).strip()
    try:
        return dt.datetime.strptime(raw, _DATE_INPUT_FORMAT).strftime(_DATE_OUTPUT_FORMAT)
    except ValueError:
        return raw


def _is_iso_date(value: str) -> bool:
    try:
        dt.datetime.strptime(value, _DATE_OUTPUT_FORMAT)
    except ValueError:
        return False
    return True


def resolve_carrier(
    driver_name: Any,
    carriers: Sequence[tuple[str, Sequence[str]]] = CARRIERS,
) -> str:
    """Infer the carrier from driver naming conventions (suffix/prefix rules)."""
    if _is_blank(driver_name):
        return UNKNOWN
    name = str(driver_name).strip().upper()
    if name.endswith("ID LOG"):
        return "ID LOGISTICS"
    if name.startswith("STT"):
        return "Sous traitants"
    for carrier, suffixes in carriers:
        for suffix in suffixes:
            if suffix and name.endswith(suffix.upper()):
                return carrier
    return UNKNOWN


def resolve_depot(warehouse: Any, warehouse_map: Mapping[str, str] = WAREHOUSE_DEPOT_MAP) -> str:
    if _is_blank(warehouse):
        return UNKNOWN_DEPOT
    return warehouse_map.get(str(warehouse).strip(), UNKNOWN_DEPOT)


def coerce_status(value: Any) -> DeliveryStatus:
    if isinstance(value, DeliveryStatus):
        return value
    if _is_blank(value):
        return DeliveryStatus.PENDING
    return STATUS_LABELS.get(str(value).strip(), DeliveryStatus.PENDING)


def coerce_rating(value: Any) -> Optional[int]:
    """Whole stars in [1, 5], otherwise None."""
    num = _to_float(value)
    if num is None or not num.is_integer() or not 1 <= num <= 5:
        return None
    return int(num)


def coerce_flag(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if _is_blank(value):
        return False
    return str(value).strip().lower() in TRUTHY_FLAGS


def coerce_channel(value: Any) -> CompletionChannel:
    if not _is_blank(value) and str(value).strip().lower() == CompletionChannel.WEB.value:
        return CompletionChannel.WEB
    return CompletionChannel.MOBILE


def _text_or_none(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    return str(value).strip()


def _identifier(value: Any) -> str:
    if _is_blank(value):
        return NOT_AVAILABLE
    num = _to_float(value)
    # ids read from spreadsheets often arrive as 12345.0
    if num is not None and num.is_integer() and not isinstance(value, str):
        return str(int(num))
    return str(value).strip()


def map_headers(row: Mapping[Any, Any]) -> dict[str, Any]:
    """Rename known source columns to Delivery field names; drop the rest."""
    fields: dict[str, Any] = {}
    for raw_header, value in row.items():
        key = HEADER_MAPPING.get(str(raw_header).strip())
        if key is not None:
            fields[key] = value
    return fields


class Normalizer:
    """Turns loosely-typed spreadsheet rows into Delivery records, one per row."""

    def __init__(
        self,
        logger=None,
        *,
        carriers: Sequence[tuple[str, Sequence[str]]] = CARRIERS,
        warehouse_map: Mapping[str, str] = WAREHOUSE_DEPOT_MAP,
    ) -> None:
        self.logger = logger
        self.carriers = carriers
        self.warehouse_map = warehouse_map

    def _normalize(self, row: Any) -> tuple[Delivery, list[str]]:
        degraded: list[str] = []
        fields = map_headers(row) if isinstance(row, Mapping) else {}
        if not isinstance(row, Mapping):
            degraded.append("row")

        raw_date = fields.get("date")
        date = coerce_date(raw_date)
        if not _is_blank(raw_date) and not _is_iso_date(date):
            degraded.append("date")

        raw_status = fields.get("status")
        status = coerce_status(raw_status)
        if status is DeliveryStatus.PENDING and not _is_blank(raw_status) \
                and str(raw_status).strip() != DeliveryStatus.PENDING.value:
            degraded.append("status")

        sequence = _to_float(fields.get("sequence"))
        if sequence is None and not _is_blank(fields.get("sequence")):
            degraded.append("sequence")
        delay = _to_float(fields.get("delay_seconds"))
        if delay is None and not _is_blank(fields.get("delay_seconds")):
            degraded.append("delay_seconds")

        rating = coerce_rating(fields.get("rating"))
        if rating is None and not _is_blank(fields.get("rating")):
            degraded.append("rating")

        warehouse = _text_or_none(fields.get("warehouse")) or UNKNOWN
        depot = resolve_depot(warehouse, self.warehouse_map)
        raw_driver = _text_or_none(fields.get("driver")) or ""
        carrier = resolve_carrier(raw_driver, self.carriers)
        driver = f"{raw_driver or UNKNOWN_DRIVER} ({depot})"

        delivery = Delivery(
            date=date,
            status=status,
            task_id=_identifier(fields.get("task_id")),
            tour_id=_identifier(fields.get("tour_id")),
            sequence=max(0, int(sequence)) if sequence is not None else 0,
            warehouse=warehouse,
            driver=driver,
            depot=depot,
            carrier=carrier,
            delay_seconds=delay if delay is not None else 0.0,
            failure_reason=(
                _text_or_none(fields.get("failure_reason"))
                if status is DeliveryStatus.NOT_DELIVERED else None
            ),
            comment=_text_or_none(fields.get("comment")),
            rating=rating,
            forced_no_contact=coerce_flag(fields.get("forced_no_contact")),
            no_contact_reason=_text_or_none(fields.get("no_contact_reason")),
            forced_on_site=coerce_flag(fields.get("forced_on_site")),
            completed_by=coerce_channel(fields.get("completed_by")),
        )
        return delivery, degraded

    def normalize_row(self, row: Mapping[Any, Any]) -> Delivery:
        return self._normalize(row)[0]

    def normalize(self, rows: Iterable[Any]) -> list[Delivery]:
        deliveries: list[Delivery] = []
        degraded: Counter[str] = Counter()
        for row in rows:
            delivery, issues = self._normalize(row)
            deliveries.append(delivery)
            degraded.update(issues)

        if self.logger:
            self.logger.info("normalize: %d rows", len(deliveries))
            for field_name, count in sorted(degraded.items()):
                self.logger.debug(
                    "normalize: %d value(s) degraded to default for %s", count, field_name)
        return deliveries


def normalize_rows(rows: Iterable[Any], logger=None) -> list[Delivery]:
    """Functional entry point: Normalizer(logger).normalize(rows)."""
    return Normalizer(logger).normalize(rows)
