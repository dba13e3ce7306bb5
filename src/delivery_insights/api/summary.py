from __future__ import annotations

import logging
from typing import Any, Optional

from delivery_insights.models import Report

from .transport import RequestsTransport


class SummaryError(RuntimeError):
    """Raised when the summary service cannot produce a summary."""


def summary_payload(report: Report) -> dict[str, Any]:
    """Request body: global statistics plus the global KPI rankings."""
    section = report.global_section
    return {
        "stats": section.stats.to_dict(),
        "rankings": section.kpi_rankings.to_dict(),
    }


class SummaryClient:
    """Client for the text-summary service.

    POSTs the report statistics as JSON with a bearer key and expects
    `{"summary": "<text>"}` back. Transport failures, error statuses and
    malformed bodies all surface as SummaryError.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        transport: Optional[RequestsTransport] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.transport = transport or RequestsTransport()
        self.logger: logging.Logger = logger or logging.getLogger(
            "delivery_insights.api.summary"
        )

    def summarize(self, report: Report) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        self.logger.debug("Requesting summary from %s", self.url)

        try:
            resp = self.transport.post(self.url, headers=headers, json=summary_payload(report))
        except Exception as ex:
            raise SummaryError(f"Summary request failed: {ex}") from ex

        status = getattr(resp, "status_code", None)
        if status is None or status >= 400:
            raise SummaryError(f"Summary service returned status={status}")

        try:
            body = resp.json()
        except ValueError as ex:
            raise SummaryError("Summary service returned a non-JSON body") from ex

        summary = body.get("summary") if isinstance(body, dict) else None
        if not isinstance(summary, str) or not summary.strip():
            raise SummaryError("Summary service response has no 'summary' text")

        self.logger.debug("Summary received (%d chars, status=%s)", len(summary), status)
        return summary.strip()
