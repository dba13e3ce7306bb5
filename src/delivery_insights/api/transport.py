from __future__ import annotations

from typing import Any, Dict, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

USER_AGENT = "delivery-insights"
RETRY_STATUSES = (429, 500, 502, 503, 504)


def _retry_policy(max_retries: int, backoff_factor: float) -> Retry:
    # summary requests are read-only, so POST is safe to replay
    return Retry(
        total=max_retries,
        connect=max_retries,
        read=max_retries,
        status=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"POST"}),
        raise_on_status=False,
    )


class RequestsTransport:
    """requests.Session with retry/backoff mounted for http and https."""

    def __init__(self, timeout: float = 60, max_retries: int = 3, backoff_factor: float = 0.5) -> None:
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT

        adapter = HTTPAdapter(max_retries=_retry_policy(max_retries, backoff_factor))
        for prefix in ("https://", "http://"):
            self.session.mount(prefix, adapter)

    def post(self, url: str, *, headers: Optional[Dict[str, str]] = None, json: Any = None) -> requests.Response:
        return self.session.post(url, headers=headers, json=json, timeout=self.timeout)
