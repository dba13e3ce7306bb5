import pytest
import requests

from delivery_insights.api.summary import SummaryClient, SummaryError, summary_payload
from delivery_insights.models import AggregatedStats, KpiRankings, Report, Section


class _Resp:
    def __init__(self, status_code=200, body=None, raises=None):
        self.status_code = status_code
        self._body = body
        self._raises = raises

    def json(self):
        if self._raises:
            raise self._raises
        return self._body


class _Transport:
    def __init__(self, resp=None, exc=None):
        self.resp = resp
        self.exc = exc
        self.calls = []

    def post(self, url, *, headers=None, json=None):
        self.calls.append((url, headers, json))
        if self.exc:
            raise self.exc
        return self.resp


def _report():
    stats = AggregatedStats(total_deliveries=10, success_rate=90.0)
    return Report(global_section=Section(stats=stats, kpi_rankings=KpiRankings()))


def test_summary_payload_carries_stats_and_rankings():
    payload = summary_payload(_report())
    assert payload["stats"]["totalDeliveries"] == 10
    assert payload["rankings"] == {"drivers": {}, "carriers": {}}


def test_summarize_posts_payload_with_bearer_key():
    transport = _Transport(_Resp(body={"summary": "  Bonne semaine.  "}))
    client = SummaryClient("http://svc/summary", "secret", transport)

    assert client.summarize(_report()) == "Bonne semaine."
    url, headers, body = transport.calls[0]
    assert url == "http://svc/summary"
    assert headers["Authorization"] == "Bearer secret"
    assert body["stats"]["successRate"] == 90.0


@pytest.mark.parametrize("transport", [
    _Transport(exc=requests.ConnectionError("down")),
    _Transport(_Resp(status_code=503, body={})),
    _Transport(_Resp(body=None, raises=ValueError("not json"))),
    _Transport(_Resp(body={"text": "wrong key"})),
    _Transport(_Resp(body={"summary": "   "})),
])
def test_summarize_failures_raise_summary_error(transport):
    with pytest.raises(SummaryError):
        SummaryClient("http://svc/summary", "secret", transport).summarize(_report())
