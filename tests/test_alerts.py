"""Tests for overrun alert sinks."""
from datetime import date
import httpx
import pytest
from crewhours.domain.exceptions import AlertDispatchError
from crewhours.infra.alerts import LogAlertSink, OverrunAlert, WebhookAlertSink

ALERT = OverrunAlert(
    job_id=3, job_name="Lorie Scholten", branch=1, crew_leader="Alex Moreno",
    closing_date=date(2025, 1, 10), at_estimated_hours=5.0, total_hours_worked=8.0, hours_saved=-3.0,
)


def test_payload_shape():
    assert ALERT.to_payload() == {
        "job_id": 3, "job_name": "Lorie Scholten", "branch": 1, "crew_leader": "Alex Moreno",
        "closing_date": "2025-01-10", "at_estimated_hours": 5.0, "total_hours_worked": 8.0, "hours_saved": -3.0,
    }


def test_webhook_posts_one_batch(monkeypatch):
    calls = []

    def fake_post(url, json, timeout):
        calls.append((url, json, timeout))
        return httpx.Response(200, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx, "post", fake_post)
    WebhookAlertSink("https://hooks.example.test/overrun", timeout=2.0).send([ALERT, ALERT])
    [(url, body, timeout)] = calls
    assert url == "https://hooks.example.test/overrun"
    assert len(body["jobs"]) == 2
    assert timeout == 2.0


def test_webhook_failure_is_wrapped(monkeypatch):
    def fake_post(url, json, timeout):
        return httpx.Response(503, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx, "post", fake_post)
    with pytest.raises(AlertDispatchError):
        WebhookAlertSink("https://hooks.example.test/overrun").send([ALERT])


def test_log_sink_logs(caplog):
    LogAlertSink().send([ALERT])
    assert "Lorie Scholten" in caplog.text
