"""Overrun alert sinks. Delivery is best-effort: callers log failures and move on."""
from __future__ import annotations
import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Protocol, Sequence
import httpx
from crewhours.domain.exceptions import AlertDispatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverrunAlert:
    job_id: int
    job_name: str
    branch: int
    crew_leader: str | None
    closing_date: date | None
    at_estimated_hours: float
    total_hours_worked: float
    hours_saved: float

    def to_payload(self) -> dict:
        payload = asdict(self)
        payload["closing_date"] = self.closing_date.isoformat() if self.closing_date else None
        return payload


class AlertSink(Protocol):
    def send(self, alerts: Sequence[OverrunAlert]) -> None:
        """Deliver one batch. Raises AlertDispatchError on failure."""
        ...


class WebhookAlertSink:
    """POST the batch as JSON to a webhook URL."""

    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self._url = url
        self._timeout = timeout

    def send(self, alerts: Sequence[OverrunAlert]) -> None:
        body = {"jobs": [a.to_payload() for a in alerts]}
        try:
            resp = httpx.post(self._url, json=body, timeout=self._timeout)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise AlertDispatchError(f"Overrun webhook failed: {exc}") from exc
        logger.info("Sent %d overrun alert(s) to webhook", len(alerts))


class LogAlertSink:
    """Fallback when no webhook is configured."""

    def send(self, alerts: Sequence[OverrunAlert]) -> None:
        for alert in alerts:
            logger.warning(
                "Overrun on job %s %r: %.2fh worked vs %.2fh estimated",
                alert.job_id, alert.job_name, alert.total_hours_worked, alert.at_estimated_hours,
            )


def default_sink() -> AlertSink:
    from crewhours.config import settings
    if settings.OVERRUN_ALERT_WEBHOOK_URL is not None:
        return WebhookAlertSink(
            settings.OVERRUN_ALERT_WEBHOOK_URL.get_secret_value(),
            timeout=settings.ALERT_TIMEOUT_SECONDS,
        )
    return LogAlertSink()
