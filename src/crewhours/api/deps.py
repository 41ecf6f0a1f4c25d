"""FastAPI dependencies."""
from __future__ import annotations
from typing import Generator
from crewhours.infra.alerts import AlertSink, default_sink
from crewhours.infra.db.uow import UnitOfWork


def get_uow() -> Generator[UnitOfWork, None, None]:
    """Yield one UnitOfWork per request; commit/rollback in __exit__."""
    with UnitOfWork() as uow:
        yield uow


def get_alert_sink() -> AlertSink:
    return default_sink()
