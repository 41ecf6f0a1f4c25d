"""Shared test fixtures.

  use_test_engine:  redirects UoW + infra layer to a temp-file SQLite DB.
  client:           FastAPI TestClient wired to the test engine.
  export_csv:       builds a time-clock export buffer from row tuples.
  make_batch:       a batch with ledger rows and an optional uploaded export.
  confirm:          records confirmed label matches for a batch.
"""
import os
import pytest
from sqlmodel import SQLModel, create_engine

HEADER = ("Date", "Job", "Name", "Tags", "Regular Time", "OT", "2OT", "PTO", "Total Work Time", "Notes")


def pytest_configure(config):
    """Keep crewhours.db from creating ./data during collection."""
    os.environ.setdefault("DATABASE_URL", "sqlite://")


@pytest.fixture
def use_test_engine(tmp_path, monkeypatch):
    """Monkeypatch infra/db engine references to an isolated temp-file SQLite DB."""
    db_path = tmp_path / "test_crewhours.db"
    test_engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False}
    )

    import crewhours.models  # noqa: F401  # register all ORM mappers
    SQLModel.metadata.create_all(test_engine)

    monkeypatch.setattr("crewhours.infra.db.engine.engine", test_engine)
    monkeypatch.setattr("crewhours.infra.db.uow.engine", test_engine)

    yield test_engine

    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def client(use_test_engine):
    """FastAPI TestClient backed by the isolated test engine."""
    from fastapi.testclient import TestClient
    from crewhours.api.app import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c


@pytest.fixture
def export_csv():
    """Build a CSV export: ``export_csv(("01/06/2025", "Job", "Name", ...), ...)``.

    Rows shorter than the header are padded with empty cells.
    """
    def _build(*rows, preamble=("Timesheet report",)):
        lines = [",".join(preamble)] if preamble else []
        lines.append(",".join(HEADER))
        for row in rows:
            cells = list(row) + [""] * (len(HEADER) - len(row))
            lines.append(",".join(f'"{c}"' if "," in c else c for c in cells))
        return ("\n".join(lines) + "\n").encode("utf-8")
    return _build


class RecordingSink:
    def __init__(self) -> None:
        self.calls: list[list] = []

    def send(self, alerts) -> None:
        self.calls.append(list(alerts))


class FailingSink:
    def send(self, alerts) -> None:
        from crewhours.domain.exceptions import AlertDispatchError
        raise AlertDispatchError("webhook unreachable")


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture
def make_batch(use_test_engine):
    """Create a batch with ledger rows and (optionally) an uploaded export via the services."""
    from crewhours.api.schemas.batches import BatchCreate, LedgerRowIn, LedgerRowsReplace
    from crewhours.infra.db.uow import UnitOfWork
    from crewhours.services.batch_service import BatchService
    from crewhours.services.ingest_service import IngestService

    def _make(ledger_rows, export=None, branch_id=1):
        with UnitOfWork() as uow:
            batch = BatchService(uow).create_batch(BatchCreate(branch_id=branch_id, branch_name="Denver"))
            rows = BatchService(uow).replace_ledger_rows(
                batch.id,
                LedgerRowsReplace(rows=[LedgerRowIn(row_number=i, **r) for i, r in enumerate(ledger_rows, start=2)]),
            )
            if export is not None:
                IngestService(uow).ingest_export(batch.id, export)
        return batch.id, [r.id for r in rows.items]
    return _make


@pytest.fixture
def confirm(use_test_engine):
    """Confirm ``{raw_label: ledger_row_id}`` for a batch."""
    from crewhours.api.schemas.matches import ConfirmRequest, MatchConfirmation
    from crewhours.infra.db.uow import UnitOfWork
    from crewhours.services.matching_service import MatchingService

    def _confirm(batch_id, mapping):
        with UnitOfWork() as uow:
            return MatchingService(uow).confirm_matches(
                batch_id,
                ConfirmRequest(matches=[
                    MatchConfirmation(raw_label=label, ledger_row_id=row_id) for label, row_id in mapping.items()
                ]),
            )
    return _confirm
