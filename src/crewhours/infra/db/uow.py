"""Unit of Work: one session per request or CLI command."""
from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from crewhours.domain.exceptions import PersistenceError
from crewhours.infra.db.engine import engine

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Owns the session for one operation.

    Writes go through :meth:`atomic`, which commits before returning so that
    side effects such as overrun alerts only ever see durable state. Leaving
    the context commits whatever reads or flushes remain, or rolls back on error.
    """

    def __init__(self) -> None:
        self._session: Session | None = None

    def __enter__(self) -> "UnitOfWork":
        self._session = Session(engine)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._session.commit()
            else:
                self._session.rollback()
        finally:
            self._session.close()
            self._session = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("UnitOfWork is not active; open it with a with-block")
        return self._session

    @contextmanager
    def atomic(self, action: str) -> Iterator[Session]:
        """Run one write step and commit it.

        Any error rolls the step back. Database errors surface as
        PersistenceError naming *action*; domain errors pass through unchanged.
        """
        session = self.session
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Could not %s; rolled back", action)
            raise PersistenceError(f"Could not {action}: {exc}") from exc
        except Exception:
            session.rollback()
            raise
