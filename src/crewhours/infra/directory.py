"""Crew-member directory: lookup-or-create a person id from a free-text name."""
from __future__ import annotations
import logging
import time
from typing import Protocol
from sqlmodel import Session
from crewhours.domain.exceptions import DirectoryResolutionError
from crewhours.infra.db.repositories.employee_repository import EmployeeRepository
from crewhours.models.performance import EmployeeStatus
from crewhours.reconcile.matcher import DISAMBIGUATION_MIN_CONFIDENCE, best_scoring
from crewhours.reconcile.names import clean_person_name, looks_like_person, split_name

logger = logging.getLogger(__name__)


class Directory(Protocol):
    def resolve(self, name: str, branch_id: int | None, role: str = "crew_member") -> int:
        """Return a stable person id, creating a pending entry when unknown.

        Raises DirectoryResolutionError when the name cannot identify a person.
        """
        ...


class EmployeeDirectory:
    """Directory backed by the Employee table, sharing the caller's session."""

    def __init__(self, session: Session, min_confidence: int = DISAMBIGUATION_MIN_CONFIDENCE) -> None:
        self._repo = EmployeeRepository(session)
        self._min_confidence = min_confidence
        self._cache: dict[str, int] = {}

    def resolve(self, name: str, branch_id: int | None, role: str = "crew_member") -> int:
        cleaned = clean_person_name(name)
        if not looks_like_person(cleaned):
            raise DirectoryResolutionError(f"Invalid crew member name: {name!r}")

        cache_key = cleaned.lower()
        if cache_key in self._cache:
            return self._cache[cache_key]

        first, last = split_name(cleaned)
        employee = self._repo.find_by_name(first, last)
        if employee is None:
            self._warn_if_near_duplicate(cleaned)
            employee = self._repo.create(
                first_name=first,
                last_name=last,
                email=_pending_email(first, last),
                role=role,
                status=EmployeeStatus.PENDING,
                branch_id=branch_id,
            )
            logger.info("Created pending employee %r (id=%s)", cleaned, employee.id)

        self._cache[cache_key] = employee.id
        return employee.id

    def _warn_if_near_duplicate(self, cleaned: str) -> None:
        near = best_scoring(cleaned, self._repo.list_active(), key=lambda e: e.full_name)
        if near is not None and near.score >= self._min_confidence:
            logger.warning(
                "Possible duplicate employee: %r resembles %r (%d%%)",
                cleaned, near.candidate.full_name, near.score,
            )


def _pending_email(first: str, last: str) -> str:
    local = ".".join(p for p in (first.lower(), last.lower().replace(" ", ".")) if p)
    return f"{local}.{int(time.time() * 1000)}@pending.local"
