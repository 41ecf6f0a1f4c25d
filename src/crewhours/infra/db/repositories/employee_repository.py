"""Repository for Employee records backing the default directory."""
from __future__ import annotations
from sqlalchemy import func
from sqlmodel import Session, select
from crewhours.models.performance import Employee


class EmployeeRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def get_by_id(self, employee_id: int) -> Employee | None:
        return self._s.get(Employee, employee_id)

    def find_by_name(self, first_name: str, last_name: str) -> Employee | None:
        stmt = select(Employee).where(
            func.lower(Employee.first_name) == first_name.lower(),
            func.lower(Employee.last_name) == last_name.lower(),
            Employee.is_deleted == False,  # noqa: E712
        )
        return self._s.exec(stmt.order_by(Employee.id)).first()

    def list_active(self) -> list[Employee]:
        stmt = select(Employee).where(Employee.is_deleted == False).order_by(Employee.id)  # noqa: E712
        return list(self._s.exec(stmt).all())

    def create(self, **fields) -> Employee:
        employee = Employee(**fields)
        self._s.add(employee)
        self._s.flush()
        return employee
