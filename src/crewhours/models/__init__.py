"""Register every table mapper on import."""
from crewhours.models.core import SyncBatch, LedgerJobRow, RawShiftRecord, ConfirmedMatch
from crewhours.models.performance import Employee, EmployeeStatus, Job, Shift, JobSpecialShift

__all__ = [
    "SyncBatch",
    "LedgerJobRow",
    "RawShiftRecord",
    "ConfirmedMatch",
    "Employee",
    "EmployeeStatus",
    "Job",
    "Shift",
    "JobSpecialShift",
]
