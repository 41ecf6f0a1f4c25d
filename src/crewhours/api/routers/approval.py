"""Approval workflow endpoints."""
from fastapi import APIRouter, Depends
from crewhours.api.deps import get_alert_sink, get_uow
from crewhours.api.schemas.approval import (
    ApproveRequest, ApproveResult, PendingJobList, RejectRequest, RejectResult,
)
from crewhours.infra.alerts import AlertSink
from crewhours.infra.db.uow import UnitOfWork
from crewhours.services.approval_service import ApprovalService

router = APIRouter(prefix="/approvals", tags=["approvals"])


@router.get("/pending", response_model=PendingJobList)
def list_pending(branch_id: int | None = None, uow: UnitOfWork = Depends(get_uow)) -> PendingJobList:
    return ApprovalService(uow).list_pending(branch_id)


@router.post("/approve", response_model=ApproveResult)
def approve_jobs(
    payload: ApproveRequest,
    uow: UnitOfWork = Depends(get_uow),
    sink: AlertSink = Depends(get_alert_sink),
) -> ApproveResult:
    return ApprovalService(uow, alert_sink=sink).approve_jobs(payload)


@router.post("/reject", response_model=RejectResult)
def reject_shifts(payload: RejectRequest, uow: UnitOfWork = Depends(get_uow)) -> RejectResult:
    return ApprovalService(uow).reject_shifts(payload)
