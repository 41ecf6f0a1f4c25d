"""Time-clock export upload."""
from fastapi import APIRouter, Depends, UploadFile
from crewhours.api.deps import get_uow
from crewhours.api.schemas.exports import IngestResult
from crewhours.infra.db.uow import UnitOfWork
from crewhours.services.ingest_service import IngestService

router = APIRouter(prefix="/batches/{batch_id}/exports", tags=["exports"])


@router.post("", response_model=IngestResult, status_code=201)
async def upload_export(
    batch_id: str,
    file: UploadFile,
    uow: UnitOfWork = Depends(get_uow),
) -> IngestResult:
    content = await file.read()
    return IngestService(uow).ingest_export(batch_id, content, filename=file.filename)
