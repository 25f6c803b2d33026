"""
Bulk item upload endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_csv_upload
from app.domain.ingestion_errors import RequestRejectedError, StagingError
from app.domain.items import CommitMode
from app.domain.jobs import JobStatus
from app.schemas.uploads import UploadAcceptedResponse, UploadResultResponse, UploadStatusResponse
from app.services.ingestion_orchestrator_service import (
    IngestionOrchestratorService,
    get_ingestion_orchestrator_service,
)

router = APIRouter(prefix="/api/uploads", tags=["uploads"])

NOT_FOUND_STEP = "NOT_FOUND"


@router.post(
    "",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=UploadAcceptedResponse,
)
def upload_items(
    file: UploadFile = Depends(get_csv_upload),
    mode: CommitMode = Query(default=CommitMode.CHUNKED, description="ATOMIC or CHUNKED"),
    orchestrator: IngestionOrchestratorService = Depends(get_ingestion_orchestrator_service),
) -> UploadAcceptedResponse:
    """
    Stage an item CSV and process it in the background.
    """

    try:
        accepted = orchestrator.accept_upload(
            stream=file.file,
            file_name=file.filename or "upload.csv",
            mode=mode,
        )
    except RequestRejectedError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StagingError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Upload initiation failed: {exc}",
        ) from exc
    finally:
        file.file.close()

    return UploadAcceptedResponse(
        job_id=accepted.job_id,
        step=accepted.status.step.value,
        message=accepted.status.message,
        status_url=f"{router.prefix}/status?job_id={accepted.job_id}",
    )


@router.get(
    "/status",
    response_model=UploadStatusResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": UploadStatusResponse}},
)
def get_upload_status(
    job_id: UUID = Query(..., description="Job id returned by the upload endpoint"),
    orchestrator: IngestionOrchestratorService = Depends(get_ingestion_orchestrator_service),
) -> UploadStatusResponse | JSONResponse:
    job_status = orchestrator.get_status(job_id)
    if job_status is None:
        not_found = UploadStatusResponse(
            job_id=job_id,
            step=NOT_FOUND_STEP,
            message=f"Upload job not found: {job_id}",
        )
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=not_found.model_dump(mode="json"),
        )
    return _to_status_response(job_status)


def _to_status_response(job_status: JobStatus) -> UploadStatusResponse:
    result = job_status.result
    return UploadStatusResponse(
        job_id=job_status.job_id,
        mode=job_status.mode.value,
        step=job_status.step.value,
        message=job_status.message,
        rows_processed=job_status.rows_processed,
        rows_total=job_status.rows_total,
        updated_at=job_status.updated_at,
        result=(
            UploadResultResponse(
                processed=result.processed,
                inserted=result.inserted,
                failed=result.failed,
                error_report_path=result.error_report_path,
                summary=result.summary,
            )
            if result is not None
            else None
        ),
    )
