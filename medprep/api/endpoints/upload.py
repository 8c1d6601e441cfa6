"""Document upload endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from medprep.core.app_exceptions import AppError
from medprep.core.dependencies import CurrentUserDep, ServicesDep
from medprep.db.session import get_db
from medprep.schemas.upload import UploadResponse, UploadStatusResponse
from medprep.services.upload_service import get_upload, status_message, store_upload

router = APIRouter()


@router.post("", response_model=UploadResponse, response_model_by_alias=True)
async def upload_file(
    user: CurrentUserDep,
    services: ServicesDep,
    db: Annotated[Session, Depends(get_db)],
    file: Annotated[UploadFile | None, File()] = None,
) -> UploadResponse:
    """
    Upload a PDF, DOCX or XLSX question source (max 50 MB).

    The file is stored and a question bank is created in `uploading` state;
    extraction happens later.
    """
    upload = await store_upload(db, user.id, file, services.config)
    return UploadResponse(
        upload_id=upload.id,
        question_bank_id=upload.question_bank_id,
        file_name=upload.original_name,
        file_size=upload.file_size,
        file_type=upload.file_type,
        status=upload.status,
        message=status_message(upload),
    )


@router.get("", response_model=UploadStatusResponse, response_model_by_alias=True)
async def get_upload_status(
    user: CurrentUserDep,
    db: Annotated[Session, Depends(get_db)],
    upload_id: Annotated[str | None, Query(alias="uploadId")] = None,
) -> UploadStatusResponse:
    if not upload_id:
        raise AppError(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="UPLOAD_ID_REQUIRED",
            message="uploadId query parameter is required",
        )

    upload = get_upload(db, upload_id, user.id)
    return UploadStatusResponse(
        upload_id=upload.id,
        question_bank_id=upload.question_bank_id,
        status=upload.status,
        progress=upload.progress,
        message=status_message(upload),
        error=upload.error,
    )
