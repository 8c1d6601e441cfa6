"""Source document uploads: validation, local storage and status tracking."""

import secrets
import time
from pathlib import Path

from fastapi import UploadFile, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from medprep.core.app_exceptions import AppError, not_found
from medprep.core.config import DOCX_MIME, PDF_MIME, XLSX_MIME, Settings
from medprep.core.logging import get_logger
from medprep.models.question_bank import FileType, QuestionBank, QuestionBankStatus
from medprep.models.upload import FileUpload, UploadStatus
from medprep.services.validation import ValidationResult, sanitize_filename, validate_upload

logger = get_logger(__name__)

MIME_TO_FILE_TYPE = {
    PDF_MIME: FileType.PDF,
    DOCX_MIME: FileType.DOCX,
    XLSX_MIME: FileType.XLSX,
}

STATUS_MESSAGES = {
    UploadStatus.PENDING.value: "Upload received.",
    UploadStatus.UPLOADED.value: "File uploaded successfully. Processing will begin shortly.",
    UploadStatus.PROCESSING.value: "File is being processed.",
    UploadStatus.COMPLETED.value: "Processing complete. Questions are ready for practice.",
    UploadStatus.ERROR.value: "Processing failed.",
}


def new_upload_id() -> str:
    return f"upload_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


def _raise_invalid(result: ValidationResult) -> None:
    first = result.first
    raise AppError(
        status_code=status.HTTP_400_BAD_REQUEST,
        code=first.code,
        message=first.message,
        details=result.to_list(),
    )


def queue_for_processing(upload: FileUpload) -> None:
    # OCR extraction runs outside this service; only the hand-off is recorded
    logger.info(
        "Upload queued for OCR processing",
        extra={
            "user_id": upload.user_id,
            "upload_id": upload.id,
            "question_bank_id": str(upload.question_bank_id),
            "file_type": upload.file_type,
        },
    )


async def store_upload(
    db: Session,
    user_id: str,
    file: UploadFile | None,
    config: Settings,
) -> FileUpload:
    """
    Validate, store and register an uploaded document.

    Nothing is written to disk or the database until validation passes.

    Raises:
        AppError: 400 NO_FILE / INVALID_FILE_TYPE / FILE_TOO_LARGE / EMPTY_FILE
    """
    filename = file.filename if file is not None else None
    content_type = file.content_type if file is not None else None
    declared_size = getattr(file, "size", None) if file is not None else None

    result = validate_upload(
        filename, content_type, declared_size, config.UPLOAD_ALLOWED_MIME_TYPES, config.UPLOAD_MAX_BYTES
    )
    if not result.ok:
        _raise_invalid(result)

    content = await file.read(config.UPLOAD_MAX_BYTES + 1)
    result = validate_upload(
        filename, content_type, len(content), config.UPLOAD_ALLOWED_MIME_TYPES, config.UPLOAD_MAX_BYTES
    )
    if not result.ok:
        _raise_invalid(result)

    upload_id = new_upload_id()
    safe_name = sanitize_filename(filename)
    storage_dir = Path(config.UPLOAD_DIR)
    storage_dir.mkdir(parents=True, exist_ok=True)
    file_path = storage_dir / f"{upload_id}-{safe_name}"
    file_type = MIME_TO_FILE_TYPE[content_type].value

    with open(file_path, "wb") as f:
        f.write(content)

    try:
        bank = QuestionBank(
            user_id=user_id,
            name=Path(filename).stem or safe_name,
            description=f"Uploaded from {filename}",
            total_questions=0,
            status=QuestionBankStatus.UPLOADING.value,
            file_type=file_type,
            file_url=str(file_path),
        )
        db.add(bank)
        db.flush()

        upload = FileUpload(
            id=upload_id,
            user_id=user_id,
            question_bank_id=bank.id,
            file_name=safe_name,
            original_name=filename,
            file_size=len(content),
            file_type=file_type,
            mime_type=content_type,
            status=UploadStatus.UPLOADED.value,
            progress=0,
            file_path=str(file_path),
        )
        db.add(upload)
        db.commit()
    except Exception:
        db.rollback()
        file_path.unlink(missing_ok=True)
        raise

    db.refresh(upload)
    logger.info(
        "File uploaded",
        extra={"user_id": user_id, "upload_id": upload_id, "file_size": len(content)},
    )
    queue_for_processing(upload)
    return upload


def get_upload(db: Session, upload_id: str, user_id: str) -> FileUpload:
    upload = db.execute(
        select(FileUpload).where(FileUpload.id == upload_id, FileUpload.user_id == user_id)
    ).scalar_one_or_none()
    if upload is None:
        raise not_found("UPLOAD_NOT_FOUND", "Upload not found")
    return upload


def status_message(upload: FileUpload) -> str:
    return STATUS_MESSAGES.get(upload.status, f"Upload is {upload.status}.")
