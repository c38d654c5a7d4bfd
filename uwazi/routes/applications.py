"""
API routes for applicant sessions: intake, processing and reset
"""
import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from ..dependencies import get_application_service
from ..exceptions import (
    ExtractionError,
    IntakeIncompleteError,
    InvalidStageError,
    ProgramNotFoundError,
    SessionNotFoundError,
)
from ..models import ApplicationView, CreateApplicationRequest, DocumentType, UploadedFile
from ..services.application_service import ApplicationService
from ..utils.validators import guess_mime_type, sanitize_filename, validate_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


def _http_error(e: Exception) -> HTTPException:
    """Translate a domain exception into an HTTP error"""
    if isinstance(e, (SessionNotFoundError, ProgramNotFoundError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, IntakeIncompleteError):
        return HTTPException(
            status_code=409,
            detail={"message": str(e), "missing_documents": e.missing}
        )
    if isinstance(e, InvalidStageError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ExtractionError):
        return HTTPException(status_code=e.status_code or 422, detail=e.message)
    logger.error(f"Unexpected application error: {e}")
    return HTTPException(status_code=500, detail="Internal server error")


@router.post("", response_model=ApplicationView, status_code=201)
async def create_application(
    request: CreateApplicationRequest,
    service: ApplicationService = Depends(get_application_service)
):
    """
    Start an application for a program
    """
    try:
        return service.create(request.program_id).view()
    except ProgramNotFoundError as e:
        raise _http_error(e)


@router.get("/{session_id}", response_model=ApplicationView)
async def get_application(session_id: str, service: ApplicationService = Depends(get_application_service)):
    try:
        return service.get(session_id).view()
    except SessionNotFoundError as e:
        raise _http_error(e)


@router.post("/{session_id}/program", response_model=ApplicationView)
async def select_program(
    session_id: str,
    request: CreateApplicationRequest,
    service: ApplicationService = Depends(get_application_service)
):
    """
    Select (or switch to) a program; any documents already uploaded are discarded
    """
    try:
        return service.select_program(session_id, request.program_id).view()
    except (SessionNotFoundError, ProgramNotFoundError) as e:
        raise _http_error(e)


@router.post("/{session_id}/documents", response_model=ApplicationView)
async def upload_documents(
    session_id: str,
    files: List[UploadFile] = File(..., description="Documents to classify"),
    service: ApplicationService = Depends(get_application_service)
):
    """
    Upload one or more documents; each is classified into a required-document slot
    """
    uploads = []
    errors = []
    for file in files:
        if not file.filename:
            raise HTTPException(status_code=400, detail="No filename provided")

        filename = sanitize_filename(file.filename)
        content = await file.read()
        upload = UploadedFile(
            filename=filename,
            mime_type=guess_mime_type(filename, file.content_type),
            content=content
        )
        reason = validate_upload(upload)
        if reason:
            errors.append(f"{filename}: {reason}")
        uploads.append(upload)

    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))

    try:
        session = await service.submit_files(session_id, uploads)
    except (SessionNotFoundError, InvalidStageError) as e:
        raise _http_error(e)

    logger.info(f"Session {session_id}: {len(uploads)} document(s) submitted")
    return session.view()


@router.delete("/{session_id}/documents/{document_type}", response_model=ApplicationView)
async def remove_document(
    session_id: str,
    document_type: DocumentType,
    service: ApplicationService = Depends(get_application_service)
):
    try:
        return service.remove_file(session_id, document_type).view()
    except (SessionNotFoundError, InvalidStageError) as e:
        raise _http_error(e)


@router.post("/{session_id}/process", response_model=ApplicationView)
async def process_application(
    session_id: str,
    as_of: Optional[date] = Query(None, description="Reference date for date-relative rules"),
    service: ApplicationService = Depends(get_application_service)
):
    """
    Extract facts from the identified documents, evaluate eligibility and issue a proof
    """
    try:
        session = await service.process(session_id, as_of=as_of)
    except Exception as e:
        raise _http_error(e)

    return session.view()


@router.post("/{session_id}/reset", response_model=ApplicationView)
async def reset_application(session_id: str, service: ApplicationService = Depends(get_application_service)):
    """
    Abandon the current attempt and return to program selection
    """
    try:
        return service.reset(session_id).view()
    except SessionNotFoundError as e:
        raise _http_error(e)
