# leave_manager/worklogs/router.py
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from leave_manager import config
from leave_manager.auth.dependencies import get_current_user
from leave_manager.auth.guard import CurrentUser
from leave_manager.database import get_db
from leave_manager.results import to_response
from leave_manager.storage.blob_store import LocalBlobStore, get_blob_store
from leave_manager.worklogs import service

router = APIRouter(prefix="/api/worklogs", tags=["worklogs"])


@router.get("")
def list_worklogs(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return to_response(service.list_all(db, user))


@router.post("", status_code=201)
def upload_worklog(
    file: Optional[UploadFile] = File(None),
    signatureDataUrl: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    blobs: LocalBlobStore = Depends(get_blob_store),
    user: CurrentUser = Depends(get_current_user),
):
    if file is None:
        return to_response(service.upload(db, blobs, None, None, signatureDataUrl, user,
                                          max_bytes=config.MAX_UPLOAD_BYTES), status_code=201)
    # streamed from the spooled upload to disk, never read whole into memory
    try:
        result = service.upload(db, blobs, file.file, file.filename, signatureDataUrl, user,
                                max_bytes=config.MAX_UPLOAD_BYTES, size=file.size)
    finally:
        file.file.close()
    return to_response(result, status_code=201)


@router.put("/{worklog_id}/status")
def update_worklog_status(worklog_id: str, payload: Any = Body(None), db: Session = Depends(get_db),
                          user: CurrentUser = Depends(get_current_user)):
    return to_response(service.update_status(db, worklog_id, payload, user))
