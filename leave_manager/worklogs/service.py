# leave_manager/worklogs/service.py
"""
Work-log submissions: an uploaded file plus the uploader's signature.

    (upload) -> Pending <-> Approved | Rejected

Unlike leave requests there is no terminal-state protection; reviewers may
flip a work log's status freely.
"""
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, BinaryIO, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leave_manager.auth.guard import CurrentUser, require
from leave_manager.auth.roles import ALL_ROLES, Role
from leave_manager.config import MAX_UPLOAD_BYTES
from leave_manager.database import storage_errors_as_results
from leave_manager.results import Err, ErrorKind, Ok, Result, validation_error
from leave_manager.schemas.validators import is_signature, validate_model
from leave_manager.schemas.worklog_schema import WorklogStatus, WorklogStatusSchema
from leave_manager.storage.blob_store import LocalBlobStore
from leave_manager.users.models import User
from leave_manager.worklogs.models import WorkLog

log = logging.getLogger(__name__)


def serialize_worklog(w: WorkLog, uploader_username=None, uploader_name=None) -> dict:
    data = {
        "id": w.id,
        "uploaderId": w.uploader_id,
        "fileName": w.file_name,
        "filePath": w.file_path,
        "signature": w.signature,
        "status": w.status,
        "createdAt": w.created_at,
    }
    if uploader_username is not None or uploader_name is not None:
        data["uploaderUsername"] = uploader_username
        data["uploaderName"] = uploader_name
    return data


def _iso_now() -> str:
    # 2025-01-10T08:30:00.123Z, sorts lexicographically
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


UPLOAD_ROLES = ALL_ROLES


def _remaining_size(fileobj: BinaryIO) -> int:
    pos = fileobj.tell()
    fileobj.seek(0, os.SEEK_END)
    end = fileobj.tell()
    fileobj.seek(pos)
    return end - pos


def upload(db: Session, blobs: LocalBlobStore, fileobj: Optional[BinaryIO], file_name: Optional[str],
           signature: Any, caller: Optional[CurrentUser],
           max_bytes: int = MAX_UPLOAD_BYTES, size: Optional[int] = None) -> Result:
    """
    Validate, stream the file into the blob store, then insert the row.
    The size is checked before any byte is read; nothing is written when
    validation fails, and the stored file is removed if the insert fails.
    Empty files are accepted; only a missing file part is rejected.
    """
    allowed = require(caller, UPLOAD_ROLES)
    if not allowed.ok:
        return allowed

    errors = {}
    if fileobj is None:
        errors["file"] = ["file is required"]
    else:
        if size is None:
            size = _remaining_size(fileobj)
        if size > max_bytes:
            errors["file"] = [f"file exceeds {max_bytes} bytes"]
    if not is_signature(signature):
        errors["signatureDataUrl"] = ["signature must be a data:image/png or data:image/jpeg base64 URL"]
    if errors:
        if "file" in errors and fileobj is not None:
            log.warning("Rejected oversized work log upload from user %s (%s bytes)", caller.id, size)
        return validation_error(errors)

    original_name = file_name or "worklog"
    try:
        reference = blobs.save(fileobj, original_name)
    except OSError:
        log.exception("Failed to store work log upload %s for user %s", original_name, caller.id)
        return Err(ErrorKind.INTERNAL, "Internal error")

    worklog = WorkLog(
        id=str(uuid.uuid4()),
        uploader_id=caller.id,
        file_name=original_name,
        file_path=reference,
        signature=signature,
        status=WorklogStatus.PENDING.value,
        created_at=_iso_now(),
    )
    try:
        db.add(worklog)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        blobs.delete(reference)
        log.exception("Failed to persist work log %s; removed stored file", reference)
        return Err(ErrorKind.INTERNAL, "Internal error")

    log.info("Work log %s uploaded by user %s (%s)", worklog.id, caller.id, reference)
    return Ok({"id": worklog.id, "filePath": reference})


LIST_ROLES = (Role.MANAGER, Role.ADMIN)


@storage_errors_as_results
def list_all(db: Session, caller: Optional[CurrentUser]) -> Result:
    allowed = require(caller, LIST_ROLES)
    if not allowed.ok:
        return allowed
    rows = (
        db.query(WorkLog, User.username, User.name)
        .outerjoin(User, User.id == WorkLog.uploader_id)
        .order_by(WorkLog.created_at.desc())
        .all()
    )
    return Ok([serialize_worklog(w, username, name) for w, username, name in rows])


UPDATE_STATUS_ROLES = (Role.MANAGER, Role.ADMIN)


@storage_errors_as_results
def update_status(db: Session, worklog_id: str, payload: Any, caller: Optional[CurrentUser]) -> Result:
    allowed = require(caller, UPDATE_STATUS_ROLES)
    if not allowed.ok:
        return allowed

    parsed = validate_model(WorklogStatusSchema, payload)
    if not parsed.ok:
        return parsed

    worklog = db.get(WorkLog, worklog_id)
    if worklog is None:
        return Err(ErrorKind.NOT_FOUND, "Not found")

    worklog.status = parsed.value.status.value
    db.commit()
    db.refresh(worklog)
    log.info("Work log %s status -> %s by user %s", worklog_id, worklog.status, caller.id)
    return Ok(serialize_worklog(worklog))
