# leave_manager/leaves/service.py
"""
Leave request lifecycle.

    (create) -> Pending -> Approved | Rejected | Canceled

Every function takes the SQLAlchemy session first and the authenticated caller
last, runs the role check before touching storage, and returns Ok/Err.
Returned records are plain dicts; re-fetch to see later changes.
"""
import logging
import uuid
from calendar import monthrange
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from leave_manager.auth.guard import CurrentUser, require
from leave_manager.auth.roles import ALL_ROLES, Role
from leave_manager.database import storage_errors_as_results
from leave_manager.leaves.models import LeaveRequest
from leave_manager.results import Err, ErrorKind, Ok, Result
from leave_manager.schemas.leave_schema import (
    ApproveSchema, RequestStatus, StatusUpdateSchema, validate_leave_payload,
)
from leave_manager.schemas.validators import parse_iso_date, validate_model

log = logging.getLogger(__name__)

APPROVED = RequestStatus.APPROVED.value


# -----------------------
# Serializer (dates as YYYY-MM-DD)
# -----------------------
def _safe_iso(value):
    """Return YYYY-MM-DD for date/datetime-like values, else string or None."""
    if value is None:
        return None
    if hasattr(value, "year") and hasattr(value, "month") and hasattr(value, "day"):
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
    return str(value)


def serialize_request(leave: LeaveRequest) -> dict:
    return {
        "requestId": leave.request_id,
        "requesterId": leave.requester_id,
        "dateRequested": _safe_iso(leave.date_requested),
        "empId": leave.emp_id,
        "name": leave.name,
        "dept": leave.dept,
        "position": leave.position,
        "leaveType": leave.leave_type,
        "startDate": _safe_iso(leave.start_date),
        "endDate": _safe_iso(leave.end_date),
        "note": leave.note or "",
        "handoverPerson": leave.handover_person,
        "contact": leave.contact,
        "status": leave.status,
        "requesterSignature": leave.requester_signature,
        "approverSignature": leave.approver_signature,
        "approverId": leave.approver_id,
        "approvedAt": leave.approved_at,
    }


def one_month_back(today: date) -> date:
    """Same day of the previous month, clamped to that month's length (03-31 -> 02-28)."""
    if today.month == 1:
        year, month = today.year - 1, 12
    else:
        year, month = today.year, today.month - 1
    return date(year, month, min(today.day, monthrange(year, month)[1]))


def _now_stamp() -> str:
    return datetime.now().strftime("%Y-%m-%dT%H:%M:%S")


def _ordered(query):
    return query.order_by(LeaveRequest.date_requested.desc())


# -----------------------
# Operations
# -----------------------
SUBMIT_ROLES = (Role.EMPLOYEE, Role.ADMIN)


@storage_errors_as_results
def submit(db: Session, payload: Any, caller: Optional[CurrentUser]) -> Result:
    """
    Create a Pending request owned by the caller.
    All field problems are reported together; the signature is mandatory.
    """
    allowed = require(caller, SUBMIT_ROLES)
    if not allowed.ok:
        return allowed

    parsed = validate_leave_payload(payload)
    if not parsed.ok:
        return parsed
    data = parsed.value

    leave = LeaveRequest(
        request_id=str(uuid.uuid4()),
        requester_id=caller.id,
        date_requested=parse_iso_date(data.dateRequested),
        emp_id=data.empId,
        name=data.name,
        dept=data.dept.value,
        position=data.position,
        leave_type=data.leaveType.value,
        start_date=parse_iso_date(data.startDate),
        end_date=parse_iso_date(data.endDate),
        note=data.note or "",
        handover_person=data.handoverPerson,
        contact=data.contact,
        status=RequestStatus.PENDING.value,
        requester_signature=data.signatureDataUrl,
    )
    db.add(leave)
    db.commit()
    db.refresh(leave)

    log.info("Leave request %s submitted by user %s (%s %s..%s)",
             leave.request_id, caller.id, leave.leave_type, leave.start_date, leave.end_date)
    return Ok(serialize_request(leave))


LIST_ROLES = ALL_ROLES


@storage_errors_as_results
def list_all(db: Session, caller: Optional[CurrentUser]) -> Result:
    allowed = require(caller, LIST_ROLES)
    if not allowed.ok:
        return allowed
    items = _ordered(db.query(LeaveRequest)).all()
    return Ok([serialize_request(l) for l in items])


LIST_MINE_ROLES = ALL_ROLES


@storage_errors_as_results
def list_mine(db: Session, caller: Optional[CurrentUser]) -> Result:
    allowed = require(caller, LIST_MINE_ROLES)
    if not allowed.ok:
        return allowed
    items = _ordered(db.query(LeaveRequest).filter(LeaveRequest.requester_id == caller.id)).all()
    return Ok([serialize_request(l) for l in items])


LIST_RECENT_ROLES = (Role.MANAGER, Role.HR, Role.ADMIN)


@storage_errors_as_results
def list_recent(db: Session, caller: Optional[CurrentUser], today: Optional[date] = None) -> Result:
    """Requests with dateRequested on or after the same day last month."""
    allowed = require(caller, LIST_RECENT_ROLES)
    if not allowed.ok:
        return allowed
    cutoff = one_month_back(today or date.today())
    items = _ordered(db.query(LeaveRequest).filter(LeaveRequest.date_requested >= cutoff)).all()
    return Ok([serialize_request(l) for l in items])


UPDATE_STATUS_ROLES = (Role.MANAGER, Role.ADMIN)


@storage_errors_as_results
def update_status(db: Session, request_id: str, payload: Any, caller: Optional[CurrentUser]) -> Result:
    """
    Overwrite the status of a request that is not yet Approved.
    Approved requests only change through approve_with_signature, so this
    returns Conflict for them instead of silently dropping the approval.
    """
    allowed = require(caller, UPDATE_STATUS_ROLES)
    if not allowed.ok:
        return allowed

    leave = db.get(LeaveRequest, request_id)
    if leave is None:
        return Err(ErrorKind.NOT_FOUND, "Not found")
    if leave.status == APPROVED:
        return Err(ErrorKind.CONFLICT, "Already approved")

    parsed = validate_model(StatusUpdateSchema, payload)
    if not parsed.ok:
        return parsed
    new_status = parsed.value.status.value

    # conditional write: loses cleanly against a concurrent approval
    res = db.execute(
        update(LeaveRequest)
        .where(LeaveRequest.request_id == request_id, LeaveRequest.status != APPROVED)
        .values({LeaveRequest.status: new_status})
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        db.rollback()
        return Err(ErrorKind.CONFLICT, "Already approved")
    db.commit()

    db.refresh(leave)
    log.info("Leave request %s status -> %s by user %s", request_id, new_status, caller.id)
    return Ok(serialize_request(leave))


APPROVE_ROLES = (Role.MANAGER, Role.ADMIN)


@storage_errors_as_results
def approve_with_signature(db: Session, request_id: str, payload: Any,
                           caller: Optional[CurrentUser]) -> Result:
    """
    Approve and record the approver's signature, id and timestamp in one UPDATE.
    A second approval of the same request is a Conflict, not a no-op.
    """
    allowed = require(caller, APPROVE_ROLES)
    if not allowed.ok:
        return allowed

    leave = db.get(LeaveRequest, request_id)
    if leave is None:
        return Err(ErrorKind.NOT_FOUND, "Not found")
    if leave.status == APPROVED:
        return Err(ErrorKind.CONFLICT, "Already approved")

    parsed = validate_model(ApproveSchema, payload)
    if not parsed.ok:
        return parsed

    res = db.execute(
        update(LeaveRequest)
        .where(LeaveRequest.request_id == request_id, LeaveRequest.status != APPROVED)
        .values({
            LeaveRequest.status: APPROVED,
            LeaveRequest.approver_signature: parsed.value.signatureDataUrl,
            LeaveRequest.approver_id: caller.id,
            LeaveRequest.approved_at: _now_stamp(),
        })
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        db.rollback()
        log.warning("Concurrent approval lost for request %s (user %s)", request_id, caller.id)
        return Err(ErrorKind.CONFLICT, "Already approved")
    db.commit()

    db.refresh(leave)
    log.info("Leave request %s approved by user %s", request_id, caller.id)
    return Ok(serialize_request(leave))


SIGNATURE_ROLES = ALL_ROLES


@storage_errors_as_results
def get_signature(db: Session, request_id: str, caller: Optional[CurrentUser]) -> Result:
    allowed = require(caller, SIGNATURE_ROLES)
    if not allowed.ok:
        return allowed
    leave = db.get(LeaveRequest, request_id)
    if leave is None or not leave.requester_signature:
        return Err(ErrorKind.NOT_FOUND, "No signature")
    return Ok(leave.requester_signature)
