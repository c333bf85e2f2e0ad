"""
Tests for the leave request lifecycle.

Verifies:
- Submission binds ownership to the caller and starts Pending
- "mine" isolation
- Recent window (one calendar month)
- Approval with signature is single-shot, also under a race
- Generic status updates never move a request out of Approved
"""
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from leave_manager.bootstrap import init_db
from leave_manager.leaves import service
from leave_manager.leaves.models import LeaveRequest
from leave_manager.results import ErrorKind

SIGNATURE = "data:image/png;base64,AAAA"
MANAGER_SIGNATURE = "data:image/jpeg;base64,/9j/BBBB"


def _submit(db, callers, leave_payload, who="employee", **overrides):
    result = service.submit(db, leave_payload(**overrides), callers[who])
    assert result.ok, result
    return result.value


class TestSubmit:
    def test_submit_then_list_mine(self, db, callers, leave_payload):
        record = _submit(db, callers, leave_payload)

        mine = service.list_mine(db, callers["employee"]).value

        assert [r["requestId"] for r in mine] == [record["requestId"]]
        assert mine[0]["status"] == "Pending"
        assert mine[0]["requesterId"] == callers["employee"].id

    def test_client_cannot_choose_owner_or_status(self, db, callers, leave_payload):
        record = _submit(db, callers, leave_payload, requesterId="someone-else", status="Approved")
        assert record["requesterId"] == callers["employee"].id
        assert record["status"] == "Pending"
        assert record["approverId"] is None
        assert record["approverSignature"] is None
        assert record["approvedAt"] is None

    def test_admin_may_submit(self, db, callers, leave_payload):
        record = _submit(db, callers, leave_payload, who="admin")
        assert record["requesterId"] == callers["admin"].id

    def test_invalid_payload_persists_nothing(self, db, callers, leave_payload):
        result = service.submit(db, leave_payload(startDate="2025-01-12", endDate="2025-01-10"),
                                callers["employee"])
        assert result.kind == ErrorKind.VALIDATION
        assert "endDate" in result.detail["fieldErrors"]
        assert db.query(LeaveRequest).count() == 0

    def test_signature_is_stored(self, db, callers, leave_payload):
        record = _submit(db, callers, leave_payload)
        assert record["requesterSignature"] == SIGNATURE
        assert service.get_signature(db, record["requestId"], callers["hr"]).value == SIGNATURE


class TestListing:
    def test_list_all_newest_first(self, db, callers, leave_payload):
        _submit(db, callers, leave_payload, dateRequested="2025-01-01")
        _submit(db, callers, leave_payload, who="employee2", dateRequested="2025-03-01")
        _submit(db, callers, leave_payload, dateRequested="2025-02-01")

        rows = service.list_all(db, callers["hr"]).value

        assert [r["dateRequested"] for r in rows] == ["2025-03-01", "2025-02-01", "2025-01-01"]

    def test_list_mine_isolation(self, db, callers, leave_payload):
        for who in ("employee", "employee2", "admin", "employee2"):
            _submit(db, callers, leave_payload, who=who)

        for who in ("employee", "employee2", "admin", "manager"):
            mine = service.list_mine(db, callers[who]).value
            assert all(r["requesterId"] == callers[who].id for r in mine)

        assert len(service.list_mine(db, callers["employee2"]).value) == 2
        assert service.list_mine(db, callers["manager"]).value == []

    def test_list_requires_caller(self, db):
        assert service.list_all(db, None).kind == ErrorKind.UNAUTHORIZED
        assert service.list_mine(db, None).kind == ErrorKind.UNAUTHORIZED

    @pytest.mark.parametrize("today,expected_cutoff", [
        (date(2025, 3, 15), date(2025, 2, 15)),
        (date(2025, 3, 31), date(2025, 2, 28)),
        (date(2024, 3, 31), date(2024, 2, 29)),
        (date(2025, 1, 10), date(2024, 12, 10)),
    ])
    def test_one_month_back(self, today, expected_cutoff):
        assert service.one_month_back(today) == expected_cutoff

    def test_list_recent_window(self, db, callers, leave_payload):
        _submit(db, callers, leave_payload, dateRequested="2025-02-27")
        _submit(db, callers, leave_payload, dateRequested="2025-02-28")
        _submit(db, callers, leave_payload, dateRequested="2025-03-31")

        rows = service.list_recent(db, callers["manager"], today=date(2025, 3, 31)).value

        assert [r["dateRequested"] for r in rows] == ["2025-03-31", "2025-02-28"]

    def test_list_recent_roles(self, db, callers):
        assert service.list_recent(db, callers["hr"]).ok
        assert service.list_recent(db, callers["admin"]).ok
        assert service.list_recent(db, callers["employee"]).kind == ErrorKind.FORBIDDEN


class TestApproveWithSignature:
    def test_approve_then_conflict(self, db, callers, leave_payload):
        record = _submit(db, callers, leave_payload)

        first = service.approve_with_signature(
            db, record["requestId"], {"signatureDataUrl": MANAGER_SIGNATURE}, callers["manager"])
        second = service.approve_with_signature(
            db, record["requestId"], {"signatureDataUrl": MANAGER_SIGNATURE}, callers["admin"])

        assert first.ok
        assert first.value["status"] == "Approved"
        assert first.value["approverId"] == callers["manager"].id
        assert first.value["approverSignature"] == MANAGER_SIGNATURE
        assert first.value["approvedAt"]
        assert second.kind == ErrorKind.CONFLICT
        assert second.status_code == 409

    def test_unknown_request_is_not_found(self, db, callers):
        result = service.approve_with_signature(
            db, "missing", {"signatureDataUrl": MANAGER_SIGNATURE}, callers["manager"])
        assert result.kind == ErrorKind.NOT_FOUND

    def test_unknown_request_not_found_even_with_bad_signature(self, db, callers):
        result = service.approve_with_signature(db, "missing", {"signatureDataUrl": "x"}, callers["admin"])
        assert result.kind == ErrorKind.NOT_FOUND

    def test_bad_signature_leaves_request_pending(self, db, callers, leave_payload):
        record = _submit(db, callers, leave_payload)

        result = service.approve_with_signature(
            db, record["requestId"], {"signatureDataUrl": "data:image/gif;base64,AA"}, callers["manager"])

        assert result.kind == ErrorKind.VALIDATION
        db.expire_all()
        leave = db.get(LeaveRequest, record["requestId"])
        assert leave.status == "Pending"
        assert leave.approver_id is None

    def test_concurrent_approval_only_one_wins(self, tmp_path, leave_payload, callers):
        # two sessions on separate connections; the loser read the row before the winner committed
        engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}")
        init_db(engine, seed_users=False)
        Session = sessionmaker(bind=engine)
        first, second = Session(), Session()
        try:
            request_id = service.submit(first, leave_payload(), callers["employee"]).value["requestId"]
            stale = second.get(LeaveRequest, request_id)
            assert stale.status == "Pending"

            won = service.approve_with_signature(
                first, request_id, {"signatureDataUrl": MANAGER_SIGNATURE}, callers["manager"])
            lost = service.approve_with_signature(
                second, request_id, {"signatureDataUrl": SIGNATURE}, callers["admin"])

            assert won.ok
            assert lost.kind == ErrorKind.CONFLICT
            first.expire_all()
            assert first.get(LeaveRequest, request_id).approver_id == callers["manager"].id
        finally:
            first.close()
            second.close()
            engine.dispose()


class TestUpdateStatus:
    @pytest.mark.parametrize("status", ["Rejected", "Canceled", "Pending", "Approved"])
    def test_pending_can_move_anywhere(self, db, callers, leave_payload, status):
        record = _submit(db, callers, leave_payload)
        result = service.update_status(db, record["requestId"], {"status": status}, callers["manager"])
        assert result.ok
        assert result.value["status"] == status

    def test_unknown_status_rejected(self, db, callers, leave_payload):
        record = _submit(db, callers, leave_payload)
        result = service.update_status(db, record["requestId"], {"status": "Done"}, callers["admin"])
        assert result.kind == ErrorKind.VALIDATION

    def test_unknown_request_is_not_found(self, db, callers):
        result = service.update_status(db, "missing", {"status": "Rejected"}, callers["manager"])
        assert result.kind == ErrorKind.NOT_FOUND

    def test_approved_request_is_locked(self, db, callers, leave_payload):
        record = _submit(db, callers, leave_payload)
        service.approve_with_signature(
            db, record["requestId"], {"signatureDataUrl": MANAGER_SIGNATURE}, callers["manager"])

        result = service.update_status(db, record["requestId"], {"status": "Pending"}, callers["admin"])

        assert result.kind == ErrorKind.CONFLICT
        db.expire_all()
        leave = db.get(LeaveRequest, record["requestId"])
        assert leave.status == "Approved"
        assert leave.approver_signature == MANAGER_SIGNATURE

    def test_rejected_request_can_be_reopened(self, db, callers, leave_payload):
        record = _submit(db, callers, leave_payload)
        service.update_status(db, record["requestId"], {"status": "Rejected"}, callers["manager"])
        result = service.update_status(db, record["requestId"], {"status": "Pending"}, callers["manager"])
        assert result.value["status"] == "Pending"


def test_get_signature_missing(db, callers):
    assert service.get_signature(db, "missing", callers["employee"]).kind == ErrorKind.NOT_FOUND


def test_get_signature_absent_on_legacy_row(db, callers):
    db.add(LeaveRequest(
        request_id="legacy-1", date_requested=date(2025, 1, 1), emp_id="E0002", name="n",
        dept="생산팀", position="p", leave_type="병가", start_date=date(2025, 1, 2),
        end_date=date(2025, 1, 2), status="Pending",
    ))
    db.commit()
    assert service.get_signature(db, "legacy-1", callers["manager"]).kind == ErrorKind.NOT_FOUND
