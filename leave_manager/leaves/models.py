# leave_manager/leaves/models.py

from sqlalchemy import Column, String, Date, Text, Index

from leave_manager.database import Base


class LeaveRequest(Base):
    # column names match the existing leave_manager.db files (camelCase)
    __tablename__ = "requests"
    __table_args__ = (
        Index("ix_requests_date_requested", "dateRequested"),
        Index("ix_requests_requester_id", "requesterId"),
    )

    request_id = Column("requestId", String(36), primary_key=True)
    requester_id = Column("requesterId", String(36), nullable=True)   # NULL only for legacy/demo rows
    date_requested = Column("dateRequested", Date, nullable=False)
    emp_id = Column("empId", String(50), nullable=False)
    name = Column("name", String(100), nullable=False)
    dept = Column("dept", String(20), nullable=False)
    position = Column("position", String(50), nullable=False)
    leave_type = Column("leaveType", String(20), nullable=False)
    start_date = Column("startDate", Date, nullable=False)
    end_date = Column("endDate", Date, nullable=False)
    note = Column("note", Text, nullable=True, default="")
    handover_person = Column("handoverPerson", String(100), nullable=True)
    contact = Column("contact", String(20), nullable=True)
    status = Column("status", String(20), nullable=False, default="Pending")
    # Pending / Approved / Rejected / Canceled

    requester_signature = Column("signature", Text, nullable=True)        # data URL
    approver_signature = Column("managerSignature", Text, nullable=True)  # data URL, set on approval only
    approver_id = Column("managerSignerId", String(36), nullable=True)
    approved_at = Column("managerSignedAt", String(19), nullable=True)    # YYYY-MM-DDTHH:MM:SS

    def __repr__(self):
        return f"<LeaveRequest id={self.request_id} requester_id={self.requester_id} status={self.status}>"
