# leave_manager/worklogs/models.py

from sqlalchemy import Column, String, Text, CheckConstraint

from leave_manager.database import Base


class WorkLog(Base):
    __tablename__ = "worklogs"
    __table_args__ = (
        CheckConstraint("status IN ('Pending','Approved','Rejected')", name="ck_worklogs_status"),
    )

    id = Column("id", String(36), primary_key=True)
    uploader_id = Column("uploaderId", String(36), nullable=False)
    file_name = Column("fileName", String(255), nullable=False)
    file_path = Column("filePath", String(512), nullable=False)
    signature = Column("signature", Text, nullable=False)
    status = Column("status", String(20), nullable=False, default="Pending")
    created_at = Column("createdAt", String(32), nullable=False)

    def __repr__(self):
        return f"<WorkLog id={self.id} uploader_id={self.uploader_id} status={self.status}>"
