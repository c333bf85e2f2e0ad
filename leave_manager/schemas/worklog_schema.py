# leave_manager/schemas/worklog_schema.py
from enum import Enum

from pydantic import BaseModel


class WorklogStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class WorklogStatusSchema(BaseModel):
    status: WorklogStatus
