"""
Approval report schemas for LessonGate.

Admin-facing summaries of which learners approved which modules and courses.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Literal, Optional
from enum import Enum


class ApprovalStatus(str, Enum):
    APPROVED = "approved"
    FAILED = "failed"            # latest attempt in scope did not pass
    IN_PROGRESS = "in_progress"


class ApprovalRecord(BaseModel):
    learner_id: str
    kind: Literal["module", "course"]
    entity_id: int
    status: ApprovalStatus
    approved_at: Optional[datetime] = None


class ReportSummary(BaseModel):
    learners: int = 0
    modules_approved: int = 0
    courses_approved: int = 0
    module_approvals: int = 0    # distinct learner/module pairs
    course_approvals: int = 0


class ApprovalReport(BaseModel):
    course_id: int
    records: list[ApprovalRecord]
    summary: ReportSummary
