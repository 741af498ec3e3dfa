# ========================================
# app/schemas/application.py
# ========================================

from pydantic import EmailStr, field_validator
from typing import Optional, Literal, get_args
from datetime import datetime

from app.schemas.base import CamelModel, require_text

ApplicationStatus = Literal["PENDING", "REVIEWED", "SHORTLISTED", "REJECTED"]
APPLICATION_STATUSES = get_args(ApplicationStatus)


# 1. Input: Apply to a job
class ApplicationCreate(CamelModel):
    applicant_name: str
    email: EmailStr
    phone: str = ""
    resume_url: str
    cover_letter: str = ""

    @field_validator("applicant_name", "resume_url")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return require_text(value)


# 2. Input: Update Status
class ApplicationStatusUpdate(CamelModel):
    # only checked against APPLICATION_STATUSES when strict mode is on
    status: str


# 3. Output: Stored record
class ApplicationResponse(CamelModel):
    id: str
    job_id: str
    applicant_name: str
    email: str
    phone: str = ""
    resume_url: str
    cover_letter: str = ""
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
