# ========================================
# app/schemas/job.py
# ========================================

from pydantic import EmailStr, field_validator, model_validator
from typing import List, Optional, Literal, Union
from datetime import datetime

from app.schemas.base import CamelModel, require_text

Currency = Literal["USD", "EUR"]
EmploymentType = Literal["FULL_TIME", "PART_TIME", "CONTRACT", "INTERNSHIP"]
JobStatus = Literal["ACTIVE", "CLOSED", "DRAFT"]


class Salary(CamelModel):
    min: Union[int, float]
    max: Union[int, float]
    currency: Currency

    @model_validator(mode="after")
    def check_range(self):
        if self.min < 0:
            raise ValueError("salary.min must not be negative")
        if self.max < self.min:
            raise ValueError("salary.max must be greater than or equal to salary.min")
        return self


# 0. Fields shared by input and stored records
class JobFields(CamelModel):
    title: str
    company: str
    location: str
    description: str
    requirements: List[str]
    salary: Salary
    employment_type: EmploymentType
    category: str
    contact_email: str


# 1. Input: What the employer sends
class JobCreate(JobFields):
    contact_email: EmailStr

    @field_validator("title", "company", "location", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return require_text(value)


# 2. Input: Partial update, only these fields may change
class JobUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[List[str]] = None
    salary: Optional[Salary] = None
    status: Optional[JobStatus] = None

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return require_text(value)

    @model_validator(mode="after")
    def no_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} must not be null")
        return self


# 3. Output: Stored record
class JobResponse(JobFields):
    id: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    status: JobStatus = "ACTIVE"
    applicants: List[str] = []
