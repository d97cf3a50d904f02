from datetime import date, datetime
from typing import List, Optional
from pydantic import EmailStr, Field, field_validator

from app.schemas.camel_base_model import CamelCaseBaseModel as BaseModel
from app.schemas.student.scholarship_schemas import (
    RequirementItem,
    ScholarshipDetailResponse,
)


def reject_null(value):
    """Fields backed by NOT NULL columns may be omitted but not cleared"""
    if value is None:
        raise ValueError("Field cannot be null")
    return value


# Scholarships
class CreateScholarshipRequest(BaseModel):
    """Request schema for creating a scholarship"""

    scholarship_name: str = Field(
        ..., min_length=1, max_length=200, description="Scholarship name"
    )
    type: Optional[str] = Field(None, max_length=100, description="Scholarship type")
    description: Optional[str] = Field(None, description="Description")
    sponsor: Optional[str] = Field(None, max_length=200, description="Sponsor")
    eligibility_criteria: Optional[str] = Field(
        None, description="Eligibility criteria"
    )
    requirement_ids: List[int] = Field(
        default_factory=list, description="Linked requirement IDs"
    )


class UpdateScholarshipRequest(BaseModel):
    """Partial update; requirement links are replaced when requirementIds is given"""

    scholarship_name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    sponsor: Optional[str] = Field(None, max_length=200)
    eligibility_criteria: Optional[str] = None
    requirement_ids: Optional[List[int]] = None

    @field_validator("scholarship_name", mode="before")
    @classmethod
    def reject_null_name(cls, v):
        return reject_null(v)


class ScholarshipListItem(ScholarshipDetailResponse):
    application_count: int = 0
    requirement_count: int = 0


# Requirements
class CreateRequirementRequest(BaseModel):
    """Request schema for creating a requirement definition"""

    requirement_name: str = Field(
        ..., min_length=1, max_length=200, description="Requirement name"
    )
    description: Optional[str] = Field(None, description="Requirement description")


class UpdateRequirementRequest(BaseModel):
    """Partial update of a requirement definition"""

    requirement_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None

    @field_validator("requirement_name", mode="before")
    @classmethod
    def reject_null_name(cls, v):
        return reject_null(v)


class RequirementListItem(RequirementItem):
    scholarship_count: int = 0


# Students
class StudentApplicationItem(BaseModel):
    id: int
    scholarship_id: int
    scholarship_name: str
    status: str
    date_applied: datetime


class StudentResponse(BaseModel):
    """Student profile"""

    id: int = Field(..., description="Student ID")
    student_number: str = Field(..., description="Student number")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    gender: Optional[str] = Field(None, description="Gender")
    birthdate: Optional[date] = Field(None, description="Date of birth")
    program: Optional[str] = Field(None, description="Degree program")
    year_level: Optional[str] = Field(None, description="Year level")
    contact_number: Optional[str] = Field(None, description="Contact number")
    email_address: str = Field(..., description="Email address")
    username: Optional[str] = Field(None, description="Account username")


class StudentListItem(StudentResponse):
    application_count: int = 0


class StudentDetailResponse(StudentResponse):
    applications: List[StudentApplicationItem] = Field(default_factory=list)


class UpdateStudentRequest(BaseModel):
    """Partial update of a student profile"""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[str] = Field(None, max_length=20)
    birthdate: Optional[date] = None
    program: Optional[str] = Field(None, max_length=200)
    year_level: Optional[str] = Field(None, max_length=50)
    contact_number: Optional[str] = Field(None, max_length=30)
    email_address: Optional[EmailStr] = None

    @field_validator("first_name", "last_name", "email_address", mode="before")
    @classmethod
    def reject_null_required(cls, v):
        return reject_null(v)


# Dashboard
class DashboardStatsResponse(BaseModel):
    """Headline counts for the admin dashboard"""

    total_students: int = 0
    total_applications: int = 0
    pending_applications: int = 0
    total_scholarships: int = 0
