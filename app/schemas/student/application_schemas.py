from datetime import datetime
from typing import List, Optional
from pydantic import Field

from app.schemas.camel_base_model import CamelCaseBaseModel as BaseModel


class CreateApplicationRequest(BaseModel):
    """Request schema for starting an application"""

    scholarship_id: int = Field(..., gt=0, description="Scholarship to apply for")


class ApplicationCreatedResponse(BaseModel):
    """Identifier of a newly created Draft application"""

    application_id: int = Field(..., description="Application ID")


class SubmittedRequirementItem(BaseModel):
    """One requirement of an application with its submission state"""

    submission_id: Optional[int] = Field(None, description="Submission row ID")
    requirement_id: int = Field(..., description="Requirement ID")
    requirement_name: str = Field(..., description="Requirement name")
    description: Optional[str] = Field(None, description="Requirement description")
    file_name: Optional[str] = Field(None, description="Uploaded file display name")
    file_path: Optional[str] = Field(None, description="Storage path")
    status: str = Field(..., description="Submission status")
    date_submitted: Optional[datetime] = Field(None, description="Upload timestamp")


class ApplicationDetailResponse(BaseModel):
    """Application with its scholarship and requirement rows"""

    id: int = Field(..., description="Application ID")
    student_id: int = Field(..., description="Applicant student ID")
    scholarship_id: int = Field(..., description="Scholarship ID")
    scholarship_name: str = Field(..., description="Scholarship name")
    scholarship_type: Optional[str] = Field(None, description="Scholarship type")
    status: str = Field(..., description="Application status")
    remarks: Optional[str] = Field(None, description="Remarks")
    date_applied: datetime = Field(..., description="Last activity timestamp")
    requirements: List[SubmittedRequirementItem] = Field(
        default_factory=list, description="Requirement submissions"
    )


class UploadRequirementResponse(BaseModel):
    """Acknowledgement of an uploaded requirement file"""

    application_id: int = Field(..., description="Application ID")
    requirement_id: int = Field(..., description="Requirement ID")
    file_name: str = Field(..., description="Uploaded file display name")
    status: str = Field(..., description="Submission status")


class SubmitApplicationResponse(BaseModel):
    """Application state after submission"""

    application_id: int = Field(..., description="Application ID")
    status: str = Field(..., description="Application status")
    remarks: Optional[str] = Field(None, description="Remarks")


class DashboardStats(BaseModel):
    """Application counts by status for one student"""

    total: int = 0
    pending: int = 0
    under_review: int = 0
    approved: int = 0
    rejected: int = 0


class RecentApplicationItem(BaseModel):
    id: int
    scholarship_id: int
    scholarship_name: str
    scholarship_type: Optional[str] = None
    sponsor: Optional[str] = None
    status: str
    date_applied: datetime


class PendingRequirementItem(BaseModel):
    application_id: int
    scholarship_name: str
    requirement_id: int
    requirement_name: str


class StudentDashboardResponse(BaseModel):
    """Student landing page data"""

    stats: DashboardStats
    recent_applications: List[RecentApplicationItem] = Field(default_factory=list)
    pending_requirements: List[PendingRequirementItem] = Field(default_factory=list)
