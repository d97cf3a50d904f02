from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel as QueryModel, Field

from app.schemas.camel_base_model import CamelCaseBaseModel as BaseModel
from app.schemas.student.application_schemas import SubmittedRequirementItem


class UpdateApplicationStatusRequest(BaseModel):
    """Admin status change; status is checked against the application states"""

    status: str = Field(..., min_length=1, description="New application status")
    remarks: Optional[str] = Field(None, description="Remarks for the student")


class ApplicationListQueryParams(QueryModel):
    """Query parameters for the admin application list"""

    status: Optional[str] = Field(None, description="Filter by application status")
    scholarship_id: Optional[int] = Field(None, description="Filter by scholarship")


class ApplicationListItem(BaseModel):
    id: int
    student_id: int
    student_number: str
    student_name: str
    program: Optional[str] = None
    year_level: Optional[str] = None
    scholarship_id: int
    scholarship_name: str
    scholarship_type: Optional[str] = None
    status: str
    remarks: Optional[str] = None
    date_applied: datetime


class ApplicationStatusResponse(BaseModel):
    """Application fields touched by a status change"""

    id: int
    status: str
    remarks: Optional[str] = None
    date_applied: datetime


class ApplicantInfo(BaseModel):
    id: int
    student_number: str
    first_name: str
    last_name: str
    program: Optional[str] = None
    year_level: Optional[str] = None
    contact_number: Optional[str] = None
    email_address: str


class EvaluationResponse(BaseModel):
    """Evaluation record"""

    id: int = Field(..., description="Evaluation ID")
    application_id: int = Field(..., description="Evaluated application ID")
    evaluator_name: Optional[str] = Field(None, description="Evaluator")
    score: Optional[float] = Field(None, description="Score, unbounded")
    comments: Optional[str] = Field(None, description="Comments")
    date_evaluated: datetime = Field(..., description="Evaluation timestamp")


class AdminApplicationDetailResponse(BaseModel):
    """Full application view for reviewers"""

    id: int
    status: str
    remarks: Optional[str] = None
    date_applied: datetime
    student: ApplicantInfo
    scholarship_id: int
    scholarship_name: str
    scholarship_type: Optional[str] = None
    sponsor: Optional[str] = None
    requirements: List[SubmittedRequirementItem] = Field(default_factory=list)
    evaluations: List[EvaluationResponse] = Field(default_factory=list)


class CreateEvaluationRequest(BaseModel):
    """Request schema for recording an evaluation"""

    application_id: int = Field(..., description="Evaluated application ID")
    evaluator_name: Optional[str] = Field(None, max_length=200, description="Evaluator")
    score: Optional[float] = Field(None, description="Score, unbounded")
    comments: Optional[str] = Field(None, description="Comments")


class UpdateEvaluationRequest(BaseModel):
    """Partial update of an evaluation's score or comments"""

    score: Optional[float] = Field(None, description="Score, unbounded")
    comments: Optional[str] = Field(None, description="Comments")
