from typing import List, Optional
from pydantic import Field

from app.schemas.camel_base_model import CamelCaseBaseModel as BaseModel


class RequirementItem(BaseModel):
    """Requirement definition linked to a scholarship"""

    id: int = Field(..., description="Requirement ID")
    requirement_name: str = Field(..., description="Requirement name")
    description: Optional[str] = Field(None, description="Requirement description")


class ScholarshipItem(BaseModel):
    """Scholarship summary shown to students"""

    id: int = Field(..., description="Scholarship ID")
    scholarship_name: str = Field(..., description="Scholarship name")
    type: Optional[str] = Field(None, description="Scholarship type")
    description: Optional[str] = Field(None, description="Description")
    sponsor: Optional[str] = Field(None, description="Sponsor")
    eligibility_criteria: Optional[str] = Field(
        None, description="Eligibility criteria"
    )


class ScholarshipDetailResponse(ScholarshipItem):
    """Scholarship with its required documents"""

    requirements: List[RequirementItem] = Field(
        default_factory=list, description="Required documents"
    )
