from datetime import date
from typing import Optional
from pydantic import EmailStr, Field
from .camel_base_model import CamelCaseBaseModel as BaseModel


class RegisterRequest(BaseModel):
    """Student self-registration schema"""

    username: str = Field(..., min_length=3, max_length=100, description="Username")
    # bcrypt only considers the first 72 bytes
    password: str = Field(..., min_length=6, max_length=72, description="Password")
    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    gender: Optional[str] = Field(None, max_length=20, description="Gender")
    birthdate: Optional[date] = Field(None, description="Date of birth")
    program: Optional[str] = Field(None, max_length=200, description="Degree program")
    year_level: Optional[str] = Field(None, max_length=50, description="Year level")
    contact_number: Optional[str] = Field(
        None, max_length=30, description="Contact number"
    )
    email_address: EmailStr = Field(..., description="Email address")


class LoginRequest(BaseModel):
    """Login request schema"""

    username: str = Field(..., min_length=1, description="Username")
    password: str = Field(..., min_length=1, description="Password")


class UserResponse(BaseModel):
    """User response schema"""

    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    role: str = Field(..., description="Account role")
    student_id: Optional[int] = Field(None, description="Linked student ID")


class LoginResponse(BaseModel):
    """Issued token and the signed-in user"""

    token: str = Field(..., description="Bearer access token")
    user: UserResponse = Field(..., description="Signed-in user")


class RegisteredStudentResponse(BaseModel):
    """Student record created by registration"""

    id: int = Field(..., description="Student ID")
    student_number: str = Field(..., description="Generated student number")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    email_address: str = Field(..., description="Email address")
    username: str = Field(..., description="Username")
