from typing import Annotated
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.db.session import get_sync_session
from app.services.auth_service import AuthService
from app.schemas.auth_schemas import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisteredStudentResponse,
    UserResponse,
)
from app.middlewares.auth_middleware import get_current_user, AuthState
from app.utils.responses import ResponseBuilder
from app.utils.errors import AuthenticationError

auth_router = APIRouter()


@auth_router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    register_request: RegisterRequest,
    request: Request,
    db: Annotated[Session, Depends(get_sync_session)],
):
    """Register a student profile together with its Student login account."""
    auth_service = AuthService(db)
    student, account = await auth_service.register_student(register_request)

    student_data = RegisteredStudentResponse(
        id=student.id,
        student_number=student.student_number,
        first_name=student.first_name,
        last_name=student.last_name,
        email_address=student.email_address,
        username=account.username,
    )

    return ResponseBuilder.success(
        request=request,
        data=student_data.model_dump(by_alias=True),
        message="Registration successful",
        status_code=status.HTTP_201_CREATED,
    )


@auth_router.post("/login")
async def login(
    login_request: LoginRequest,
    request: Request,
    db: Annotated[Session, Depends(get_sync_session)],
):
    """
    Login user with username and password.

    Returns a bearer token carrying the user id, username, role and student id.
    """
    auth_service = AuthService(db)
    token, account = await auth_service.login_user(
        login_request.username, login_request.password
    )

    login_data = LoginResponse(
        token=token,
        user=UserResponse(
            id=account.id,
            username=account.username,
            role=account.role.value,
            student_id=account.student_id,
        ),
    )

    return ResponseBuilder.success(
        request=request,
        data=login_data.model_dump(by_alias=True),
        message="Login successful",
    )


@auth_router.get("/me")
async def get_current_user_info(
    request: Request,
    current_user: Annotated[AuthState, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_sync_session)],
):
    """Get current authenticated user information"""
    auth_service = AuthService(db)
    account = await auth_service.get_user_by_id(current_user.user_id)

    if not account:
        raise AuthenticationError("User not found")

    user_data = UserResponse(
        id=account.id,
        username=account.username,
        role=account.role.value,
        student_id=account.student_id,
    )

    return ResponseBuilder.success(
        request=request,
        data=user_data.model_dump(by_alias=True),
        message="User information retrieved",
    )
