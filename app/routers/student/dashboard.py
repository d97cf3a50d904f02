from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.middlewares.auth_middleware import AuthState, require_student
from app.services.student.application_service import (
    ApplicationService,
    get_application_service,
)
from app.utils.errors import AuthorizationError
from app.utils.responses import ResponseBuilder

dashboard_router = APIRouter(dependencies=[Depends(require_student)])


@dashboard_router.get("", summary="Get student dashboard")
async def get_student_dashboard(
    request: Request,
    current_user: Annotated[AuthState, Depends(require_student)],
    application_service: ApplicationService = Depends(get_application_service),
):
    """Application counts, five most recent applications and outstanding requirements"""
    if current_user.student_id is None:
        raise AuthorizationError(
            "No student profile is linked to this account", "NO_STUDENT_PROFILE"
        )

    dashboard = await application_service.get_student_dashboard(
        current_user.student_id
    )

    return ResponseBuilder.success(
        request=request,
        data=dashboard.model_dump(by_alias=True),
        message="Dashboard data retrieved successfully",
    )
