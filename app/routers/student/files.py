from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.middlewares.auth_middleware import AuthState, require_student
from app.services.student.application_service import (
    ApplicationService,
    get_application_service,
)
from app.utils.errors import AuthorizationError
from app.utils.responses import ResponseBuilder

files_router = APIRouter(dependencies=[Depends(require_student)])


@files_router.get("/{submission_id}", summary="Download an uploaded requirement file")
async def get_submission_file(
    submission_id: Annotated[int, Path(description="Submission ID")],
    current_user: Annotated[AuthState, Depends(require_student)],
    application_service: ApplicationService = Depends(get_application_service),
):
    if current_user.student_id is None:
        raise AuthorizationError(
            "No student profile is linked to this account", "NO_STUDENT_PROFILE"
        )

    file_name, content_type, data = await application_service.get_submission_file(
        submission_id, student_id=current_user.student_id
    )
    return ResponseBuilder.file(file_name, content_type, data)
