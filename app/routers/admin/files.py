from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.middlewares.auth_middleware import require_admin
from app.services.student.application_service import (
    ApplicationService,
    get_application_service,
)
from app.utils.responses import ResponseBuilder

files_router = APIRouter(dependencies=[Depends(require_admin)])


@files_router.get("/{submission_id}", summary="View an uploaded requirement file")
async def get_submission_file(
    submission_id: Annotated[int, Path(description="Submission ID")],
    application_service: ApplicationService = Depends(get_application_service),
):
    file_name, content_type, data = await application_service.get_submission_file(
        submission_id
    )
    return ResponseBuilder.file(file_name, content_type, data)
