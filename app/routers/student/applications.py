from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, Request, UploadFile, status

from app.config.settings import settings
from app.middlewares.auth_middleware import AuthState, require_student
from app.schemas.student.application_schemas import (
    ApplicationCreatedResponse,
    CreateApplicationRequest,
)
from app.services.student.application_service import (
    ApplicationService,
    get_application_service,
)
from app.utils.errors import AuthorizationError, InvalidInputError
from app.utils.responses import ResponseBuilder

applications_router = APIRouter(dependencies=[Depends(require_student)])


def _own_student_id(current_user: AuthState) -> int:
    if current_user.student_id is None:
        raise AuthorizationError(
            "No student profile is linked to this account", "NO_STUDENT_PROFILE"
        )
    return current_user.student_id


@applications_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Start a new application",
    description="Create a Draft application with one Not Submitted row per scholarship requirement",
)
async def create_application(
    request: Request,
    application_data: CreateApplicationRequest,
    current_user: Annotated[AuthState, Depends(require_student)],
    application_service: ApplicationService = Depends(get_application_service),
):
    application_id = await application_service.create_application(
        _own_student_id(current_user), application_data.scholarship_id
    )

    return ResponseBuilder.success(
        request=request,
        data=ApplicationCreatedResponse(application_id=application_id).model_dump(
            by_alias=True
        ),
        message="Application created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@applications_router.get(
    "/{application_id}",
    summary="Get application details",
    description="Application with scholarship info and the submission state of every requirement",
)
async def get_application(
    request: Request,
    application_id: Annotated[int, Path(description="Application ID")],
    current_user: Annotated[AuthState, Depends(require_student)],
    application_service: ApplicationService = Depends(get_application_service),
):
    await application_service.ensure_application_owner(
        application_id, current_user.student_id
    )
    application = await application_service.get_application(application_id)

    return ResponseBuilder.success(
        request=request,
        data=application.model_dump(by_alias=True),
        message="Application retrieved successfully",
    )


@applications_router.post(
    "/{application_id}/upload",
    summary="Upload a requirement file",
    description="Upload a JPEG, PNG or PDF (max 5MB) for one of the scholarship's requirements",
)
async def upload_requirement_file(
    request: Request,
    application_id: Annotated[int, Path(description="Application ID")],
    current_user: Annotated[AuthState, Depends(require_student)],
    requirement_id: int = Form(..., description="Requirement ID"),
    file: UploadFile = File(..., description="Requirement document"),
    application_service: ApplicationService = Depends(get_application_service),
):
    await application_service.ensure_application_owner(
        application_id, current_user.student_id
    )

    # One byte past the limit is enough to detect oversized uploads
    data = await file.read(settings.MAX_UPLOAD_SIZE_BYTES + 1)
    if not file.filename:
        raise InvalidInputError("No file uploaded", "EMPTY_FILE")

    result = await application_service.upload_requirement_file(
        application_id=application_id,
        requirement_id=requirement_id,
        file_name=file.filename,
        content_type=file.content_type,
        data=data,
    )

    return ResponseBuilder.success(
        request=request,
        data=result.model_dump(by_alias=True),
        message="File uploaded successfully",
    )


@applications_router.post(
    "/{application_id}/submit",
    summary="Submit an application for review",
    description="Move a Draft application to Pending once every requirement has an uploaded file",
)
async def submit_application(
    request: Request,
    application_id: Annotated[int, Path(description="Application ID")],
    current_user: Annotated[AuthState, Depends(require_student)],
    application_service: ApplicationService = Depends(get_application_service),
):
    await application_service.ensure_application_owner(
        application_id, current_user.student_id
    )
    result = await application_service.submit_application(application_id)

    return ResponseBuilder.success(
        request=request,
        data=result.model_dump(by_alias=True),
        message="Application submitted successfully",
    )
