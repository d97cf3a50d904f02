from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, status

from app.middlewares.auth_middleware import require_admin
from app.schemas.admin.application_schemas import (
    ApplicationListQueryParams,
    UpdateApplicationStatusRequest,
)
from app.services.admin.review_service import ReviewService, get_review_service
from app.utils.responses import ResponseBuilder

applications_router = APIRouter(dependencies=[Depends(require_admin)])


@applications_router.get(
    "",
    summary="List applications",
    description="Applications with student and scholarship columns, newest first. Filter by status or scholarship.",
)
async def list_applications(
    request: Request,
    query_params: Annotated[ApplicationListQueryParams, Depends()],
    review_service: ReviewService = Depends(get_review_service),
):
    applications = await review_service.list_applications(query_params)
    count = len(applications)

    return ResponseBuilder.success(
        request=request,
        data=[a.model_dump(by_alias=True) for a in applications],
        message=f"Retrieved {count} application{'s' if count != 1 else ''}",
    )


@applications_router.get(
    "/{application_id}",
    summary="Get application details for review",
)
async def get_application_details(
    request: Request,
    application_id: Annotated[int, Path(description="Application ID")],
    review_service: ReviewService = Depends(get_review_service),
):
    """Application with applicant, scholarship, requirement files and evaluations"""
    details = await review_service.get_application_details(application_id)

    return ResponseBuilder.success(
        request=request,
        data=details.model_dump(by_alias=True),
        message="Application retrieved successfully",
    )


@applications_router.put(
    "/{application_id}/status",
    summary="Update application status",
    description="Change the status with remarks. Requirement completeness is not re-checked; Approved and Rejected are final and nothing returns to Draft.",
)
async def update_application_status(
    request: Request,
    status_data: UpdateApplicationStatusRequest,
    application_id: Annotated[int, Path(description="Application ID")],
    review_service: ReviewService = Depends(get_review_service),
):
    application = await review_service.update_application_status(
        application_id, status_data.status, status_data.remarks
    )

    return ResponseBuilder.success(
        request=request,
        data=application.model_dump(by_alias=True),
        message=f"Application status updated to {application.status}",
    )


@applications_router.get(
    "/{application_id}/evaluations",
    summary="List evaluations of an application",
)
async def list_application_evaluations(
    request: Request,
    application_id: Annotated[int, Path(description="Application ID")],
    review_service: ReviewService = Depends(get_review_service),
):
    evaluations = await review_service.list_evaluations(application_id)

    return ResponseBuilder.success(
        request=request,
        data=[e.model_dump(by_alias=True) for e in evaluations],
        message=f"Retrieved {len(evaluations)} evaluation(s)",
    )


@applications_router.delete(
    "/{application_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete an application",
    description="Delete an application with its evaluations, requirement submissions and stored files",
)
async def delete_application(
    request: Request,
    application_id: Annotated[int, Path(description="Application ID")],
    review_service: ReviewService = Depends(get_review_service),
):
    await review_service.delete_application(application_id)

    return ResponseBuilder.success(
        request=request, message="Application deleted successfully"
    )
