from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request

from app.middlewares.auth_middleware import require_student
from app.services.student.application_service import (
    ApplicationService,
    get_application_service,
)
from app.utils.responses import ResponseBuilder

scholarships_router = APIRouter(dependencies=[Depends(require_student)])


@scholarships_router.get("", summary="List scholarships")
async def list_scholarships(
    request: Request,
    application_service: ApplicationService = Depends(get_application_service),
):
    scholarships = await application_service.list_scholarships()
    count = len(scholarships)

    return ResponseBuilder.success(
        request=request,
        data=[s.model_dump(by_alias=True) for s in scholarships],
        message=f"Retrieved {count} scholarship{'s' if count != 1 else ''}",
    )


@scholarships_router.get("/{scholarship_id}", summary="Get scholarship details")
async def get_scholarship_details(
    request: Request,
    scholarship_id: Annotated[int, Path(description="Scholarship ID")],
    application_service: ApplicationService = Depends(get_application_service),
):
    """Scholarship with the documents an application must include"""
    scholarship = await application_service.get_scholarship_details(scholarship_id)

    return ResponseBuilder.success(
        request=request,
        data=scholarship.model_dump(by_alias=True),
        message="Scholarship retrieved successfully",
    )
