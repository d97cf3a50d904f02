from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, status

from app.middlewares.auth_middleware import require_admin
from app.schemas.admin.catalog_schemas import (
    CreateScholarshipRequest,
    UpdateScholarshipRequest,
)
from app.services.admin.scholarship_service import (
    ScholarshipService,
    get_scholarship_service,
)
from app.utils.responses import ResponseBuilder

scholarships_router = APIRouter(dependencies=[Depends(require_admin)])


@scholarships_router.get(
    "",
    summary="List scholarships with counts",
    description="All scholarships with linked requirements and application counts",
)
async def list_scholarships(
    request: Request,
    scholarship_service: ScholarshipService = Depends(get_scholarship_service),
):
    scholarships = await scholarship_service.list_scholarships()
    count = len(scholarships)

    return ResponseBuilder.success(
        request=request,
        data=[s.model_dump(by_alias=True) for s in scholarships],
        message=f"Retrieved {count} scholarship{'s' if count != 1 else ''}",
    )


@scholarships_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a scholarship",
)
async def create_scholarship(
    request: Request,
    scholarship_data: CreateScholarshipRequest,
    scholarship_service: ScholarshipService = Depends(get_scholarship_service),
):
    scholarship = await scholarship_service.create_scholarship(scholarship_data)

    return ResponseBuilder.success(
        request=request,
        data=scholarship.model_dump(by_alias=True),
        message="Scholarship created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@scholarships_router.put(
    "/{scholarship_id}",
    summary="Update a scholarship",
    description="Partial update. When requirementIds is present the requirement links are replaced.",
)
async def update_scholarship(
    request: Request,
    scholarship_data: UpdateScholarshipRequest,
    scholarship_id: Annotated[int, Path(description="Scholarship ID")],
    scholarship_service: ScholarshipService = Depends(get_scholarship_service),
):
    scholarship = await scholarship_service.update_scholarship(
        scholarship_id, scholarship_data
    )

    return ResponseBuilder.success(
        request=request,
        data=scholarship.model_dump(by_alias=True),
        message="Scholarship updated successfully",
    )


@scholarships_router.delete(
    "/{scholarship_id}",
    summary="Delete a scholarship",
    description="Rejected while any application references the scholarship",
)
async def delete_scholarship(
    request: Request,
    scholarship_id: Annotated[int, Path(description="Scholarship ID")],
    scholarship_service: ScholarshipService = Depends(get_scholarship_service),
):
    await scholarship_service.delete_scholarship(scholarship_id)

    return ResponseBuilder.success(
        request=request, message="Scholarship deleted successfully"
    )
