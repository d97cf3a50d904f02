from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, status

from app.middlewares.auth_middleware import require_admin
from app.schemas.admin.catalog_schemas import (
    CreateRequirementRequest,
    UpdateRequirementRequest,
)
from app.services.admin.requirement_service import (
    RequirementService,
    get_requirement_service,
)
from app.utils.responses import ResponseBuilder

requirements_router = APIRouter(dependencies=[Depends(require_admin)])


@requirements_router.get("", summary="List requirement definitions")
async def list_requirements(
    request: Request,
    requirement_service: RequirementService = Depends(get_requirement_service),
):
    requirements = await requirement_service.list_requirements()
    count = len(requirements)

    return ResponseBuilder.success(
        request=request,
        data=[r.model_dump(by_alias=True) for r in requirements],
        message=f"Retrieved {count} requirement{'s' if count != 1 else ''}",
    )


@requirements_router.post(
    "", status_code=status.HTTP_201_CREATED, summary="Create a requirement"
)
async def create_requirement(
    request: Request,
    requirement_data: CreateRequirementRequest,
    requirement_service: RequirementService = Depends(get_requirement_service),
):
    requirement = await requirement_service.create_requirement(requirement_data)

    return ResponseBuilder.success(
        request=request,
        data=requirement.model_dump(by_alias=True),
        message="Requirement created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@requirements_router.put("/{requirement_id}", summary="Update a requirement")
async def update_requirement(
    request: Request,
    requirement_data: UpdateRequirementRequest,
    requirement_id: Annotated[int, Path(description="Requirement ID")],
    requirement_service: RequirementService = Depends(get_requirement_service),
):
    requirement = await requirement_service.update_requirement(
        requirement_id, requirement_data
    )

    return ResponseBuilder.success(
        request=request,
        data=requirement.model_dump(by_alias=True),
        message="Requirement updated successfully",
    )


@requirements_router.delete(
    "/{requirement_id}",
    summary="Delete a requirement",
    description="Removes the requirement, its scholarship links and every submission of it, including stored files",
)
async def delete_requirement(
    request: Request,
    requirement_id: Annotated[int, Path(description="Requirement ID")],
    requirement_service: RequirementService = Depends(get_requirement_service),
):
    await requirement_service.delete_requirement(requirement_id)

    return ResponseBuilder.success(
        request=request, message="Requirement deleted successfully"
    )
