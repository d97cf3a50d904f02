from fastapi import APIRouter, Depends, Request

from app.middlewares.auth_middleware import require_admin
from app.services.admin.dashboard_service import (
    DashboardService,
    get_dashboard_service,
)
from app.utils.responses import ResponseBuilder

dashboard_router = APIRouter(dependencies=[Depends(require_admin)])


@dashboard_router.get("/stats", summary="Get admin dashboard statistics")
async def get_dashboard_stats(
    request: Request,
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    """Total students, total and pending applications, and total scholarships"""
    stats = await dashboard_service.get_dashboard_stats()

    return ResponseBuilder.success(
        request=request,
        data=stats.model_dump(by_alias=True),
        message="Dashboard statistics retrieved successfully",
    )
