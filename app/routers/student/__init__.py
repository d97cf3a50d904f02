from fastapi import APIRouter

from .applications import applications_router
from .dashboard import dashboard_router
from .files import files_router
from .scholarships import scholarships_router

student_router = APIRouter()

# Include sub-routers
student_router.include_router(
    dashboard_router, prefix="/dashboard", tags=["Student - Dashboard"]
)
student_router.include_router(
    scholarships_router, prefix="/scholarships", tags=["Student - Scholarships"]
)
student_router.include_router(
    applications_router, prefix="/applications", tags=["Student - Applications"]
)
student_router.include_router(files_router, prefix="/files", tags=["Student - Files"])
