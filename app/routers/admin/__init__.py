from fastapi import APIRouter

from .applications import applications_router
from .dashboard import dashboard_router
from .evaluations import evaluations_router
from .files import files_router
from .requirements import requirements_router
from .scholarships import scholarships_router
from .students import students_router

admin_router = APIRouter()

# Include sub-routers
admin_router.include_router(
    dashboard_router, prefix="/dashboard", tags=["Admin - Dashboard"]
)
admin_router.include_router(
    students_router, prefix="/students", tags=["Admin - Student Management"]
)
admin_router.include_router(
    applications_router,
    prefix="/applications",
    tags=["Admin - Application Review"],
)
admin_router.include_router(
    evaluations_router, prefix="/evaluations", tags=["Admin - Evaluations"]
)
admin_router.include_router(
    scholarships_router,
    prefix="/scholarships",
    tags=["Admin - Scholarship Management"],
)
admin_router.include_router(
    requirements_router,
    prefix="/requirements",
    tags=["Admin - Requirement Management"],
)
admin_router.include_router(files_router, prefix="/files", tags=["Admin - Files"])
