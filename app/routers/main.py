from fastapi import APIRouter

from app.routers.admin import admin_router
from app.routers.student import student_router
from app.routers.shared import shared_router

main_router = APIRouter()

# Include domain-based routers
main_router.include_router(admin_router, prefix="/admin", tags=["Admin"])
main_router.include_router(student_router, prefix="/student", tags=["Student"])
main_router.include_router(shared_router, prefix="/shared", tags=["Shared Services"])
