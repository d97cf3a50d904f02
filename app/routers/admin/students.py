from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request

from app.middlewares.auth_middleware import require_admin
from app.schemas.admin.catalog_schemas import UpdateStudentRequest
from app.services.admin.student_service import StudentService, get_student_service
from app.utils.responses import ResponseBuilder

students_router = APIRouter(dependencies=[Depends(require_admin)])


@students_router.get("", summary="List students with application counts")
async def list_students(
    request: Request,
    student_service: StudentService = Depends(get_student_service),
):
    students = await student_service.list_students()
    count = len(students)

    return ResponseBuilder.success(
        request=request,
        data=[s.model_dump(by_alias=True) for s in students],
        message=f"Retrieved {count} student{'s' if count != 1 else ''}",
    )


@students_router.get("/{student_id}", summary="Get a student with applications")
async def get_student(
    request: Request,
    student_id: Annotated[int, Path(description="Student ID")],
    student_service: StudentService = Depends(get_student_service),
):
    student = await student_service.get_student(student_id)

    return ResponseBuilder.success(
        request=request,
        data=student.model_dump(by_alias=True),
        message="Student retrieved successfully",
    )


@students_router.put("/{student_id}", summary="Update a student profile")
async def update_student(
    request: Request,
    student_data: UpdateStudentRequest,
    student_id: Annotated[int, Path(description="Student ID")],
    student_service: StudentService = Depends(get_student_service),
):
    student = await student_service.update_student(student_id, student_data)

    return ResponseBuilder.success(
        request=request,
        data=student.model_dump(by_alias=True),
        message="Student updated successfully",
    )


@students_router.delete(
    "/{student_id}",
    summary="Delete a student",
    description="Removes the student and their account. Rejected while any application references the student.",
)
async def delete_student(
    request: Request,
    student_id: Annotated[int, Path(description="Student ID")],
    student_service: StudentService = Depends(get_student_service),
):
    await student_service.delete_student(student_id)

    return ResponseBuilder.success(request=request, message="Student deleted successfully")
