from typing import List

from fastapi import Depends
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.db.models import Application, Student
from app.db.session import get_sync_session
from app.schemas.admin.catalog_schemas import (
    StudentApplicationItem,
    StudentDetailResponse,
    StudentListItem,
    StudentResponse,
    UpdateStudentRequest,
)
from app.utils.errors import ConflictError, NotFoundError
from app.utils.logging import get_logger

logger = get_logger()

STUDENT_PROFILE_FIELDS = (
    "id",
    "student_number",
    "first_name",
    "last_name",
    "gender",
    "birthdate",
    "program",
    "year_level",
    "contact_number",
    "email_address",
)


class StudentService:
    """Service provider for admin management of student records"""

    def __init__(self, db_session: Session):
        self.db = db_session

    async def get_student_by_id(self, student_id: int) -> Student:
        student = self.db.execute(
            select(Student)
            .where(Student.id == student_id)
            .options(selectinload(Student.user_account))
        ).scalar_one_or_none()

        if not student:
            raise NotFoundError("Student not found", "STUDENT_NOT_FOUND")
        return student

    async def list_students(self) -> List[StudentListItem]:
        """All students with their application counts"""
        application_counts = (
            select(
                Application.student_id,
                func.count(Application.id).label("application_count"),
            )
            .group_by(Application.student_id)
            .subquery()
        )

        result = self.db.execute(
            select(Student, func.coalesce(application_counts.c.application_count, 0))
            .outerjoin(application_counts, Student.id == application_counts.c.student_id)
            .options(selectinload(Student.user_account))
            .order_by(Student.last_name, Student.first_name)
        )

        return [
            StudentListItem(
                **self._profile_fields(student), application_count=application_count
            )
            for student, application_count in result.all()
        ]

    async def get_student(self, student_id: int) -> StudentDetailResponse:
        """Student profile with applications, newest first"""
        student = await self.get_student_by_id(student_id)

        applications = self.db.execute(
            select(Application)
            .where(Application.student_id == student_id)
            .options(selectinload(Application.scholarship))
            .order_by(Application.date_applied.desc(), Application.id.desc())
        ).scalars()

        return StudentDetailResponse(
            **self._profile_fields(student),
            applications=[
                StudentApplicationItem(
                    id=application.id,
                    scholarship_id=application.scholarship_id,
                    scholarship_name=application.scholarship.scholarship_name,
                    status=application.status.value,
                    date_applied=application.date_applied,
                )
                for application in applications
            ],
        )

    async def update_student(
        self, student_id: int, student_data: UpdateStudentRequest
    ) -> StudentResponse:
        """Partial profile update"""
        student = await self.get_student_by_id(student_id)
        changes = student_data.model_dump(exclude_unset=True)

        new_email = changes.get("email_address")
        if new_email and new_email != student.email_address:
            await self._ensure_email_available(new_email, student_id)

        try:
            for field_name, value in changes.items():
                setattr(student, field_name, value)
            self.db.commit()
            self.db.refresh(student)
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Email address is already in use", "EMAIL_EXISTS")
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Updated student {student_id}: {', '.join(changes) or 'no changes'}")
        return StudentResponse(**self._profile_fields(student))

    async def delete_student(self, student_id: int) -> None:
        """Delete a student and their user account unless applications reference them"""
        student = await self.get_student_by_id(student_id)

        application_count = self.db.execute(
            select(func.count(Application.id)).where(
                Application.student_id == student_id
            )
        ).scalar_one()

        if application_count > 0:
            raise ConflictError(
                f"Cannot delete student with {application_count} existing application{'s' if application_count != 1 else ''}",
                "STUDENT_HAS_APPLICATIONS",
            )

        try:
            if student.user_account is not None:
                self.db.delete(student.user_account)
                self.db.flush()
            self.db.delete(student)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Deleted student {student_id}")

    # Helper Methods
    async def _ensure_email_available(self, email: str, student_id: int) -> None:
        existing = self.db.execute(
            select(Student.id).where(
                Student.email_address == email, Student.id != student_id
            )
        ).first()
        if existing:
            raise ConflictError("Email address is already in use", "EMAIL_EXISTS")

    @staticmethod
    def _profile_fields(student: Student) -> dict:
        fields = {name: getattr(student, name) for name in STUDENT_PROFILE_FIELDS}
        fields["username"] = (
            student.user_account.username if student.user_account else None
        )
        return fields


# Dependency injection for service provider
def get_student_service(
    db: Session = Depends(get_sync_session),
) -> StudentService:
    """Dependency to provide StudentService instance"""
    return StudentService(db)
