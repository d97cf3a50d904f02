from typing import List, Optional

from fastapi import Depends
from sqlalchemy import select, delete
from sqlalchemy.orm import Session, selectinload

from app.db.models import (
    Application,
    ApplicationStatus,
    Evaluation,
    Scholarship,
    Student,
    SubmittedRequirement,
)
from app.db.session import get_sync_session
from app.schemas.admin.application_schemas import (
    AdminApplicationDetailResponse,
    ApplicantInfo,
    ApplicationListItem,
    ApplicationListQueryParams,
    ApplicationStatusResponse,
    CreateEvaluationRequest,
    EvaluationResponse,
    UpdateEvaluationRequest,
)
from app.services.storage_service import (
    FileStorage,
    delete_files_quietly,
    get_storage_service,
)
from app.services.student.application_service import ApplicationService
from app.utils.datetime_utils import naive_utc_now
from app.utils.errors import InvalidInputError, NotFoundError
from app.utils.logging import get_logger

logger = get_logger()


def parse_application_status(value: str) -> ApplicationStatus:
    """Map a status label such as "Under Review" to its enum member"""
    try:
        return ApplicationStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        raise InvalidInputError(
            f"Invalid status '{value}'. Allowed values: {allowed}",
            "INVALID_STATUS",
        )


TERMINAL_STATUSES = (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)


def is_admin_transition_allowed(
    current: ApplicationStatus, target: ApplicationStatus
) -> bool:
    """Nothing returns to Draft and decided applications stay decided"""
    if current == target:
        return True
    if target == ApplicationStatus.DRAFT:
        return False
    return current not in TERMINAL_STATUSES


class ReviewService:
    """Admin review workflow: status changes, evaluations and application removal"""

    def __init__(self, db_session: Session, storage: FileStorage):
        self.db = db_session
        self.storage = storage

    async def update_application_status(
        self, application_id: int, status: str, remarks: Optional[str]
    ) -> ApplicationStatusResponse:
        """
        Set a new status with remarks.

        Administrative override: requirement completeness is not re-checked.
        Keeping the current status only updates the remarks.
        """
        new_status = parse_application_status(status)

        application = self.db.get(Application, application_id)
        if not application:
            raise NotFoundError("Application not found", "APPLICATION_NOT_FOUND")

        old_status = application.status
        if not is_admin_transition_allowed(old_status, new_status):
            raise InvalidInputError(
                f"Cannot change status from {old_status.value} to {new_status.value}",
                "INVALID_STATUS_TRANSITION",
            )

        try:
            application.status = new_status
            application.remarks = remarks
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Application {application_id} status changed from "
            f"{old_status.value} to {new_status.value}"
        )
        return ApplicationStatusResponse(
            id=application.id,
            status=application.status.value,
            remarks=application.remarks,
            date_applied=application.date_applied,
        )

    async def create_evaluation(
        self, evaluation_data: CreateEvaluationRequest
    ) -> EvaluationResponse:
        """Append an evaluation; the application id and score are not checked"""
        try:
            evaluation = Evaluation(
                application_id=evaluation_data.application_id,
                evaluator_name=evaluation_data.evaluator_name,
                score=evaluation_data.score,
                comments=evaluation_data.comments,
                date_evaluated=naive_utc_now(),
            )
            self.db.add(evaluation)
            self.db.commit()
            self.db.refresh(evaluation)
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Recorded evaluation {evaluation.id} for application {evaluation.application_id}"
        )
        return EvaluationResponse.model_validate(evaluation)

    async def update_evaluation(
        self, evaluation_id: int, evaluation_data: UpdateEvaluationRequest
    ) -> EvaluationResponse:
        """Change score and/or comments of an existing evaluation"""
        evaluation = self.db.get(Evaluation, evaluation_id)
        if not evaluation:
            raise NotFoundError("Evaluation not found", "EVALUATION_NOT_FOUND")

        changes = evaluation_data.model_dump(exclude_unset=True)
        try:
            for field_name, value in changes.items():
                setattr(evaluation, field_name, value)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return EvaluationResponse.model_validate(evaluation)

    async def list_evaluations(self, application_id: int) -> List[EvaluationResponse]:
        """Evaluations of an application, newest first"""
        result = self.db.execute(
            select(Evaluation)
            .where(Evaluation.application_id == application_id)
            .order_by(Evaluation.date_evaluated.desc(), Evaluation.id.desc())
        )
        return [EvaluationResponse.model_validate(e) for e in result.scalars().all()]

    async def delete_application(self, application_id: int) -> None:
        """
        Delete an application with its evaluations and submission rows.

        Everything is removed in one transaction; stored files are deleted
        only after it commits, and a missing file does not fail the call.
        """
        try:
            self.db.execute(
                delete(Evaluation).where(Evaluation.application_id == application_id)
            )

            file_paths = [
                path
                for path in self.db.execute(
                    select(SubmittedRequirement.file_path).where(
                        SubmittedRequirement.application_id == application_id
                    )
                ).scalars()
                if path
            ]

            self.db.execute(
                delete(SubmittedRequirement).where(
                    SubmittedRequirement.application_id == application_id
                )
            )

            result = self.db.execute(
                delete(Application).where(Application.id == application_id)
            )
            if result.rowcount == 0:
                raise NotFoundError("Application not found", "APPLICATION_NOT_FOUND")

            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

        await delete_files_quietly(self.storage, file_paths)
        logger.info(
            f"Deleted application {application_id} and {len(file_paths)} stored file(s)"
        )

    async def list_applications(
        self, query_params: ApplicationListQueryParams
    ) -> List[ApplicationListItem]:
        """Applications with student and scholarship columns, newest first"""
        query = (
            select(Application, Student, Scholarship)
            .join(Student, Student.id == Application.student_id)
            .join(Scholarship, Scholarship.id == Application.scholarship_id)
        )

        if query_params.status:
            query = query.where(
                Application.status == parse_application_status(query_params.status)
            )
        if query_params.scholarship_id is not None:
            query = query.where(Application.scholarship_id == query_params.scholarship_id)

        query = query.order_by(Application.date_applied.desc(), Application.id.desc())

        return [
            ApplicationListItem(
                id=application.id,
                student_id=student.id,
                student_number=student.student_number,
                student_name=f"{student.first_name} {student.last_name}",
                program=student.program,
                year_level=student.year_level,
                scholarship_id=scholarship.id,
                scholarship_name=scholarship.scholarship_name,
                scholarship_type=scholarship.type,
                status=application.status.value,
                remarks=application.remarks,
                date_applied=application.date_applied,
            )
            for application, student, scholarship in self.db.execute(query).all()
        ]

    async def get_application_details(
        self, application_id: int
    ) -> AdminApplicationDetailResponse:
        """Application with applicant, scholarship, requirement rows and evaluations"""
        application = self.db.execute(
            select(Application)
            .where(Application.id == application_id)
            .options(
                selectinload(Application.student),
                selectinload(Application.scholarship),
            )
        ).scalar_one_or_none()

        if not application:
            raise NotFoundError("Application not found", "APPLICATION_NOT_FOUND")

        requirements = await ApplicationService(
            self.db, self.storage
        ).get_requirement_rows(application)

        return AdminApplicationDetailResponse(
            id=application.id,
            status=application.status.value,
            remarks=application.remarks,
            date_applied=application.date_applied,
            student=ApplicantInfo.model_validate(application.student),
            scholarship_id=application.scholarship.id,
            scholarship_name=application.scholarship.scholarship_name,
            scholarship_type=application.scholarship.type,
            sponsor=application.scholarship.sponsor,
            requirements=requirements,
            evaluations=await self.list_evaluations(application_id),
        )


# Dependency injection for service provider
def get_review_service(
    db: Session = Depends(get_sync_session),
    storage: FileStorage = Depends(get_storage_service),
) -> ReviewService:
    """Dependency to provide ReviewService instance"""
    return ReviewService(db, storage)
