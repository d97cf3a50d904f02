from typing import List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import select, func, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.config.settings import settings
from app.db.models import (
    ACTIVE_APPLICATION_STATUSES,
    Application,
    ApplicationStatus,
    Requirement,
    Scholarship,
    Student,
    SubmissionStatus,
    SubmittedRequirement,
    scholarship_requirements,
)
from app.db.session import get_sync_session
from app.schemas.student.application_schemas import (
    ApplicationDetailResponse,
    DashboardStats,
    PendingRequirementItem,
    RecentApplicationItem,
    StudentDashboardResponse,
    SubmitApplicationResponse,
    SubmittedRequirementItem,
    UploadRequirementResponse,
)
from app.schemas.student.scholarship_schemas import (
    RequirementItem,
    ScholarshipDetailResponse,
    ScholarshipItem,
)
from app.services.storage_service import (
    FileStorage,
    delete_files_quietly,
    get_storage_service,
)
from app.utils.datetime_utils import naive_utc_now
from app.utils.errors import (
    AuthorizationError,
    ConflictError,
    IncompleteSubmissionError,
    InvalidInputError,
    NotFoundError,
)
from app.utils.logging import get_logger

logger = get_logger()

ALLOWED_CONTENT_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "application/pdf"}
)

APPLICATION_STARTED_REMARK = "Application started"
APPLICATION_SUBMITTED_REMARK = "Application submitted for review"


class ApplicationService:
    """Student-side application lifecycle: create, upload requirement files, submit"""

    def __init__(self, db_session: Session, storage: FileStorage):
        self.db = db_session
        self.storage = storage

    # Lifecycle Operations
    async def create_application(self, student_id: int, scholarship_id: int) -> int:
        """
        Create a Draft application and one Not Submitted row per scholarship requirement.

        All rows are written in a single transaction; nothing persists on failure.
        """
        scholarship = await self._get_scholarship(scholarship_id)

        if self.db.get(Student, student_id) is None:
            raise NotFoundError("Student not found", "STUDENT_NOT_FOUND")

        if await self._has_active_application(student_id, scholarship_id):
            raise ConflictError(
                "You already have an active application for this scholarship",
                "DUPLICATE_APPLICATION",
            )

        try:
            application = Application(
                student_id=student_id,
                scholarship_id=scholarship_id,
                status=ApplicationStatus.DRAFT,
                remarks=APPLICATION_STARTED_REMARK,
                date_applied=naive_utc_now(),
            )
            self.db.add(application)
            self.db.flush()

            for requirement in scholarship.requirements:
                self.db.add(self._new_submission_row(application.id, requirement.id))

            self.db.commit()

        except IntegrityError:
            # Concurrent request won the partial unique index
            self.db.rollback()
            raise ConflictError(
                "You already have an active application for this scholarship",
                "DUPLICATE_APPLICATION",
            )
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Created application {application.id} for student {student_id} "
            f"on scholarship {scholarship_id} with {len(scholarship.requirements)} requirement(s)"
        )
        return application.id

    async def upload_requirement_file(
        self,
        application_id: int,
        requirement_id: int,
        file_name: str,
        content_type: Optional[str],
        data: bytes,
    ) -> UploadRequirementResponse:
        """
        Store a requirement file and mark its submission row as Submitted.

        The file is validated before it is stored. Once stored, any failure
        before commit removes it again; a file replaced by this upload is
        removed after commit.
        """
        self._validate_upload(content_type, data)

        application = await self._get_application(application_id)

        if not await self._is_requirement_linked(
            application.scholarship_id, requirement_id
        ):
            raise InvalidInputError(
                "Invalid requirement for this scholarship", "REQUIREMENT_NOT_LINKED"
            )

        stored_path = await self.storage.store(
            data, file_name, content_type or "application/octet-stream"
        )

        try:
            submission = await self._get_submission_row(application_id, requirement_id)
            replaced_path = submission.file_path if submission else None

            if submission is None:
                submission = self._new_submission_row(application_id, requirement_id)
                self.db.add(submission)

            now = naive_utc_now()
            submission.status = SubmissionStatus.SUBMITTED
            submission.file_name = file_name
            submission.file_path = stored_path
            submission.date_submitted = now
            application.date_applied = now

            self.db.commit()

        except Exception:
            self.db.rollback()
            await delete_files_quietly(self.storage, [stored_path])
            raise

        if replaced_path and replaced_path != stored_path:
            await delete_files_quietly(self.storage, [replaced_path])

        logger.info(
            f"Uploaded '{file_name}' for requirement {requirement_id} "
            f"of application {application_id}"
        )
        return UploadRequirementResponse(
            application_id=application_id,
            requirement_id=requirement_id,
            file_name=file_name,
            status=SubmissionStatus.SUBMITTED.value,
        )

    async def submit_application(
        self, application_id: int
    ) -> SubmitApplicationResponse:
        """Move a Draft application to Pending once every requirement has a file"""
        application = await self._get_application(application_id)

        if application.status != ApplicationStatus.DRAFT:
            raise InvalidInputError(
                f"Only draft applications can be submitted (current status: {application.status.value})",
                "INVALID_STATUS_TRANSITION",
            )

        missing = await self.get_missing_requirements(application)
        if missing:
            raise IncompleteSubmissionError(missing_requirements=missing)

        try:
            application.status = ApplicationStatus.PENDING
            application.remarks = APPLICATION_SUBMITTED_REMARK
            application.date_applied = naive_utc_now()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Application {application_id} submitted for review")
        return SubmitApplicationResponse(
            application_id=application.id,
            status=application.status.value,
            remarks=application.remarks,
        )

    async def get_missing_requirements(self, application: Application) -> List[str]:
        """Names of linked requirements without a submitted file, sorted by name"""
        result = self.db.execute(
            select(Requirement.requirement_name, SubmittedRequirement.status)
            .select_from(scholarship_requirements)
            .join(Requirement, Requirement.id == scholarship_requirements.c.requirement_id)
            .outerjoin(
                SubmittedRequirement,
                (SubmittedRequirement.requirement_id == Requirement.id)
                & (SubmittedRequirement.application_id == application.id),
            )
            .where(scholarship_requirements.c.scholarship_id == application.scholarship_id)
            .order_by(Requirement.requirement_name)
        )

        return [
            name
            for name, status in result.all()
            if status is None or status == SubmissionStatus.NOT_SUBMITTED
        ]

    # Read Operations
    async def get_application(self, application_id: int) -> ApplicationDetailResponse:
        """Application with scholarship info and requirement rows"""
        application = self.db.execute(
            select(Application)
            .where(Application.id == application_id)
            .options(selectinload(Application.scholarship))
        ).scalar_one_or_none()

        if not application:
            raise NotFoundError("Application not found", "APPLICATION_NOT_FOUND")

        return ApplicationDetailResponse(
            id=application.id,
            student_id=application.student_id,
            scholarship_id=application.scholarship_id,
            scholarship_name=application.scholarship.scholarship_name,
            scholarship_type=application.scholarship.type,
            status=application.status.value,
            remarks=application.remarks,
            date_applied=application.date_applied,
            requirements=await self.get_requirement_rows(application),
        )

    async def get_requirement_rows(
        self, application: Application
    ) -> List[SubmittedRequirementItem]:
        """Every requirement of the application's scholarship, with its submission if any"""
        result = self.db.execute(
            select(Requirement, SubmittedRequirement)
            .select_from(scholarship_requirements)
            .join(Requirement, Requirement.id == scholarship_requirements.c.requirement_id)
            .outerjoin(
                SubmittedRequirement,
                (SubmittedRequirement.requirement_id == Requirement.id)
                & (SubmittedRequirement.application_id == application.id),
            )
            .where(scholarship_requirements.c.scholarship_id == application.scholarship_id)
            .order_by(Requirement.requirement_name)
        )

        rows = []
        for requirement, submission in result.all():
            rows.append(
                SubmittedRequirementItem(
                    submission_id=submission.id if submission else None,
                    requirement_id=requirement.id,
                    requirement_name=requirement.requirement_name,
                    description=requirement.description,
                    file_name=submission.file_name if submission else None,
                    file_path=submission.file_path if submission else None,
                    status=(
                        submission.status.value
                        if submission
                        else SubmissionStatus.NOT_SUBMITTED.value
                    ),
                    date_submitted=submission.date_submitted if submission else None,
                )
            )
        return rows

    async def get_student_dashboard(self, student_id: int) -> StudentDashboardResponse:
        """Status counts, recent applications and outstanding requirements"""
        stats_row = self.db.execute(
            select(
                func.count(Application.id).label("total"),
                self._count_status(ApplicationStatus.PENDING).label("pending"),
                self._count_status(ApplicationStatus.UNDER_REVIEW).label("under_review"),
                self._count_status(ApplicationStatus.APPROVED).label("approved"),
                self._count_status(ApplicationStatus.REJECTED).label("rejected"),
            ).where(Application.student_id == student_id)
        ).one()

        recent_result = self.db.execute(
            select(Application, Scholarship)
            .join(Scholarship, Scholarship.id == Application.scholarship_id)
            .where(Application.student_id == student_id)
            .order_by(Application.date_applied.desc(), Application.id.desc())
            .limit(5)
        )
        recent_applications = [
            RecentApplicationItem(
                id=application.id,
                scholarship_id=scholarship.id,
                scholarship_name=scholarship.scholarship_name,
                scholarship_type=scholarship.type,
                sponsor=scholarship.sponsor,
                status=application.status.value,
                date_applied=application.date_applied,
            )
            for application, scholarship in recent_result.all()
        ]

        pending_result = self.db.execute(
            select(
                Application.id,
                Scholarship.scholarship_name,
                Requirement.id,
                Requirement.requirement_name,
            )
            .select_from(SubmittedRequirement)
            .join(Application, Application.id == SubmittedRequirement.application_id)
            .join(Scholarship, Scholarship.id == Application.scholarship_id)
            .join(Requirement, Requirement.id == SubmittedRequirement.requirement_id)
            .where(
                Application.student_id == student_id,
                SubmittedRequirement.status == SubmissionStatus.NOT_SUBMITTED,
            )
            .order_by(Application.date_applied.desc(), Requirement.requirement_name)
        )
        pending_requirements = [
            PendingRequirementItem(
                application_id=application_id,
                scholarship_name=scholarship_name,
                requirement_id=requirement_id,
                requirement_name=requirement_name,
            )
            for application_id, scholarship_name, requirement_id, requirement_name in pending_result.all()
        ]

        return StudentDashboardResponse(
            stats=DashboardStats(
                total=stats_row.total or 0,
                pending=stats_row.pending or 0,
                under_review=stats_row.under_review or 0,
                approved=stats_row.approved or 0,
                rejected=stats_row.rejected or 0,
            ),
            recent_applications=recent_applications,
            pending_requirements=pending_requirements,
        )

    async def list_scholarships(self) -> List[ScholarshipItem]:
        """All scholarships ordered by name"""
        result = self.db.execute(select(Scholarship).order_by(Scholarship.scholarship_name))
        return [ScholarshipItem.model_validate(s) for s in result.scalars().all()]

    async def get_scholarship_details(
        self, scholarship_id: int
    ) -> ScholarshipDetailResponse:
        """Scholarship with its linked requirements"""
        scholarship = await self._get_scholarship(scholarship_id)
        return ScholarshipDetailResponse(
            id=scholarship.id,
            scholarship_name=scholarship.scholarship_name,
            type=scholarship.type,
            description=scholarship.description,
            sponsor=scholarship.sponsor,
            eligibility_criteria=scholarship.eligibility_criteria,
            requirements=[
                RequirementItem.model_validate(r) for r in scholarship.requirements
            ],
        )

    async def get_submission_file(
        self, submission_id: int, student_id: Optional[int] = None
    ) -> Tuple[str, str, bytes]:
        """Display name, content type and bytes of an uploaded requirement file"""
        submission = self.db.execute(
            select(SubmittedRequirement)
            .where(SubmittedRequirement.id == submission_id)
            .options(selectinload(SubmittedRequirement.application))
        ).scalar_one_or_none()

        if not submission or not submission.file_path:
            raise NotFoundError("File not found", "FILE_NOT_FOUND")

        if student_id is not None and submission.application.student_id != student_id:
            raise AuthorizationError(
                "You can only access your own files", "NOT_APPLICATION_OWNER"
            )

        data = await self.storage.read(submission.file_path)
        file_name = submission.file_name or submission.file_path
        return file_name, self._guess_content_type(file_name), data

    async def ensure_application_owner(
        self, application_id: int, student_id: Optional[int]
    ) -> None:
        """Raise unless the application belongs to the given student"""
        application = await self._get_application(application_id)
        if student_id is None or application.student_id != student_id:
            raise AuthorizationError(
                "You can only access your own applications", "NOT_APPLICATION_OWNER"
            )

    # Helper Methods
    def _validate_upload(self, content_type: Optional[str], data: bytes) -> None:
        if (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
            raise InvalidInputError(
                "Invalid file type. Only JPEG, PNG, and PDF files are allowed.",
                "INVALID_FILE_TYPE",
            )
        if not data:
            raise InvalidInputError("No file uploaded", "EMPTY_FILE")
        if len(data) > settings.MAX_UPLOAD_SIZE_BYTES:
            raise InvalidInputError(
                "File size too large. Maximum size is 5MB.", "FILE_TOO_LARGE"
            )

    def _new_submission_row(
        self, application_id: int, requirement_id: int
    ) -> SubmittedRequirement:
        return SubmittedRequirement(
            application_id=application_id,
            requirement_id=requirement_id,
            status=SubmissionStatus.NOT_SUBMITTED,
        )

    async def _get_application(self, application_id: int) -> Application:
        application = self.db.get(Application, application_id)
        if not application:
            raise NotFoundError("Application not found", "APPLICATION_NOT_FOUND")
        return application

    async def _get_scholarship(self, scholarship_id: int) -> Scholarship:
        scholarship = self.db.execute(
            select(Scholarship)
            .where(Scholarship.id == scholarship_id)
            .options(selectinload(Scholarship.requirements))
        ).scalar_one_or_none()
        if not scholarship:
            raise NotFoundError("Scholarship not found", "SCHOLARSHIP_NOT_FOUND")
        return scholarship

    async def _has_active_application(
        self, student_id: int, scholarship_id: int
    ) -> bool:
        result = self.db.execute(
            select(Application.id).where(
                Application.student_id == student_id,
                Application.scholarship_id == scholarship_id,
                Application.status.in_(ACTIVE_APPLICATION_STATUSES),
            )
        )
        return result.first() is not None

    async def _is_requirement_linked(
        self, scholarship_id: int, requirement_id: int
    ) -> bool:
        result = self.db.execute(
            select(scholarship_requirements.c.requirement_id).where(
                scholarship_requirements.c.scholarship_id == scholarship_id,
                scholarship_requirements.c.requirement_id == requirement_id,
            )
        )
        return result.first() is not None

    async def _get_submission_row(
        self, application_id: int, requirement_id: int
    ) -> Optional[SubmittedRequirement]:
        result = self.db.execute(
            select(SubmittedRequirement).where(
                SubmittedRequirement.application_id == application_id,
                SubmittedRequirement.requirement_id == requirement_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _count_status(status: ApplicationStatus):
        return func.coalesce(
            func.sum(case((Application.status == status, 1), else_=0)), 0
        )

    @staticmethod
    def _guess_content_type(file_name: str) -> str:
        extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
        return {
            "pdf": "application/pdf",
            "png": "image/png",
            "jpg": "image/jpeg",
            "jpeg": "image/jpeg",
        }.get(extension, "application/octet-stream")


# Dependency injection for service provider
def get_application_service(
    db: Session = Depends(get_sync_session),
    storage: FileStorage = Depends(get_storage_service),
) -> ApplicationService:
    """Dependency to provide ApplicationService instance"""
    return ApplicationService(db, storage)
