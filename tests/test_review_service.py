import pytest

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.db.models import (
    Application,
    ApplicationStatus,
    Evaluation,
    Scholarship,
    Student,
    SubmittedRequirement,
)
from app.schemas.admin.application_schemas import (
    ApplicationListQueryParams,
    CreateEvaluationRequest,
    UpdateEvaluationRequest,
)
from app.services.admin.review_service import (
    ReviewService,
    is_admin_transition_allowed,
    parse_application_status,
)
from app.services.student.application_service import ApplicationService
from app.utils.errors import InvalidInputError, NotFoundError


PDF_BYTES = b"%PDF-1.4 test document"


async def _application_with_file(
    application_service: ApplicationService, student, scholarship, requirement
) -> int:
    application_id = await application_service.create_application(
        student.id, scholarship.id
    )
    await application_service.upload_requirement_file(
        application_id, requirement.id, "form138.pdf", "application/pdf", PDF_BYTES
    )
    return application_id


class TestStatusRules:
    """Test status label parsing and admin transition rules."""

    @pytest.mark.parametrize("status", [s for s in ApplicationStatus])
    def test_accepts_every_label(self, status):
        """Every status label maps back to its member."""
        assert parse_application_status(status.value) is status

    @pytest.mark.parametrize("label", ["Closed", "pending", "", "UNDER_REVIEW"])
    def test_rejects_unknown_labels(self, label):
        """Anything else is invalid input."""
        with pytest.raises(InvalidInputError) as exc_info:
            parse_application_status(label)

        assert exc_info.value.error_code == "INVALID_STATUS"

    @pytest.mark.parametrize(
        "current,target,allowed",
        [
            (ApplicationStatus.DRAFT, ApplicationStatus.APPROVED, True),
            (ApplicationStatus.PENDING, ApplicationStatus.UNDER_REVIEW, True),
            (ApplicationStatus.UNDER_REVIEW, ApplicationStatus.REJECTED, True),
            (ApplicationStatus.PENDING, ApplicationStatus.DRAFT, False),
            (ApplicationStatus.APPROVED, ApplicationStatus.PENDING, False),
            (ApplicationStatus.REJECTED, ApplicationStatus.APPROVED, False),
            (ApplicationStatus.REJECTED, ApplicationStatus.REJECTED, True),
        ],
    )
    def test_admin_transitions(self, current, target, allowed):
        assert is_admin_transition_allowed(current, target) is allowed


class TestUpdateApplicationStatus:
    """Test admin status changes."""

    @pytest.mark.asyncio
    async def test_approve_skips_completeness_check(
        self,
        db_session: Session,
        application_service: ApplicationService,
        review_service: ReviewService,
        student: Student,
        tesda_scholarship: Scholarship,
    ):
        """An admin may approve a Draft with every requirement still missing."""
        application_id = await application_service.create_application(
            student.id, tesda_scholarship.id
        )

        response = await review_service.update_application_status(
            application_id, "Approved", "Approved by committee"
        )

        assert response.status == "Approved"
        assert response.remarks == "Approved by committee"
        db_session.expire_all()
        application = db_session.get(Application, application_id)
        assert application.status == ApplicationStatus.APPROVED
        assert application.remarks == "Approved by committee"

    @pytest.mark.asyncio
    async def test_review_path(
        self,
        application_service: ApplicationService,
        review_service: ReviewService,
        student: Student,
        open_scholarship: Scholarship,
    ):
        """Pending moves through Under Review to a decision."""
        application_id = await application_service.create_application(
            student.id, open_scholarship.id
        )
        await application_service.submit_application(application_id)

        for label in ["Under Review", "Pending", "Under Review", "Rejected"]:
            response = await review_service.update_application_status(
                application_id, label, None
            )
            assert response.status == label

    @pytest.mark.asyncio
    async def test_no_return_to_draft(
        self,
        application_service: ApplicationService,
        review_service: ReviewService,
        student: Student,
        open_scholarship: Scholarship,
    ):
        application_id = await application_service.create_application(
            student.id, open_scholarship.id
        )
        await application_service.submit_application(application_id)

        with pytest.raises(InvalidInputError) as exc_info:
            await review_service.update_application_status(application_id, "Draft", None)

        assert exc_info.value.error_code == "INVALID_STATUS_TRANSITION"

    @pytest.mark.asyncio
    async def test_decided_applications_are_final(
        self,
        application_service: ApplicationService,
        review_service: ReviewService,
        student: Student,
        open_scholarship: Scholarship,
    ):
        """Approved stays Approved, though its remarks may still be edited."""
        application_id = await application_service.create_application(
            student.id, open_scholarship.id
        )
        await review_service.update_application_status(application_id, "Approved", None)

        with pytest.raises(InvalidInputError) as exc_info:
            await review_service.update_application_status(
                application_id, "Rejected", "Changed our mind"
            )
        assert exc_info.value.error_code == "INVALID_STATUS_TRANSITION"

        response = await review_service.update_application_status(
            application_id, "Approved", "Award letter sent"
        )
        assert response.remarks == "Award letter sent"

    @pytest.mark.asyncio
    async def test_invalid_status_leaves_application_untouched(
        self,
        db_session: Session,
        application_service: ApplicationService,
        review_service: ReviewService,
        student: Student,
        open_scholarship: Scholarship,
    ):
        """Unknown status labels are rejected."""
        application_id = await application_service.create_application(
            student.id, open_scholarship.id
        )

        with pytest.raises(InvalidInputError):
            await review_service.update_application_status(application_id, "Closed", "x")

        db_session.expire_all()
        assert db_session.get(Application, application_id).status == ApplicationStatus.DRAFT

    @pytest.mark.asyncio
    async def test_unknown_application_raises_not_found(
        self, review_service: ReviewService
    ):
        """Status changes on missing applications fail."""
        with pytest.raises(NotFoundError):
            await review_service.update_application_status(999, "Approved", None)


class TestEvaluations:
    """Test recording and updating evaluations."""

    @pytest.mark.asyncio
    async def test_evaluation_for_unknown_application_is_accepted(
        self, review_service: ReviewService
    ):
        """Evaluations are not tied to an existing application."""
        evaluation = await review_service.create_evaluation(
            CreateEvaluationRequest(
                application_id=4242, evaluator_name="Dr. Reyes", score=88.5
            )
        )

        assert evaluation.id is not None
        assert evaluation.application_id == 4242
        assert evaluation.score == 88.5
        assert evaluation.date_evaluated is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [-15.0, 0.0, 1000.0])
    async def test_score_is_unbounded(self, review_service: ReviewService, score):
        """Any numeric score is stored as given."""
        evaluation = await review_service.create_evaluation(
            CreateEvaluationRequest(application_id=1, score=score)
        )

        assert evaluation.score == score

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(
        self, review_service: ReviewService
    ):
        """Only the provided fields change."""
        evaluation = await review_service.create_evaluation(
            CreateEvaluationRequest(
                application_id=1, evaluator_name="Panel", score=70, comments="Good"
            )
        )

        updated = await review_service.update_evaluation(
            evaluation.id, UpdateEvaluationRequest(score=95)
        )

        assert updated.score == 95
        assert updated.comments == "Good"
        assert updated.evaluator_name == "Panel"

    @pytest.mark.asyncio
    async def test_update_unknown_evaluation(self, review_service: ReviewService):
        """Updating a missing evaluation fails."""
        with pytest.raises(NotFoundError) as exc_info:
            await review_service.update_evaluation(999, UpdateEvaluationRequest(score=1))

        assert exc_info.value.error_code == "EVALUATION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_list_evaluations_newest_first(self, review_service: ReviewService):
        """Evaluations are listed per application, newest first."""
        first = await review_service.create_evaluation(
            CreateEvaluationRequest(application_id=7, comments="first")
        )
        second = await review_service.create_evaluation(
            CreateEvaluationRequest(application_id=7, comments="second")
        )
        await review_service.create_evaluation(
            CreateEvaluationRequest(application_id=8, comments="other")
        )

        evaluations = await review_service.list_evaluations(7)

        assert [e.id for e in evaluations] == [second.id, first.id]


class TestDeleteApplication:
    """Test removing applications with their dependents."""

    @pytest.mark.asyncio
    async def test_delete_removes_rows_evaluations_and_files(
        self,
        db_session: Session,
        application_service: ApplicationService,
        review_service: ReviewService,
        storage,
        student: Student,
        tesda_scholarship: Scholarship,
        requirements,
    ):
        """Submission rows, evaluations and stored files go with the application."""
        application_id = await _application_with_file(
            application_service, student, tesda_scholarship, requirements["Form 138"]
        )
        await review_service.create_evaluation(
            CreateEvaluationRequest(application_id=application_id, score=90)
        )
        stored_paths = list(storage.files)

        await review_service.delete_application(application_id)

        db_session.expire_all()
        assert db_session.get(Application, application_id) is None
        assert (
            db_session.execute(
                select(func.count()).select_from(SubmittedRequirement)
            ).scalar_one()
            == 0
        )
        assert await review_service.list_evaluations(application_id) == []
        assert storage.files == {}
        assert storage.deleted == stored_paths

        with pytest.raises(NotFoundError):
            await application_service.get_application(application_id)

    @pytest.mark.asyncio
    async def test_delete_tolerates_missing_stored_file(
        self,
        db_session: Session,
        application_service: ApplicationService,
        review_service: ReviewService,
        storage,
        student: Student,
        tesda_scholarship: Scholarship,
        requirements,
    ):
        """A file already gone from storage does not fail the deletion."""
        application_id = await _application_with_file(
            application_service, student, tesda_scholarship, requirements["Form 138"]
        )
        storage.files.clear()

        await review_service.delete_application(application_id)

        db_session.expire_all()
        assert db_session.get(Application, application_id) is None

    @pytest.mark.asyncio
    async def test_delete_unknown_application_rolls_back(
        self, db_session: Session, review_service: ReviewService
    ):
        """Evaluations recorded for a missing application survive a failed delete."""
        await review_service.create_evaluation(
            CreateEvaluationRequest(application_id=999, comments="orphan")
        )

        with pytest.raises(NotFoundError):
            await review_service.delete_application(999)

        db_session.expire_all()
        assert (
            db_session.execute(select(func.count()).select_from(Evaluation)).scalar_one()
            == 1
        )

    @pytest.mark.asyncio
    async def test_student_may_reapply_after_deletion(
        self,
        application_service: ApplicationService,
        review_service: ReviewService,
        student: Student,
        tesda_scholarship: Scholarship,
    ):
        """Deleting the active application frees the slot."""
        application_id = await application_service.create_application(
            student.id, tesda_scholarship.id
        )
        await review_service.delete_application(application_id)

        new_id = await application_service.create_application(
            student.id, tesda_scholarship.id
        )

        assert new_id is not None


class TestApplicationQueries:
    """Test admin listing and detail views."""

    @pytest.mark.asyncio
    async def test_list_filters_by_status_and_scholarship(
        self,
        application_service: ApplicationService,
        review_service: ReviewService,
        student: Student,
        other_student: Student,
        tesda_scholarship: Scholarship,
        open_scholarship: Scholarship,
    ):
        """Filters narrow the list."""
        tesda_id = await application_service.create_application(
            student.id, tesda_scholarship.id
        )
        open_id = await application_service.create_application(
            other_student.id, open_scholarship.id
        )
        await application_service.submit_application(open_id)

        everything = await review_service.list_applications(ApplicationListQueryParams())
        pending = await review_service.list_applications(
            ApplicationListQueryParams(status="Pending")
        )
        tesda_only = await review_service.list_applications(
            ApplicationListQueryParams(scholarship_id=tesda_scholarship.id)
        )

        assert {a.id for a in everything} == {tesda_id, open_id}
        assert [a.id for a in pending] == [open_id]
        assert [a.id for a in tesda_only] == [tesda_id]
        assert tesda_only[0].student_name == "Maria Santos"

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_status_filter(
        self, review_service: ReviewService
    ):
        """Status filters use the same labels as status changes."""
        with pytest.raises(InvalidInputError):
            await review_service.list_applications(
                ApplicationListQueryParams(status="Archived")
            )

    @pytest.mark.asyncio
    async def test_details_include_student_requirements_and_evaluations(
        self,
        application_service: ApplicationService,
        review_service: ReviewService,
        student: Student,
        tesda_scholarship: Scholarship,
        requirements,
    ):
        """The reviewer view combines applicant, requirement rows and evaluations."""
        application_id = await _application_with_file(
            application_service, student, tesda_scholarship, requirements["Form 138"]
        )
        await review_service.create_evaluation(
            CreateEvaluationRequest(application_id=application_id, score=75)
        )

        details = await review_service.get_application_details(application_id)

        assert details.student.student_number == "STU-2025-1001"
        assert details.scholarship_name == "TESDA Grant"
        assert [(r.requirement_name, r.status) for r in details.requirements] == [
            ("Form 138", "Submitted"),
            ("Indigency", "Not Submitted"),
        ]
        assert [e.score for e in details.evaluations] == [75]

    @pytest.mark.asyncio
    async def test_details_of_unknown_application(self, review_service: ReviewService):
        with pytest.raises(NotFoundError):
            await review_service.get_application_details(999)
