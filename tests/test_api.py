import pytest

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.config.settings import settings
from app.db.models import Scholarship, Student, UserAccount
from app.db.session import get_sync_session
from app.main import create_application
from app.services.admin.dashboard_service import DashboardService
from app.services.storage_service import get_storage_service
from app.utils.auth import AuthUtils


API = settings.API_PREFIX
PDF_BYTES = b"%PDF-1.4 test document"


@pytest.fixture
def client(session_factory, storage) -> TestClient:
    """Application wired to the in-memory database and storage."""
    application = create_application()

    def override_session():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_sync_session] = override_session
    application.dependency_overrides[get_storage_service] = lambda: storage
    return TestClient(application)


def _student_headers(student: Student) -> dict:
    token = AuthUtils.generate_access_token(
        user_id=student.user_account.id,
        username=student.user_account.username,
        role="Student",
        student_id=student.id,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_headers(student) -> dict:
    return _student_headers(student)


@pytest.fixture
def admin_headers(admin_account: UserAccount) -> dict:
    token = AuthUtils.generate_access_token(
        user_id=admin_account.id, username=admin_account.username, role="Admin"
    )
    return {"Authorization": f"Bearer {token}"}


def _upload(client, headers, application_id, requirement_id, name, content, content_type):
    return client.post(
        f"{API}/student/applications/{application_id}/upload",
        headers=headers,
        data={"requirement_id": str(requirement_id)},
        files={"file": (name, content, content_type)},
    )


class TestAuthentication:
    """Test token checks on the HTTP surface."""

    def test_health_needs_no_token(self, client: TestClient):
        response = client.get(f"{API}/shared/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "healthy"
        assert "X-Request-ID" in response.headers

    def test_missing_token_is_unauthorized(self, client: TestClient):
        """Protected routes answer 401 with the error envelope."""
        response = client.get(f"{API}/student/dashboard")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["status"] == "error"
        assert body["meta"]["error_code"] == "UNAUTHORIZED"

    def test_invalid_token_is_unauthorized(self, client: TestClient):
        response = client.get(
            f"{API}/student/dashboard", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401

    def test_student_cannot_use_admin_routes(
        self, client: TestClient, student_headers: dict
    ):
        response = client.get(f"{API}/admin/applications", headers=student_headers)

        assert response.status_code == 403
        assert response.json()["meta"]["error_code"] == "FORBIDDEN"

    def test_admin_cannot_use_student_routes(
        self, client: TestClient, admin_headers: dict
    ):
        response = client.get(f"{API}/student/dashboard", headers=admin_headers)

        assert response.status_code == 403

    def test_register_login_and_me(self, client: TestClient):
        """A registered student can log in and read their own account."""
        register = client.post(
            f"{API}/shared/auth/register",
            json={
                "username": "ana_reyes",
                "password": "secret123",
                "firstName": "Ana",
                "lastName": "Reyes",
                "emailAddress": "ana.reyes@email.com",
            },
        )
        assert register.status_code == 201
        assert register.json()["data"]["studentNumber"].startswith("STU-")

        login = client.post(
            f"{API}/shared/auth/login",
            json={"username": "ana_reyes", "password": "secret123"},
        )
        assert login.status_code == 200
        login_data = login.json()["data"]
        assert login_data["user"]["role"] == "Student"

        me = client.get(
            f"{API}/shared/auth/me",
            headers={"Authorization": f"Bearer {login_data['token']}"},
        )
        assert me.status_code == 200
        assert me.json()["data"]["username"] == "ana_reyes"

    def test_login_with_wrong_password(self, client: TestClient, student: Student):
        response = client.post(
            f"{API}/shared/auth/login",
            json={"username": "maria_santos", "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json()["success"] is False


class TestStudentApplicationFlow:
    """Test the student application endpoints end to end."""

    def test_create_upload_and_submit(
        self,
        client: TestClient,
        student_headers: dict,
        admin_headers: dict,
        tesda_scholarship: Scholarship,
        requirements,
    ):
        """An incomplete submission reports the missing documents, then succeeds."""
        created = client.post(
            f"{API}/student/applications",
            headers=student_headers,
            json={"scholarshipId": tesda_scholarship.id},
        )
        assert created.status_code == 201
        application_id = created.json()["data"]["applicationId"]

        uploaded = _upload(
            client,
            student_headers,
            application_id,
            requirements["Form 138"].id,
            "form138.pdf",
            PDF_BYTES,
            "application/pdf",
        )
        assert uploaded.status_code == 200
        assert uploaded.json()["data"]["status"] == "Submitted"

        incomplete = client.post(
            f"{API}/student/applications/{application_id}/submit",
            headers=student_headers,
        )
        assert incomplete.status_code == 400
        body = incomplete.json()
        assert body["meta"]["error_code"] == "INCOMPLETE_SUBMISSION"
        assert body["data"]["missingRequirements"] == ["Indigency"]

        _upload(
            client,
            student_headers,
            application_id,
            requirements["Indigency"].id,
            "indigency.png",
            b"\x89PNG\r\n\x1a\n",
            "image/png",
        )
        submitted = client.post(
            f"{API}/student/applications/{application_id}/submit",
            headers=student_headers,
        )
        assert submitted.status_code == 200
        assert submitted.json()["data"]["status"] == "Pending"

        pending = client.get(
            f"{API}/admin/applications",
            headers=admin_headers,
            params={"status": "Pending"},
        )
        assert [a["id"] for a in pending.json()["data"]] == [application_id]

        approved = client.put(
            f"{API}/admin/applications/{application_id}/status",
            headers=admin_headers,
            json={"status": "Approved", "remarks": "Congratulations"},
        )
        assert approved.status_code == 200

        details = client.get(
            f"{API}/student/applications/{application_id}", headers=student_headers
        )
        assert details.json()["data"]["status"] == "Approved"
        assert details.json()["data"]["remarks"] == "Congratulations"

    def test_duplicate_application_is_rejected(
        self, client: TestClient, student_headers: dict, tesda_scholarship: Scholarship
    ):
        payload = {"scholarshipId": tesda_scholarship.id}
        client.post(f"{API}/student/applications", headers=student_headers, json=payload)

        response = client.post(
            f"{API}/student/applications", headers=student_headers, json=payload
        )

        assert response.status_code == 400
        assert response.json()["meta"]["error_code"] == "DUPLICATE_APPLICATION"

    def test_missing_scholarship_id_is_a_validation_error(
        self, client: TestClient, student_headers: dict
    ):
        response = client.post(
            f"{API}/student/applications", headers=student_headers, json={}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["meta"]["error_code"] == "VALIDATION_ERROR"
        assert body["errors"]

    def test_disallowed_file_type(
        self,
        client: TestClient,
        storage,
        student_headers: dict,
        tesda_scholarship: Scholarship,
        requirements,
    ):
        created = client.post(
            f"{API}/student/applications",
            headers=student_headers,
            json={"scholarshipId": tesda_scholarship.id},
        )
        application_id = created.json()["data"]["applicationId"]

        response = _upload(
            client,
            student_headers,
            application_id,
            requirements["Form 138"].id,
            "notes.txt",
            b"plain text",
            "text/plain",
        )

        assert response.status_code == 400
        assert response.json()["meta"]["error_code"] == "INVALID_FILE_TYPE"
        assert storage.files == {}

    def test_other_students_application_is_forbidden(
        self,
        client: TestClient,
        student_headers: dict,
        other_student: Student,
        tesda_scholarship: Scholarship,
    ):
        created = client.post(
            f"{API}/student/applications",
            headers=student_headers,
            json={"scholarshipId": tesda_scholarship.id},
        )
        application_id = created.json()["data"]["applicationId"]

        response = client.get(
            f"{API}/student/applications/{application_id}",
            headers=_student_headers(other_student),
        )

        assert response.status_code == 403

    def test_download_uploaded_file(
        self,
        client: TestClient,
        student_headers: dict,
        admin_headers: dict,
        tesda_scholarship: Scholarship,
        requirements,
    ):
        """Students and admins can download an uploaded requirement file."""
        created = client.post(
            f"{API}/student/applications",
            headers=student_headers,
            json={"scholarshipId": tesda_scholarship.id},
        )
        application_id = created.json()["data"]["applicationId"]
        _upload(
            client,
            student_headers,
            application_id,
            requirements["Form 138"].id,
            "form138.pdf",
            PDF_BYTES,
            "application/pdf",
        )
        details = client.get(
            f"{API}/student/applications/{application_id}", headers=student_headers
        ).json()["data"]
        submission_id = next(
            r["submissionId"] for r in details["requirements"] if r["fileName"]
        )

        student_download = client.get(
            f"{API}/student/files/{submission_id}", headers=student_headers
        )
        admin_download = client.get(
            f"{API}/admin/files/{submission_id}", headers=admin_headers
        )

        assert student_download.status_code == 200
        assert student_download.content == PDF_BYTES
        assert student_download.headers["content-type"].startswith("application/pdf")
        assert admin_download.content == PDF_BYTES

    def test_scholarship_catalog(
        self, client: TestClient, student_headers: dict, tesda_scholarship: Scholarship
    ):
        listing = client.get(f"{API}/student/scholarships", headers=student_headers)
        details = client.get(
            f"{API}/student/scholarships/{tesda_scholarship.id}", headers=student_headers
        )

        assert [s["scholarshipName"] for s in listing.json()["data"]] == ["TESDA Grant"]
        assert [r["requirementName"] for r in details.json()["data"]["requirements"]] == [
            "Form 138",
            "Indigency",
        ]


class TestAdminEndpoints:
    """Test admin endpoints through the HTTP surface."""

    def test_unknown_application_is_not_found(
        self, client: TestClient, admin_headers: dict
    ):
        response = client.get(f"{API}/admin/applications/999", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["meta"]["error_code"] == "APPLICATION_NOT_FOUND"

    def test_invalid_status_is_rejected(
        self,
        client: TestClient,
        student_headers: dict,
        admin_headers: dict,
        tesda_scholarship: Scholarship,
    ):
        created = client.post(
            f"{API}/student/applications",
            headers=student_headers,
            json={"scholarshipId": tesda_scholarship.id},
        )
        application_id = created.json()["data"]["applicationId"]

        response = client.put(
            f"{API}/admin/applications/{application_id}/status",
            headers=admin_headers,
            json={"status": "Closed"},
        )

        assert response.status_code == 400
        assert response.json()["meta"]["error_code"] == "INVALID_STATUS"

    @pytest.mark.parametrize(
        "path_template,payload",
        [
            ("admin/students/{student_id}", {"firstName": None}),
            ("admin/students/{student_id}", {"emailAddress": None}),
            ("admin/scholarships/{scholarship_id}", {"scholarshipName": None}),
        ],
    )
    def test_clearing_required_field_is_a_validation_error(
        self,
        client: TestClient,
        admin_headers: dict,
        student: Student,
        tesda_scholarship: Scholarship,
        path_template: str,
        payload: dict,
    ):
        path = path_template.format(
            student_id=student.id, scholarship_id=tesda_scholarship.id
        )

        response = client.put(f"{API}/{path}", headers=admin_headers, json=payload)

        assert response.status_code == 400
        assert response.json()["meta"]["error_code"] == "VALIDATION_ERROR"

    def test_evaluation_accepts_any_application_id(
        self, client: TestClient, admin_headers: dict
    ):
        response = client.post(
            f"{API}/admin/evaluations",
            headers=admin_headers,
            json={"applicationId": 999, "evaluatorName": "Panel", "score": -5},
        )

        assert response.status_code == 201
        assert response.json()["data"]["score"] == -5

    def test_scholarship_with_applications_cannot_be_deleted(
        self,
        client: TestClient,
        student_headers: dict,
        admin_headers: dict,
        tesda_scholarship: Scholarship,
    ):
        client.post(
            f"{API}/student/applications",
            headers=student_headers,
            json={"scholarshipId": tesda_scholarship.id},
        )

        response = client.delete(
            f"{API}/admin/scholarships/{tesda_scholarship.id}", headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["meta"]["error_code"] == "SCHOLARSHIP_HAS_APPLICATIONS"

    def test_delete_application_then_not_found(
        self,
        client: TestClient,
        storage,
        student_headers: dict,
        admin_headers: dict,
        tesda_scholarship: Scholarship,
        requirements,
    ):
        created = client.post(
            f"{API}/student/applications",
            headers=student_headers,
            json={"scholarshipId": tesda_scholarship.id},
        )
        application_id = created.json()["data"]["applicationId"]
        _upload(
            client,
            student_headers,
            application_id,
            requirements["Form 138"].id,
            "form138.pdf",
            PDF_BYTES,
            "application/pdf",
        )

        deleted = client.delete(
            f"{API}/admin/applications/{application_id}", headers=admin_headers
        )
        again = client.get(
            f"{API}/admin/applications/{application_id}", headers=admin_headers
        )

        assert deleted.status_code == 200
        assert again.status_code == 404
        assert storage.files == {}

    def test_dashboard_stats(
        self,
        client: TestClient,
        admin_headers: dict,
        student: Student,
        tesda_scholarship: Scholarship,
    ):
        response = client.get(f"{API}/admin/dashboard/stats", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {
            "totalStudents": 1,
            "totalApplications": 0,
            "pendingApplications": 0,
            "totalScholarships": 1,
        }

    def test_store_failure_is_a_generic_server_error(
        self, client: TestClient, admin_headers: dict, monkeypatch
    ):
        """Database failures surface as 500 without driver details."""

        async def failing_stats(self):
            raise OperationalError("SELECT count(*)", {}, Exception("disk I/O error"))

        monkeypatch.setattr(DashboardService, "get_dashboard_stats", failing_stats)

        response = client.get(f"{API}/admin/dashboard/stats", headers=admin_headers)

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["meta"]["error_code"] == "DATABASE_ERROR"
        assert "disk I/O" not in response.text
