import pytest
from datetime import date
from typing import Dict, Generator, List

import bcrypt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import (
    Base,
    Requirement,
    Scholarship,
    Student,
    UserAccount,
    UserRole,
)
from app.db.session import enable_sqlite_foreign_keys
from app.services.admin.review_service import ReviewService
from app.services.storage_service import FileStorage, build_object_name
from app.services.student.application_service import ApplicationService
from app.utils.errors import NotFoundError


# Test database setup
TEST_DATABASE_URL = "sqlite://"
TEST_PASSWORD = "password123"


class InMemoryFileStorage(FileStorage):
    """Storage double that keeps files in a dict and records deletions."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.deleted: List[str] = []

    async def store(self, data, suggested_name, content_type="application/octet-stream"):
        path = build_object_name(suggested_name)
        self.files[path] = data
        return path

    async def delete(self, path):
        self.deleted.append(path)
        self.files.pop(path, None)

    async def read(self, path):
        if path not in self.files:
            raise NotFoundError("Stored file not found", "FILE_NOT_FOUND")
        return self.files[path]


@pytest.fixture
def test_engine():
    """Create a fresh in-memory database per test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(bind=test_engine, class_=Session, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    """Create a database session for each test."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def storage() -> InMemoryFileStorage:
    return InMemoryFileStorage()


@pytest.fixture
def application_service(db_session, storage) -> ApplicationService:
    return ApplicationService(db_session, storage)


@pytest.fixture
def review_service(db_session, storage) -> ReviewService:
    return ReviewService(db_session, storage)


# Test data factories
def _password_hash(password: str = TEST_PASSWORD) -> str:
    # Low cost factor keeps the suite fast; verification is cost-independent
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=4)).decode()


def make_student(
    db_session: Session,
    number: str,
    first_name: str,
    last_name: str,
    username: str,
) -> Student:
    student = Student(
        student_number=number,
        first_name=first_name,
        last_name=last_name,
        gender="female",
        birthdate=date(2002, 3, 15),
        program="Computer Science",
        year_level="3rd Year",
        contact_number="09171234567",
        email_address=f"{username}@email.com",
    )
    student.user_account = UserAccount(
        username=username, password_hash=_password_hash(), role=UserRole.STUDENT
    )
    db_session.add(student)
    db_session.commit()
    return student


@pytest.fixture
def requirements(db_session) -> Dict[str, Requirement]:
    """Form 138 (id 1) and Indigency (id 2)."""
    form_138 = Requirement(
        requirement_name="Form 138", description="Report card from the previous year"
    )
    indigency = Requirement(
        requirement_name="Indigency", description="Certificate of indigency"
    )
    db_session.add(form_138)
    db_session.flush()
    db_session.add(indigency)
    db_session.commit()
    return {"Form 138": form_138, "Indigency": indigency}


@pytest.fixture
def tesda_scholarship(db_session, requirements) -> Scholarship:
    """TESDA Grant requiring Form 138 and Indigency."""
    scholarship = Scholarship(
        scholarship_name="TESDA Grant",
        type="Government",
        description="Technical-vocational training grant",
        sponsor="TESDA",
        eligibility_criteria="Filipino citizen",
        requirements=[requirements["Form 138"], requirements["Indigency"]],
    )
    db_session.add(scholarship)
    db_session.commit()
    return scholarship


@pytest.fixture
def open_scholarship(db_session) -> Scholarship:
    """Scholarship without any required documents."""
    scholarship = Scholarship(
        scholarship_name="Open Grant", type="Private", sponsor="Acme Foundation"
    )
    db_session.add(scholarship)
    db_session.commit()
    return scholarship


@pytest.fixture
def student(db_session) -> Student:
    return make_student(db_session, "STU-2025-1001", "Maria", "Santos", "maria_santos")


@pytest.fixture
def other_student(db_session) -> Student:
    return make_student(db_session, "STU-2025-1002", "Juan", "Cruz", "juan_cruz")


@pytest.fixture
def admin_account(db_session) -> UserAccount:
    account = UserAccount(
        username="admin", password_hash=_password_hash(), role=UserRole.ADMIN
    )
    db_session.add(account)
    db_session.commit()
    return account


