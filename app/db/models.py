from typing import List, Optional
from datetime import datetime, date
from sqlalchemy import (
    String,
    Integer,
    Float,
    Text,
    ForeignKey,
    Enum,
    Index,
    func,
    text,
    UniqueConstraint,
    DateTime,
    Date,
    Table,
    Column,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import enum


class Base(DeclarativeBase):
    pass


# Enums
class UserRole(enum.Enum):
    STUDENT = "Student"
    ADMIN = "Admin"


class ApplicationStatus(enum.Enum):
    DRAFT = "Draft"
    PENDING = "Pending"
    UNDER_REVIEW = "Under Review"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class SubmissionStatus(enum.Enum):
    NOT_SUBMITTED = "Not Submitted"
    SUBMITTED = "Submitted"
    VERIFIED = "Verified"
    REJECTED = "Rejected"


# A student may hold only one of these per scholarship at a time
ACTIVE_APPLICATION_STATUSES = (ApplicationStatus.DRAFT, ApplicationStatus.PENDING)


# Base model with common audit fields
class AuditMixin:
    """Mixin for common audit fields"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


scholarship_requirements = Table(
    "scholarship_requirements",
    Base.metadata,
    Column(
        "scholarship_id",
        Integer,
        ForeignKey("scholarships.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "requirement_id",
        Integer,
        ForeignKey("requirements.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


# Models
class Student(Base, AuditMixin):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(String(20))
    birthdate: Mapped[Optional[date]] = mapped_column(Date)
    program: Mapped[Optional[str]] = mapped_column(String(200))
    year_level: Mapped[Optional[str]] = mapped_column(String(50))
    contact_number: Mapped[Optional[str]] = mapped_column(String(30))
    email_address: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)

    # Relationships
    user_account: Mapped[Optional["UserAccount"]] = relationship(
        back_populates="student"
    )
    applications: Mapped[List["Application"]] = relationship(back_populates="student")

    # Constraints
    __table_args__ = (
        Index("idx_students_student_number", "student_number"),
        Index("idx_students_email_address", "email_address"),
    )


class UserAccount(Base, AuditMixin):
    __tablename__ = "user_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole), default=UserRole.STUDENT, nullable=False
    )
    student_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("students.id", ondelete="CASCADE"), unique=True
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Relationships
    student: Mapped[Optional["Student"]] = relationship(back_populates="user_account")

    # Constraints
    __table_args__ = (Index("idx_user_accounts_username", "username"),)


class Requirement(Base, AuditMixin):
    __tablename__ = "requirements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    requirement_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    scholarships: Mapped[List["Scholarship"]] = relationship(
        secondary=scholarship_requirements, back_populates="requirements"
    )


class Scholarship(Base, AuditMixin):
    __tablename__ = "scholarships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    scholarship_name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text)
    sponsor: Mapped[Optional[str]] = mapped_column(String(200))
    eligibility_criteria: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    requirements: Mapped[List["Requirement"]] = relationship(
        secondary=scholarship_requirements,
        back_populates="scholarships",
        order_by="Requirement.requirement_name",
    )
    applications: Mapped[List["Application"]] = relationship(
        back_populates="scholarship"
    )

    # Constraints
    __table_args__ = (Index("idx_scholarships_name", "scholarship_name"),)


class Application(Base, AuditMixin):
    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id", ondelete="NO ACTION"), nullable=False
    )
    scholarship_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("scholarships.id", ondelete="NO ACTION"), nullable=False
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus), default=ApplicationStatus.DRAFT, nullable=False
    )
    remarks: Mapped[Optional[str]] = mapped_column(Text)
    date_applied: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    # Relationships
    student: Mapped["Student"] = relationship(back_populates="applications")
    scholarship: Mapped["Scholarship"] = relationship(back_populates="applications")
    submitted_requirements: Mapped[List["SubmittedRequirement"]] = relationship(
        back_populates="application", passive_deletes=True
    )

    # Constraints
    __table_args__ = (
        Index("idx_applications_student_id", "student_id"),
        Index("idx_applications_scholarship_id", "scholarship_id"),
        Index("idx_applications_status", "status"),
        Index("idx_applications_date_applied", "date_applied"),
        # At most one Draft/Pending application per student and scholarship
        Index(
            "uq_applications_active_student_scholarship",
            "student_id",
            "scholarship_id",
            unique=True,
            postgresql_where=text("status IN ('DRAFT', 'PENDING')"),
            sqlite_where=text("status IN ('DRAFT', 'PENDING')"),
        ),
    )


class SubmittedRequirement(Base, AuditMixin):
    __tablename__ = "submitted_requirements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False
    )
    requirement_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("requirements.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[SubmissionStatus] = mapped_column(
        Enum(SubmissionStatus), default=SubmissionStatus.NOT_SUBMITTED, nullable=False
    )
    file_name: Mapped[Optional[str]] = mapped_column(String(255))
    file_path: Mapped[Optional[str]] = mapped_column(String(500))
    date_submitted: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Relationships
    application: Mapped["Application"] = relationship(
        back_populates="submitted_requirements"
    )
    requirement: Mapped["Requirement"] = relationship()

    # Constraints
    __table_args__ = (
        UniqueConstraint(
            "application_id", "requirement_id", name="uq_sub_req_application_requirement"
        ),
        Index("idx_sub_req_application_id", "application_id"),
        Index("idx_sub_req_requirement_id", "requirement_id"),
        Index("idx_sub_req_status", "status"),
    )


class Evaluation(Base, AuditMixin):
    __tablename__ = "evaluations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # No foreign key: evaluations accept any application id
    application_id: Mapped[int] = mapped_column(Integer, nullable=False)
    evaluator_name: Mapped[Optional[str]] = mapped_column(String(200))
    score: Mapped[Optional[float]] = mapped_column(Float)
    comments: Mapped[Optional[str]] = mapped_column(Text)
    date_evaluated: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    # Constraints
    __table_args__ = (
        Index("idx_evaluations_application_id", "application_id"),
        Index("idx_evaluations_date_evaluated", "date_evaluated"),
    )
