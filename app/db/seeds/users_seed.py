from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import delete

from app.config.settings import settings
from app.db.models import Student, UserAccount, UserRole
from app.utils.auth import AuthUtils
from app.utils.logging import get_logger

logger = get_logger()

DEFAULT_STUDENT_PASSWORD = "password123"


def seed_users(db_session: Session):
    """Seed the admin account and sample students - clear existing and add new"""

    # Clear existing accounts and students
    db_session.execute(delete(UserAccount))
    db_session.execute(delete(Student))
    db_session.commit()

    admin = UserAccount(
        username=settings.SEED_ADMIN_USERNAME,
        password_hash=AuthUtils.hash_password(settings.SEED_ADMIN_PASSWORD),
        role=UserRole.ADMIN,
    )
    db_session.add(admin)

    students_data = [
        ("STU-2025-1001", "Maria", "Santos", "female", date(2002, 3, 15), "Computer Science", "3rd Year", "09171234567", "maria.santos@email.com", "maria_santos"),
        ("STU-2025-1002", "Juan", "Cruz", "male", date(2001, 8, 22), "Engineering", "4th Year", "09181234567", "juan.cruz@email.com", "juan_cruz"),
        ("STU-2025-1003", "Ana", "Reyes", "female", date(2003, 1, 10), "Business Administration", "2nd Year", "09191234567", "ana.reyes@email.com", "ana_reyes"),
    ]

    password_hash = AuthUtils.hash_password(DEFAULT_STUDENT_PASSWORD)
    for (
        student_number,
        first_name,
        last_name,
        gender,
        birthdate,
        program,
        year_level,
        contact_number,
        email_address,
        username,
    ) in students_data:
        student = Student(
            student_number=student_number,
            first_name=first_name,
            last_name=last_name,
            gender=gender,
            birthdate=birthdate,
            program=program,
            year_level=year_level,
            contact_number=contact_number,
            email_address=email_address,
        )
        student.user_account = UserAccount(
            username=username, password_hash=password_hash, role=UserRole.STUDENT
        )
        db_session.add(student)

    db_session.commit()
    logger.info(f"Seeded admin account and {len(students_data)} students")
