import random
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models import Student, UserAccount, UserRole
from app.schemas.auth_schemas import RegisterRequest
from app.utils.auth import AuthUtils
from app.utils.datetime_utils import naive_utc_now
from app.utils.errors import AuthenticationError, ConflictError
from app.utils.logging import get_logger

logger = get_logger()

STUDENT_NUMBER_ATTEMPTS = 10


class AuthService:
    """Authentication service for registration, login and token issuance"""

    def __init__(self, db_session: Session):
        self.db = db_session

    async def register_student(
        self, registration: RegisterRequest
    ) -> Tuple[Student, UserAccount]:
        """Create a student record and its Student account in one transaction"""
        await self._ensure_unique_identity(
            registration.username, registration.email_address
        )

        try:
            student = Student(
                student_number=await self._generate_unique_student_number(),
                first_name=registration.first_name,
                last_name=registration.last_name,
                gender=registration.gender,
                birthdate=registration.birthdate,
                program=registration.program,
                year_level=registration.year_level,
                contact_number=registration.contact_number,
                email_address=registration.email_address,
            )
            self.db.add(student)
            self.db.flush()

            account = UserAccount(
                username=registration.username,
                password_hash=AuthUtils.hash_password(registration.password),
                role=UserRole.STUDENT,
                student_id=student.id,
            )
            self.db.add(account)
            self.db.commit()

        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                "Username or email address already exists", "ACCOUNT_EXISTS"
            )
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Registered student {student.student_number} as '{account.username}'")
        return student, account

    async def authenticate_user(
        self, username: str, password: str
    ) -> Optional[UserAccount]:
        """Return the account when the password matches its stored hash"""
        account = self.db.execute(
            select(UserAccount).where(UserAccount.username == username)
        ).scalar_one_or_none()

        if not account or not AuthUtils.verify_password(password, account.password_hash):
            return None

        return account

    async def login_user(self, username: str, password: str) -> Tuple[str, UserAccount]:
        """Login user and generate an access token"""
        account = await self.authenticate_user(username, password)
        if not account:
            raise AuthenticationError(
                "Invalid username or password", "INVALID_CREDENTIALS"
            )

        token = AuthUtils.generate_access_token(
            user_id=account.id,
            username=account.username,
            role=account.role.value,
            student_id=account.student_id,
        )

        account.last_login = naive_utc_now()
        self.db.commit()

        logger.info(f"User '{account.username}' logged in")
        return token, account

    async def get_user_by_id(self, user_id: int) -> Optional[UserAccount]:
        return self.db.get(UserAccount, user_id)

    # Helper Methods
    async def _ensure_unique_identity(self, username: str, email: str) -> None:
        existing = self.db.execute(
            select(UserAccount.id).where(UserAccount.username == username)
        ).first()
        if existing:
            raise ConflictError("Username already exists", "USERNAME_EXISTS")

        existing = self.db.execute(
            select(Student.id).where(Student.email_address == email)
        ).first()
        if existing:
            raise ConflictError("Email address already exists", "EMAIL_EXISTS")

    async def _generate_unique_student_number(self) -> str:
        for _ in range(STUDENT_NUMBER_ATTEMPTS):
            candidate = self.generate_student_number()
            taken = self.db.execute(
                select(Student.id).where(Student.student_number == candidate)
            ).first()
            if not taken:
                return candidate
        raise ConflictError(
            "Could not allocate a student number, please retry",
            "STUDENT_NUMBER_EXHAUSTED",
        )

    @staticmethod
    def generate_student_number(year: Optional[int] = None) -> str:
        """Student number of the form STU-<year>-<4 digits>"""
        year = year or naive_utc_now().year
        return f"STU-{year}-{random.randint(1000, 9999)}"
