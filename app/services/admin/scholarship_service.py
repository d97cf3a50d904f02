from typing import List, Sequence, Type

from fastapi import Depends
from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from app.db.models import (
    Application,
    Requirement,
    Scholarship,
)
from app.db.session import get_sync_session
from app.schemas.admin.catalog_schemas import (
    CreateScholarshipRequest,
    ScholarshipListItem,
    UpdateScholarshipRequest,
)
from app.schemas.student.scholarship_schemas import (
    RequirementItem,
    ScholarshipDetailResponse,
)
from app.utils.errors import ConflictError, InvalidInputError, NotFoundError
from app.utils.logging import get_logger

logger = get_logger()


class ScholarshipService:
    """Service provider for scholarship management"""

    def __init__(self, db_session: Session):
        self.db = db_session

    async def get_scholarship_by_id(self, scholarship_id: int) -> Scholarship:
        """Get scholarship with requirements or raise NotFoundError"""
        scholarship = self.db.execute(
            select(Scholarship)
            .where(Scholarship.id == scholarship_id)
            .options(selectinload(Scholarship.requirements))
        ).scalar_one_or_none()

        if not scholarship:
            raise NotFoundError("Scholarship not found", "SCHOLARSHIP_NOT_FOUND")
        return scholarship

    async def list_scholarships(self) -> List[ScholarshipListItem]:
        """All scholarships with application and requirement counts"""
        application_counts = (
            select(
                Application.scholarship_id,
                func.count(Application.id).label("application_count"),
            )
            .group_by(Application.scholarship_id)
            .subquery()
        )

        result = self.db.execute(
            select(
                Scholarship,
                func.coalesce(application_counts.c.application_count, 0),
            )
            .outerjoin(
                application_counts,
                Scholarship.id == application_counts.c.scholarship_id,
            )
            .options(selectinload(Scholarship.requirements))
            .order_by(Scholarship.scholarship_name)
        )

        return [
            self._create_scholarship_response(
                scholarship,
                ScholarshipListItem,
                application_count=application_count,
                requirement_count=len(scholarship.requirements),
            )
            for scholarship, application_count in result.all()
        ]

    async def create_scholarship(
        self, scholarship_data: CreateScholarshipRequest
    ) -> ScholarshipDetailResponse:
        """Create a scholarship and link its requirements"""
        requirements = await self._get_requirements(scholarship_data.requirement_ids)

        try:
            scholarship = Scholarship(
                scholarship_name=scholarship_data.scholarship_name,
                type=scholarship_data.type,
                description=scholarship_data.description,
                sponsor=scholarship_data.sponsor,
                eligibility_criteria=scholarship_data.eligibility_criteria,
            )
            scholarship.requirements = list(requirements)

            self.db.add(scholarship)
            self.db.commit()
            self.db.refresh(scholarship)
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Created scholarship {scholarship.id} '{scholarship.scholarship_name}' "
            f"with {len(requirements)} requirement(s)"
        )
        return self._create_scholarship_response(scholarship)

    async def update_scholarship(
        self, scholarship_id: int, scholarship_data: UpdateScholarshipRequest
    ) -> ScholarshipDetailResponse:
        """Partial update; requirement links are replaced when ids are given"""
        scholarship = await self.get_scholarship_by_id(scholarship_id)
        changes = scholarship_data.model_dump(exclude_unset=True)
        requirement_ids = changes.pop("requirement_ids", None)

        requirements = None
        if requirement_ids is not None:
            requirements = await self._get_requirements(requirement_ids)

        try:
            for field_name, value in changes.items():
                setattr(scholarship, field_name, value)
            if requirements is not None:
                scholarship.requirements = list(requirements)

            self.db.commit()
            self.db.refresh(scholarship)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Updated scholarship {scholarship_id}")
        return self._create_scholarship_response(scholarship)

    async def delete_scholarship(self, scholarship_id: int) -> None:
        """Delete a scholarship unless applications reference it"""
        scholarship = await self.get_scholarship_by_id(scholarship_id)

        application_count = self.db.execute(
            select(func.count(Application.id)).where(
                Application.scholarship_id == scholarship_id
            )
        ).scalar_one()

        if application_count > 0:
            raise ConflictError(
                f"Cannot delete scholarship with {application_count} existing application{'s' if application_count != 1 else ''}",
                "SCHOLARSHIP_HAS_APPLICATIONS",
            )

        try:
            # Unlink requirements first; the requirements themselves are shared
            scholarship.requirements.clear()
            self.db.flush()
            self.db.delete(scholarship)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Deleted scholarship {scholarship_id}")

    # Helper Methods
    async def _get_requirements(self, requirement_ids: List[int]) -> Sequence[Requirement]:
        """Load requirements by id; unknown ids are rejected"""
        unique_ids = list(dict.fromkeys(requirement_ids))
        if not unique_ids:
            return []

        requirements = (
            self.db.execute(select(Requirement).where(Requirement.id.in_(unique_ids)))
            .scalars()
            .all()
        )

        found_ids = {r.id for r in requirements}
        unknown_ids = [i for i in unique_ids if i not in found_ids]
        if unknown_ids:
            raise InvalidInputError(
                f"Unknown requirement id(s): {', '.join(str(i) for i in unknown_ids)}",
                "UNKNOWN_REQUIREMENT",
            )
        return requirements

    def _create_scholarship_response(
        self,
        scholarship: Scholarship,
        response_cls: Type[ScholarshipDetailResponse] = ScholarshipDetailResponse,
        **extra,
    ) -> ScholarshipDetailResponse:
        """Create standardized scholarship response data"""
        return response_cls(
            **extra,
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


# Dependency injection for service provider
def get_scholarship_service(
    db: Session = Depends(get_sync_session),
) -> ScholarshipService:
    """Dependency to provide ScholarshipService instance"""
    return ScholarshipService(db)
