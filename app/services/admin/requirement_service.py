from typing import List

from fastapi import Depends
from sqlalchemy import select, func, delete
from sqlalchemy.orm import Session

from app.db.models import Requirement, SubmittedRequirement, scholarship_requirements
from app.db.session import get_sync_session
from app.schemas.admin.catalog_schemas import (
    CreateRequirementRequest,
    RequirementListItem,
    UpdateRequirementRequest,
)
from app.schemas.student.scholarship_schemas import RequirementItem
from app.services.storage_service import (
    FileStorage,
    delete_files_quietly,
    get_storage_service,
)
from app.utils.errors import NotFoundError
from app.utils.logging import get_logger

logger = get_logger()


class RequirementService:
    """Service provider for requirement definitions"""

    def __init__(self, db_session: Session, storage: FileStorage):
        self.db = db_session
        self.storage = storage

    async def get_requirement_by_id(self, requirement_id: int) -> Requirement:
        requirement = self.db.get(Requirement, requirement_id)
        if not requirement:
            raise NotFoundError("Requirement not found", "REQUIREMENT_NOT_FOUND")
        return requirement

    async def list_requirements(self) -> List[RequirementListItem]:
        """All requirements with the number of scholarships using each"""
        usage = (
            select(
                scholarship_requirements.c.requirement_id,
                func.count(scholarship_requirements.c.scholarship_id).label(
                    "scholarship_count"
                ),
            )
            .group_by(scholarship_requirements.c.requirement_id)
            .subquery()
        )

        result = self.db.execute(
            select(Requirement, func.coalesce(usage.c.scholarship_count, 0))
            .outerjoin(usage, Requirement.id == usage.c.requirement_id)
            .order_by(Requirement.requirement_name)
        )

        return [
            RequirementListItem(
                id=requirement.id,
                requirement_name=requirement.requirement_name,
                description=requirement.description,
                scholarship_count=scholarship_count,
            )
            for requirement, scholarship_count in result.all()
        ]

    async def create_requirement(
        self, requirement_data: CreateRequirementRequest
    ) -> RequirementItem:
        try:
            requirement = Requirement(
                requirement_name=requirement_data.requirement_name,
                description=requirement_data.description,
            )
            self.db.add(requirement)
            self.db.commit()
            self.db.refresh(requirement)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Created requirement {requirement.id} '{requirement.requirement_name}'")
        return RequirementItem.model_validate(requirement)

    async def update_requirement(
        self, requirement_id: int, requirement_data: UpdateRequirementRequest
    ) -> RequirementItem:
        requirement = await self.get_requirement_by_id(requirement_id)

        try:
            for field_name, value in requirement_data.model_dump(
                exclude_unset=True
            ).items():
                setattr(requirement, field_name, value)
            self.db.commit()
            self.db.refresh(requirement)
        except Exception:
            self.db.rollback()
            raise

        return RequirementItem.model_validate(requirement)

    async def delete_requirement(self, requirement_id: int) -> None:
        """
        Delete a requirement with its scholarship links and submission rows.

        Unlike scholarships and students, there is no guard on existing
        applications. Files of removed submissions are deleted after commit.
        """
        requirement = await self.get_requirement_by_id(requirement_id)

        try:
            file_paths = [
                path
                for path in self.db.execute(
                    select(SubmittedRequirement.file_path).where(
                        SubmittedRequirement.requirement_id == requirement_id
                    )
                ).scalars()
                if path
            ]

            self.db.execute(
                delete(SubmittedRequirement).where(
                    SubmittedRequirement.requirement_id == requirement_id
                )
            )
            requirement.scholarships.clear()
            self.db.flush()
            self.db.delete(requirement)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        await delete_files_quietly(self.storage, file_paths)
        logger.info(
            f"Deleted requirement {requirement_id} and {len(file_paths)} stored file(s)"
        )


# Dependency injection for service provider
def get_requirement_service(
    db: Session = Depends(get_sync_session),
    storage: FileStorage = Depends(get_storage_service),
) -> RequirementService:
    """Dependency to provide RequirementService instance"""
    return RequirementService(db, storage)
