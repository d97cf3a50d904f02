from fastapi import Depends
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.db.models import Application, ApplicationStatus, Scholarship, Student
from app.db.session import get_sync_session
from app.schemas.admin.catalog_schemas import DashboardStatsResponse


class DashboardService:
    """Headline counts for the admin dashboard"""

    def __init__(self, db_session: Session):
        self.db = db_session

    async def get_dashboard_stats(self) -> DashboardStatsResponse:
        return DashboardStatsResponse(
            total_students=self._count(select(func.count(Student.id))),
            total_applications=self._count(select(func.count(Application.id))),
            pending_applications=self._count(
                select(func.count(Application.id)).where(
                    Application.status == ApplicationStatus.PENDING
                )
            ),
            total_scholarships=self._count(select(func.count(Scholarship.id))),
        )

    def _count(self, query) -> int:
        return self.db.execute(query).scalar_one() or 0


def get_dashboard_service(
    db: Session = Depends(get_sync_session),
) -> DashboardService:
    """Dependency to provide DashboardService instance"""
    return DashboardService(db)
