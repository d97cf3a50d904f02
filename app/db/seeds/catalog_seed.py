from sqlalchemy.orm import Session
from sqlalchemy import delete

from app.db.models import (
    Application,
    Evaluation,
    Requirement,
    Scholarship,
    SubmittedRequirement,
    scholarship_requirements,
)
from app.utils.logging import get_logger

logger = get_logger()


def seed_catalog(db_session: Session):
    """Seed requirements and scholarships - clear existing and add new"""

    # Clear dependent rows first
    db_session.execute(delete(Evaluation))
    db_session.execute(delete(SubmittedRequirement))
    db_session.execute(delete(Application))
    db_session.execute(delete(scholarship_requirements))
    db_session.execute(delete(Scholarship))
    db_session.execute(delete(Requirement))
    db_session.commit()

    requirements = {
        name: Requirement(requirement_name=name, description=description)
        for name, description in [
            ("Form 138", "Report card from the previous school year"),
            ("Indigency", "Certificate of indigency issued by the barangay"),
            ("Certificate of Enrollment", "Proof of enrollment for the current term"),
            ("Birth Certificate", "PSA-issued birth certificate"),
        ]
    }
    db_session.add_all(requirements.values())

    scholarships = [
        Scholarship(
            scholarship_name="TESDA Grant",
            type="Government",
            description="Technical-vocational training grant",
            sponsor="TESDA",
            eligibility_criteria="Filipino citizen, at least 18 years old",
            requirements=[requirements["Form 138"], requirements["Indigency"]],
        ),
        Scholarship(
            scholarship_name="CHED Scholarship",
            type="Government",
            description="Merit scholarship for undergraduate students",
            sponsor="CHED",
            eligibility_criteria="General weighted average of at least 85%",
            requirements=[
                requirements["Form 138"],
                requirements["Certificate of Enrollment"],
                requirements["Birth Certificate"],
            ],
        ),
    ]
    db_session.add_all(scholarships)
    db_session.commit()

    logger.info(
        f"Seeded {len(requirements)} requirements and {len(scholarships)} scholarships"
    )
