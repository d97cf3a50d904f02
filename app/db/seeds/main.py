"""
Main seeding file that orchestrates all database seeding operations.

Catalog data is cleared and seeded before accounts so that applications
referencing students are removed first.
"""

from app.db.session import SessionLocal
from app.utils.logging import get_logger

from .catalog_seed import seed_catalog
from .users_seed import seed_users

logger = get_logger()


def seed_all_data():
    """Seed all database tables in dependency order."""

    db_session = SessionLocal()
    try:
        logger.info("Starting database seeding...")

        seed_catalog(db_session)
        seed_users(db_session)

        logger.info("Database seeding completed successfully!")
        return True

    except Exception as e:
        logger.error(f"Database seeding failed: {str(e)}")
        db_session.rollback()
        raise e
    finally:
        db_session.close()
