import argparse

from .models import Base
from .seeds.main import seed_all_data
from .session import engine

from app.utils.logging import get_logger

logger = get_logger()


def create_tables():
    Base.metadata.create_all(engine)
    logger.info(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")


def drop_tables():
    Base.metadata.drop_all(engine)
    logger.info("Dropped all tables.")


def seed_db():
    """Seed scholarships, requirements, the admin account and sample students"""
    seed_all_data()


def reset_db():
    logger.info("Resetting database...")
    drop_tables()
    create_tables()
    seed_db()
    logger.info("Database reset complete.")


COMMANDS = {
    "create": create_tables,
    "drop": drop_tables,
    "seed": seed_db,
    "reset": reset_db,
}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Scholarship portal database tasks")
    parser.add_argument("command", choices=sorted(COMMANDS), nargs="?", default="reset")
    COMMANDS[parser.parse_args().command]()
