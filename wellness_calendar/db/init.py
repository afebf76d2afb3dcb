"""Initialize database tables."""
import logging

from sqlmodel import SQLModel, Session, select

from wellness_calendar.models.activity import Activity  # noqa: F401
from wellness_calendar.models.preset import UserPreset  # noqa: F401
from wellness_calendar.models.template import ActivityTemplate
from wellness_calendar.services.template_service import SYSTEM_TEMPLATES

logger = logging.getLogger(__name__)


def seed_system_templates(engine):
    """Insert the system templates that are missing."""
    with Session(engine) as session:
        existing = set(session.exec(
            select(ActivityTemplate.id).where(ActivityTemplate.user_id.is_(None))
        ).all())
        missing = [template for template in SYSTEM_TEMPLATES if template["id"] not in existing]
        for template in missing:
            session.add(ActivityTemplate(**template))
        session.commit()
    if missing:
        logger.info(f"[DB INIT] Seeded {len(missing)} system templates")


def init_db(engine=None):
    """Create all tables in the database and seed system templates."""
    if engine is None:
        from wellness_calendar.db.config import engine
    logger.info("[DB INIT] Creating all tables...")
    SQLModel.metadata.create_all(engine)
    seed_system_templates(engine)
    logger.info("[DB INIT] Tables created successfully.")


if __name__ == "__main__":
    init_db()
