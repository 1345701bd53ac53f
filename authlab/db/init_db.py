import logging

from sqlalchemy.engine import Engine

from authlab.db.base import Base

logger = logging.getLogger(__name__)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def reset_db(engine: Engine) -> None:
    """Drop every table and recreate the schema. Admin tooling only."""
    logger.warning("Resetting database at %s", engine.url.render_as_string(hide_password=True))
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
