from __future__ import annotations

import logging
import os

from packages.shared.env import parse_bool
from services.api.app.db.database import get_engine
from services.api.app.db.models import Base

logger = logging.getLogger(__name__)


def init_db() -> bool:
    """Create missing tables unless STOREFRONT_DB_AUTO_CREATE is switched off."""

    if not parse_bool(os.getenv("STOREFRONT_DB_AUTO_CREATE", "true")):
        logger.info("Skipping table creation (STOREFRONT_DB_AUTO_CREATE is off)")
        return False

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    logger.debug("Tables ensured on %s", engine.url.render_as_string(hide_password=True))
    return True
