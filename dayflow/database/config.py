"""
Database configuration (Tortoise ORM).
Supports SQLite (dev) and PostgreSQL (production).
"""

import logging

from dayflow.config import config

logger = logging.getLogger(__name__)


def get_tortoise_db_url() -> str:
    """
    Get database URL with proper scheme for Tortoise ORM.

    Tortoise ORM requires 'postgres://' scheme, but Railway/Render
    provide 'postgresql://' URLs. This function ensures conversion.
    """
    url = config.database_url

    # postgresql:// -> postgres://
    if url.startswith("postgresql://"):
        url = "postgres://" + url[len("postgresql://") :]
        logger.info("Converted postgresql:// to postgres:// for Tortoise ORM")

    logger.info(
        f"Database URL scheme: {url.split('://')[0] if '://' in url else 'unknown'}"
    )

    return url


TORTOISE_ORM = {
    "connections": {"default": get_tortoise_db_url()},
    "apps": {
        "models": {
            "models": ["dayflow.database.models"],
            "default_connection": "default",
        },
    },
}
