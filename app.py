import logging

import config
from utils.logging_config import setup_logging
from utils.config_validator import validate_or_exit

from db import create_db_and_tables, get_redis
from repositories.session import SessionContext
from utils.shipping_zones_loader import get_shipping_zones

logger = logging.getLogger(__name__)


def silence_sql_loggers() -> None:
    # Catalog lookups run on every cart read; SQL logging would flood the log
    for logger_name in ['aiosqlite', 'sqlalchemy', 'sqlalchemy.engine', 'sqlalchemy.pool', 'sqlalchemy.orm']:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


async def init_app() -> None:
    """
    Startup wiring for an embedding application (HTTP layer, worker, ...).

    Configures logging, validates configuration (exits on error), loads the
    shipping zones once and creates the catalog tables if missing.
    """
    setup_logging()
    silence_sql_loggers()
    validate_or_exit(config)

    zones = get_shipping_zones()
    logger.info(f"[App] {len(zones)} shipping zones configured, primary cart instance '{config.PRIMARY_CART_INSTANCE}'")

    await create_db_and_tables()
    logger.info(f"[App] Cart engine ready ({config.RUNTIME_ENVIRONMENT.value})")


def open_session_context(session_id: str, customer_key: str | None = None) -> SessionContext:
    """
    Session context for one user session, backed by the shared Redis client.

    Args:
        session_id: Id of the user session
        customer_key: Slug/email of the logged-in customer, None for anonymous sessions
    """
    return SessionContext(get_redis(), session_id, customer_key=customer_key)
