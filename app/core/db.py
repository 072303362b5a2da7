import logging

from tortoise import Tortoise, connections

from app.core.config import DB_URL, GENERATE_SCHEMAS, LOG_LEVEL

log = logging.getLogger(__name__)

# Set logging level for Tortoise ORM
logging.getLogger('tortoise').setLevel(LOG_LEVEL)

# Define all models modules for the ORM
MODELS_MODULES = [
    "app.models.menu",
    "app.models.stock",
    "app.models.order",
]

async def init_db(db_url: str = DB_URL, generate_schemas: bool = GENERATE_SCHEMAS):
    """Initializes the Tortoise ORM connection and optionally generates schemas."""
    try:
        await Tortoise.init(
            db_url=db_url,
            modules={"models": MODELS_MODULES},
        )
        if generate_schemas:
            # Generate the database schema (create tables)
            await Tortoise.generate_schemas()
        log.info("Database connection established.")
    except Exception:
        log.exception("FATAL ERROR: Could not connect to database.")
        # Re-raise to prevent the application from starting without a database
        raise

async def close_db():
    """Closes all database connections."""
    await connections.close_all()
    log.info("Database connections closed.")
