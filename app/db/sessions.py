import logging
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from app.core.config import settings
from app.db.base import Base

logger = logging.getLogger("app.db.session")
if not logging.getLogger().handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

DATABASE_URL = settings.DATABASE_URL
logger.info("Initializing DB session (checking configuration)")
logger.info("DATABASE_URL configured: %s", bool(DATABASE_URL))

if not DATABASE_URL:
    logger.error(
        "DATABASE_URL is not configured. Set the DATABASE_URL env var."
    )
    raise RuntimeError(
        "DATABASE_URL is not configured. Set the DATABASE_URL env var."
    )

# sqlite connections are shared with the threadpool that runs sync handlers
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# enable pool_pre_ping to avoid stale/closed connections
engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(fail_fast: bool = settings.DB_FAIL_FAST) -> bool:
    """Check connectivity and create missing tables.

    Returns True when the database is ready. When ``fail_fast`` is set a
    connection failure is re-raised so the process refuses to start;
    otherwise it is logged and the app keeps serving (every store call will
    then surface its own error notice).
    """
    # Import models so they're registered with Base
    import app.models  # noqa: F401

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.exception("Database connection failed")
        if fail_fast:
            raise
        return False

    logger.info("Database connected successfully")
    return True


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
