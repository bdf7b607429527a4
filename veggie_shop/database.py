"""
Database engine, session factory and transaction handling
"""
from contextlib import contextmanager
from typing import Iterator

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from veggie_shop.config import settings
from veggie_shop.exceptions import ShopError, TransactionError

logger = structlog.get_logger(__name__)


def _engine_options(url: str) -> dict:
    """Extra engine arguments for the configured backend"""
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}

    options = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every checkout sees an empty database
        options["poolclass"] = StaticPool
    return options


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    **_engine_options(settings.DATABASE_URL)
)

if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """Request-scoped database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@retry(
    stop=stop_after_attempt(settings.MAX_RETRIES),
    wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
    retry=retry_if_exception_type(OperationalError),
    reraise=True
)
def init_db() -> None:
    """
    Create tables and optionally seed the catalog

    Retries while the database is still coming up.
    """
    from veggie_shop import models  # noqa: F401  (registers tables on Base)
    from veggie_shop.seed import seed_catalog

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready", url=engine.url.render_as_string(hide_password=True))

    if settings.SEED_DATA:
        db = SessionLocal()
        try:
            seed_catalog(db)
        finally:
            db.close()


@contextmanager
def unit_of_work(db: Session, operation: str, **context) -> Iterator[Session]:
    """
    Run a block of reads and writes as one transaction

    The transaction commits when the block exits cleanly. On any exception
    it is rolled back and the original exception re-raised. Store failures
    (raised while flushing or committing) surface as TransactionError with
    the driver error chained. A failing rollback is logged and never
    replaces the original error.

    Args:
        db: Session the block works with
        operation: Name used in log records
        **context: Extra key/value pairs bound to every log record
    """
    log = logger.bind(operation=operation, **context)
    try:
        yield db
        db.commit()
    except Exception as exc:
        if isinstance(exc, ShopError):
            log.warning("Transaction aborted", error=str(exc), error_type=type(exc).__name__)
        else:
            log.error("Transaction failed", error=str(exc), error_type=type(exc).__name__)

        try:
            db.rollback()
            log.info("Transaction rolled back")
        except Exception as rollback_exc:
            log.error("Failed to rollback transaction", error=str(rollback_exc))

        if isinstance(exc, SQLAlchemyError):
            raise TransactionError(f"{operation} failed: {exc}") from exc
        raise
