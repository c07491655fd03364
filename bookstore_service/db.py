"""
Connection lifecycle for the book store.

``ConnectionManager`` owns the pooled SQLAlchemy engine. It is built once
by the entry point, handed to the app and the repository, and shut down
once when the process exits.
"""
import logging
import time
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

from .errors import FatalStartupError, StoreError
from .models import Base

logger = logging.getLogger(__name__)


def build_database_url(config):
    """
    DATABASE_URL wins when set; otherwise assemble a PostgreSQL URL from the
    DB_* settings.
    """
    if getattr(config, "DATABASE_URL", None):
        return config.DATABASE_URL

    return URL.create(
        "postgresql+psycopg2",
        username=config.DB_USER,
        password=config.DB_PASSWORD,
        host=config.DB_HOST,
        port=config.DB_PORT,
        database=config.DB_NAME,
    )


def describe_db_error(exc):
    # DBAPIError wraps the driver exception; its own str() drags in the SQL
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc).strip()


def connect_with_retry(ping, attempts=10, delay=3.0, sleep=time.sleep):
    """
    Call ``ping`` until it succeeds, at most ``attempts`` times, sleeping
    ``delay`` seconds between failures.

    Returns the attempt number that succeeded. Raises FatalStartupError
    once the budget is spent.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            ping()
        except StoreError as e:
            last_error = e
            logger.warning(
                "Failed to ping database (attempt %d/%d): %s", attempt, attempts, e
            )
            if attempt < attempts:
                sleep(delay)
            continue

        logger.info("Connected to database on attempt %d", attempt)
        return attempt

    raise FatalStartupError(
        f"failed to connect to database after {attempts} attempts: {last_error}"
    ) from last_error


class ConnectionManager:
    def __init__(self, url, max_open=25, max_idle=20, max_lifetime=300, echo=False):
        if max_open < max_idle:
            raise ValueError("max_open must be >= max_idle")

        # pool_size connections stay idle in the pool; overflow ones are
        # closed on return, so max_open bounds everything checked out.
        self.engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=max_idle,
            max_overflow=max_open - max_idle,
            pool_recycle=max_lifetime,
            echo=echo,
            future=True,
        )
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )
        self._closed = False

    @classmethod
    def from_config(cls, config):
        return cls(
            build_database_url(config),
            max_open=config.DB_MAX_OPEN_CONNS,
            max_idle=config.DB_MAX_IDLE_CONNS,
            max_lifetime=config.DB_CONN_MAX_LIFETIME,
            echo=getattr(config, "SQLALCHEMY_ECHO", False),
        )

    @property
    def closed(self):
        return self._closed

    def _ensure_open(self):
        if self._closed:
            raise StoreError("connection pool is closed")

    def ping(self):
        """Round-trip ``SELECT 1``. Raises StoreError when the store is unreachable."""
        self._ensure_open()
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StoreError(describe_db_error(e)) from e

    def initialize(self, attempts=10, delay=3.0, sleep=time.sleep):
        return connect_with_retry(self.ping, attempts=attempts, delay=delay, sleep=sleep)

    def create_schema(self):
        self._ensure_open()
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error("Failed to create schema: %s", describe_db_error(e))
            raise StoreError(describe_db_error(e)) from e

    @contextmanager
    def session_scope(self):
        """
        Yield a session bound to the pool; commit on success, roll back on
        any error. Driver failures come out as StoreError.
        """
        self._ensure_open()
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Database operation failed: %s", describe_db_error(e))
            raise StoreError(describe_db_error(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def pool_status(self):
        pool = self.engine.pool
        return {
            "size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }

    def shutdown(self):
        if self._closed:
            return
        logger.debug("Pool status at shutdown: %s", self.pool_status())
        self.engine.dispose()
        self._closed = True
        logger.info("Database connection pool closed.")
