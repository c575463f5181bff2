# backend/database.py
import time
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.orm.exc import StaleDataError

from config import settings
from services.errors import TransactionTimeoutError, ConcurrencyConflictError

# Load .env into os.environ (populate_db and alembic read it too)
load_dotenv()

logger = logging.getLogger(__name__)

# 1. Connection URL from the environment (.env / settings), SQLite locally
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# 2. Hosted Postgres hands out postgres://, SQLAlchemy requires postgresql://
if SQLALCHEMY_DATABASE_URL and SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

# 3. Dialect specific connection arguments
if "sqlite" in SQLALCHEMY_DATABASE_URL:
    connect_args = {"check_same_thread": False} # SQLite only
else:
    connect_args = {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    # Register every model on Base.metadata before creating tables
    import models.users, models.log, models.catalog  # noqa: F401
    import models.product, models.unit, models.movement  # noqa: F401
    Base.metadata.create_all(bind=engine)


# ---- TRANSACTIONS ----

# SQLSTATE codes raised by PostgreSQL when lock_timeout / statement_timeout fire
_PG_TIMEOUT_CODES = {"55P03", "57014"}


@dataclass(frozen=True)
class TransactionOptions:
    """Bounds applied to one unit of work.

    max_wait: seconds a statement may wait to acquire a row lock.
    timeout: seconds the whole transaction may run before it is aborted.
    """
    max_wait: float
    timeout: float


def default_transaction_options() -> TransactionOptions:
    return TransactionOptions(
        max_wait=settings.TX_MAX_WAIT_SECONDS,
        timeout=settings.TX_TIMEOUT_SECONDS,
    )


def batch_transaction_options() -> TransactionOptions:
    return TransactionOptions(
        max_wait=settings.BATCH_TX_MAX_WAIT_SECONDS,
        timeout=settings.BATCH_TX_TIMEOUT_SECONDS,
    )


class TransactionScope:
    """Handle yielded by `transaction()`; tracks the execution deadline."""

    def __init__(self, db: Session, options: TransactionOptions):
        self.db = db
        self.options = options
        self.started = time.monotonic()

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started

    def check_deadline(self) -> None:
        if self.elapsed > self.options.timeout:
            raise TransactionTimeoutError(timeout=self.options.timeout, elapsed=self.elapsed)


def _apply_local_timeouts(db: Session, options: TransactionOptions) -> None:
    if db.get_bind().dialect.name != "postgresql":
        return
    # SET LOCAL does not accept bind parameters; values are plain integers
    db.execute(text(f"SET LOCAL lock_timeout = {int(options.max_wait * 1000)}"))
    db.execute(text(f"SET LOCAL statement_timeout = {int(options.timeout * 1000)}"))


def _is_timeout(exc: OperationalError) -> bool:
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code in _PG_TIMEOUT_CODES:
        return True
    # SQLite reports busy-timeout expiry this way
    return "database is locked" in str(orig)


@contextmanager
def transaction(db: Session, options: Optional[TransactionOptions] = None) -> Iterator[TransactionScope]:
    """Run the enclosed block as one all-or-nothing unit of work.

    Commits when the block exits normally and the deadline still holds,
    otherwise rolls back and re-raises. Lock/statement timeouts and stale
    version counters are surfaced as typed infrastructure errors.
    """
    options = options or default_transaction_options()
    scope = TransactionScope(db, options)
    try:
        _apply_local_timeouts(db, options)
        yield scope
        db.flush()
        scope.check_deadline()
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Transaction rolled back on stale row version: %s", exc)
        raise ConcurrencyConflictError(str(exc)) from exc
    except OperationalError as exc:
        db.rollback()
        if _is_timeout(exc):
            logger.warning("Transaction rolled back on timeout after %.2fs", scope.elapsed)
            raise TransactionTimeoutError(timeout=options.timeout, elapsed=scope.elapsed) from exc
        raise
    except BaseException:
        db.rollback()
        raise
