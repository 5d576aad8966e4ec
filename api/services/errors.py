"""Domain errors raised by the catalog services.

Routes never see SQLAlchemy exceptions for expected failures: store-level
conflicts detected while flushing are translated here as well.
"""

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

# PostgreSQL aborts one side of a write-write race with these SQLSTATEs
# (serialization_failure, deadlock_detected).
WRITE_CONFLICT_SQLSTATES = frozenset({"40001", "40P01"})


class CatalogError(Exception):
    """Base class for expected catalog failures."""


class NotFoundError(CatalogError):
    """A referenced series or character does not exist."""


class ConflictError(CatalogError):
    """A uniqueness rule was violated or a concurrent write collided."""


class InvalidArgumentError(CatalogError):
    """The request is well-formed JSON but not acceptable for the operation."""


def is_write_conflict(exc: DBAPIError) -> bool:
    """True if the store aborted the transaction because of a concurrent writer."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in WRITE_CONFLICT_SQLSTATES


async def flush_or_conflict(db: AsyncSession, message: str) -> None:
    """Flush pending changes, reporting store-detected conflicts as ConflictError."""
    try:
        await db.flush()
    except (IntegrityError, StaleDataError) as e:
        raise ConflictError(message) from e
    except DBAPIError as e:
        if is_write_conflict(e):
            raise ConflictError(message) from e
        raise
