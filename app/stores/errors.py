import asyncio
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import DuplicateRecord, StoreFailure

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(operation: str, unique: tuple[str, str] | None = None):
    """Translate driver/ORM errors raised inside the block into StoreFailure.

    ``unique`` is a (resource, field) pair reported as DuplicateRecord when
    an IntegrityError escapes the block.
    """
    try:
        yield
    except IntegrityError as e:
        if unique is None:
            logger.exception("Integrity error during %s", operation)
            raise StoreFailure(f"{operation} failed") from e
        raise DuplicateRecord(*unique) from e
    except (SQLAlchemyError, OSError) as e:
        logger.exception("Store error during %s", operation)
        raise StoreFailure(f"{operation} failed") from e


async def with_store_deadline(awaitable, timeout: float | None):
    """Await a store call; exceeding the deadline is a hard StoreFailure."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error("Store call exceeded %ss deadline", timeout)
        raise StoreFailure("Store operation timed out") from e
