from __future__ import annotations

import contextlib
import logging
import typing as t

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import Conflict, StorageError

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def unit_of_work(session: Session, *, conflict: str = "That record already exists") -> t.Iterator[Session]:
    """Run the block in one transaction on `session`.

    Any exception rolls the transaction back before it propagates. Database
    errors do not escape as such: a constraint violation becomes Conflict
    with the given message, anything else becomes an opaque StorageError and
    the original is logged.
    """
    try:
        with session.begin():
            yield session
    except IntegrityError as e:
        logger.warning("integrity violation", extra={"error": str(e.orig)})
        raise Conflict(conflict) from e
    except SQLAlchemyError as e:
        logger.exception("transaction failed", extra={"error_type": type(e).__name__})
        raise StorageError() from e
