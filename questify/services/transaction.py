"""
Transaction boundary for ledger operations.
Either every write of an operation is committed or none is.
"""
import logging
from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from questify.exceptions import QuestifyException, LedgerOperationException

logger = logging.getLogger("questify.transaction")


@contextmanager
def ledger_transaction(db: Session, operation: str):
    """
    Run the body as one unit of work and commit it.

    Domain exceptions and unexpected errors roll back and propagate unchanged.
    Store failures before the commit roll back and raise a non-ambiguous
    LedgerOperationException; a failing commit raises an ambiguous one.
    """
    try:
        yield
    except QuestifyException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{operation} failed, rolled back: {e}")
        raise LedgerOperationException(operation, str(e), ambiguous=False)
    except Exception as e:
        db.rollback()
        logger.error(f"{operation} failed unexpectedly, rolled back: {e}")
        raise

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{operation} commit failed, state must be rechecked: {e}")
        raise LedgerOperationException(operation, str(e), ambiguous=True)
