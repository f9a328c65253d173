"""
Transaction boundary for every mutation path.

Domain errors raised inside the block roll the session back and propagate
unchanged. SQLAlchemy failures (constraint violations, lost connections) are
rolled back and re-raised as StorageError.
"""
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from talentflow.errors import StorageError
from talentflow.logging_config import get_logger
from talentflow.models import db

logger = get_logger(__name__)


@contextmanager
def atomic(operation_name: str, commit: bool = True):
    """
    Run the block as one transaction.

    Args:
        operation_name: Label used in log lines
        commit: When False the block only flushes; the caller owns the commit.
            Used when the block is nested inside a larger transaction.

    Raises:
        StorageError: If the database rejects any statement or the commit
    """
    try:
        yield db.session
        if commit:
            db.session.commit()
        else:
            db.session.flush()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error(
            "Transaction failed",
            operation=operation_name,
            error=str(exc),
            exc_info=True,
        )
        raise StorageError(
            f"Storage failure during {operation_name}",
            details={"operation": operation_name},
        ) from exc
    except Exception:
        db.session.rollback()
        raise
