"""Structured outcomes returned by every mutating service operation."""

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursehub.errors import DomainError, ErrorKind

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    success: bool
    message: str
    error: Optional[ErrorKind] = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **data: Any) -> "OperationResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, exc: DomainError) -> "OperationResult":
        return cls(success=False, message=exc.message, error=exc.kind)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


def service_operation(func):
    """Run a service function as one unit of work.

    The wrapped function receives the session as its first argument. A raised
    ``DomainError`` rolls the session back and becomes a failed result; storage
    errors roll back and propagate to the caller.
    """

    @functools.wraps(func)
    def wrapper(db: Session, *args, **kwargs) -> OperationResult:
        try:
            return func(db, *args, **kwargs)
        except DomainError as e:
            db.rollback()
            logger.debug("%s rejected (%s): %s", func.__name__, e.kind.value, e.message)
            return OperationResult.fail(e)
        except SQLAlchemyError:
            db.rollback()
            raise

    return wrapper
