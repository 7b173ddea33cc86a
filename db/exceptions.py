"""
db/exceptions.py
----------------
Typed errors raised by the database layer.
Callers only ever see these, never the raw psycopg2 exception types.
"""

from typing import Optional


class DaoOperationError(Exception):
    """Base exception for every failed database operation."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ExecutionError(DaoOperationError):
    """
    A statement could not be executed, or its outcome was unusable.

    Raised for driver failures (connect, execute, fetch, commit), for
    mutations that affected zero rows and for inserts that returned no
    generated key.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        sql: Optional[str] = None,
    ):
        super().__init__(message, cause)
        self.sql = sql

    def __str__(self) -> str:
        text = self.message
        if self.sql:
            text += f" [sql: {' '.join(self.sql.split())}]"
        if self.cause is not None:
            text += f": {self.cause}"
        return text


class NotFoundError(DaoOperationError):
    """A lookup by identity matched no rows."""

    def __init__(self, message: str, entity_id=None):
        super().__init__(message)
        self.entity_id = entity_id


class IllegalArgumentError(DaoOperationError, ValueError):
    """A precondition was violated before any I/O took place."""
