from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from pymongo.errors import OperationFailure


class FlashMongoError(Exception):
    """Base class for all Flash Mongo exceptions."""


class ConfigurationError(FlashMongoError, RuntimeError):
    """Raised when a record is built before any database has been set."""


class PersistenceError(FlashMongoError):
    """
    Raised (or stored on the record) when the store rejects a write.

    Mirrors the error document returned by the server: a human readable
    ``message`` and the numeric ``code``.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code

    @classmethod
    def from_failure(cls, failure: OperationFailure) -> PersistenceError:
        details = failure.details or {}
        message = details.get("errmsg") or str(failure)
        return cls(message, failure.code)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"


class DoesNotExistError(FlashMongoError, LookupError):
    """Raised when a document was expected by identifier but none was found."""
