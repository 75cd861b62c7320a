from .config import MongoSettings, mongo_settings
from .db import close_db, get_database, init_db, set_database
from .exceptions import (
    ConfigurationError,
    DoesNotExistError,
    FlashMongoError,
    PersistenceError,
)
from .logging import get_logger, setup_logging
from .manager import RecordManager
from .query import QueryBuilder
from .records import ID_FIELD, Record, attribute_getter, attribute_setter

__all__ = [
    "ConfigurationError",
    "DoesNotExistError",
    "FlashMongoError",
    "ID_FIELD",
    "MongoSettings",
    "PersistenceError",
    "QueryBuilder",
    "Record",
    "RecordManager",
    "attribute_getter",
    "attribute_setter",
    "close_db",
    "get_database",
    "get_logger",
    "init_db",
    "mongo_settings",
    "set_database",
    "setup_logging",
]
