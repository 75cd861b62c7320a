from typing import Any, Optional

from pymongo import MongoClient
from pymongo.database import Database

from .config import mongo_settings
from .exceptions import ConfigurationError
from .logging import get_logger

logger = get_logger(__name__)

_client: Optional[MongoClient] = None
_database: Optional[Database] = None


def init_db(
    database_url: Optional[str] = None,
    db_name: Optional[str] = None,
    **client_kwargs: Any,
) -> Database:
    """
    Connect to MongoDB and install the database as the process default.

    Args:
        database_url: The connection URI (e.g., 'mongodb://localhost:27017').
            Defaults to ``MONGO_URI``.
        db_name: Name of the database every record collection lives in.
            Defaults to ``MONGO_DB_NAME``.
        **client_kwargs: Additional keyword arguments passed to `MongoClient`.

    Example:
        >>> init_db("mongodb://localhost:27017", "shop")
    """
    global _client, _database

    options: dict[str, Any] = {
        **mongo_settings.client_options(),
        **client_kwargs,
    }
    url = database_url or mongo_settings.MONGO_URI
    name = db_name or mongo_settings.MONGO_DB_NAME

    # Drop a previous client so sockets are not leaked on re-init
    close_db()

    _client = MongoClient(url, **options)
    _database = _client.get_database(name)
    logger.info("Connected to MongoDB database %r", name)
    return _database


def set_database(database: Any) -> None:
    """
    Install an already selected database as the process default.

    Any object exposing ``get_collection(name)`` works, which lets tests
    plug in an in-memory database.
    """
    global _database
    _database = database
    logger.debug("Active database set to %r", getattr(database, "name", database))


def get_database() -> Any:
    """
    Return the process default database.

    Raises:
        ConfigurationError: If neither `init_db` nor `set_database` ran.
    """
    if _database is None:
        msg = "Active database has not been set. Call init_db() or set_database() first."
        raise ConfigurationError(msg)
    return _database


def close_db() -> None:
    """
    Close the client opened by `init_db` and forget the default database.

    Example:
        >>> close_db()
    """
    global _client, _database
    if _client is not None:
        _client.close()
        _client = None
    _database = None
