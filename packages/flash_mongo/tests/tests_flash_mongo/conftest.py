from unittest.mock import MagicMock

import mongomock
import pytest
from flash_mongo import db


@pytest.fixture(autouse=True)
def reset_active_database():
    """
    Every test starts and ends without a process-wide database.
    """
    db.close_db()
    yield
    db.close_db()


@pytest.fixture
def database():
    """
    In-memory MongoDB database installed as the active database.
    """
    client = mongomock.MongoClient()
    database = client.get_database("flash_mongo_test")
    db.set_database(database)
    return database


@pytest.fixture
def collection():
    """
    Collection double whose ``find`` returns a cursor double, for checking
    exactly what the builder sends to the driver.
    """
    table = MagicMock(name="collection")
    table.find.return_value = MagicMock(name="cursor")
    table.find_one.return_value = None
    return table
