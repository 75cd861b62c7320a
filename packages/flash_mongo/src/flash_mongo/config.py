"""
Connection settings for Flash Mongo.
"""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoSettings(BaseSettings):
    """
    Settings used by ``init_db`` when no explicit URI or database is given.
    Every field can be overridden through the environment or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # --- Connection ---
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "flash"
    MONGO_TIMEOUT_MS: int = 5000
    MONGO_APP_NAME: str | None = None

    # --- Logging ---
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @model_validator(mode="after")
    def validate_connection(self) -> "MongoSettings":
        """Rejects URIs the driver cannot parse and empty database names."""
        if not self.MONGO_URI.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(
                "MONGO_URI must use the mongodb:// or mongodb+srv:// scheme."
            )
        if not self.MONGO_DB_NAME.strip():
            raise ValueError("MONGO_DB_NAME must not be empty.")
        return self

    def client_options(self) -> dict:
        options: dict = {"serverSelectionTimeoutMS": self.MONGO_TIMEOUT_MS}
        if self.MONGO_APP_NAME:
            options["appname"] = self.MONGO_APP_NAME
        return options


# Singleton instance for core use
mongo_settings = MongoSettings()
