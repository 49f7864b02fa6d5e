"""Custom SQLAlchemy JSON type with validation.

Uses native JSONB on PostgreSQL (the production database) and the generic JSON
type on any other dialect, which keeps the repository tests runnable against an
in-memory SQLite database.
"""

import logging
from typing import Any

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Dialect
from sqlalchemy.types import JSON, TypeDecorator

logger = logging.getLogger(__name__)


class JSONType(TypeDecorator):
    """JSON column type with validation.

    Usage:
        class MyModel(Base):
            data: Mapped[list] = mapped_column(JSONType)

    Features:
        - Native PostgreSQL JSONB storage, generic JSON elsewhere
        - Validates data before storage (dict/list only)
        - Handles None values gracefully (stores as SQL NULL)
        - Cache-safe for SQLAlchemy query caching

    Error Handling:
        - Non-JSON types are logged and converted to empty dict
        - Unexpected types coming back from the database raise TypeError
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB(none_as_null=True))
        return dialect.type_descriptor(JSON(none_as_null=True))

    def process_bind_param(self, value: Any, dialect: Dialect) -> dict | list | None:
        """Process value being sent to database.

        Args:
            value: Python object to store (dict, list, or None)
            dialect: Database dialect

        Returns:
            Python dict/list for JSON storage, or None for SQL NULL
        """
        if value is None:
            return None

        if not isinstance(value, dict | list):
            logger.warning(
                f"JSONType received non-JSON type: {type(value).__name__}. "
                f"Converting to empty dict to prevent data corruption."
            )
            value = {}

        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> dict | list | None:
        """Process value returned from database.

        Args:
            value: Raw value from database (already deserialized by the driver)
            dialect: Database dialect

        Returns:
            Python object (dict/list) or None
        """
        if value is None:
            return None

        if isinstance(value, dict | list):
            return value

        logger.error(
            f"Unexpected type in JSON column: {type(value).__name__}. "
            f"Expected dict or list. Value: {repr(value)[:100]}"
        )
        raise TypeError(
            f"Unexpected type in JSON column: {type(value).__name__}. "
            "This may indicate a database schema issue."
        )
