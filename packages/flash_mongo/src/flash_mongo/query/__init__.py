from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    TypeVar,
)

from .execution import QueryBuilderExecution

if TYPE_CHECKING:
    from flash_mongo.records import Record


T = TypeVar("T", bound="Record")


class QueryBuilder(QueryBuilderExecution[T]):
    """
    Mutable query builder and result iterator for a record type.

    A QueryBuilder collects filter criteria, a projection, sort keys and a
    limit, then lazily opens a single cursor on the collection. Unlike a
    Django-style queryset, every step changes the builder itself and the
    cursor is shared by all later calls, so sorting, limit and offset
    belong before the first read.

    Execution happens through:
        - find() (one record)
        - find_all() / get_iterator() (the cursor)
        - count() / get_query_count()
        - iteration and each()

    Notes:
        - Iterating rewinds the cursor, so a builder can be iterated again.
        - Sort keys added after the cursor was read take effect on the next
          rewind.

    Examples:
        >>> adults = User.query().greater_than_or_equals("age", 18)
        >>> for user in adults.ascending_by("name").limit(10):
        ...     print(user.name)

        >>> User.objects.equals("name", "Ada").find()
    """


__all__ = ["QueryBuilder"]
