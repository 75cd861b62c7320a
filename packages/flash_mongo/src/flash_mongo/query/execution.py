from __future__ import annotations

from typing import (
    Any,
    Callable,
    Mapping,
    Optional,
)

from flash_mongo.logging import get_logger

from .construction import QueryBuilderConstruction, T

logger = get_logger(__name__)


class QueryBuilderExecution(QueryBuilderConstruction[T]):
    """
    Terminal operations that talk to the collection.

    Covers single-document lookups, counting, and the iterator protocol
    that turns each document of the cursor into a record.
    """

    def _wrap(self, document: Optional[Mapping[str, Any]]) -> T:
        return self.record_type(dict(document or {}), collection=self._table)

    def find(self, extra: Optional[Mapping[str, Any]] = None) -> T:
        """
        Fetch one document matching the filter merged with ``extra``.

        Always returns a record; it is empty when nothing matched.

        Example:
            >>> user = User.query().find({"email": "ada@example.com"})
        """
        query = self._merged_filter(extra)
        logger.debug("find_one on %s with filter %r", self.record_type.__name__, query)
        document = self._table.find_one(query, projection=self._projection or None)
        return self._wrap(document)

    def count(self) -> int:
        """
        Return the limit when one was set, otherwise the number of matching
        documents (see `get_query_count`).
        """
        return self._limit or self.get_query_count()

    def get_query_count(self) -> int:
        """Count every document matching the cursor's filter, ignoring limit."""
        self.get_iterator()
        if "$where" in self._cursor_filter:
            # count_documents runs as an aggregate $match, which rejects $where
            response = self._table.database.command(
                "count", self._table.name, query=self._cursor_filter
            )
            total = response["n"]
        else:
            total = self._table.count_documents(self._cursor_filter)
        logger.debug("%s query matched %d documents", self.record_type.__name__, total)
        return total

    def rewind(self) -> Any:
        """
        Restart the cursor and apply pending sort keys before the first
        document is read again.
        """
        cursor = self.get_iterator()
        cursor.rewind()
        if self._sort_keys:
            self._apply_sort(cursor)
        return self

    def __iter__(self) -> Any:
        return self.rewind()

    def __next__(self) -> T:
        return self._wrap(next(self.get_iterator()))

    def each(self, callback: Callable[[T], Any]) -> None:
        """
        Call ``callback`` with every record, in cursor order.

        Example:
            >>> User.query().equals("active", True).each(send_newsletter)
        """
        for record in self:
            callback(record)
