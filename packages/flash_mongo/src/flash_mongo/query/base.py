from __future__ import annotations

import copy
from typing import (
    TYPE_CHECKING,
    Any,
    Generic,
    Mapping,
    Optional,
    Type,
    TypeVar,
)

from flash_mongo.logging import get_logger

if TYPE_CHECKING:
    from pymongo.collection import Collection
    from pymongo.cursor import Cursor

    from flash_mongo.records import Record

logger = get_logger(__name__)

T = TypeVar("T", bound="Record")


class QueryBuilderBase(Generic[T]):
    """
    Fundamental state of a QueryBuilder.

    Holds the target record type, the collection handle, the accumulated
    filter, projection and sort keys, the limit, and the single cursor the
    builder ever opens. The cursor is created lazily by `find_all` (or the
    first `get_iterator` call) and reused by every later operation.
    """

    def __init__(self, table: Collection, record_type: Optional[Type[T]] = None):
        if record_type is None:
            from flash_mongo.records import Record

            record_type = Record  # type: ignore[assignment]
        self.record_type: Type[T] = record_type  # type: ignore[assignment]
        self._table = table
        self._projection: dict[str, bool] = {}
        self._filter: dict[str, Any] = {}
        self._sort_keys: dict[str, int] = {}
        self._limit: Optional[int] = None
        self._cursor: Optional[Cursor] = None
        self._cursor_filter: dict[str, Any] = {}

    @classmethod
    def from_record(cls, record: T) -> Any:
        """
        Build a QueryBuilder over the table and type of an existing record.

        Example:
            >>> builder = QueryBuilder.from_record(User())
        """
        return cls(record.get_table(), type(record))

    def set_record_type(self, record_type: Type[T]) -> Any:
        self.record_type = record_type
        return self

    def set_table(self, table: Collection) -> Any:
        self._table = table
        return self

    @property
    def table(self) -> Collection:
        return self._table

    @property
    def filter(self) -> Mapping[str, Any]:
        return copy.deepcopy(self._filter)

    @property
    def projection(self) -> Mapping[str, bool]:
        return dict(self._projection)

    @property
    def sort_keys(self) -> Mapping[str, int]:
        return dict(self._sort_keys)

    def _merged_filter(self, extra: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        return {**self._filter, **(extra or {})}

    def find_all(self, extra: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Open the multi-result cursor and keep it as the active one.

        Args:
            extra: Criteria merged over the accumulated filter for this
                cursor only.

        Returns:
            The builder, ready for further chaining or iteration.
        """
        query = self._merged_filter(extra)
        logger.debug("Opening cursor on %s with filter %r", self.record_type.__name__, query)
        self._cursor = self._table.find(query, projection=self._projection or None)
        self._cursor_filter = query
        return self

    def get_iterator(self) -> Cursor:
        """
        Return the active cursor, opening it with the current filter on
        first use.
        """
        if self._cursor is None:
            self.find_all()
        return self._cursor  # type: ignore[return-value]
