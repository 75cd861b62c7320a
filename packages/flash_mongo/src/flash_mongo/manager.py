from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Generic, Iterable, Mapping, Optional, TypeVar

from .exceptions import DoesNotExistError
from .records import ID_FIELD, Record

if TYPE_CHECKING:
    from .query import QueryBuilder

T = TypeVar("T", bound=Record)


class RecordManager(Generic[T]):
    """
    Entry point for type-level operations of a record class.

    Every query method starts a fresh QueryBuilder, so
    ``User.objects.equals("name", "Ada")`` is shorthand for
    ``User.query().equals("name", "Ada")``.
    """

    def __init__(self, record_type: type[T]):
        self._record_type = record_type

    def query(self, database: Any = None) -> QueryBuilder[T]:
        """
        Return a fresh QueryBuilder for the record type.
        """
        return self._record_type.query(database)

    # --- Builder shortcuts ---

    def equals(self, key: str, value: Any) -> QueryBuilder[T]:
        return self.query().equals(key, value)

    def not_equals(self, key: str, value: Any) -> QueryBuilder[T]:
        return self.query().not_equals(key, value)

    def lower_than(self, key: str, value: Any) -> QueryBuilder[T]:
        return self.query().lower_than(key, value)

    def lower_than_or_equals(self, key: str, value: Any) -> QueryBuilder[T]:
        return self.query().lower_than_or_equals(key, value)

    def greater_than(self, key: str, value: Any) -> QueryBuilder[T]:
        return self.query().greater_than(key, value)

    def greater_than_or_equals(self, key: str, value: Any) -> QueryBuilder[T]:
        return self.query().greater_than_or_equals(key, value)

    def in_range(self, key: str, from_: Any, to: Any) -> QueryBuilder[T]:
        return self.query().in_range(key, from_, to)

    between = in_range

    def is_in(self, key: str, values: Iterable[Any]) -> QueryBuilder[T]:
        return self.query().is_in(key, values)

    def by_function(self, expression: str) -> QueryBuilder[T]:
        return self.query().by_function(expression)

    def select(self, *fields: Any) -> QueryBuilder[T]:
        return self.query().select(*fields)

    def ascending_by(self, key: str) -> QueryBuilder[T]:
        return self.query().ascending_by(key)

    def descending_by(self, key: str) -> QueryBuilder[T]:
        return self.query().descending_by(key)

    def limit(self, count: int, offset: Optional[int] = None) -> QueryBuilder[T]:
        return self.query().limit(count, offset)

    def offset(self, count: int) -> QueryBuilder[T]:
        return self.query().offset(count)

    def sort(self, extra: Optional[Mapping[str, int]] = None) -> QueryBuilder[T]:
        return self.query().sort(extra)

    def select_all(self) -> QueryBuilder[T]:
        return self.query().select_all()

    def find(self, extra: Optional[Mapping[str, Any]] = None) -> T:
        return self.query().find(extra)

    def find_all(self, extra: Optional[Mapping[str, Any]] = None) -> QueryBuilder[T]:
        return self.query().find_all(extra)

    def count(self) -> int:
        return self.query().count()

    def get_query_count(self) -> int:
        return self.query().get_query_count()

    def each(self, callback: Callable[[T], Any]) -> None:
        self.query().each(callback)

    # --- Single records ---

    def get_by_pk(self, pk: Any, database: Any = None) -> T:
        """
        Retrieve a single record by its identifier.

        Raises:
            DoesNotExistError: If no document has that identifier.
        """
        table = self._record_type.resolve_table(database)
        document = table.find_one({ID_FIELD: pk})
        if document is None:
            msg = f"{self._record_type.__name__} with pk {pk!r} not found"
            raise DoesNotExistError(msg)
        return self._record_type(document, collection=table)

    def create(self, **fields: Any) -> T:
        """
        Create and persist a new record.

        Raises:
            PersistenceError: If the store rejects the insert.
        """
        instance = self._record_type(fields)
        instance.save(throw_on_error=True)
        return instance
