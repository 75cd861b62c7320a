from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Iterable,
    Mapping,
    Optional,
)

from pymongo import ASCENDING, DESCENDING

from .base import QueryBuilderBase, T

if TYPE_CHECKING:
    from pymongo.cursor import Cursor


def _is_operator_document(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and bool(value)
        and all(isinstance(k, str) and k.startswith("$") for k in value)
    )


class QueryBuilderConstruction(QueryBuilderBase[T]):
    """
    Fluent API for building up the query.

    Every method mutates the builder in place and returns it so calls can
    be chained. Filter methods only touch the criteria; sorting, limit and
    offset act on the builder's cursor, which is opened if needed.
    """

    def _add_operator(self, key: str, operator: str, value: Any) -> Any:
        current = self._filter.get(key)
        # An exact-match value is replaced; operators on one field accumulate.
        if not _is_operator_document(current):
            current = {}
        # Copied so a document passed to equals() is never written into
        self._filter[key] = {**current, operator: value}
        return self

    def equals(self, key: str, value: Any) -> Any:
        """
        Match documents whose ``key`` equals ``value``.

        Example:
            >>> User.query().equals("name", "Ada")
            # {"name": "Ada"}
        """
        self._filter[key] = value
        return self

    def not_equals(self, key: str, value: Any) -> Any:
        """
        Example:
            >>> User.query().not_equals("status", "banned")
            # {"status": {"$ne": "banned"}}
        """
        return self._add_operator(key, "$ne", value)

    def lower_than(self, key: str, value: Any) -> Any:
        return self._add_operator(key, "$lt", value)

    def lower_than_or_equals(self, key: str, value: Any) -> Any:
        return self._add_operator(key, "$lte", value)

    def greater_than(self, key: str, value: Any) -> Any:
        return self._add_operator(key, "$gt", value)

    def greater_than_or_equals(self, key: str, value: Any) -> Any:
        return self._add_operator(key, "$gte", value)

    def in_range(self, key: str, from_: Any, to: Any) -> Any:
        """
        Replace the criteria on ``key`` with ``{"$lt": from_, "$gt": to}``.

        Notes:
            - ``from_`` is the exclusive upper bound and ``to`` the exclusive
              lower bound, so ascending arguments match nothing. Pass the
              larger value first.

        Example:
            >>> Product.query().in_range("price", 100, 10)
            # {"price": {"$lt": 100, "$gt": 10}}
        """
        self._filter[key] = {"$lt": from_, "$gt": to}
        return self

    between = in_range

    def is_in(self, key: str, values: Iterable[Any]) -> Any:
        """
        Example:
            >>> User.query().is_in("role", ["admin", "staff"])
            # {"role": {"$in": ["admin", "staff"]}}
        """
        return self._add_operator(key, "$in", list(values))

    def by_function(self, expression: str) -> Any:
        """
        Filter with a server-side JavaScript predicate (``$where``).

        Example:
            >>> User.query().by_function("this.credits > this.debits")
        """
        self._filter["$where"] = expression
        return self

    def select(self, *fields: Any) -> Any:
        """
        Add fields to the projection.

        Accepts field names, a single iterable of names, or a mapping of
        name to include flag.

        Example:
            >>> User.query().select("name", "email")
            # projection {"name": True, "email": True}
        """
        if len(fields) == 1 and not isinstance(fields[0], str):
            (selection,) = fields
            if isinstance(selection, Mapping):
                self._projection.update({k: bool(v) for k, v in selection.items()})
                return self
            fields = tuple(selection)
        for name in fields:
            self._projection[name] = True
        return self

    def select_all(self) -> Any:
        """Drop the projection so whole documents are fetched."""
        self._projection.clear()
        return self

    def ascending_by(self, key: str) -> Any:
        """
        Sort by ``key`` ascending. Applied when the cursor is rewound,
        which iterating the builder does.
        """
        self._sort_keys[key] = ASCENDING
        return self

    def descending_by(self, key: str) -> Any:
        self._sort_keys[key] = DESCENDING
        return self

    def sort(self, extra: Optional[Mapping[str, int]] = None) -> Any:
        """
        Merge ``extra`` over the pending sort keys and apply them to the
        cursor right away.

        Example:
            >>> User.query().ascending_by("name").sort({"age": -1})
        """
        self._sort_keys = {**self._sort_keys, **(extra or {})}
        if self._sort_keys:
            self._apply_sort(self.get_iterator())
        return self

    def _apply_sort(self, cursor: Cursor) -> None:
        cursor.sort(list(self._sort_keys.items()))

    def limit(self, count: int, offset: Optional[int] = None) -> Any:
        """
        Limit the cursor to ``count`` documents (at least 1), optionally
        skipping ``offset`` first.

        Example:
            >>> User.query().limit(10, offset=20)
        """
        self._limit = max(1, int(count))
        self.get_iterator().limit(self._limit)
        if offset is not None:
            self.offset(offset)
        return self

    def offset(self, count: int) -> Any:
        """Skip the first ``count`` documents (at least 0)."""
        self.get_iterator().skip(max(0, int(count)))
        return self
