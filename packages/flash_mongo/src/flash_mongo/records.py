from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Iterator,
    KeysView,
    Optional,
    TypeVar,
)

from bson import ObjectId
from pymongo.errors import OperationFailure

from . import db
from .exceptions import PersistenceError
from .logging import get_logger

if TYPE_CHECKING:
    from pymongo.collection import Collection

    from .manager import RecordManager
    from .query import QueryBuilder

logger = get_logger(__name__)

ID_FIELD = "_id"

F = TypeVar("F", bound=Callable[..., Any])


def attribute_getter(name: str) -> Callable[[F], F]:
    """
    Register the decorated method as the getter of attribute ``name``.

    Example:
        >>> class User(Record):
        ...     @attribute_getter("full_name")
        ...     def _full_name(self):
        ...         return f"{self.first} {self.last}"
    """

    def decorator(func: F) -> F:
        func.__record_getter__ = name  # type: ignore[attr-defined]
        return func

    return decorator


def attribute_setter(name: str) -> Callable[[F], F]:
    """
    Register the decorated method as the setter of attribute ``name``.

    The method receives the new value and is responsible for storing it,
    usually through `Record.write_field`.
    """

    def decorator(func: F) -> F:
        func.__record_setter__ = name  # type: ignore[attr-defined]
        return func

    return decorator


class Record:
    """
    Active record over a single MongoDB document.

    Fields are dynamic: any attribute (or key) that is not part of the
    class itself is read from and written to the document. The ``_id`` of
    a stored document is kept apart from the fields and only merged back
    when the record is saved.

    Each subclass maps to the collection named after the class, unless
    ``__collection__`` says otherwise, and gets an ``objects`` manager.

    Example:
        >>> class User(Record):
        ...     __collection__ = "users"
        >>> user = User({"name": "Ada"})
        >>> user.age = 36
        >>> user.save()
        True
    """

    __collection__: ClassVar[Optional[str]] = None
    identifier_types: ClassVar[tuple[type, ...]] = (ObjectId,)
    objects: ClassVar[RecordManager[Any]]

    _getters: ClassVar[dict[str, Callable[..., Any]]] = {}
    _setters: ClassVar[dict[str, Callable[..., Any]]] = {}

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        from .manager import RecordManager

        getters = dict(cls._getters)
        setters = dict(cls._setters)
        for member in cls.__dict__.values():
            getter_for = getattr(member, "__record_getter__", None)
            if getter_for is not None:
                getters[getter_for] = member
            setter_for = getattr(member, "__record_setter__", None)
            if setter_for is not None:
                setters[setter_for] = member
        cls._getters = getters
        cls._setters = setters
        cls.objects = RecordManager(cls)

    def __init__(
        self,
        document: Optional[dict[str, Any]] = None,
        *,
        database: Any = None,
        collection: Optional[Collection] = None,
    ):
        """
        Args:
            document: Raw field mapping. A valid ``_id`` is moved out of it.
            database: Database to use instead of the process default.
            collection: Collection handle to use directly.

        Raises:
            ConfigurationError: If no collection or database was given and
                no default database has been set.
        """
        if collection is None:
            collection = self.resolve_table(database)
        self._table = collection
        self._id = None
        self._error: Optional[PersistenceError] = None
        self._fields: dict[str, Any] = self._extract_id(dict(document or {}))

    # --- Database and table ---

    @staticmethod
    def set_database(database: Any) -> None:
        """Set the database shared by every record type."""
        db.set_database(database)

    @staticmethod
    def get_database() -> Any:
        return db.get_database()

    @classmethod
    def get_table_name(cls) -> str:
        return cls.__collection__ or cls.__name__

    @classmethod
    def resolve_table(cls, database: Any = None) -> Collection:
        if database is None:
            database = db.get_database()
        name = cls.get_table_name()
        logger.debug("Resolving collection %r for %s", name, cls.__name__)
        return database.get_collection(name)

    def get_table(self) -> Collection:
        return self._table

    @classmethod
    def query(cls, database: Any = None) -> QueryBuilder[Any]:
        """
        Return a fresh QueryBuilder bound to this record type.

        Example:
            >>> adults = User.query().greater_than_or_equals("age", 18)
        """
        from .query import QueryBuilder

        return QueryBuilder.from_record(cls(database=database))

    # --- Identifier ---

    def _extract_id(self, document: dict[str, Any]) -> dict[str, Any]:
        identifier = document.get(ID_FIELD)
        if isinstance(identifier, self.identifier_types):
            self._id = document.pop(ID_FIELD)
        return document

    @property
    def pk(self) -> Any:
        """Identifier of the stored document, or None before the first save."""
        return self._id

    @property
    def last_error(self) -> Optional[PersistenceError]:
        return self._error

    @property
    def fields(self) -> dict[str, Any]:
        """Copy of the working set of fields (without the identifier)."""
        return dict(self._fields)

    def to_document(self) -> dict[str, Any]:
        """Return the document as it would be written by `save`."""
        document = dict(self._fields)
        if self._id is not None:
            document[ID_FIELD] = self._id
        return document

    # --- Persistence ---

    def save(self, validate: bool = True, throw_on_error: bool = False) -> bool:
        """
        Insert the record, or replace the stored document when it has an id.

        Args:
            validate: Accepted for subclasses that validate before writing;
                the base record does not validate.
            throw_on_error: Raise the PersistenceError instead of returning
                False when the store rejects the write.

        Returns:
            True when the document was written.

        Raises:
            PersistenceError: If the write failed and `throw_on_error` is set.
        """
        document = self.to_document()
        try:
            if ID_FIELD in document:
                logger.debug(
                    "Replacing %s document %r", self.get_table_name(), document[ID_FIELD]
                )
                self._table.replace_one(
                    {ID_FIELD: document[ID_FIELD]}, document, upsert=True
                )
            else:
                logger.debug("Inserting new %s document", self.get_table_name())
                result = self._table.insert_one(document)
                document = {**document, ID_FIELD: result.inserted_id}
        except OperationFailure as e:
            self._error = PersistenceError.from_failure(e)
            logger.warning(
                "Saving %s failed: %s (code %s)",
                self.get_table_name(),
                self._error.message,
                self._error.code,
            )
            if throw_on_error:
                raise self._error from e
            return False

        self._error = None
        self._fields = self._extract_id(dict(document))
        return True

    def delete(self) -> bool:
        """
        Remove the stored document. Unsaved records are left untouched.

        Returns:
            True if a document was deleted.
        """
        if self._id is None:
            return False
        result = self._table.delete_one({ID_FIELD: self._id})
        logger.debug("Deleted %s document %r", self.get_table_name(), self._id)
        self._id = None
        return result.deleted_count > 0

    # --- Attributes ---

    def set_attribute(self, name: str, value: Any) -> Any:
        """
        Set attribute ``name``, going through its registered setter if any.

        Returns:
            The record itself, or whatever the registered setter returned.
        """
        setter = self._setters.get(name)
        if setter is not None:
            return setter(self, value)
        self._fields[name] = value
        return self

    def get_attribute(self, name: str) -> Any:
        """
        Get attribute ``name``, going through its registered getter if any.
        Missing fields read as None.
        """
        getter = self._getters.get(name)
        if getter is not None:
            return getter(self)
        return self._fields.get(name)

    def read_field(self, name: str) -> Any:
        """Read a raw field, bypassing registered getters."""
        return self._fields.get(name)

    def write_field(self, name: str, value: Any) -> None:
        """Write a raw field, bypassing registered setters."""
        self._fields[name] = value

    def __getattr__(self, name: str) -> Any:
        # Only called when regular lookup failed
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get_attribute(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            object.__setattr__(self, name, value)
        else:
            self.set_attribute(name, value)

    def __delattr__(self, name: str) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            object.__delattr__(self, name)
        else:
            self._fields.pop(name, None)

    def __getitem__(self, name: str) -> Any:
        return self.get_attribute(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set_attribute(name, value)

    def __delitem__(self, name: str) -> None:
        self._fields.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def keys(self) -> KeysView[str]:
        return self._fields.keys()

    def values(self) -> list[Any]:
        return [self.get_attribute(name) for name in self._fields]

    def items(self) -> list[tuple[str, Any]]:
        """Field names and values, read through registered getters."""
        return [(name, self.get_attribute(name)) for name in self._fields]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} pk={self._id!r} fields={self._fields!r}>"
