"""
MongoDB Repository Implementation

Implements the Repository interface on top of a LogicalSession. Every call
runs on the session's dedicated connection and is recorded as that logical
session's last request.
"""

import logging
import time
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..database.session import LogicalSession
from ..exceptions import DocumentNotFoundError, OperationError
from ..observability import record_operation
from .base import Entity, Repository, to_object_id

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)


class MongoRepository(Repository[T], Generic[T]):
    """
    MongoDB implementation of the Repository interface.

    Example:
        packages = MongoRepository(session, "package", Package)

        package_id = packages.insert(Package(full_name="react"))
        package = packages.find_one({"fullName": "react"})
        packages.update_fields(package_id, {"full_name": "react-native"})
        packages.delete(package_id)
    """

    def __init__(
        self,
        session: LogicalSession,
        collection_name: str,
        entity_class: type[T],
    ):
        """
        Initialize the MongoDB repository.

        Args:
            session: Logical session every call runs on
            collection_name: Collection within the session's database
            entity_class: Entity subclass for this repository
        """
        self._session = session
        self.collection_name = collection_name
        self._entity_class = entity_class

    @property
    def session(self) -> LogicalSession:
        return self._session

    @property
    def collection(self) -> Collection:
        return self._session.collection(self.collection_name)

    def _execute(self, operation: str, call: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a driver call on this repository's session, wrapping driver errors."""
        self._session.note_request(operation)
        start_time = time.time()
        success = True
        try:
            return call(*args, **kwargs)
        except PyMongoError as e:
            success = False
            logger.error(
                f"{operation} on '{self.collection_name}' failed "
                f"(session={self._session.label}): {e}"
            )
            raise OperationError(
                f"Error running {operation}: {e}",
                operation=operation,
                collection_name=self.collection_name,
                context={"error_type": type(e).__name__},
            ) from e
        finally:
            duration_ms = (time.time() - start_time) * 1000
            record_operation(
                f"repository.{operation}",
                duration_ms,
                success=success,
                collection=self.collection_name,
            )

    def _not_found(self, operation: str, filter: dict[str, Any]) -> DocumentNotFoundError:
        return DocumentNotFoundError(
            f"No {self._entity_class.__name__} matches the filter",
            filter=filter,
            operation=operation,
            collection_name=self.collection_name,
        )

    def _to_entity(self, doc: dict[str, Any]) -> T:
        return self._entity_class.from_dict(doc)

    def _storage_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        return {self._entity_class.storage_key(name): value for name, value in fields.items()}

    def insert(self, entity: T) -> str:
        """Insert a new entity and return the assigned ID."""
        doc = entity.to_dict()
        result = self._execute("insert", self.collection.insert_one, doc)
        entity.id = str(result.inserted_id)

        logger.debug(f"Inserted {self._entity_class.__name__} with id={entity.id}")
        return entity.id

    def find_one(self, filter: dict[str, Any]) -> T:
        """
        Find a single entity matching an equality filter.

        Filter keys may be attribute names or stored keys. When several
        documents match, the first one returned by the store wins.
        """
        query = self._storage_fields(filter)
        doc = self._execute("find", self.collection.find_one, query)
        if doc is None:
            raise self._not_found("find", query)
        return self._to_entity(doc)

    def find_by_full_name(self, full_name: str) -> T:
        return self.find_one({"full_name": full_name})

    def get(self, id: str) -> T:
        return self.find_one({"_id": to_object_id(id)})

    def update_fields(self, id: str, fields: dict[str, Any]) -> bool:
        """Apply a ``$set`` of the given fields to the entity with this ID."""
        query = {"_id": to_object_id(id)}
        update = {"$set": self._storage_fields(fields)}
        result = self._execute("update", self.collection.update_one, query, update)
        if result.matched_count == 0:
            raise self._not_found("update", query)
        return result.modified_count > 0

    def delete(self, id: str) -> None:
        query = {"_id": to_object_id(id)}
        result = self._execute("delete", self.collection.delete_one, query)
        if result.deleted_count == 0:
            raise self._not_found("delete", query)
