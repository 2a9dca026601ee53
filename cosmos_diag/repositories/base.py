"""
Abstract Repository Pattern

Defines the repository interface that abstracts data access operations,
and the Entity base class that maps dataclass attributes to stored keys.
"""

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from bson import ObjectId


def to_object_id(id: Any) -> Any:
    """Convert a hex string to ObjectId; any other value is used as-is."""
    if isinstance(id, str) and ObjectId.is_valid(id):
        return ObjectId(id)
    return id


@dataclass
class Entity:
    """
    Base class for domain entities.

    Subclasses declare ``FIELD_KEYS`` to map attribute names to the keys
    stored in the collection. Attributes not listed are stored under their
    own name.

    Example:
        @dataclass
        class User(Entity):
            FIELD_KEYS = {"display_name": "displayName"}

            display_name: str = ""
    """

    FIELD_KEYS: ClassVar[dict[str, str]] = {}

    id: str | None = None

    @classmethod
    def storage_key(cls, name: str) -> str:
        """Map an attribute name to its stored key; stored keys pass through."""
        if name == "id":
            return "_id"
        return cls.FIELD_KEYS.get(name, name)

    def to_dict(self) -> dict[str, Any]:
        """Convert entity to dictionary for storage."""
        data = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.name == "id":
                if value is not None:
                    data["_id"] = to_object_id(value)
                continue
            data[self.storage_key(f.name)] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Entity | None":
        """Create entity from a stored document; unknown keys are ignored."""
        if data is None:
            return None

        key_to_attr = {cls.storage_key(f.name): f.name for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in data.items():
            attr = key_to_attr.get(key)
            if attr is None:
                continue
            if attr == "id" and value is not None:
                value = str(value)
            kwargs[attr] = value

        return cls(**kwargs)


T = TypeVar("T", bound=Entity)


class Repository(ABC, Generic[T]):
    """
    Abstract repository interface for data access.

    Every method blocks until the store responds. Lookups that match
    nothing raise DocumentNotFoundError rather than returning None.
    """

    @abstractmethod
    def insert(self, entity: T) -> str:
        """
        Add a new entity.

        Args:
            entity: Entity to store; its ``id`` is set to the assigned ID

        Returns:
            The assigned ID
        """

    @abstractmethod
    def find_one(self, filter: dict[str, Any]) -> T:
        """
        Find a single entity matching an equality filter.

        Raises:
            DocumentNotFoundError: If nothing matches
        """

    @abstractmethod
    def get(self, id: str) -> T:
        """
        Get a single entity by ID.

        Raises:
            DocumentNotFoundError: If nothing matches
        """

    @abstractmethod
    def update_fields(self, id: str, fields: dict[str, Any]) -> bool:
        """
        Replace specific fields of an entity.

        Returns:
            True if the document changed

        Raises:
            DocumentNotFoundError: If no document has this ID
        """

    @abstractmethod
    def delete(self, id: str) -> None:
        """
        Delete an entity by ID.

        Raises:
            DocumentNotFoundError: If no document has this ID
        """
