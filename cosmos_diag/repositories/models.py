"""
Domain models stored by the demonstration flows.
"""

from dataclasses import dataclass
from typing import ClassVar

from .base import Entity


@dataclass
class Package(Entity):
    """A software package entry in the ``package`` collection."""

    FIELD_KEYS: ClassVar[dict[str, str]] = {
        "full_name": "fullName",
        "stars_count": "starsCount",
        "forks_count": "forksCount",
        "last_updated_by": "lastUpdatedBy",
    }

    full_name: str = ""
    description: str = ""
    stars_count: int = 0
    forks_count: int = 0
    last_updated_by: str = ""
