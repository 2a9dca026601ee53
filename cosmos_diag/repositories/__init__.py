"""
Repository Pattern

Provides the abstract repository interface, its MongoDB implementation and
the domain models it stores.

Usage:
    from cosmos_diag.repositories import MongoRepository, Package

    packages = MongoRepository(session, "package", Package)
    package_id = packages.insert(Package(full_name="react"))
"""

from .base import Entity, Repository, to_object_id
from .models import Package
from .mongo import MongoRepository

__all__ = [
    "Repository",
    "Entity",
    "MongoRepository",
    "Package",
    "to_object_id",
]
