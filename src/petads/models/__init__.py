r"""
Centralized access to the table models.

Importing this package registers every table with `Base.metadata`, which is
what `petads.db.schema.create_schema()` relies on.

    from petads.models import User, Category, Ad, Favorite
"""

from .user import User
from .ad import Category, Ad, Favorite

__all__ = [
    "User",
    "Category",
    "Ad",
    "Favorite",
]
