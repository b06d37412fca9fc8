"""
This Base class is used as the declarative base for all SQLAlchemy table models.
The data-access core issues parameterized SQL against these tables; the models
exist so the schema (constraints included) is declared in one place.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# Naming convention for constraints and indexes.
# Constraint names show up in driver diagnostics, so keep them predictable.
Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}
