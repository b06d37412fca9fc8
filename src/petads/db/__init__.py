from .base import Base
from .engine import build_engine
from .schema import create_schema, seed_categories

__all__ = ["Base", "build_engine", "create_schema", "seed_categories"]
