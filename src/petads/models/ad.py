from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from petads.db.base import Base


class Category(Base):
    """Read-only reference data for ad categories."""
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    category: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Category(id={self.id!r}, category={self.category!r})>"


class Ad(Base):
    """
    Pet-adoption ad, owned by one category and one authoring user.
    """
    __tablename__ = "ads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), nullable=False)

    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    pet_name: Mapped[str] = mapped_column(String(100), nullable=False)

    pet_age: Mapped[float] = mapped_column(Float, nullable=False)

    pet_gender: Mapped[str] = mapped_column(String(20), nullable=False)

    ad_content: Mapped[str] = mapped_column(Text, nullable=False)

    # Empty string means "no image"
    image_path: Mapped[str | None] = mapped_column(String(255), nullable=True, default="")

    # Server-assigned creation timestamp
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Ad(id={self.id!r}, pet_name={self.pet_name!r}, author_id={self.author_id!r})>"


class Favorite(Base):
    """
    Many-to-many join between users and ads.
    The composite primary key allows at most one row per (user, ad) pair.
    """
    __tablename__ = "favorites"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)

    ad_id: Mapped[int] = mapped_column(ForeignKey("ads.id"), primary_key=True, index=True)

    def __repr__(self) -> str:
        return f"<Favorite(user_id={self.user_id!r}, ad_id={self.ad_id!r})>"
