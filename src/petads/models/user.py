from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from petads.db.base import Base


class User(Base):
    """
    Registered marketplace user.

    `username` and `email` are unique; the storage layer is the only place
    uniqueness is enforced, concurrent registrations race on these constraints.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    # Opaque password digest (never the plain-text secret)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    display_name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    phone: Mapped[str] = mapped_column(String(30), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, username={self.username!r}, email={self.email!r})>"
