"""TutorMatch Backend — Admin Model (authorization-only principal)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from tutormatch.database import Base
from tutormatch.models.mixins import IdMixin, TimestampMixin


class Admin(IdMixin, TimestampMixin, Base):
    __tablename__ = "admins"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, email='{self.email}')>"
