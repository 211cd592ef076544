"""User ORM model. Directory collaborator: read by the lifecycle engine and audit reports."""

from sqlalchemy import Boolean, String, true
from sqlalchemy.orm import Mapped, mapped_column

from officeflow.infrastructure.persistence.database import Base
from officeflow.infrastructure.persistence.models.mixins import IntIdMixin, TimestampMixin


class User(IntIdMixin, TimestampMixin, Base):
    """Directory user. Table: users."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
