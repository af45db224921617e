"""Reference rows owned by the wider operations platform.

Only the columns the discipline engine reads are mapped here. Their CRUD lives
outside this package.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, String
from sqlalchemy.orm import Mapped, mapped_column

from discipline_engine.models.base import Base, TimestampMixin
from discipline_engine.models.enums import UserRole, sql_in


class Employee(Base, TimestampMixin):
    """Employee who can be the subject of a corrective action."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    position: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'terminated', 'on_leave')",
            name="employee_status_check",
        ),
    )

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class AppUser(Base, TimestampMixin):
    """Platform user (issuer, signer, voider)."""

    __tablename__ = "app_user"

    user_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        CheckConstraint(
            sql_in("role", UserRole) + " AND role != 'subject_employee'",
            name="app_user_role_check",
        ),
    )


class House(Base, TimestampMixin):
    """Licensed site where an incident can occur."""

    __tablename__ = "house"

    house_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
