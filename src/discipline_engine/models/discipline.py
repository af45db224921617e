"""Violation catalog, corrective action and signature models."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from discipline_engine.models.base import Base, TimestampMixin, utcnow
from discipline_engine.models.enums import (
    CorrectiveActionStatus,
    DisciplineLevel,
    SeverityLevel,
    SignerType,
    sql_in,
)

DEFAULT_CONSEQUENCES_TEXT = (
    "Further violations may result in additional disciplinary action up to "
    "and including termination of employment."
)

JSONType = JSON().with_variant(JSONB, "postgresql")


class ViolationCategory(Base, TimestampMixin):
    """Classification of misconduct with a severity tier and default points."""

    __tablename__ = "violation_category"

    violation_category_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    category_name: Mapped[str] = mapped_column(String, nullable=False)
    severity_level: Mapped[str] = mapped_column(String, nullable=False)
    default_points: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("category_name", name="violation_category_name_unique"),
        CheckConstraint(
            sql_in("severity_level", SeverityLevel),
            name="violation_category_severity_check",
        ),
        CheckConstraint(
            "(severity_level = 'minor' AND default_points BETWEEN 1 AND 2)"
            " OR (severity_level = 'moderate' AND default_points BETWEEN 3 AND 4)"
            " OR (severity_level = 'serious' AND default_points BETWEEN 5 AND 6)"
            " OR (severity_level = 'critical' AND default_points BETWEEN 8 AND 10)"
            " OR (severity_level = 'immediate_termination' AND default_points = 0)",
            name="violation_category_points_tier_check",
        ),
    )


class CorrectiveAction(Base, TimestampMixin):
    """Formal disciplinary record raised against an employee."""

    __tablename__ = "corrective_action"

    corrective_action_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="RESTRICT"),
        nullable=False,
    )
    issued_by_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_user.user_id", ondelete="RESTRICT"),
        nullable=False,
    )
    house_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("house.house_id", ondelete="RESTRICT"),
        nullable=True,
    )
    violation_category_id: Mapped[UUID] = mapped_column(
        ForeignKey("violation_category.violation_category_id", ondelete="RESTRICT"),
        nullable=False,
    )
    violation_date: Mapped[date] = mapped_column(Date, nullable=False)
    violation_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    incident_description: Mapped[str] = mapped_column(Text, nullable=False)
    mitigating_circumstances: Mapped[str | None] = mapped_column(Text, nullable=True)
    discipline_level: Mapped[str] = mapped_column(String, nullable=False)

    # points_assigned is copied from the category at creation and never updated
    points_assigned: Mapped[int] = mapped_column(Integer, nullable=False)
    points_adjusted: Mapped[int | None] = mapped_column(Integer, nullable=True)
    adjustment_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    corrective_expectations: Mapped[list[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    consequences_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    pip_scheduled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pip_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    employee_comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String,
        nullable=False,
        default=CorrectiveActionStatus.PENDING_SIGNATURE.value,
    )
    void_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    voided_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("app_user.user_id", ondelete="RESTRICT"),
        nullable=True,
    )
    voided_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            sql_in("status", CorrectiveActionStatus),
            name="corrective_action_status_check",
        ),
        CheckConstraint(
            sql_in("discipline_level", DisciplineLevel),
            name="corrective_action_discipline_level_check",
        ),
        CheckConstraint(
            "points_assigned >= 0 AND (points_adjusted IS NULL OR points_adjusted >= 0)",
            name="corrective_action_points_check",
        ),
        CheckConstraint(
            "points_adjusted IS NULL OR "
            "(adjustment_reason IS NOT NULL AND length(trim(adjustment_reason)) > 0)",
            name="corrective_action_adjustment_reason_check",
        ),
        CheckConstraint(
            "(status = 'voided' AND void_reason IS NOT NULL"
            " AND voided_by_id IS NOT NULL AND voided_at IS NOT NULL)"
            " OR (status != 'voided' AND void_reason IS NULL"
            " AND voided_by_id IS NULL AND voided_at IS NULL)",
            name="corrective_action_void_fields_check",
        ),
        Index("ix_corrective_action_employee_status", "employee_id", "status"),
    )

    # Relationships
    violation_category: Mapped[ViolationCategory] = relationship(lazy="selectin")
    signatures: Mapped[list[CorrectiveActionSignature]] = relationship(
        back_populates="corrective_action",
        lazy="selectin",
        order_by="CorrectiveActionSignature.signed_at",
    )

    @property
    def is_voided(self) -> bool:
        """Whether the action has been voided."""
        return self.status == CorrectiveActionStatus.VOIDED

    @property
    def effective_points(self) -> int:
        """Points counted toward the employee's score (0 once voided)."""
        if self.is_voided:
            return 0
        if self.points_adjusted is not None:
            return self.points_adjusted
        return self.points_assigned

    def signature_for(self, signer_type: SignerType | str) -> CorrectiveActionSignature | None:
        """Get the signature recorded for a signer type, if any."""
        wanted = SignerType(signer_type).value
        for signature in self.signatures:
            if signature.signer_type == wanted:
                return signature
        return None

    def snapshot(self) -> dict[str, Any]:
        """Audit snapshot of the mutable fields."""
        return {
            "status": self.status,
            "incident_description": self.incident_description,
            "mitigating_circumstances": self.mitigating_circumstances,
            "discipline_level": self.discipline_level,
            "violation_date": self.violation_date.isoformat(),
            "violation_time": self.violation_time.isoformat() if self.violation_time else None,
            "house_id": str(self.house_id) if self.house_id else None,
            "points_assigned": self.points_assigned,
            "points_adjusted": self.points_adjusted,
            "adjustment_reason": self.adjustment_reason,
            "corrective_expectations": list(self.corrective_expectations or []),
            "consequences_text": self.consequences_text,
            "pip_scheduled": self.pip_scheduled,
            "pip_date": self.pip_date.isoformat() if self.pip_date else None,
            "employee_comments": self.employee_comments,
            "void_reason": self.void_reason,
        }


class CorrectiveActionSignature(Base):
    """Recorded acknowledgment by one party, exactly one per signer type."""

    __tablename__ = "corrective_action_signature"

    signature_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    corrective_action_id: Mapped[UUID] = mapped_column(
        ForeignKey("corrective_action.corrective_action_id", ondelete="RESTRICT"),
        nullable=False,
    )
    signer_type: Mapped[str] = mapped_column(String, nullable=False)
    signer_id: Mapped[UUID] = mapped_column(nullable=False)
    signature_data: Mapped[str] = mapped_column(Text, nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)
    device_info: Mapped[str | None] = mapped_column(String, nullable=True)
    signed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "corrective_action_id",
            "signer_type",
            name="corrective_action_signature_type_unique",
        ),
        CheckConstraint(
            sql_in("signer_type", SignerType),
            name="corrective_action_signature_type_check",
        ),
    )

    corrective_action: Mapped[CorrectiveAction] = relationship(back_populates="signatures")


class AuditEvent(Base, TimestampMixin):
    """Audit trail entry. Rows are only ever inserted."""

    __tablename__ = "audit_event"

    audit_event_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    actor_user_id: Mapped[UUID | None] = mapped_column(nullable=True)
    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[UUID] = mapped_column(nullable=False)
    action: Mapped[str] = mapped_column(String, nullable=False)
    before_json: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    after_json: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)

    __table_args__ = (
        Index("ix_audit_event_entity", "entity_type", "entity_id"),
    )
