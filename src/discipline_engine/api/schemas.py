"""Pydantic schemas for API request/response models."""

from datetime import date, datetime, time
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from discipline_engine.models import DisciplineLevel, SignerType
from discipline_engine.services.requests import (  # noqa: F401
    CreateActionRequest,
    EditActionRequest,
    SignatureRequest,
    VoidActionRequest,
)


# ============================================================================
# Violation category schemas
# ============================================================================


class ViolationCategoryResponse(BaseModel):
    """Schema for violation category response."""

    model_config = ConfigDict(from_attributes=True)

    violation_category_id: UUID
    category_name: str
    severity_level: str
    default_points: int
    description: str | None = None
    display_order: int
    is_active: bool


class ViolationCategoryListResponse(BaseModel):
    """Schema for listing categories, flat and grouped by severity."""

    items: list[ViolationCategoryResponse]
    grouped: dict[str, list[ViolationCategoryResponse]]


# ============================================================================
# Corrective action request schemas
# ============================================================================


class CreateActionBody(BaseModel):
    """HTTP body for creating an action; the issuer comes from the caller."""

    model_config = ConfigDict(extra="forbid")

    employee_id: UUID
    violation_category_id: UUID
    violation_date: date
    incident_description: str = Field(min_length=1)
    discipline_level: DisciplineLevel
    house_id: UUID | None = None
    violation_time: time | None = None
    mitigating_circumstances: str | None = None
    points_override: int | None = Field(default=None, ge=0)
    adjustment_reason: str | None = None
    corrective_expectations: list[str] = Field(default_factory=list)
    consequences_text: str | None = None
    pip_scheduled: bool = False
    pip_date: date | None = None


class SignActionRequest(BaseModel):
    """Schema for a staff signature (supervisor, witness, HR)."""

    model_config = ConfigDict(extra="forbid")

    signer_type: SignerType
    signature_data: str = Field(min_length=1)


class EmployeeSignRequest(BaseModel):
    """Schema for the employee's own signature via a signing link.

    ``dispute`` is the explicit signal that the employee disagrees with the
    record; comments alone never imply a dispute.
    """

    model_config = ConfigDict(extra="forbid")

    signature_data: str = Field(min_length=1)
    dispute: bool = False
    employee_comments: str | None = None


# ============================================================================
# Corrective action response schemas
# ============================================================================


class SignatureResponse(BaseModel):
    """Schema for a recorded signature."""

    model_config = ConfigDict(from_attributes=True)

    signature_id: UUID
    signer_type: str
    signer_id: UUID
    signature_data: str
    signed_at: datetime


class CorrectiveActionResponse(BaseModel):
    """Full corrective action snapshot including signatures."""

    model_config = ConfigDict(from_attributes=True)

    corrective_action_id: UUID
    employee_id: UUID
    issued_by_id: UUID
    house_id: UUID | None = None
    violation_category_id: UUID
    violation_date: date
    violation_time: time | None = None
    incident_description: str
    mitigating_circumstances: str | None = None
    discipline_level: str
    points_assigned: int
    points_adjusted: int | None = None
    adjustment_reason: str | None = None
    effective_points: int
    corrective_expectations: list[str]
    consequences_text: str | None = None
    pip_scheduled: bool
    pip_date: date | None = None
    employee_comments: str | None = None
    status: str
    void_reason: str | None = None
    voided_by_id: UUID | None = None
    voided_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    signatures: list[SignatureResponse]


class SignatureStatusResponse(BaseModel):
    """Which parties have signed an action."""

    corrective_action_id: UUID
    status: str
    signed_at: dict[str, datetime | None]
    has_employee_signature: bool


class SigningLinkResponse(BaseModel):
    """Tokenized link the subject employee uses to sign."""

    corrective_action_id: UUID
    token: str
    expires_at: datetime


class EmployeePointsResponse(BaseModel):
    """Employee point totals."""

    employee_id: UUID
    total_points: int
    current_points: int
    rolling_window_days: int


class DisciplineHistoryResponse(BaseModel):
    """Employee discipline history with summary statistics."""

    employee_id: UUID
    employee_name: str
    actions: list[CorrectiveActionResponse]
    total_points: int
    current_points: int
    counts_by_status: dict[str, int]
    counts_by_severity: dict[str, int]


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None
