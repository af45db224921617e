"""Validated inputs to the discipline service operations."""

from datetime import date, time
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from discipline_engine.models import DisciplineLevel, SignerType


class CreateActionRequest(BaseModel):
    """Fields for issuing a corrective action."""

    model_config = ConfigDict(extra="forbid")

    employee_id: UUID
    issuer_id: UUID
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


class EditActionRequest(BaseModel):
    """Field patch. Only fields that are set are applied."""

    model_config = ConfigDict(extra="forbid")

    incident_description: str | None = None
    mitigating_circumstances: str | None = None
    discipline_level: DisciplineLevel | None = None
    violation_date: date | None = None
    violation_time: time | None = None
    house_id: UUID | None = None
    points_adjusted: int | None = Field(default=None, ge=0)
    adjustment_reason: str | None = None
    corrective_expectations: list[str] | None = None
    consequences_text: str | None = None
    pip_scheduled: bool | None = None
    pip_date: date | None = None

    def to_patch(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller."""
        return self.model_dump(exclude_unset=True)


class SignatureRequest(BaseModel):
    """Any signature, staff or employee."""

    model_config = ConfigDict(extra="forbid")

    signer_type: SignerType
    signer_id: UUID
    signature_data: str = Field(min_length=1)
    caller_role: str = Field(min_length=1)
    dispute: bool = False
    employee_comments: str | None = None
    ip_address: str | None = None
    device_info: str | None = None


class VoidActionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: str
