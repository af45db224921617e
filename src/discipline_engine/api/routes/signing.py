"""Employee signing endpoint, authenticated by a signing token."""

from typing import Annotated

from fastapi import APIRouter, Path, Request

from discipline_engine.api.dependencies import AppSettings, Discipline
from discipline_engine.api.routes.corrective_actions import client_details
from discipline_engine.api.schemas import (
    CorrectiveActionResponse,
    EmployeeSignRequest,
    ErrorResponse,
)
from discipline_engine.api.signing import verify_signing_token
from discipline_engine.models import SignerType, UserRole

router = APIRouter(prefix="/sign", tags=["signing"])


@router.post(
    "/{token}",
    response_model=CorrectiveActionResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def sign_as_employee(
    request: Request,
    service: Discipline,
    settings: AppSettings,
    token: Annotated[str, Path()],
    payload: EmployeeSignRequest,
) -> CorrectiveActionResponse:
    """Acknowledge or dispute an action as its subject employee."""
    link = verify_signing_token(token, settings)
    ip_address, device_info = client_details(request)
    action = await service.sign_action(
        link.corrective_action_id,
        SignerType.EMPLOYEE,
        link.employee_id,
        payload.signature_data,
        UserRole.SUBJECT_EMPLOYEE,
        payload.dispute,
        employee_comments=payload.employee_comments,
        ip_address=ip_address,
        device_info=device_info,
    )
    return CorrectiveActionResponse.model_validate(action)
