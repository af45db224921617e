"""Corrective action API endpoints."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Request, status

from discipline_engine.api.dependencies import AppSettings, CurrentCaller, Discipline
from discipline_engine.api.schemas import (
    CorrectiveActionResponse,
    CreateActionBody,
    CreateActionRequest,
    EditActionRequest,
    ErrorResponse,
    SignActionRequest,
    SignatureStatusResponse,
    SigningLinkResponse,
    VoidActionRequest,
)
from discipline_engine.api.signing import issue_signing_token
from discipline_engine.errors import ValidationError
from discipline_engine.models import SignerType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/corrective-actions", tags=["corrective-actions"])


def client_details(request: Request) -> tuple[str | None, str | None]:
    """Client address and user agent recorded alongside a signature."""
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


# ============================================================================
# Corrective action CRUD
# ============================================================================


@router.post(
    "",
    response_model=CorrectiveActionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def create_corrective_action(
    service: Discipline,
    caller: CurrentCaller,
    payload: CreateActionBody,
) -> CorrectiveActionResponse:
    """Issue a new corrective action in pending_signature status."""
    request = CreateActionRequest(issuer_id=caller.user_id, **payload.model_dump())
    action = await service.create_action(request)
    return CorrectiveActionResponse.model_validate(action)


@router.get(
    "/{corrective_action_id}",
    response_model=CorrectiveActionResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_corrective_action(
    service: Discipline,
    caller: CurrentCaller,
    corrective_action_id: Annotated[UUID, Path()],
) -> CorrectiveActionResponse:
    """Get a corrective action with its signatures."""
    action = await service.get_action(corrective_action_id)
    return CorrectiveActionResponse.model_validate(action)


@router.patch(
    "/{corrective_action_id}",
    response_model=CorrectiveActionResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def edit_corrective_action(
    service: Discipline,
    caller: CurrentCaller,
    corrective_action_id: Annotated[UUID, Path()],
    payload: EditActionRequest,
) -> CorrectiveActionResponse:
    """Patch an action that the employee has not yet signed."""
    action = await service.edit_action(
        corrective_action_id, caller.user_id, caller.role, payload
    )
    return CorrectiveActionResponse.model_validate(action)


# ============================================================================
# Signatures
# ============================================================================


@router.post(
    "/{corrective_action_id}/signatures",
    response_model=CorrectiveActionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def add_signature(
    request: Request,
    service: Discipline,
    caller: CurrentCaller,
    corrective_action_id: Annotated[UUID, Path()],
    payload: SignActionRequest,
) -> CorrectiveActionResponse:
    """Record a staff signature (supervisor, witness or HR).

    Employee signatures go through a signing link instead.
    """
    if payload.signer_type == SignerType.EMPLOYEE:
        raise ValidationError(
            "Employee signatures must be submitted through a signing link",
            {"signer_type": payload.signer_type.value},
        )
    ip_address, device_info = client_details(request)
    action = await service.sign_action(
        corrective_action_id,
        payload.signer_type,
        caller.user_id,
        payload.signature_data,
        caller.role,
        ip_address=ip_address,
        device_info=device_info,
    )
    return CorrectiveActionResponse.model_validate(action)


@router.get(
    "/{corrective_action_id}/signatures",
    response_model=SignatureStatusResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_signature_status(
    service: Discipline,
    caller: CurrentCaller,
    corrective_action_id: Annotated[UUID, Path()],
) -> SignatureStatusResponse:
    """Which parties have signed an action, and when."""
    signature_status = await service.get_signature_status(corrective_action_id)
    return SignatureStatusResponse(
        corrective_action_id=corrective_action_id,
        status=signature_status.status,
        signed_at=signature_status.signed_at,
        has_employee_signature=signature_status.has_employee_signature,
    )


@router.post(
    "/{corrective_action_id}/signing-link",
    response_model=SigningLinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_signing_link(
    service: Discipline,
    settings: AppSettings,
    caller: CurrentCaller,
    corrective_action_id: Annotated[UUID, Path()],
) -> SigningLinkResponse:
    """Issue a signing token for the subject employee of a pending action."""
    action = await service.prepare_signing_link(
        corrective_action_id, caller.user_id, caller.role
    )
    token, link = issue_signing_token(
        action.corrective_action_id, action.employee_id, settings
    )
    logger.info(
        "Issued signing link for action %s (employee %s) by %s",
        action.corrective_action_id,
        action.employee_id,
        caller.user_id,
    )
    return SigningLinkResponse(
        corrective_action_id=link.corrective_action_id,
        token=token,
        expires_at=link.expires_at,
    )


# ============================================================================
# Void
# ============================================================================


@router.post(
    "/{corrective_action_id}/void",
    response_model=CorrectiveActionResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def void_corrective_action(
    service: Discipline,
    caller: CurrentCaller,
    corrective_action_id: Annotated[UUID, Path()],
    payload: VoidActionRequest,
) -> CorrectiveActionResponse:
    """Void an action. Voiding is irreversible."""
    action = await service.void_action(
        corrective_action_id, caller.user_id, caller.role, payload.reason
    )
    return CorrectiveActionResponse.model_validate(action)
