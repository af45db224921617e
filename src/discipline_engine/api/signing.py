"""Tokenized signing links for employee signatures.

The subject employee does not hold a staff session. Their identity is carried
by an HS256 JWT binding the action id, the employee id and an expiry.
A verified token is the only way a caller obtains the SUBJECT_EMPLOYEE role.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from discipline_engine.config import Settings
from discipline_engine.errors import AuthorizationError

ALGORITHM = "HS256"


@dataclass(frozen=True)
class SigningLink:
    """Verified contents of a signing token."""

    corrective_action_id: UUID
    employee_id: UUID
    expires_at: datetime


def issue_signing_token(
    corrective_action_id: UUID,
    employee_id: UUID,
    settings: Settings,
    now: datetime | None = None,
) -> tuple[str, SigningLink]:
    """Create a signing token for the subject employee of an action."""
    issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
    expires_at = issued_at + timedelta(hours=settings.signing_link_ttl_hours)
    payload = {
        "sub": str(employee_id),
        "action": str(corrective_action_id),
        "iat": issued_at,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.signing_secret, algorithm=ALGORITHM)
    link = SigningLink(
        corrective_action_id=corrective_action_id,
        employee_id=employee_id,
        expires_at=expires_at,
    )
    return token, link


def verify_signing_token(token: str, settings: Settings) -> SigningLink:
    """Verify a signing token, raising AuthorizationError if invalid or expired."""
    try:
        payload = jwt.decode(
            token,
            settings.signing_secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "sub", "action"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthorizationError("Signing token has expired")
    except jwt.InvalidTokenError:
        raise AuthorizationError("Invalid signing token")

    try:
        return SigningLink(
            corrective_action_id=UUID(payload["action"]),
            employee_id=UUID(payload["sub"]),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (ValueError, TypeError):
        raise AuthorizationError("Invalid signing token")
