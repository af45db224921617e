"""Tests for employee signing tokens."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from discipline_engine.api.signing import issue_signing_token, verify_signing_token
from discipline_engine.errors import AuthorizationError

from tests.conftest import make_settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class TestSigningTokens:
    """Signed links bind an action to its subject employee."""

    def test_round_trip(self, settings):
        action_id, employee_id = uuid4(), uuid4()
        now = utc_now()

        token, issued = issue_signing_token(action_id, employee_id, settings, now=now)
        link = verify_signing_token(token, settings)

        assert link == issued
        assert link.corrective_action_id == action_id
        assert link.employee_id == employee_id
        assert link.expires_at == now + timedelta(hours=72)

    def test_claims(self, settings):
        action_id, employee_id = uuid4(), uuid4()
        token, _ = issue_signing_token(action_id, employee_id, settings)

        claims = jwt.decode(token, settings.signing_secret, algorithms=["HS256"])

        assert claims["sub"] == str(employee_id)
        assert claims["action"] == str(action_id)
        assert "exp" in claims

    def test_expired(self, settings):
        token, _ = issue_signing_token(
            uuid4(), uuid4(), settings, now=utc_now() - timedelta(hours=73)
        )

        with pytest.raises(AuthorizationError, match="expired"):
            verify_signing_token(token, settings)

    def test_ttl_from_settings(self):
        settings = make_settings(signing_link_ttl_hours=1)
        issued_at = utc_now() - timedelta(hours=2)
        token, link = issue_signing_token(uuid4(), uuid4(), settings, now=issued_at)

        assert link.expires_at == issued_at + timedelta(hours=1)
        with pytest.raises(AuthorizationError, match="expired"):
            verify_signing_token(token, settings)

    def test_tampered_payload(self, settings):
        token, _ = issue_signing_token(uuid4(), uuid4(), settings)
        other, _ = issue_signing_token(uuid4(), uuid4(), settings)
        header, _, signature = token.split(".")
        forged = ".".join([header, other.split(".")[1], signature])

        with pytest.raises(AuthorizationError, match="Invalid"):
            verify_signing_token(forged, settings)

    def test_wrong_secret(self, settings):
        token, _ = issue_signing_token(uuid4(), uuid4(), settings)
        other = make_settings(signing_secret="another-signing-secret-0123456789ab")

        with pytest.raises(AuthorizationError, match="Invalid"):
            verify_signing_token(token, other)

    def test_missing_action_claim(self, settings):
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": utc_now() + timedelta(hours=1)},
            settings.signing_secret,
            algorithm="HS256",
        )

        with pytest.raises(AuthorizationError, match="Invalid"):
            verify_signing_token(token, settings)

    def test_non_uuid_claims(self, settings):
        token = jwt.encode(
            {"sub": "dana", "action": "42", "exp": utc_now() + timedelta(hours=1)},
            settings.signing_secret,
            algorithm="HS256",
        )

        with pytest.raises(AuthorizationError, match="Invalid"):
            verify_signing_token(token, settings)

    @pytest.mark.parametrize("token", ["", "no-separator", "abc.def", "a.b.c"])
    def test_malformed(self, settings, token):
        with pytest.raises(AuthorizationError):
            verify_signing_token(token, settings)
