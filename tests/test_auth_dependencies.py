"""Tests for token verification and the identity dependencies."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from backend.app.api.dependencies import (
    NotAuthenticatedError,
    _extract_bearer_token,
    get_optional_identity,
    require_identity,
)
from backend.app.core.security import (
    AuthSecurityError,
    decode_access_token,
    subject_from_token,
)
from backend.app.core.settings import settings
from backend.app.db.base import Base
from backend.app.models.identifiers import new_id
from backend.app.services.user_repository import create_user
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker


def _token(claims: dict, secret: str | None = None) -> str:
    return jwt.encode(
        claims, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm,
    )


@pytest.fixture()
def db() -> Session:  # type: ignore[misc]
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Token decoding
# ---------------------------------------------------------------------------


class TestDecodeAccessToken:
    def test_valid_token(self) -> None:
        payload = decode_access_token(_token({"sub": "u1"}))
        assert payload["sub"] == "u1"

    def test_empty_token(self) -> None:
        with pytest.raises(AuthSecurityError, match="empty"):
            decode_access_token("  ")

    def test_bad_signature(self) -> None:
        with pytest.raises(AuthSecurityError, match="Invalid"):
            decode_access_token(_token({"sub": "u1"}, secret="not-the-secret"))

    def test_expired(self) -> None:
        past = datetime.now(UTC) - timedelta(minutes=5)
        with pytest.raises(AuthSecurityError):
            decode_access_token(_token({"sub": "u1", "exp": past}))

    def test_subject_required(self) -> None:
        with pytest.raises(AuthSecurityError, match="subject"):
            subject_from_token(_token({"name": "x"}))

    def test_subject_returned(self) -> None:
        assert subject_from_token(_token({"sub": "abc"})) == "abc"


# ---------------------------------------------------------------------------
# Authorization header parsing
# ---------------------------------------------------------------------------


class TestExtractBearerToken:
    def test_bearer(self) -> None:
        assert _extract_bearer_token("Bearer abc") == "abc"

    def test_scheme_case_insensitive(self) -> None:
        assert _extract_bearer_token("bearer abc") == "abc"

    def test_missing_token(self) -> None:
        with pytest.raises(NotAuthenticatedError):
            _extract_bearer_token("Bearer")

    def test_other_scheme(self) -> None:
        with pytest.raises(NotAuthenticatedError, match="Bearer"):
            _extract_bearer_token("Basic abc")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


class TestIdentityDependencies:
    def test_optional_without_header_is_none(self, db: Session) -> None:
        assert get_optional_identity(authorization=None, db=db) is None

    def test_required_without_header_rejected(self, db: Session) -> None:
        with pytest.raises(NotAuthenticatedError, match="no token"):
            require_identity(authorization=None, db=db)

    def test_known_user_resolved(self, db: Session) -> None:
        user = create_user(db, username="alice", email="alice@example.com")
        db.commit()
        identity = require_identity(
            authorization=f"Bearer {_token({'sub': user.id})}", db=db,
        )
        assert identity.user_id == user.id
        assert identity.username == "alice"

    def test_optional_still_rejects_bad_token(self, db: Session) -> None:
        with pytest.raises(NotAuthenticatedError, match="token failed"):
            get_optional_identity(authorization="Bearer garbage", db=db)

    def test_unknown_user_rejected(
        self, db: Session, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with pytest.raises(NotAuthenticatedError, match="user not found"):
            require_identity(authorization=f"Bearer {_token({'sub': new_id()})}", db=db)
        assert "auth_failed" in caplog.text
