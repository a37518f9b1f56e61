"""Access/refresh token lifecycle.

Access tokens are signed by flask-jwt-extended with ``ACCESS_TOKEN_SECRET``
and carry ``id`` and ``role``. Refresh and forgot-password tokens are signed
with their own secrets through PyJWT. A refresh token is only honoured while
the revocation store maps it to ``"true"``; refreshing consumes it.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

import jwt
import redis
from flask import current_app
from flask_jwt_extended import create_access_token
from sqlalchemy.exc import SQLAlchemyError

from habitat.config import REQUIRED_SECRETS
from habitat.core.auth.revocation import RevocationStore, get_revocation_store
from habitat.core.errors import (
    ForbiddenError,
    HabitatError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
    TransportError,
)
from habitat.core.users.models import ROLE_USER, User
from habitat.extensions import db

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
REFRESH_TOKEN_VALID = "true"
REFRESH_TOKEN_TYPE = "refresh"
FORGOT_PASSWORD_TOKEN_TYPE = "forgot_password"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def to_dict(self) -> dict:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


def short_random(n: int, source: Callable[[int], bytes] = secrets.token_bytes) -> str:
    """Lowercase hex of ``n`` random bytes, or ``""`` if the source fails."""
    try:
        raw = source(n)
    except (OSError, NotImplementedError):
        logger.exception("Random source failed")
        return ""
    return raw.hex()


def lookup_role(user_id: int) -> str:
    user = db.session.get(User, user_id)
    if user is None or not user.role:
        return ROLE_USER
    return user.role


class TokenService:
    """Issues, rotates and revokes token pairs."""

    def __init__(
        self,
        store: Optional[RevocationStore] = None,
        role_lookup: Optional[Callable[[int], str]] = None,
    ):
        self.store = store if store is not None else get_revocation_store()
        self.role_lookup = role_lookup if role_lookup is not None else lookup_role
        self.config = current_app.config

    def issue(self, user_id: int) -> TokenPair:
        self._require_secrets()
        role = self.role_lookup(user_id) or ROLE_USER
        try:
            access_token = create_access_token(
                identity=str(user_id),
                additional_claims={"id": user_id, "role": role},
            )
            refresh_token = self._encode(
                {"sub": str(user_id), "type": REFRESH_TOKEN_TYPE, "jti": uuid4().hex},
                self.config["REFRESH_TOKEN_SECRET"],
                self.config["REFRESH_TOKEN_EXPIRES"],
            )
        except (jwt.PyJWTError, RuntimeError, TypeError, ValueError) as exc:
            raise InternalError("token signing failed") from exc

        ttl = self.config["REFRESH_TOKEN_EXPIRES"] + self.config["REFRESH_TOKEN_GRACE"]
        try:
            self.store.set(refresh_token, REFRESH_TOKEN_VALID, ttl)
        except redis.RedisError as exc:
            raise TransportError("revocation store unavailable") from exc
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def forgot_password(self, user_id: int, email: str) -> str:
        """Short-lived single-purpose token; not tracked in the revocation store."""
        self._require_secrets()
        try:
            return self._encode(
                {"id": user_id, "email": email, "type": FORGOT_PASSWORD_TOKEN_TYPE},
                self.config["EMAIL_TOKEN_SECRET"],
                self.config["FORGOT_PASSWORD_TOKEN_EXPIRES"],
            )
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise InternalError("token signing failed") from exc

    def verify_forgot_password(self, token: str) -> dict:
        claims = self._decode(token, self.config["EMAIL_TOKEN_SECRET"], ["exp", "id", "email"])
        if claims.get("type") != FORGOT_PASSWORD_TOKEN_TYPE:
            raise InvalidCredentialsError("not a password reset token")
        return claims

    def refresh(self, presented: str) -> TokenPair:
        """Consume ``presented`` and return a fresh pair for its subject.

        The presented token is deleted before the new pair is signed; if signing
        fails the old token stays consumed. Of two concurrent refreshes of the
        same token only the one whose delete succeeds continues.
        """
        claims = self._decode(presented, self.config["REFRESH_TOKEN_SECRET"], ["exp", "sub"])
        if claims.get("type") != REFRESH_TOKEN_TYPE:
            raise InvalidCredentialsError("not a refresh token")

        try:
            stored = self.store.get(presented)
            if stored is None:
                raise NotFoundError("refresh token not found")
            if stored != REFRESH_TOKEN_VALID:
                raise ForbiddenError("refresh token revoked")
            if not self.store.delete(presented):
                raise ForbiddenError("refresh token already used")
        except redis.RedisError as exc:
            raise TransportError("revocation store unavailable") from exc

        try:
            user_id = int(claims["sub"])
        except (TypeError, ValueError) as exc:
            raise InternalError("malformed refresh subject") from exc

        try:
            return self.issue(user_id)
        except (HabitatError, SQLAlchemyError) as exc:
            logger.exception("Failed to issue rotated token pair for user %s", user_id)
            raise InternalError("could not issue token pair") from exc

    def revoke(self, refresh_token: str) -> bool:
        try:
            return bool(self.store.delete(refresh_token))
        except redis.RedisError as exc:
            raise TransportError("revocation store unavailable") from exc

    # --- helpers ---

    def _require_secrets(self) -> None:
        if self.config.get("ENV") != "production":
            return
        missing = [name for name in REQUIRED_SECRETS if not self.config.get(name)]
        if missing:
            logger.error("Refusing to sign tokens; missing secrets: %s", ", ".join(missing))
            raise InternalError("token secrets are not configured")

    @staticmethod
    def _encode(claims: dict, secret: str, lifetime) -> str:
        now = datetime.now(timezone.utc)
        payload = {**claims, "iat": now, "exp": now + lifetime}
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    @staticmethod
    def _decode(token: str, secret: str, required: list[str]) -> dict:
        try:
            return jwt.decode(token, secret, algorithms=[ALGORITHM], options={"require": required})
        except jwt.ExpiredSignatureError as exc:
            raise InvalidCredentialsError("token expired") from exc
        except jwt.PyJWTError as exc:
            raise InvalidCredentialsError("invalid token") from exc


__all__ = ["TokenPair", "TokenService", "lookup_role", "short_random"]
