"""Consent-gated lookup of a user's device tokens."""

from __future__ import annotations

from typing import List, Protocol

from habitat.core.errors import NotPermittedError, UserMissingError
from habitat.core.users.models import User
from habitat.core.users.services import decode_push_tokens
from habitat.extensions import db


class PushTokenRegistry(Protocol):
    def tokens_for(self, user_id: int) -> List[str]:
        ...


class UserPushTokenRegistry:
    """Reads tokens from the ``user`` table.

    Raises ``UserMissingError`` for unknown users, ``NotPermittedError`` when
    consent is not ``True`` or no tokens are stored, and ``CorruptTokensError``
    when the stored blob is not a JSON list of strings.
    """

    def tokens_for(self, user_id: int) -> List[str]:
        user = db.session.get(User, user_id)
        if user is None:
            raise UserMissingError(f"user {user_id} not found")
        if user.allows_notifications is not True or user.push_tokens is None:
            raise NotPermittedError(f"user {user_id} does not accept push notifications")
        tokens = decode_push_tokens(user.push_tokens)
        if not tokens:
            raise NotPermittedError(f"user {user_id} has no registered devices")
        return tokens
