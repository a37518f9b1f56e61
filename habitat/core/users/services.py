"""User service layer: push-token registration, consent and roles."""

from __future__ import annotations

import json
import logging
from typing import List, Optional

from habitat.core.errors import CorruptTokensError, InternalError, NotFoundError
from habitat.core.users.models import ROLES, User
from habitat.extensions import db

logger = logging.getLogger(__name__)

OP_ADD = "add"
OP_REPLACE = "replace"
OP_REMOVE = "remove"


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def require_user(user_id: int) -> User:
    user = get_user(user_id)
    if user is None:
        raise NotFoundError("user not found")
    return user


def decode_push_tokens(raw: Optional[str]) -> List[str]:
    """Decode the stored token blob; ``None`` decodes to an empty list."""
    if raw is None or raw == "":
        return []
    try:
        tokens = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise CorruptTokensError("stored push tokens are not valid JSON") from exc
    if not isinstance(tokens, list) or not all(isinstance(t, str) for t in tokens):
        raise CorruptTokensError("stored push tokens are not a list of strings")
    return tokens


def encode_push_tokens(tokens: List[str]) -> str:
    return json.dumps(tokens)


def alter_push_token(user: User, op: str, token: str) -> List[str]:
    """Apply ``op`` to the user's device-token list and persist it."""
    try:
        tokens = decode_push_tokens(user.push_tokens)
    except CorruptTokensError as exc:
        # The client cannot repair this; report it as a server fault.
        logger.error("User %s has a corrupt push token list", user.id)
        raise InternalError("stored push tokens are corrupt") from exc

    if op == OP_ADD:
        if token not in tokens:
            tokens.append(token)
    elif op == OP_REPLACE:
        tokens = [token]
    elif op == OP_REMOVE:
        tokens = [t for t in tokens if t != token]
    else:
        raise ValueError(f"unknown push token op: {op}")

    user.push_tokens = encode_push_tokens(tokens)
    db.session.commit()
    logger.info("Push token %s for user %s (%d registered)", op, user.id, len(tokens))
    return tokens


def set_allows_notifications(user: User, allows: Optional[bool]) -> User:
    """Record consent; withdrawing it also forgets every device token."""
    user.allows_notifications = allows
    if allows is False:
        user.push_tokens = None
    db.session.commit()
    return user


def set_role(user: User, role: str) -> User:
    if role not in ROLES:
        raise ValueError("invalid_role")
    user.role = role
    db.session.commit()
    return user
