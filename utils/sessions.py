"""
Session lifecycle: issuing, rotating and revoking the refresh token stored
for each user.

Every user owns exactly one UserSession row. A refresh token is honored only
while it equals the value in that row, so writing a new token (login or
refresh) or clearing it (logout) revokes whatever was issued before.
"""
from __future__ import annotations

import logging
from typing import Tuple

import jwt
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from api.errors import Internal, InvalidToken, TokenReused, Unauthenticated
from models import storage
from models.user import User
from models.user_session import UserSession
from utils.security import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
)

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def _session_query(user_id: str):
    return storage.get_session().query(UserSession).filter(UserSession.user_id == user_id)


def issue_token_pair(user: User) -> Tuple[str, str]:
    """
    Mint an access/refresh pair and store the refresh token, overwriting the
    previous one. Raises Internal if the tokens cannot be minted or stored.
    """
    try:
        access_token = create_access_token(user)
        refresh_token = create_refresh_token(user)
        updated = _session_query(user.id).update(
            {
                UserSession.refresh_token: refresh_token,
                UserSession.version: UserSession.version + 1,
            },
            synchronize_session=False,
        )
        if not updated:
            storage.new(UserSession(user_id=user.id, refresh_token=refresh_token, version=1))
        storage.save()
    except (SQLAlchemyError, jwt.PyJWTError) as exc:
        storage.rollback()
        logger.exception("Failed to issue tokens for user %s", user.id)
        raise Internal("failed to generate tokens") from exc
    return access_token, refresh_token


def rotate_refresh_token(presented: str | None) -> Tuple[User, str, str]:
    """
    Exchange a refresh token for a new pair.

    The swap is conditional on the stored value still being `presented`, so of
    two concurrent refreshes with the same token only one succeeds.
    """
    if not presented:
        raise Unauthenticated("unauthenticated")

    decoded = decode_token(presented, expected_type=REFRESH)
    user = storage.get(User, decoded.get("sub"))
    if not user:
        raise InvalidToken("invalid refresh token")

    try:
        access_token = create_access_token(user)
        refresh_token = create_refresh_token(user)
        swapped = (
            _session_query(user.id)
            .filter(UserSession.refresh_token == presented)
            .update(
                {
                    UserSession.refresh_token: refresh_token,
                    UserSession.version: UserSession.version + 1,
                },
                synchronize_session=False,
            )
        )
        if swapped != 1:
            storage.rollback()
            logger.warning("Rejected reused refresh token for user %s", user.id)
            raise TokenReused()
        storage.save()
    except (SQLAlchemyError, jwt.PyJWTError) as exc:
        storage.rollback()
        logger.exception("Failed to rotate tokens for user %s", user.id)
        raise Internal("failed to generate tokens") from exc

    logger.info("Rotated refresh token for user %s", user.id)
    return user, access_token, refresh_token


def revoke_session(user: User) -> None:
    """Clear the stored refresh token; every outstanding refresh token dies."""
    _session_query(user.id).update(
        {
            UserSession.refresh_token: None,
            UserSession.version: UserSession.version + 1,
        },
        synchronize_session=False,
    )
    storage.save()


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": current_app.config.get("COOKIE_SECURE", True),
        "samesite": current_app.config.get("COOKIE_SAMESITE", "Lax"),
    }


def set_auth_cookies(response, access_token: str, refresh_token: str):
    opts = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE,
        access_token,
        max_age=int(current_app.config["ACCESS_TOKEN_EXPIRES"].total_seconds()),
        **opts,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        refresh_token,
        max_age=int(current_app.config["REFRESH_TOKEN_EXPIRES"].total_seconds()),
        **opts,
    )
    return response


def clear_auth_cookies(response):
    opts = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **opts)
    response.delete_cookie(REFRESH_COOKIE, **opts)
    return response
