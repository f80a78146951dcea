from __future__ import annotations
from functools import wraps
from flask import request, g
from api.errors import InvalidToken, Unauthenticated
from utils.security import ACCESS, decode_token
from utils.sessions import ACCESS_COOKIE
from models import storage
from models.user import User


def _bearer_token() -> str | None:
    # the cookie wins over the Authorization header
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def login_required(fn):
    """
    Resolve the access token into a user and attach it as g.current_user.
    Verification is signature-only; the session store is not consulted.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        if not token:
            raise Unauthenticated("unauthorized")

        decoded = decode_token(token, expected_type=ACCESS)
        user = storage.get(User, decoded.get("sub"))
        if not user:
            raise InvalidToken("invalid token")

        g.current_user = user
        return fn(*args, **kwargs)

    return wrapper
