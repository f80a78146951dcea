"""
Authentication blueprint:
- POST  /register          (multipart; avatar required, coverImage optional)
- POST  /login
- POST  /logout
- POST  /token             (refresh-token rotation)
- GET   /get-current-user
- PATCH /change-password

- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and long-lived refresh tokens, both JWTs
  signed with separate secrets
- Stores the single live refresh token per user (UserSession) so that login,
  refresh and logout revoke earlier tokens
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, g
from sqlalchemy import or_

from api.errors import BadRequest, Conflict, NotFound, Unauthenticated, ValidationFailed
from api.responses import api_response
from models import storage
from models.user import User
from models.user_session import UserSession
from models.schemas.user import (
    UserRegisterSchema,
    UserLoginSchema,
    ChangePasswordSchema,
    RefreshTokenSchema,
    UserOutSchema,
)
from utils.decorators import login_required
from utils.media import upload_request_file
from utils.security import hash_password, verify_password
from utils.sessions import (
    REFRESH_COOKIE,
    issue_token_pair,
    rotate_refresh_token,
    revoke_session,
    set_auth_cookies,
    clear_auth_cookies,
)

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
change_password_schema = ChangePasswordSchema()
refresh_token_schema = RefreshTokenSchema()
user_out_schema = UserOutSchema()


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: username, type: string, required: true }
      - { in: formData, name: email, type: string, required: true }
      - { in: formData, name: fullname, type: string, required: true }
      - { in: formData, name: password, type: string, required: true }
      - { in: formData, name: avatar, type: file, required: true }
      - { in: formData, name: coverImage, type: file, required: false }
    responses:
      201:
        description: Created
      409:
        description: Username or email already taken
      422:
        description: Validation error (missing fields or avatar)
    """
    data = user_register_schema.load(request.form.to_dict())

    session = storage.get_session()
    existing = (
        session.query(User)
        .filter(or_(User.username == data["username"], User.email == data["email"]))
        .first()
    )
    if existing:
        raise Conflict("User already exists with email or username")

    avatar = request.files.get("avatar")
    if avatar is None or not avatar.filename:
        raise ValidationFailed("Avatar is required")

    avatar_url = upload_request_file(avatar)
    if not avatar_url:
        raise ValidationFailed("Avatar is required")
    cover_image_url = upload_request_file(request.files.get("coverImage")) or ""

    user = User(
        username=data["username"],
        email=data["email"],
        fullname=data["fullname"],
        password_hash=hash_password(data["password"]),
        avatar=avatar_url,
        cover_image=cover_image_url,
    )
    user.session = UserSession(refresh_token=None, version=0)
    storage.new(user)
    storage.save()

    logger.info("Registered user %s (%s)", user.username, user.id)
    return api_response(user_out_schema.dump(user), "user registered successfully", 201)


@bp.post("/login")
def login():
    """
    Login: returns the user, accessToken and refreshToken (also set as cookies)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             username: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Missing identifier or password
      401:
        description: Wrong password
      404:
        description: Unknown user
    """
    data = user_login_schema.load(request.get_json(silent=True) or {})
    email = data.get("email")
    username = data.get("username")
    password = data.get("password")
    if not (email or username):
        raise BadRequest("email or username required!")
    if not password:
        raise BadRequest("password is required")

    filters = []
    if email:
        filters.append(User.email == email)
    if username:
        filters.append(User.username == username)

    session = storage.get_session()
    user = session.query(User).filter(or_(*filters)).first()
    if not user:
        raise NotFound("User not found!!")
    if not verify_password(password, user.password_hash):
        raise Unauthenticated("invalid creds")

    access_token, refresh_token = issue_token_pair(user)
    logger.info("User %s logged in", user.id)

    response, status = api_response(
        {
            "user": user_out_schema.dump(user),
            "accessToken": access_token,
            "refreshToken": refresh_token,
        },
        "user logged in",
        200,
    )
    set_auth_cookies(response, access_token, refresh_token)
    return response, status


@bp.post("/logout")
@login_required
def logout():
    """
    Logout: clears the stored refresh token and both auth cookies
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    user = g.current_user
    revoke_session(user)
    logger.info("User %s logged out", user.id)

    response, status = api_response({}, "user logged out", 200)
    clear_auth_cookies(response)
    return response, status


@bp.post("/token")
def refresh_token():
    """
    Exchange a refresh token for a new access/refresh pair (rotation).
    The token is read from the JSON body first, then from the refreshToken cookie.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Tokens refreshed
      401:
        description: Missing, invalid, expired or already used refresh token
      422:
        description: Body is not a JSON object
    """
    data = refresh_token_schema.load(request.get_json(silent=True) or {})
    presented = data.get("refresh_token") or request.cookies.get(REFRESH_COOKIE)

    _, access_token, new_refresh_token = rotate_refresh_token(presented)

    response, status = api_response(
        {"accessToken": access_token, "refreshToken": new_refresh_token},
        "tokens refreshed",
        200,
    )
    set_auth_cookies(response, access_token, new_refresh_token)
    return response, status


@bp.get("/get-current-user")
@login_required
def get_current_user():
    """
    Get current user info
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return api_response(user_out_schema.dump(g.current_user), "user details", 200)


@bp.patch("/change-password")
@login_required
def change_password():
    """
    Change the current user's password
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             currentPassword: { type: string }
             newPassword: { type: string }
    responses:
      200:
        description: Password changed
      400:
        description: Current password is incorrect
      422:
        description: Validation error
    """
    data = change_password_schema.load(request.get_json(silent=True) or {})
    user = g.current_user
    if not verify_password(data["current_password"], user.password_hash):
        raise BadRequest("current password is incorrect")

    user.password_hash = hash_password(data["new_password"])
    user.save()
    return api_response({}, "password changed", 200)
