from __future__ import annotations

import logging

from flask import Blueprint, request, g

from api.errors import BadRequest, Conflict, Internal, NotFound
from api.responses import api_response
from models import storage
from models.read_models import channel_details, watch_history
from models.subscription import Subscription
from models.user import User, UserFileType
from models.schemas.user import UserDetailsUpdateSchema, UserOutSchema, ChannelDetailsOutSchema
from models.schemas.subscription import SubscribeSchema, SubscriptionOutSchema
from models.schemas.video import WatchHistoryVideoSchema
from utils.decorators import login_required
from utils.media import upload_request_file

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__)

user_details_update_schema = UserDetailsUpdateSchema()
user_out_schema = UserOutSchema()
channel_details_out_schema = ChannelDetailsOutSchema()
subscribe_schema = SubscribeSchema()
subscription_out_schema = SubscriptionOutSchema()
watch_history_schema = WatchHistoryVideoSchema(many=True)


@bp.patch("/update-user-details")
@login_required
def update_user_details():
    """
    Update the current user's fullname and email
    ---
    tags:
      - Users
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
             fullname: { type: string }
             email: { type: string }
    responses:
      200: { description: OK }
      409: { description: Email already used by another user }
      422: { description: Validation error }
    """
    data = user_details_update_schema.load(request.get_json(silent=True) or {})
    user = g.current_user

    session = storage.get_session()
    taken = (
        session.query(User)
        .filter(User.email == data["email"], User.id != user.id)
        .first()
    )
    if taken:
        raise Conflict("Email already registered")

    user.fullname = data["fullname"]
    user.email = data["email"]
    user.save()
    return api_response(user_out_schema.dump(user), "user details updated", 200)


@bp.patch("/update-user-files")
@login_required
def update_user_file():
    """
    Replace the current user's avatar or cover image
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - in: query
        name: type
        type: string
        enum: [avatar, coverImage]
        required: true
      - in: formData
        name: file
        type: file
        required: true
    responses:
      200: { description: OK }
      400: { description: Missing or unknown file type, or missing file }
      500: { description: Upload failed }
    """
    raw_type = request.args.get("type")
    if not raw_type:
        raise BadRequest("file type is required")
    try:
        file_type = UserFileType(raw_type)
    except ValueError:
        allowed = ", ".join(t.value for t in UserFileType)
        raise BadRequest(f"Unsupported file type. Allowed: {allowed}")

    file = request.files.get("file")
    if file is None or not file.filename:
        raise BadRequest("file is required")

    url = upload_request_file(file)
    if not url:
        raise Internal(f"failed to save {file_type.value} file")

    # TODO: delete the previous file from the media host once it is replaced
    user = g.current_user
    user.set_file(file_type, url)
    user.save()
    return api_response(user_out_schema.dump(user), f"{file_type.value} uploaded", 200)


@bp.get("/get-user-channel-details/<username>")
@login_required
def get_user_channel_details(username: str):
    """
    Channel profile with subscriber counts, as seen by the current user
    ---
    tags:
      - Channels
    security:
      - Bearer: []
    parameters:
      - in: path
        name: username
        type: string
        required: true
    responses:
      200: { description: OK }
      400: { description: Username missing }
      404: { description: Channel does not exist }
    """
    username = (username or "").strip().lower()
    if not username:
        raise BadRequest("username required")

    details = channel_details(username, viewer_id=g.current_user.id)
    if details is None:
        raise NotFound("channel does not exist")
    return api_response(channel_details_out_schema.dump(details), "channel details", 200)


@bp.post("/subscribe")
@login_required
def subscribe():
    """
    Subscribe the current user to a channel (by username)
    ---
    tags:
      - Channels
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
             channel: { type: string }
    responses:
      201: { description: Subscribed }
      404: { description: Channel not found }
      409: { description: Already subscribed }
    """
    data = subscribe_schema.load(request.get_json(silent=True) or {})

    session = storage.get_session()
    channel = session.query(User).filter(User.username == data["channel"]).first()
    if not channel:
        raise NotFound("channel not found")

    subscriber = g.current_user
    already = (
        session.query(Subscription)
        .filter(Subscription.subscriber_id == subscriber.id, Subscription.channel_id == channel.id)
        .first()
    )
    if already:
        raise Conflict("already subscribed to this channel")

    subscription = Subscription(subscriber_id=subscriber.id, channel_id=channel.id)
    storage.new(subscription)
    storage.save()

    logger.info("User %s subscribed to %s", subscriber.id, channel.id)
    return api_response(subscription_out_schema.dump(subscription), "subscribed successfully", 201)


@bp.get("/watch-history")
@login_required
def get_watch_history():
    """
    Current user's watch history, oldest first, with video owners
    ---
    tags:
      - Channels
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    history = watch_history(g.current_user.id)
    return api_response(watch_history_schema.dump(history), "watch history fetched successfully", 200)
