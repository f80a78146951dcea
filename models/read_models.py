"""
Read-side queries that join users with their subscriptions and watch history.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import and_, exists, func, select

from models import storage
from models.subscription import Subscription
from models.user import User
from models.video import Video, WatchHistoryEntry


def channel_details(username: str, viewer_id: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Profile of the channel `username` with its subscriber count, the number
    of channels it subscribes to, and whether `viewer_id` is subscribed.
    Returns None if no such user exists.
    """
    subscribers_count = (
        select(func.count(Subscription.id))
        .where(Subscription.channel_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    subscribed_channel_count = (
        select(func.count(Subscription.id))
        .where(Subscription.subscriber_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    is_subscribed = (
        exists()
        .where(and_(Subscription.channel_id == User.id, Subscription.subscriber_id == viewer_id))
        .correlate(User)
    )

    row = (
        storage.get_session()
        .query(
            User,
            subscribers_count.label("subscribers_count"),
            subscribed_channel_count.label("subscribed_channel_count"),
            is_subscribed.label("is_subscribed"),
        )
        .filter(User.username == username)
        .first()
    )
    if row is None:
        return None

    user, n_subscribers, n_subscribed, subscribed = row
    return {
        "id": user.id,
        "username": user.username,
        "fullname": user.fullname,
        "email": user.email,
        "avatar": user.avatar,
        "cover_image": user.cover_image,
        "subscribers_count": n_subscribers or 0,
        "subscribed_channel_count": n_subscribed or 0,
        "is_subscribed": bool(subscribed) if viewer_id else False,
    }


def watch_history(user_id: str) -> List[Dict[str, Any]]:
    """
    Videos in the user's watch history, in watch order, each carrying a
    summary of its owner. A video watched twice appears twice.
    """
    rows = (
        storage.get_session()
        .query(WatchHistoryEntry, Video, User)
        .join(Video, Video.id == WatchHistoryEntry.video_id)
        .join(User, User.id == Video.owner_id)
        .filter(WatchHistoryEntry.user_id == user_id)
        .order_by(WatchHistoryEntry.position.asc())
        .all()
    )
    history = []
    # one row per history entry, so repeat watches are kept
    for _entry, video, owner in rows:
        history.append(
            {
                "id": video.id,
                "title": video.title,
                "description": video.description,
                "video_file": video.video_file,
                "thumbnail": video.thumbnail,
                "duration": video.duration,
                "views": video.views,
                "is_published": video.is_published,
                "created_at": video.created_at,
                "owner": owner,
            }
        )
    return history
