from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    Text,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Video(BaseModel, Base):
    __tablename__ = "videos"

    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    video_file = Column(String(1024), nullable=False)
    thumbnail = Column(String(1024), nullable=True)
    duration = Column(Integer, nullable=False, default=0)  # seconds
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)

    owner = relationship("User")

    __table_args__ = (
        CheckConstraint("duration >= 0", name="ck_videos_duration_nonnegative"),
        CheckConstraint("views >= 0", name="ck_videos_views_nonnegative"),
    )


class WatchHistoryEntry(BaseModel, Base):
    """One slot of a user's ordered watch history."""
    __tablename__ = "watch_history"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)

    video = relationship("Video")

    __table_args__ = (
        UniqueConstraint("user_id", "position", name="uq_watch_history_user_position"),
    )
