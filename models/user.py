from enum import Enum

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel


class UserFileType(str, Enum):
    """User fields that can be replaced by an uploaded file."""
    AVATAR = "avatar"
    COVER_IMAGE = "coverImage"


class User(BaseModel, Base):
    __tablename__ = "users"

    # username and email are stored lowercased (normalized in the schemas)
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    fullname = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=False)
    cover_image = Column(String(1024), nullable=False, default="")

    session = relationship(
        "UserSession",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    watch_history = relationship(
        "WatchHistoryEntry",
        order_by="WatchHistoryEntry.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def set_avatar(self, url: str) -> None:
        self.avatar = url

    def set_cover_image(self, url: str) -> None:
        self.cover_image = url

    def set_file(self, file_type: UserFileType, url: str) -> None:
        setters = {
            UserFileType.AVATAR: self.set_avatar,
            UserFileType.COVER_IMAGE: self.set_cover_image,
        }
        setters[file_type](url)
