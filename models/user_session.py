"""
UserSession model: the single currently-valid refresh token of a user.

Fields:
- user_id (String(36)) - FK to users.id, one row per user
- refresh_token - the last issued refresh token, NULL when logged out
- version - incremented on every write to the token
"""
from sqlalchemy import Column, String, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class UserSession(BaseModel, Base):
    __tablename__ = "user_sessions"

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    refresh_token = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="session")
