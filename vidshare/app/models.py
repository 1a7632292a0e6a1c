"""
SQLAlchemy 2.0 database models.
"""
import uuid
import enum
from datetime import datetime

from sqlalchemy import (
    Column, String, DateTime, Enum as SAEnum, ForeignKey, Text,
    Boolean, Integer, Uuid
)
import sqlalchemy as sa
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


class LikeTargetType(str, enum.Enum):
    video = "video"
    comment = "comment"
    tweet = "tweet"


class User(Base):
    __tablename__ = "users"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    avatar = Column(String(500), nullable=False)
    cover_image = Column(String(500), default="", nullable=False)
    password_hash = Column(String(255), nullable=False)
    refresh_token = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    videos = relationship("Video", back_populates="owner")


class WatchHistoryEntry(Base):
    __tablename__ = "watch_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    watched_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = relationship("User")
    video = relationship("Video")


class Video(Base):
    __tablename__ = "videos"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    video_file = Column(String(500), nullable=False)
    thumbnail = Column(String(500), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    duration = Column(Integer, default=0, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    is_published = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="videos")
    comments = relationship("Comment", back_populates="video", cascade="all, delete-orphan")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    video_id = Column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    video = relationship("Video", back_populates="comments")
    owner = relationship("User")


class Tweet(Base):
    __tablename__ = "tweets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    owner = relationship("User")


class Like(Base):
    """
    A like is the existence of a row; there is no boolean flag.

    The target is stored as a (target_type, target_id) pair; rows are built
    from a ``TargetRef`` so exactly one target is always set.
    """
    __tablename__ = "likes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    liked_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    target_type = Column(SAEnum(LikeTargetType), nullable=False)
    target_id = Column(Uuid, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    liked_by = relationship("User")

    # One like per user per target
    __table_args__ = (
        sa.UniqueConstraint('liked_by_id', 'target_type', 'target_id', name='uq_like_user_target'),
    )


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    subscriber_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    channel_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    subscriber = relationship("User", foreign_keys=[subscriber_id])
    channel = relationship("User", foreign_keys=[channel_id])

    __table_args__ = (
        sa.UniqueConstraint('subscriber_id', 'channel_id', name='uq_subscriber_channel'),
        sa.CheckConstraint('subscriber_id <> channel_id', name='ck_no_self_subscription'),
    )


class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    owner = relationship("User")
    items = relationship(
        "PlaylistVideo", back_populates="playlist",
        cascade="all, delete-orphan", order_by="PlaylistVideo.position"
    )


class PlaylistVideo(Base):
    __tablename__ = "playlist_videos"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    playlist_id = Column(Uuid, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)

    position = Column(Integer, nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    playlist = relationship("Playlist", back_populates="items")
    video = relationship("Video")

    # A video appears at most once per playlist
    __table_args__ = (
        sa.UniqueConstraint('playlist_id', 'video_id', name='uq_playlist_video'),
    )
