"""User and session models for authoring identity."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, utcnow


class User(Base, TimestampMixin):
    """Authors allowed to write content.

    Authentication itself lives outside the core; posts and versions only
    reference the author by id and surface the display name.

    Attributes:
        id: Primary key identifier.
        username: Login name (unique).
        display_name: Name shown next to posts and versions.
        email: Optional contact address.
        password_hash: Credential hash managed by the auth layer.
        is_active: Whether the account can author content.
        created_at: When the user was created.
        updated_at: When the user was last modified.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        doc="Login name"
    )
    display_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        doc="User's display name"
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="User email address"
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        doc="Password hash owned by the authentication layer"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        doc="Whether the user account is active"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"


class Session(Base):
    """Login session issued by the authentication layer.

    Expired rows are purged periodically by the session cleanup task.

    Attributes:
        id: Opaque session token.
        user_id: Owning user.
        expires_at: When the session stops being valid.
        created_at: When the session was issued.
        last_activity: Last time the session was seen.
        user_agent: Client user agent string.
        ip_address: Client address.
    """

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="Reference to the user"
    )
    expires_at: Mapped[datetime] = mapped_column(
        nullable=False,
        doc="Expiry timestamp"
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    last_activity: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    user_agent: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)

    __table_args__ = (
        Index("idx_sessions_user", "user_id"),
        Index("idx_sessions_expires_at", "expires_at"),
    )

    def __repr__(self) -> str:
        return f"<Session(user_id={self.user_id}, expires_at={self.expires_at})>"
