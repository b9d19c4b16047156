"""ORM models for hub users and the admin-zero claim."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, func

from authhub.models.base import Base, new_id

USER_ROLES = ("admin", "user")


class User(Base):
    """
    Hub user. Anonymous users have neither email nor password.

    role: 'admin' or 'user'
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="ck_users_role"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(320), nullable=True, unique=True, index=True)
    password_hash = Column(Text, nullable=True)
    role = Column(String(16), nullable=False, default="user", index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class AdminBootstrap(Base):
    """
    Single-row marker claimed by the first user ever created.

    The fixed primary key turns "am I the first user?" into an insert that only
    one transaction can win.
    """

    __tablename__ = "admin_bootstrap"

    id = Column(Integer, primary_key=True, default=1)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    claimed_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
