"""ORM model for client services that trust hub-issued tokens."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, func

from authhub.models.base import Base, new_id


class Service(Base):
    """
    A client service. ``secret`` holds the AES-GCM blob of the signing secret;
    the plaintext is never stored. ``user_id`` is NULL for global services.
    """

    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    url = Column(String(2048), nullable=False)
    redirect_url = Column(String(2048), nullable=True)
    icon = Column(String(64), nullable=False, default="Globe")
    color = Column(String(64), nullable=True)
    secret = Column(Text, nullable=True)
    secret_preview = Column(String(64), nullable=True)
    is_system = Column(Boolean, nullable=False, default=False)
    login_config_id = Column(String(36), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
