"""ORM model for API keys used by external products to call the hub."""

from sqlalchemy import Column, DateTime, ForeignKey, String, func

from authhub.models.base import Base, new_id


class ApiKey(Base):
    """
    An API key owned by a user. Only the SHA-256 of the key is stored; the
    plaintext is returned once when the key is created.
    """

    __tablename__ = "api_keys"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    key_hash = Column(String(64), nullable=False, unique=True)
    key_preview = Column(String(32), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
