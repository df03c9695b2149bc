# backend/app/models/client.py
"""Client profile model: per-client flags such as student status."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class ClientProfile(Base):
    """Client-specific attributes attached one-to-one to a User."""

    __tablename__ = "client_profiles"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    is_student = Column(Boolean, nullable=False, default=False)
    nickname = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="client_profile")

    def __repr__(self) -> str:
        return f"<ClientProfile user={self.user_id} student={self.is_student}>"
