from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from authlab.core.time import utcnow
from authlab.db.base import Base


class PasskeyCredential(Base):
    __tablename__ = "passkey_credentials"

    # base64url credential id as issued by the authenticator
    id = Column(String(512), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    public_key = Column(Text, nullable=False)
    counter = Column(Integer, default=0, nullable=False)
    transports = Column(JSON, nullable=True)
    device_type = Column(String(32), nullable=True)
    backed_up = Column(Boolean, default=False, nullable=False)
    friendly_name = Column(String(255), nullable=True)
    created_at_utc = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_used_at_utc = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="passkeys")
