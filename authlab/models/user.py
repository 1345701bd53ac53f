import uuid

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship

from authlab.core.time import utcnow
from authlab.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(150), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    totp_secret = Column(String(64), nullable=True)
    totp_enabled = Column(Boolean, default=False, nullable=False)
    email_mfa_enabled = Column(Boolean, default=False, nullable=False)
    created_at_utc = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    passkeys = relationship("PasskeyCredential", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    email_codes = relationship("EmailCode", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    challenges = relationship("WebAuthnChallenge", cascade="all, delete-orphan", passive_deletes=True)
    events = relationship("AuthEvent", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def mfa_required(self) -> bool:
        return bool(self.totp_enabled or self.email_mfa_enabled)
