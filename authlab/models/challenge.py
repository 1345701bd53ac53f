import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String

from authlab.core.time import utcnow
from authlab.db.base import Base


class ChallengePurpose(str, enum.Enum):
    REGISTRATION = "registration"
    AUTHENTICATION = "authentication"


class WebAuthnChallenge(Base):
    __tablename__ = "webauthn_challenges"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # unbound for discoverable passkey login
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    request_token = Column(String(64), unique=True, nullable=False, index=True)
    challenge = Column(String(128), nullable=False)
    purpose = Column(Enum(ChallengePurpose), nullable=False)
    expires_at_utc = Column(DateTime(timezone=True), nullable=False)
    created_at_utc = Column(DateTime(timezone=True), default=utcnow, nullable=False)
