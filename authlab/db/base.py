from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import models so Alembic can discover metadata
from authlab.models import (  # noqa: E402,F401
    auth_event,
    challenge,
    email_code,
    passkey,
    session,
    user,
)
