from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str | List[str]) -> List[str]:
    if isinstance(value, list):
        return value
    return [v.strip() for v in str(value).split(",") if v and v.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="AUTHLAB_",
        extra="ignore",
    )

    app_name: str = "Auth Test App"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 3000
    log_dir: str = "logs"

    database_url: str = "sqlite:///./authlab.db"
    db_echo: bool = False

    session_hours: int = 24
    session_cookie_name: str = "session_id"
    cookie_secure: bool = False

    challenge_minutes: int = 5
    email_code_minutes: int = 10
    min_password_length: int = 6
    # when set, /mfa/email/send returns the code in its response
    expose_email_codes: bool = True

    totp_issuer: str = "AuthTestApp"

    rp_id: str = "localhost"
    rp_name: str = "Auth Test App"
    expected_origin: str = "http://localhost:3000"

    cors_origins_raw: str = "http://localhost:3000"
    enable_docs: bool = True

    @property
    def cors_origins(self) -> List[str]:
        parsed = _split_csv(self.cors_origins_raw)
        return parsed or ["http://localhost:3000"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
