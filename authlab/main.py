"""
Auth Test App

A harness for exercising authentication flows end to end:
- username/password login and registration
- TOTP and email-code second factors
- passkeys (WebAuthn) for step-up MFA and passwordless login
- an unauthenticated admin API for inspecting and resetting all state
"""
import logging
import logging.config
import logging.handlers
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from authlab.api.routers import account, admin, auth, mfa, webauthn
from authlab.core.config import Settings, get_settings
from authlab.core.mfa import TotpAdapter
from authlab.core.passkeys import PasskeyAdapter
from authlab.db.init_db import init_db
from authlab.db.session import build_engine, build_session_factory

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure console + rotating file logging under settings.log_dir."""
    log_level = "DEBUG" if settings.debug else "INFO"
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "authlab.log"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": log_level,
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "level": log_level,
                "filename": str(log_file),
                "maxBytes": 10 * 1024 * 1024,
                "backupCount": 5,
                "encoding": "utf-8",
            },
        },
        "root": {
            "handlers": ["console", "file"],
            "level": log_level,
        },
        "loggers": {
            "uvicorn.access": {
                "handlers": ["console", "file"],
                "level": log_level,
                "propagate": False,
            },
            "uvicorn.error": {
                "handlers": ["console", "file"],
                "level": log_level,
                "propagate": False,
            },
        },
    })


def create_app(
    settings: Settings | None = None,
    totp: TotpAdapter | None = None,
    passkeys: PasskeyAdapter | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    docs_url = "/docs" if settings.enable_docs else None
    redoc_url = "/redoc" if settings.enable_docs else None
    openapi_url = "/openapi.json" if settings.enable_docs else None

    app = FastAPI(title=settings.app_name, version="0.1.0", docs_url=docs_url, redoc_url=redoc_url, openapi_url=openapi_url)

    # Engine and session factory live on app.state
    engine = build_engine(settings)
    init_db(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.totp = totp or TotpAdapter(issuer=settings.totp_issuer)
    app.state.passkeys = passkeys or PasskeyAdapter(
        rp_id=settings.rp_id, rp_name=settings.rp_name, expected_origin=settings.expected_origin
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    app.include_router(auth.router)
    app.include_router(mfa.router)
    app.include_router(webauthn.router)
    app.include_router(account.router)
    app.include_router(admin.router)

    @app.get("/health")
    def health():
        """Health check for load balancers."""
        return {"status": "healthy"}

    logger.info("%s ready (rp_id=%s, origin=%s)", settings.app_name, settings.rp_id, settings.expected_origin)
    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        "authlab.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    run()
