import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import psycopg2
from fastapi import Cookie, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict

_project_root = Path(__file__).resolve().parents[1]
if str(_project_root) not in sys.path:
    sys.path.append(str(_project_root))

from backend.config import AppConfig, load_app_config  # noqa: E402

# Loads .env before the routers read their cookie settings.
CONFIG: AppConfig = load_app_config()

from backend import app_context  # noqa: E402
from backend.app.routes.onboarding import router as onboarding_router  # noqa: E402
from backend.app.routes.plans import router as plans_router  # noqa: E402

JWT_SECRET_KEY = CONFIG.jwt_secret_key
JWT_ALGORITHM = CONFIG.jwt_algorithm
JWT_EXP_MINUTES = 60 * 24 * 7  # default: 7 days
SESSION_COOKIE_NAME = CONFIG.session_cookie_name

logging.basicConfig(
    level=getattr(logging, CONFIG.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("auth")


class SessionInfo(BaseModel):
    """Authenticated caller resolved from the session cookie."""

    user_id: str
    active_organization_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)


def get_conn():
    return psycopg2.connect(**CONFIG.database.connect_kwargs())


def create_access_token(
    *,
    subject: str,
    organization_id: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    payload = {"sub": subject}
    if organization_id:
        payload["org"] = organization_id
    if expires_delta is None:
        expires_delta = timedelta(minutes=JWT_EXP_MINUTES)
    payload["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def resolve_session_from_token(session_token: str) -> Optional[SessionInfo]:
    try:
        payload = jwt.decode(session_token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None

    subject = payload.get("sub")
    if not subject:
        return None
    organization_id = payload.get("org")
    return SessionInfo(
        user_id=str(subject),
        active_organization_id=str(organization_id) if organization_id else None,
    )


def get_optional_current_session(
    session_token: Optional[str] = Cookie(None, alias=SESSION_COOKIE_NAME),
) -> Optional[SessionInfo]:
    if not session_token:
        return None

    try:
        return resolve_session_from_token(session_token)
    except Exception:
        logger.exception("Unexpected error while resolving session token")
        return None


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    app_config = config or CONFIG
    app_context.configure(
        get_conn=get_conn,
        get_optional_current_session=get_optional_current_session,
        config=app_config,
    )

    application = FastAPI(title="Kitasuro Plans API")
    if app_config.cors_origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=list(app_config.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    application.include_router(plans_router)
    application.include_router(onboarding_router)
    return application


app = create_app()
