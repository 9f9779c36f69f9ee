import logging
from typing import Annotated

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from coursehub.core.config import Settings
from coursehub.core.error_codes import ErrorCode
from coursehub.core.errors import ApiError, Forbidden, Unauthenticated
from coursehub.core.ids import parse_uuid
from coursehub.core.security import ROLES, Identity, decode_access_token
from coursehub.db.session import get_db
from coursehub.models import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _resolve_identity(token: str, settings: Settings, db: Session) -> Identity:
    try:
        payload = decode_access_token(token, settings.jwt_secret)
    except jwt.PyJWTError as exc:
        raise Unauthenticated("Invalid or expired token", code=ErrorCode.INVALID_TOKEN) from exc

    user_id = parse_uuid(payload.get("sub") or "")
    if payload.get("type") != "access" or user_id is None:
        raise Unauthenticated("Invalid token", code=ErrorCode.INVALID_TOKEN)

    user = db.get(User, user_id)
    if not user or user.status != "active" or user.role not in ROLES:
        raise Unauthenticated("User not found or inactive", code=ErrorCode.INVALID_USER)
    return Identity(user_id=user.id, role=user.role)


def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
) -> Identity | None:
    """Read paths: any failure to authenticate means anonymous."""
    if credentials is None:
        return None
    try:
        return _resolve_identity(credentials.credentials, settings, db)
    except ApiError as exc:
        logger.debug("Treating caller as anonymous: %s", exc.code)
        return None


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
) -> Identity:
    if credentials is None:
        raise Unauthenticated("Missing authorization token")
    return _resolve_identity(credentials.credentials, settings, db)


def require_instructor(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_instructor:
        raise Forbidden("Instructor role required", code=ErrorCode.INSTRUCTOR_ONLY)
    return identity


OptionalIdentity = Annotated[Identity | None, Depends(get_optional_identity)]
CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
InstructorIdentity = Annotated[Identity, Depends(require_instructor)]
