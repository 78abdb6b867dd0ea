# bloodlink/deps.py
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from . import database, models, users
from .errors import BloodLinkError, NotAuthenticated, PermissionDenied, TokenInvalid
from .tokens import TokenService, get_token_service

bearer = HTTPBearer(auto_error=False)


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(database.get_db),
    tokens: TokenService = Depends(get_token_service),
) -> models.User:
    if not creds:
        raise NotAuthenticated()
    claims = tokens.verify(creds.credentials)
    user = users.get_active(db, claims.subject_id)
    if not user:
        # deactivated or deleted accounts lose access even with an unexpired token
        raise TokenInvalid("Invalid user")
    return user


def get_optional_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(database.get_db),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[models.User]:
    if not creds:
        return None
    try:
        return get_current_user(creds, db, tokens)
    except BloodLinkError:
        return None


def require_admin(current: models.User = Depends(get_current_user)) -> models.User:
    if current.role != models.Role.ADMIN.value:
        raise PermissionDenied()
    return current
