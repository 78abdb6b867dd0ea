# bloodlink/users.py
"""Credential store: user records, password hashing and profile edits."""
import logging
from typing import Any, List, Optional

from passlib.hash import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import AuthFailure, DuplicateIdentity, ValidationFailure

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "phone", "location")
SELF_REGISTRABLE_ROLES = {models.Role.DONOR, models.Role.PATIENT}

_dummy_hash: Optional[str] = None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _password_matches(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        # malformed hash or oversized password (passlib PasswordSizeError)
        return False


def _burn_hash(password: str) -> None:
    # keep the unknown-email path about as slow as a real bcrypt check
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = bcrypt.hash("not-a-real-password")
    _password_matches(password, _dummy_hash)


def get_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == normalize_email(email)).first()


def get_active(db: Session, user_id: int) -> Optional[models.User]:
    user = db.get(models.User, user_id)
    if not user or not user.is_active:
        return None
    return user


def _create(db: Session, payload: schemas.UserRegister, role: models.Role) -> models.User:
    email = normalize_email(payload.email)
    if get_by_email(db, email):
        raise DuplicateIdentity()

    user = models.User(
        email=email,
        name=payload.name,
        password_hash=bcrypt.hash(payload.password),
        blood_type=payload.blood_type.value if payload.blood_type else None,
        phone=payload.phone,
        location=payload.location,
        role=role.value,
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent registration for the same email
        db.rollback()
        raise DuplicateIdentity()
    db.refresh(user)
    logger.info("Registered user %s with role %s", user.id, user.role)
    return user


def register(db: Session, payload: Any) -> models.User:
    payload = schemas.parse_payload(schemas.UserRegister, payload)
    if payload.role not in SELF_REGISTRABLE_ROLES:
        raise ValidationFailure.for_field("role", "Role cannot be self-assigned")
    return _create(db, payload, payload.role)


def create_admin(db: Session, payload: Any) -> models.User:
    """Provision an admin account. Not reachable over HTTP."""
    payload = schemas.parse_payload(schemas.UserRegister, payload)
    return _create(db, payload, models.Role.ADMIN)


def verify_credentials(db: Session, email: str, password: str) -> models.User:
    user = get_by_email(db, email)
    if not user:
        _burn_hash(password)
        logger.info("Rejected login attempt")
        raise AuthFailure()
    if not _password_matches(password, user.password_hash) or not user.is_active:
        logger.info("Rejected login attempt")
        raise AuthFailure()
    return user


def update_profile(db: Session, user: models.User, patch: Any) -> models.User:
    patch = schemas.parse_payload(schemas.UserUpdate, patch)
    changes = patch.model_dump(exclude_unset=True, include=set(PROFILE_FIELDS))
    if changes.get("name", "") is None:
        raise ValidationFailure.for_field("name", "Name may not be null")
    for field, value in changes.items():
        setattr(user, field, value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def list_users(db: Session) -> List[models.User]:
    return db.query(models.User).order_by(models.User.id.asc()).all()


def deactivate(db: Session, user_id: int) -> Optional[models.User]:
    user = db.get(models.User, user_id)
    if not user:
        return None
    if user.is_active:
        user.is_active = False
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Deactivated user %s", user.id)
    return user
