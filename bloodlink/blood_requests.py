# bloodlink/blood_requests.py
"""Blood request lifecycle and discovery.

A request is created active and leaves that state exactly once, either by
being fulfilled (``fulfillment_date`` set) or withdrawn (``fulfillment_date``
left null). Every owner-scoped mutation matches on ``(id, owner_id,
is_active)``; a miss is reported as NotFoundOrForbidden whether the record is
missing, closed, or owned by someone else.
"""
import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy import case
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import NotFoundOrForbidden, ValidationFailure

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("blood_type", "location", "contact", "urgency", "description")
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

_urgency_rank = case(models.URGENCY_RANK, value=models.BloodRequest.urgency, else_=0)


def _value(v):
    return v.value if hasattr(v, "value") else v


def _owned_active(db: Session, request_id: int, owner_id: int):
    return db.query(models.BloodRequest).filter(
        models.BloodRequest.id == request_id,
        models.BloodRequest.owner_id == owner_id,
        models.BloodRequest.is_active.is_(True),
    )


def present(request: models.BloodRequest, viewer: Optional[models.User] = None) -> schemas.BloodRequestOut:
    out = schemas.BloodRequestOut.model_validate(request)
    if viewer is not None and viewer.id == request.owner_id:
        out.is_owner = True
    return out


# ---- Lifecycle

def create(db: Session, owner: models.User, payload: Any) -> models.BloodRequest:
    payload = schemas.parse_payload(schemas.BloodRequestCreate, payload)
    req = models.BloodRequest(
        owner_id=owner.id,
        blood_type=payload.blood_type.value,
        location=payload.location,
        contact=payload.contact,
        urgency=payload.urgency.value,
        description=payload.description or None,
        is_active=True,
        fulfillment_date=None,
    )
    db.add(req)
    db.commit()
    db.refresh(req)
    logger.info("User %s created blood request %s (%s, %s)", owner.id, req.id, req.blood_type, req.urgency)
    return req


def update(db: Session, request_id: int, owner_id: int, patch: Any) -> models.BloodRequest:
    patch = schemas.parse_payload(schemas.BloodRequestUpdate, patch)
    changes = {
        field: _value(value)
        for field, value in patch.model_dump(exclude_unset=True, include=set(EDITABLE_FIELDS)).items()
    }
    if "description" in changes and not changes["description"]:
        changes["description"] = None

    fields = sorted(changes)
    query = _owned_active(db, request_id, owner_id)
    if changes:
        changes["updated_at"] = models.utcnow()
        matched = query.update(changes, synchronize_session=False)
        db.commit()
        if not matched:
            raise NotFoundOrForbidden()
    elif query.first() is None:
        raise NotFoundOrForbidden()

    req = db.get(models.BloodRequest, request_id, populate_existing=True)
    logger.info("User %s updated blood request %s: %s", owner_id, request_id, fields)
    return req


def _close(db: Session, request_id: int, owner_id: int, fulfilled: bool) -> models.BloodRequest:
    now = models.utcnow()
    values = {"is_active": False, "updated_at": now}
    if fulfilled:
        values["fulfillment_date"] = now
    # single conditional UPDATE: a concurrent or repeated call matches zero rows
    matched = _owned_active(db, request_id, owner_id).update(values, synchronize_session=False)
    db.commit()
    if not matched:
        raise NotFoundOrForbidden()
    logger.info(
        "User %s %s blood request %s", owner_id, "fulfilled" if fulfilled else "withdrew", request_id
    )
    return db.get(models.BloodRequest, request_id, populate_existing=True)


def withdraw(db: Session, request_id: int, owner_id: int) -> models.BloodRequest:
    return _close(db, request_id, owner_id, fulfilled=False)


def fulfill(db: Session, request_id: int, owner_id: int) -> models.BloodRequest:
    return _close(db, request_id, owner_id, fulfilled=True)


def get_by_id(db: Session, request_id: int) -> models.BloodRequest:
    req = (
        db.query(models.BloodRequest)
        .filter(models.BloodRequest.id == request_id, models.BloodRequest.is_active.is_(True))
        .first()
    )
    if not req:
        raise NotFoundOrForbidden("Blood request not found")
    return req


# ---- Discovery

def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_requests(
    db: Session,
    filters: Any = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[models.BloodRequest], schemas.PageInfo]:
    filters = schemas.parse_payload(schemas.RequestFilters, filters or {})
    if page < 1:
        raise ValidationFailure.for_field("page", "Page must be a positive integer")
    if limit < 1:
        raise ValidationFailure.for_field("limit", "Limit must be between 1 and 100")
    limit = min(limit, MAX_PAGE_SIZE)

    query = db.query(models.BloodRequest).filter(models.BloodRequest.is_active.is_(True))
    if filters.blood_type:
        query = query.filter(models.BloodRequest.blood_type == filters.blood_type.value)
    if filters.urgency:
        query = query.filter(models.BloodRequest.urgency == filters.urgency.value)
    if filters.location:
        pattern = f"%{_escape_like(filters.location)}%"
        query = query.filter(models.BloodRequest.location.ilike(pattern, escape="\\"))

    total = query.order_by(None).count()
    offset = (page - 1) * limit
    if offset >= total:
        # past the last page; also keeps huge offsets away from the store
        items = []
    else:
        items = (
            query.order_by(
                _urgency_rank.desc(),
                models.BloodRequest.created_at.desc(),
                models.BloodRequest.id.desc(),
            )
            .offset(offset)
            .limit(limit)
            .all()
        )
    page_info = schemas.PageInfo(
        current_page=page,
        total_pages=(total + limit - 1) // limit,
        total=total,
        has_next=page * limit < total,
        has_prev=page > 1,
    )
    return items, page_info


def list_own(db: Session, owner_id: int) -> List[models.BloodRequest]:
    return (
        db.query(models.BloodRequest)
        .filter(
            models.BloodRequest.owner_id == owner_id,
            models.BloodRequest.is_active.is_(True),
        )
        .order_by(models.BloodRequest.created_at.desc(), models.BloodRequest.id.desc())
        .all()
    )


# ---- Admin dashboard

def stats(db: Session) -> schemas.AdminStats:
    requests = db.query(models.BloodRequest)
    return schemas.AdminStats(
        total_users=db.query(models.User).count(),
        total_requests=requests.count(),
        active_requests=requests.filter(models.BloodRequest.is_active.is_(True)).count(),
        fulfilled_requests=requests.filter(
            models.BloodRequest.is_active.is_(False),
            models.BloodRequest.fulfillment_date.isnot(None),
        ).count(),
    )
