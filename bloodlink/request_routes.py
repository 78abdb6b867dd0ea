# bloodlink/request_routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from . import blood_requests, database, models, schemas
from .deps import get_current_user, get_optional_user

router = APIRouter(prefix="/api/requests", tags=["requests"])

# ---- Discovery listing (anonymous or authenticated)
@router.get("", response_model=schemas.BloodRequestPage)
def list_requests(
    blood_type: Optional[models.BloodType] = Query(default=None),
    urgency: Optional[models.Urgency] = Query(default=None),
    location: Optional[str] = Query(default=None, min_length=1, max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=blood_requests.DEFAULT_PAGE_SIZE, ge=1, le=blood_requests.MAX_PAGE_SIZE),
    db: Session = Depends(database.get_db),
    viewer: Optional[models.User] = Depends(get_optional_user),
):
    filters = {"blood_type": blood_type, "urgency": urgency, "location": location}
    items, page_info = blood_requests.list_requests(db, filters, page=page, limit=limit)
    return {
        "requests": [blood_requests.present(r, viewer) for r in items],
        "pagination": page_info,
    }

# ---- Caller's own open requests
@router.get("/my", response_model=schemas.BloodRequestList)
def list_my_requests(
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_user),
):
    rows = blood_requests.list_own(db, current.id)
    return {"requests": [blood_requests.present(r, current) for r in rows]}

@router.post("", response_model=schemas.BloodRequestEnvelope, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: schemas.BloodRequestCreate,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_user),
):
    req = blood_requests.create(db, current, payload)
    return {
        "message": "Blood request created successfully",
        "request": blood_requests.present(req, current),
    }

@router.get("/{request_id}", response_model=schemas.BloodRequestEnvelope)
def get_request(
    request_id: int,
    db: Session = Depends(database.get_db),
    viewer: Optional[models.User] = Depends(get_optional_user),
):
    req = blood_requests.get_by_id(db, request_id)
    return {"request": blood_requests.present(req, viewer)}

@router.put("/{request_id}", response_model=schemas.BloodRequestEnvelope)
def update_request(
    request_id: int,
    payload: schemas.BloodRequestUpdate,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_user),
):
    req = blood_requests.update(db, request_id, current.id, payload)
    return {
        "message": "Blood request updated successfully",
        "request": blood_requests.present(req, current),
    }

# ---- Soft delete: withdraw without fulfilling
@router.delete("/{request_id}", response_model=schemas.Message)
def withdraw_request(
    request_id: int,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_user),
):
    blood_requests.withdraw(db, request_id, current.id)
    return {"message": "Blood request withdrawn successfully"}

@router.put("/{request_id}/fulfill", response_model=schemas.BloodRequestEnvelope)
def fulfill_request(
    request_id: int,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_user),
):
    req = blood_requests.fulfill(db, request_id, current.id)
    return {
        "message": "Blood request marked as fulfilled successfully",
        "request": blood_requests.present(req, current),
    }
