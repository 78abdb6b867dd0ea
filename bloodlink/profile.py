# bloodlink/profile.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from . import database, models, schemas, users
from .deps import get_current_user

router = APIRouter(prefix="/api/users", tags=["users"])

@router.get("/me", response_model=schemas.UserOut)
def get_profile(current: models.User = Depends(get_current_user)):
    return current

@router.put("/me", response_model=schemas.UserOut)
def update_profile(
    payload: schemas.UserUpdate,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_user),
):
    return users.update_profile(db, current, payload)
