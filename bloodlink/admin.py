# bloodlink/admin.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from . import blood_requests, database, models, schemas, users
from .deps import require_admin
from .errors import PermissionDenied, UserNotFound

router = APIRouter(prefix="/api/admin", tags=["admin"])

@router.get("/stats", response_model=schemas.AdminStats)
def get_stats(
    db: Session = Depends(database.get_db),
    current: models.User = Depends(require_admin),
):
    return blood_requests.stats(db)

@router.get("/users", response_model=list[schemas.UserOut])
def list_users(
    db: Session = Depends(database.get_db),
    current: models.User = Depends(require_admin),
):
    return users.list_users(db)

@router.put("/users/{user_id}/deactivate", response_model=schemas.UserOut)
def deactivate_user(
    user_id: int,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(require_admin),
):
    if user_id == current.id:
        raise PermissionDenied("Admins cannot deactivate themselves")
    user = users.deactivate(db, user_id)
    if not user:
        raise UserNotFound()
    return user
