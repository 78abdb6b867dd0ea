# bloodlink/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from . import database, models, schemas, users
from .deps import get_current_user
from .tokens import TokenService, get_token_service

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/register", response_model=schemas.RegisterOut, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserRegister, db: Session = Depends(database.get_db)):
    user = users.register(db, payload)
    return {"user": user}

@router.post("/login", response_model=schemas.Token)
def login(
    payload: schemas.UserLogin,
    db: Session = Depends(database.get_db),
    tokens: TokenService = Depends(get_token_service),
):
    user = users.verify_credentials(db, payload.email, payload.password)
    token, expires_at = tokens.issue(user.id, user.role)
    return {"access_token": token, "token_type": "bearer", "expires_at": expires_at, "user": user}

@router.get("/me", response_model=schemas.UserOut)
def read_current_user(current: models.User = Depends(get_current_user)):
    return current
