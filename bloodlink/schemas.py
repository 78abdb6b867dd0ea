# bloodlink/schemas.py
from datetime import datetime
from typing import Annotated, Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, EmailStr, Field, StringConstraints, ValidationError, field_validator

from .errors import ValidationFailure
from .models import BloodType, Role, Urgency

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, max_length=32)]
ProfileLocation = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]
RequestLocation = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=100)]
Contact = Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=50)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]

M = TypeVar("M", bound=BaseModel)


def parse_payload(model: Type[M], data: Any) -> M:
    """Coerce ``data`` into ``model``, reporting problems as ValidationFailure."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailure(
            [{"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]} for e in exc.errors()]
        ) from exc


# Users
class UserRegister(BaseModel):
    name: Name
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    blood_type: Optional[BloodType] = None
    phone: Optional[Phone] = None
    location: Optional[ProfileLocation] = None
    role: Role = Role.DONOR


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class UserUpdate(BaseModel):
    # unknown keys (role, email, is_active...) are dropped by pydantic's default extra="ignore"
    name: Optional[Name] = None
    phone: Optional[Phone] = None
    location: Optional[ProfileLocation] = None


class UserOut(BaseModel):
    id: int
    email: EmailStr
    name: str
    blood_type: Optional[BloodType] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    role: Role
    is_active: bool
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True


class RegisterOut(BaseModel):
    message: str = "User registered successfully"
    user: UserOut


# Token
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserOut


# Blood requests
class BloodRequestCreate(BaseModel):
    blood_type: BloodType
    location: RequestLocation
    contact: Contact
    urgency: Urgency = Urgency.MEDIUM
    description: Optional[Description] = None


class BloodRequestUpdate(BaseModel):
    blood_type: Optional[BloodType] = None
    location: Optional[RequestLocation] = None
    contact: Optional[Contact] = None
    urgency: Optional[Urgency] = None
    description: Optional[Description] = None

    @field_validator("blood_type", "location", "contact", "urgency")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("Input should not be null")
        return value


class RequestFilters(BaseModel):
    blood_type: Optional[BloodType] = None
    urgency: Optional[Urgency] = None
    location: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]] = None


class OwnerOut(BaseModel):
    id: int
    name: str
    email: EmailStr
    phone: Optional[str] = None
    class Config:
        from_attributes = True


class BloodRequestOut(BaseModel):
    id: int
    blood_type: BloodType
    location: str
    contact: str
    urgency: Urgency
    description: Optional[str] = None
    is_active: bool
    fulfillment_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    owner: OwnerOut
    is_owner: bool = False
    class Config:
        from_attributes = True


class BloodRequestEnvelope(BaseModel):
    message: Optional[str] = None
    request: BloodRequestOut


class PageInfo(BaseModel):
    current_page: int
    total_pages: int
    total: int
    has_next: bool
    has_prev: bool


class BloodRequestPage(BaseModel):
    requests: List[BloodRequestOut]
    pagination: PageInfo


class BloodRequestList(BaseModel):
    requests: List[BloodRequestOut]


class Message(BaseModel):
    message: str


class AdminStats(BaseModel):
    total_users: int
    total_requests: int
    active_requests: int
    fulfilled_requests: int
