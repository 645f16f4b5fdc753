from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from isp_billing.data.base import get_db
from isp_billing.domain.models import Role
from isp_billing.domain.services.auth_service import MIN_PASSWORD_LENGTH, require_admin
from isp_billing.domain.services.user_service import (
    create_user,
    delete_user,
    get_user_or_404,
    get_users,
    update_user,
)
from isp_billing.presentation.auth_api import seed_admin_response
from isp_billing.presentation.schemas import UserResponse

PHONE_PATTERN = r"^\+?[0-9 ()\-]{5,20}$"

router = APIRouter(prefix="/api/users", tags=["users"])


class CreateUserRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=100)
    email: EmailStr
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    role: Optional[Role] = None


class UpdateUserRequest(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=MIN_PASSWORD_LENGTH, max_length=100)


# Public and idempotent, so it is declared before the admin-only routes
@router.post("/seed-admin")
def seed_admin(response: Response, db: Session = Depends(get_db)):
    return seed_admin_response(db, response)


@router.get("", response_model=List[UserResponse])
def list_users_endpoint(db: Session = Depends(get_db), admin=Depends(require_admin)):
    return [UserResponse.from_domain(u) for u in get_users(db)]


@router.get("/{user_id}", response_model=UserResponse)
def get_user_endpoint(
    user_id: int, db: Session = Depends(get_db), admin=Depends(require_admin)
):
    return UserResponse.from_domain(get_user_or_404(db, user_id))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user_endpoint(
    req: CreateUserRequest, db: Session = Depends(get_db), admin=Depends(require_admin)
):
    user = create_user(
        db,
        username=req.username,
        password=req.password,
        email=req.email,
        role=req.role,
        first_name=req.first_name,
        last_name=req.last_name,
        phone_number=req.phone_number,
    )
    return UserResponse.from_domain(user)


@router.put("/{user_id}", response_model=UserResponse)
def update_user_endpoint(
    user_id: int,
    req: UpdateUserRequest,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    changes = req.model_dump(exclude_unset=True, exclude={"password"})
    user = update_user(db, user_id, changes, password=req.password)
    return UserResponse.from_domain(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_endpoint(
    user_id: int, db: Session = Depends(get_db), admin=Depends(require_admin)
):
    delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
