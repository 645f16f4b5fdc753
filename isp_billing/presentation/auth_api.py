from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from isp_billing.data.base import get_db
from isp_billing.domain.models import User
from isp_billing.domain.services.auth_service import (
    DEFAULT_ADMIN_USERNAME,
    MIN_PASSWORD_LENGTH,
    authenticate_user,
    change_password,
    create_access_token,
    ensure_admin_exists,
    get_current_user,
)
from isp_billing.presentation.schemas import UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    token: str
    expiration: datetime
    username: str
    role: str


class ChangePasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=100)


def seed_admin_response(db: Session, response: Response) -> dict:
    if ensure_admin_exists(db):
        response.status_code = status.HTTP_201_CREATED
        return {
            "message": "Admin user created successfully",
            "username": DEFAULT_ADMIN_USERNAME,
        }
    return {"message": "Admin user already exists"}


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, req.username, req.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token, expiration = create_access_token(user)
    return LoginResponse(
        token=token,
        expiration=expiration,
        username=user.username,
        role=user.role.value,
    )


@router.post("/seed-admin")
def seed_admin(response: Response, db: Session = Depends(get_db)):
    return seed_admin_response(db, response)


@router.get("/me", response_model=UserResponse)
def read_users_me(current_user: User = Depends(get_current_user)):
    return UserResponse.from_domain(current_user)


@router.post("/change-password")
def change_password_endpoint(
    req: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    change_password(db, current_user.id, req.new_password)
    return {"success": True}
