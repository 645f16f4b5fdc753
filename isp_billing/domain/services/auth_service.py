import logging
import os
import uuid
from datetime import datetime, timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from isp_billing.data.base import SessionLocal
from isp_billing.data.repositories.user_repository import (
    admin_exists,
    create_user,
    email_exists,
    get_user,
    get_user_by_username,
    touch_last_login,
    update_password,
    username_exists,
)
from isp_billing.domain.access import is_admin
from isp_billing.domain.exceptions import ConflictError, InvalidInputError, NotFoundError
from isp_billing.domain.models import Role, User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY environment variable is not set")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 24 * 60
MIN_PASSWORD_LENGTH = 6

DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "admin123"
DEFAULT_ADMIN_EMAIL = "admin@isp.local"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def legacy_plaintext_allowed() -> bool:
    value = os.getenv("ALLOW_LEGACY_PLAINTEXT_PASSWORDS", "")
    return value.strip().lower() in ("1", "true", "yes")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if pwd_context.identify(hashed_password) is not None:
        return pwd_context.verify(plain_password, hashed_password)
    # Stored value is not a hash passlib recognises
    if not legacy_plaintext_allowed():
        return False
    logger.warning("Legacy plaintext password comparison used")
    return plain_password == hashed_password


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    user = get_user_by_username(db, username)
    if not user or not user.is_active:
        logger.warning("Login failed for username %r", username)
        return None
    if not verify_password(password, user.hashed_password):
        logger.warning("Login failed for username %r", username)
        return None
    now = datetime.utcnow()
    touch_last_login(db, user.id, now)
    user.last_login_at = now
    logger.info("User %s logged in", user.username)
    return user


def create_access_token(
    user: User, expires_delta: timedelta | None = None
) -> tuple[str, datetime]:
    issued_at = datetime.utcnow()
    expire = issued_at + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": user.username,
        "uid": user.id,
        "role": user.role.value,
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM), expire


def get_current_user(token: str = Depends(oauth2_scheme)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = payload.get("uid")
        if user_id is None or payload.get("sub") is None:
            raise credentials_exception
        user_id = int(user_id)
    except (JWTError, TypeError, ValueError):
        raise credentials_exception
    db = SessionLocal()
    try:
        user = get_user(db, user_id)
    finally:
        db.close()
    if user is None or not user.is_active:
        raise credentials_exception
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )
    return current_user


def ensure_admin_exists(db: Session) -> bool:
    """
    Seed the default administrator when no Admin-role user exists.
    Returns True if one was created, False if an admin was already present.
    """
    if admin_exists(db):
        return False
    if username_exists(db, DEFAULT_ADMIN_USERNAME) or email_exists(db, DEFAULT_ADMIN_EMAIL):
        raise ConflictError("Default administrator username or email is already taken")
    create_user(
        db,
        username=DEFAULT_ADMIN_USERNAME,
        hashed_password=get_password_hash(DEFAULT_ADMIN_PASSWORD),
        email=DEFAULT_ADMIN_EMAIL,
        role=Role.ADMIN,
        first_name="System",
        last_name="Administrator",
    )
    logger.info("Seeded default administrator account %r", DEFAULT_ADMIN_USERNAME)
    return True


def validate_new_password(new_password: str) -> None:
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def change_password(db: Session, user_id: int, new_password: str) -> User:
    validate_new_password(new_password)
    user = update_password(db, user_id, get_password_hash(new_password))
    if user is None:
        raise NotFoundError("User not found")
    logger.info("Password changed for user %s", user.username)
    return user
