import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from isp_billing.data.repositories.user_repository import create_user as repo_create_user
from isp_billing.data.repositories.user_repository import delete_user as repo_delete_user
from isp_billing.data.repositories.user_repository import (
    email_exists,
    get_user,
    list_users,
)
from isp_billing.data.repositories.user_repository import update_user as repo_update_user
from isp_billing.data.repositories.user_repository import username_exists
from isp_billing.domain.exceptions import ConflictError, NotFoundError
from isp_billing.domain.models import Role, User
from isp_billing.domain.services.auth_service import get_password_hash, validate_new_password

logger = logging.getLogger(__name__)


def get_users(db: Session) -> List[User]:
    return list_users(db)


def get_user_or_404(db: Session, user_id: int) -> User:
    user = get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def create_user(
    db: Session,
    username: str,
    password: str,
    email: str,
    role: Optional[Role] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    phone_number: Optional[str] = None,
) -> User:
    if username_exists(db, username):
        raise ConflictError("Username already exists")
    if email_exists(db, email):
        raise ConflictError("Email already exists")
    user = repo_create_user(
        db,
        username=username,
        hashed_password=get_password_hash(password),
        email=email,
        role=role or Role.CLIENT,
        first_name=first_name,
        last_name=last_name,
        phone_number=phone_number,
    )
    logger.info("Created %s user %s (id=%s)", user.role.value, user.username, user.id)
    return user


def update_user(
    db: Session,
    user_id: int,
    changes: Dict[str, Any],
    password: Optional[str] = None,
) -> User:
    """
    Apply a partial update. `changes` holds only the fields the caller sent;
    an empty email or role is treated as "leave unchanged".
    """
    existing = get_user_or_404(db, user_id)
    fields = {k: v for k, v in changes.items() if v is not None}
    if fields.get("email") == "":
        del fields["email"]
    if "email" in fields and fields["email"] != existing.email:
        if email_exists(db, fields["email"]):
            raise ConflictError("Email already exists")

    hashed_password = None
    if password:
        validate_new_password(password)
        hashed_password = get_password_hash(password)

    user = repo_update_user(db, user_id, fields, hashed_password=hashed_password)
    if user is None:
        raise NotFoundError("User not found")
    logger.info("Updated user %s (id=%s)", user.username, user.id)
    return user


def delete_user(db: Session, user_id: int) -> None:
    if not repo_delete_user(db, user_id):
        raise NotFoundError("User not found")
    logger.info("Deleted user id=%s together with their fees", user_id)
