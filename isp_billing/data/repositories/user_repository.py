from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String

from isp_billing.data.base import Base
from isp_billing.domain.models import Role, User

# Columns an administrator may change through update_user
UPDATABLE_FIELDS = (
    "email",
    "first_name",
    "last_name",
    "phone_number",
    "role",
    "is_active",
)


class UserORM(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    hashed_password = Column(String(256), nullable=False)
    role = Column(SAEnum(Role), nullable=False, default=Role.CLIENT)
    email = Column(String(100), unique=True, index=True, nullable=False)
    first_name = Column(String(50))
    last_name = Column(String(50))
    phone_number = Column(String(20))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime)
    last_login_at = Column(DateTime)


def user_to_domain(user_orm: UserORM) -> User:
    return User(
        id=user_orm.id,
        username=user_orm.username,
        hashed_password=user_orm.hashed_password,
        email=user_orm.email,
        role=user_orm.role,
        first_name=user_orm.first_name,
        last_name=user_orm.last_name,
        phone_number=user_orm.phone_number,
        is_active=user_orm.is_active,
        created_at=user_orm.created_at,
        updated_at=user_orm.updated_at,
        last_login_at=user_orm.last_login_at,
    )


def list_users(db) -> list[User]:
    users = db.query(UserORM).order_by(UserORM.id).all()
    return [user_to_domain(u) for u in users]


def get_user(db, user_id: int) -> User | None:
    user = db.query(UserORM).filter(UserORM.id == user_id).first()
    return user_to_domain(user) if user else None


def get_user_by_username(db, username: str) -> User | None:
    user = db.query(UserORM).filter(UserORM.username == username).first()
    return user_to_domain(user) if user else None


def username_exists(db, username: str) -> bool:
    return db.query(UserORM.id).filter(UserORM.username == username).first() is not None


def email_exists(db, email: str) -> bool:
    return db.query(UserORM.id).filter(UserORM.email == email).first() is not None


def admin_exists(db) -> bool:
    return db.query(UserORM.id).filter(UserORM.role == Role.ADMIN).first() is not None


def create_user(
    db,
    username: str,
    hashed_password: str,
    email: str,
    role: Role = Role.CLIENT,
    first_name: str | None = None,
    last_name: str | None = None,
    phone_number: str | None = None,
) -> User:
    db_user = UserORM(
        username=username,
        hashed_password=hashed_password,
        email=email,
        role=role,
        first_name=first_name,
        last_name=last_name,
        phone_number=phone_number,
        is_active=True,
        created_at=datetime.utcnow(),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return user_to_domain(db_user)


def update_user(
    db, user_id: int, fields: dict, hashed_password: str | None = None
) -> User | None:
    user = db.query(UserORM).filter(UserORM.id == user_id).first()
    if not user:
        return None
    for name, value in fields.items():
        if name not in UPDATABLE_FIELDS:
            raise ValueError(f"Field {name} cannot be updated")
        setattr(user, name, value)
    if hashed_password is not None:
        user.hashed_password = hashed_password
    user.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user_to_domain(user)


def update_password(db, user_id: int, new_hashed_password: str) -> User | None:
    user = db.query(UserORM).filter(UserORM.id == user_id).first()
    if user:
        user.hashed_password = new_hashed_password
        user.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(user)
        return user_to_domain(user)
    return None


def touch_last_login(db, user_id: int, when: datetime) -> None:
    db.query(UserORM).filter(UserORM.id == user_id).update({"last_login_at": when})
    db.commit()


def delete_user(db, user_id: int) -> bool:
    user = db.query(UserORM).filter(UserORM.id == user_id).first()
    if user:
        db.delete(user)
        db.commit()
        return True
    return False
