from isp_billing.domain.exceptions import ForbiddenError
from isp_billing.domain.models import Role, User


def is_admin(user: User) -> bool:
    return user.role is Role.ADMIN


def can_access_owned(user: User, owner_id: int) -> bool:
    """
    Admins can act on every user's records, clients only on their own.
    """
    if is_admin(user):
        return True
    return user.id == owner_id


def ensure_can_access(user: User, owner_id: int) -> None:
    if not can_access_owned(user, owner_id):
        raise ForbiddenError("You do not have access to this resource")
