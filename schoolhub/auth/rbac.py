from fastapi import Depends

from schoolhub.auth.dependencies import get_current_user
from schoolhub.auth.schemas import CurrentUser
from schoolhub.core.enums import Permission
from schoolhub.core.exceptions import PermissionDeniedError
from schoolhub.core.logging import get_logger

logger = get_logger(__name__)


def check_permission(*required: Permission):
    """
    Dependency factory: the current user must hold at least one of the given permissions.

    Example:
        Depends(check_permission(Permission.RECORD_PAYMENTS))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not any(current_user.has(p) for p in required):
            logger.warning(
                "authz.denied",
                user_id=str(current_user.id),
                role=current_user.role.value,
                required=[p.value for p in required],
            )
            raise PermissionDeniedError()
        return current_user

    return _checker
