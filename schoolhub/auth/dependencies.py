from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.auth.models import User
from schoolhub.auth.permissions import permissions_for
from schoolhub.auth.schemas import CurrentUser
from schoolhub.auth.security import decode_access_token
from schoolhub.core.enums import Role
from schoolhub.core.logging import bind_user_context
from schoolhub.db.session import get_db


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated user and their capability set from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    user_id_str = payload.get("user_id") or payload.get("sub")
    if not user_id_str:
        raise credentials_exception
    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise credentials_exception

    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user or user.status != "ACTIVE":
        raise credentials_exception

    # The stored role wins over the token claim so demotions apply immediately.
    try:
        role = Role(user.role)
    except ValueError:
        raise credentials_exception

    bind_user_context(str(user.id))
    return CurrentUser(id=user.id, role=role, permissions=permissions_for(role))
