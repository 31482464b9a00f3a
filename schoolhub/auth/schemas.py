from typing import FrozenSet
from uuid import UUID

from pydantic import BaseModel

from schoolhub.core.enums import Permission, Role


class CurrentUser(BaseModel):
    """Authenticated user resolved from the access token."""

    id: UUID
    role: Role
    permissions: FrozenSet[Permission] = frozenset()

    def has(self, permission: Permission) -> bool:
        return permission in self.permissions
