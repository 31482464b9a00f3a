"""Role -> capability model. Routes declare the capability they need, never a role list."""

from typing import Dict, FrozenSet

from schoolhub.core.enums import Permission, Role

_ALL: FrozenSet[Permission] = frozenset(Permission)

ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.SUPER_ADMIN: _ALL,
    Role.ADMIN: _ALL,
    Role.CASHIER: frozenset(
        {
            Permission.VIEW_FEE_STRUCTURES,
            Permission.ASSIGN_FEES,
            Permission.RECORD_PAYMENTS,
            Permission.VIEW_ANY_LEDGER,
            Permission.VIEW_STUDENTS,
        }
    ),
    Role.TEACHER: frozenset({Permission.VIEW_STUDENTS}),
    # Limited to students linked to the user; see finance.service.ensure_can_view_student
    Role.PARENT: frozenset({Permission.VIEW_OWN_LEDGER}),
    Role.STUDENT: frozenset({Permission.VIEW_OWN_LEDGER}),
}


def permissions_for(role: Role) -> FrozenSet[Permission]:
    return ROLE_PERMISSIONS.get(role, frozenset())
