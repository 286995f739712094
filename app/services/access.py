"""Who may see, manage or drive the timer of a project.

Two principals exist: regular users, who fully control their own projects and
see nothing else, and super admins, who can read and manage everything but
never start or stop a timer.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..constants import ROLE_SUPER_ADMIN, ROLE_USER
from ..errors import Forbidden


@dataclass(frozen=True)
class Principal:
    id: int
    role: str = ROLE_USER

    @property
    def is_privileged(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    @classmethod
    def from_session(cls, user: dict) -> "Principal":
        return cls(id=int(user["id"]), role=user.get("role") or ROLE_USER)


class AccessPolicy:
    def __init__(self, principal: Principal):
        self.principal = principal

    def owns(self, project) -> bool:
        return project.owner_id == self.principal.id

    def can_view(self, project) -> bool:
        raise NotImplementedError

    def can_manage(self, project) -> bool:
        raise NotImplementedError

    def can_control_timer(self, project) -> bool:
        raise NotImplementedError

    def can_edit_history(self, project) -> bool:
        return self.owns(project)

    def can_manage_users(self) -> bool:
        return False

    def ensure_view(self, project) -> None:
        if not self.can_view(project):
            raise Forbidden("You do not have access to this project")

    def ensure_manage(self, project) -> None:
        if not self.can_manage(project):
            raise Forbidden("You cannot modify this project")

    def ensure_timer_control(self, project) -> None:
        if not self.can_control_timer(project):
            raise Forbidden("Only the project owner can control its timer")

    def ensure_history_edit(self, project) -> None:
        if not self.can_edit_history(project):
            raise Forbidden("Only the project owner can change its sessions")

    def ensure_user_management(self) -> None:
        if not self.can_manage_users():
            raise Forbidden("Admin access required")


class OwnerPolicy(AccessPolicy):
    def can_view(self, project) -> bool:
        return self.owns(project)

    def can_manage(self, project) -> bool:
        return self.owns(project)

    def can_control_timer(self, project) -> bool:
        return self.owns(project)


class PrivilegedPolicy(AccessPolicy):
    def can_view(self, project) -> bool:
        return True

    def can_manage(self, project) -> bool:
        return True

    def can_control_timer(self, project) -> bool:
        return False

    def can_manage_users(self) -> bool:
        return True


def policy_for(principal: Principal) -> AccessPolicy:
    if principal.is_privileged:
        return PrivilegedPolicy(principal)
    return OwnerPolicy(principal)
