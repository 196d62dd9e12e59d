from collections.abc import Iterable

from contenthub.domain.entities import Content, User
from contenthub.domain.errors import Unauthorized
from contenthub.rules.models import Rules


def require_role(
    actor: User | None, roles: Iterable[str], action: str = "perform this action"
) -> User:
    """
    Capability guard for privileged operations.

    Call once at the start of the operation. Raises Unauthorized when there is
    no active actor or none of the actor's roles is in ``roles``.
    """
    if actor is None:
        raise Unauthorized("Not authenticated", authenticated=False)
    if actor.status != "active":
        raise Unauthorized("Inactive user")

    allowed = set(roles)
    if not allowed.intersection(actor.roles):
        raise Unauthorized(
            f"Role {sorted(allowed)} required to {action}"
        )
    return actor


class PolicyEngine:
    def __init__(self, rules: Rules):
        self.rules = rules

    def check_permission(
        self,
        user: User | None,
        action: str,
    ) -> bool:
        """
        Check if the user is allowed to perform the action.

        Order of precedence:
        1. Public Permissions (Global)
        2. Role-Based Access Control (RBAC)
        """
        if action in self.rules.rbac.public_permissions:
            return True

        if not user or user.status != "active":
            return False

        for role in user.roles:
            allowed_actions = self.rules.rbac.roles.get(role, [])
            if "*" in allowed_actions:
                return True
            if action in allowed_actions:
                return True

            # Scoped wildcards ("content:*" matches "content:create")
            if ":" in action:
                scope = action.split(":")[0]
                if f"{scope}:*" in allowed_actions:
                    return True

        return False

    def require_permission(self, user: User | None, action: str) -> User:
        if user is None:
            raise Unauthorized("Not authenticated", authenticated=False)
        if not self.check_permission(user, action):
            raise Unauthorized(f"Not allowed: {action}")
        return user

    def ensure_allowed(self, user: User | None, action: str) -> None:
        """Like require_permission, but public permissions pass without a user."""
        if self.check_permission(user, action):
            return
        if user is None:
            raise Unauthorized("Not authenticated", authenticated=False)
        raise Unauthorized(f"Not allowed: {action}")

    def is_privileged_editor(self, user: User) -> bool:
        return bool(set(self.rules.content.privileged_editor_roles).intersection(user.roles))

    def is_owner(self, user: User, content: Content) -> bool:
        return str(content.contributor_id) == str(user.id)

    def can_read_content(self, user: User, content: Content) -> bool:
        if self.check_permission(user, "content:read"):
            return True
        return self.is_owner(user, content) and self.check_permission(user, "content:read_own")

    def can_edit_content(self, user: User, content: Content) -> bool:
        """
        Privileged editors may edit any content at any status. The owning
        contributor may edit only while the status is owner-editable.
        """
        if user.status != "active":
            return False
        if self.is_privileged_editor(user) or self.check_permission(user, "content:edit_any"):
            return True
        if not self.is_owner(user, content):
            return False
        if not self.check_permission(user, "content:edit_own"):
            return False
        return content.status in self.rules.content.owner_editable_statuses

    def can_review(self, user: User) -> bool:
        return bool(set(self.rules.review.reviewer_roles).intersection(user.roles))

    def can_manage_distribution(self, user: User) -> bool:
        return bool(set(self.rules.distribution.manager_roles).intersection(user.roles))
