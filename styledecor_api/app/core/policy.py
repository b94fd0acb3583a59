"""
Role-based, resource-aware authorization.

``authorize`` is the one decision function every protected endpoint
consults.  It takes the verified caller, the operation being attempted
and the email that owns the targeted resource (the booking's client,
the booking's decorator, or the profile being read) and either returns
quietly or raises ``ForbiddenError``.

Checking only "is logged in" would let one client read another's
bookings by editing the email in the URL, so every self-scoped rule
compares the verified email against the resource owner, never against
anything the caller typed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from .errors import ForbiddenError


class Role(str, Enum):
    USER = "user"
    DECORATOR = "decorator"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    email: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Scope(str, Enum):
    PUBLIC = "public"
    SELF = "self"
    ADMIN = "admin"


@dataclass(frozen=True)
class Rule:
    scope: Scope
    admin_override: bool = False
    roles: Optional[FrozenSet[Role]] = None


class Operation(str, Enum):
    ISSUE_TOKEN = "token:issue"
    REGISTER_USER = "users:register"
    READ_CATALOG = "catalog:read"
    MANAGE_CATALOG = "catalog:manage"
    CREATE_BOOKING = "bookings:create"
    READ_BOOKING = "bookings:read"
    READ_OWN_BOOKINGS = "bookings:read-own"
    READ_ASSIGNED_BOOKINGS = "bookings:read-assigned"
    READ_ALL_BOOKINGS = "bookings:read-all"
    ASSIGN_DECORATOR = "bookings:assign"
    UPDATE_STATUS = "bookings:update-status"
    CONFIRM_PAYMENT = "bookings:confirm-payment"
    CANCEL_BOOKING = "bookings:cancel"
    CREATE_PAYMENT_INTENT = "payments:create-intent"
    READ_PROFILE = "users:read"
    READ_ROLE = "users:read-role"
    UPDATE_PROFILE = "users:update"
    CHANGE_ROLE = "users:change-role"
    LIST_USERS = "users:list"


RULES = {
    Operation.ISSUE_TOKEN: Rule(Scope.PUBLIC),
    Operation.REGISTER_USER: Rule(Scope.PUBLIC),
    Operation.READ_CATALOG: Rule(Scope.PUBLIC),
    Operation.MANAGE_CATALOG: Rule(Scope.ADMIN),
    # The new booking's client email is the owner; it must be the caller.
    Operation.CREATE_BOOKING: Rule(Scope.SELF),
    Operation.READ_BOOKING: Rule(Scope.SELF, admin_override=True),
    Operation.READ_OWN_BOOKINGS: Rule(Scope.SELF),
    Operation.READ_ASSIGNED_BOOKINGS: Rule(Scope.SELF),
    Operation.READ_ALL_BOOKINGS: Rule(Scope.ADMIN),
    Operation.ASSIGN_DECORATOR: Rule(Scope.ADMIN),
    Operation.UPDATE_STATUS: Rule(
        Scope.SELF,
        admin_override=True,
        roles=frozenset({Role.DECORATOR, Role.ADMIN}),
    ),
    Operation.CONFIRM_PAYMENT: Rule(Scope.SELF, admin_override=True),
    Operation.CANCEL_BOOKING: Rule(Scope.SELF, admin_override=True),
    Operation.CREATE_PAYMENT_INTENT: Rule(Scope.SELF),
    Operation.READ_PROFILE: Rule(Scope.SELF),
    Operation.READ_ROLE: Rule(Scope.SELF),
    Operation.UPDATE_PROFILE: Rule(Scope.SELF, admin_override=True),
    Operation.CHANGE_ROLE: Rule(Scope.ADMIN),
    Operation.LIST_USERS: Rule(Scope.ADMIN),
}


def authorize(identity: Optional[Identity], operation: Operation, owner_email: Optional[str] = None) -> None:
    """Allow or deny ``operation`` for ``identity`` on a resource owned by ``owner_email``.

    ``owner_email`` of ``None`` (e.g. the booking does not exist, or has
    no decorator yet) never matches, so a non-admin caller receives the
    same ``ForbiddenError`` whether or not the resource exists.
    """
    rule = RULES[operation]
    if rule.scope == Scope.PUBLIC:
        return
    if identity is None:
        raise ForbiddenError()
    if rule.roles is not None and identity.role not in rule.roles:
        raise ForbiddenError()
    if rule.scope == Scope.ADMIN:
        if not identity.is_admin:
            raise ForbiddenError()
        return
    if rule.admin_override and identity.is_admin:
        return
    if owner_email is None or owner_email.lower() != identity.email.lower():
        raise ForbiddenError()
