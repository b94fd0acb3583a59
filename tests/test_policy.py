import pytest

from styledecor_api.app.core.errors import ForbiddenError
from styledecor_api.app.core.policy import Identity, Operation, Role, authorize


alice = Identity("alice@x.com", Role.USER)
dora = Identity("dora@x.com", Role.DECORATOR)
admin = Identity("admin@x.com", Role.ADMIN)


def test_public_operations_need_no_identity():
    authorize(None, Operation.READ_CATALOG)
    authorize(None, Operation.REGISTER_USER)
    authorize(None, Operation.ISSUE_TOKEN)


def test_self_scope_requires_matching_owner():
    authorize(alice, Operation.READ_OWN_BOOKINGS, "alice@x.com")
    with pytest.raises(ForbiddenError):
        authorize(alice, Operation.READ_OWN_BOOKINGS, "bob@x.com")


def test_owner_comparison_ignores_case():
    authorize(alice, Operation.READ_PROFILE, "Alice@X.com")


def test_self_scope_without_owner_is_denied():
    with pytest.raises(ForbiddenError):
        authorize(alice, Operation.CANCEL_BOOKING, None)


def test_admin_override_only_where_declared():
    authorize(admin, Operation.CANCEL_BOOKING, "alice@x.com")
    authorize(admin, Operation.UPDATE_PROFILE, "alice@x.com")
    with pytest.raises(ForbiddenError):
        authorize(admin, Operation.READ_OWN_BOOKINGS, "alice@x.com")


@pytest.mark.parametrize(
    "operation",
    [
        Operation.LIST_USERS,
        Operation.READ_ALL_BOOKINGS,
        Operation.MANAGE_CATALOG,
        Operation.ASSIGN_DECORATOR,
        Operation.CHANGE_ROLE,
    ],
)
def test_admin_operations(operation):
    authorize(admin, operation)
    for identity in (alice, dora):
        with pytest.raises(ForbiddenError):
            authorize(identity, operation)


def test_status_update_needs_assigned_decorator_or_admin():
    authorize(dora, Operation.UPDATE_STATUS, "dora@x.com")
    authorize(admin, Operation.UPDATE_STATUS, "dora@x.com")
    with pytest.raises(ForbiddenError):
        authorize(dora, Operation.UPDATE_STATUS, "other@x.com")
    # A client whose email happens to match is still not a decorator.
    with pytest.raises(ForbiddenError):
        authorize(alice, Operation.UPDATE_STATUS, "alice@x.com")


def test_protected_operation_without_identity_is_denied():
    with pytest.raises(ForbiddenError):
        authorize(None, Operation.CREATE_BOOKING, "alice@x.com")
