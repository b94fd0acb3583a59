from concurrent.futures import ThreadPoolExecutor

import pytest

from styledecor_api.app.core.errors import NotFoundError, ValidationError
from styledecor_api.app.core.policy import Role
from styledecor_api.app.services.user_service import UserService

from .conftest import ADMIN_EMAIL


@pytest.fixture
def users(db):
    return UserService(db, ADMIN_EMAIL)


def test_register_is_idempotent(users):
    created, first = users.register("jane@example.com", {"name": "Jane"})
    again, second = users.register("jane@example.com", {"name": "Someone else"})
    assert created is True
    assert again is False
    assert second.name == "Jane"
    assert second.role == first.role == Role.USER
    assert len(users.list_all()) == 1


def test_bootstrap_email_becomes_admin(users):
    _, record = users.register(ADMIN_EMAIL)
    assert record.role == Role.ADMIN
    _, other = users.register("someone@example.com")
    assert other.role == Role.USER


def test_email_is_normalised(users):
    users.register("  Jane@Example.COM ")
    created, record = users.register("jane@example.com")
    assert created is False
    assert record.email == "jane@example.com"


def test_register_rejects_non_email(users):
    with pytest.raises(ValidationError):
        users.register("not-an-email")


def test_concurrent_first_registrations_store_one_record(users):
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: users.register("race@example.com"), range(16)))
    assert sum(1 for created, _ in results if created) == 1
    assert len(users.list_all()) == 1


def test_get_role_defaults_to_user(users):
    assert users.get_role("nobody@example.com") == Role.USER


def test_update_profile_merges_fields(users):
    users.register("jane@example.com", {"name": "Jane", "phone": "111"})
    updated = users.update_profile("jane@example.com", {"address": "1 Main St", "phone": None})
    assert updated.name == "Jane"
    assert updated.phone == "111"
    assert updated.address == "1 Main St"


def test_update_profile_creates_missing_record(users):
    record = users.update_profile("dora@example.com", {"role": "decorator"})
    assert record.role == Role.DECORATOR
    created, existing = users.register("dora@example.com")
    assert created is False
    assert existing.role == Role.DECORATOR


def test_get_user_missing(users):
    with pytest.raises(NotFoundError):
        users.get_user("ghost@example.com")
