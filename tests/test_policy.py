import pytest

from hoarding_api import policy
from hoarding_api.models.enums import Role
from hoarding_api.models.user import User
from hoarding_api.utils.exceptions import AppException

RESOURCES = {"hoarding", "assignment", "contract", "billing", "photo", "user"}


def _user(role: str, user_id: str = "u-1") -> User:
    return User(id=user_id, name="Test", email=f"{role}@test.com", role=role)


def test_every_entry_names_every_role():
    for key, rules in policy.POLICY.items():
        assert set(rules) == set(Role), key


def test_every_resource_has_crud_entries():
    for resource in RESOURCES:
        for action in ("create", "read", "update", "delete"):
            if (resource, action) == ("user", "create"):
                continue
            assert (resource, action) in policy.POLICY, (resource, action)


def test_user_create_is_left_to_public_registration():
    assert ("user", "create") not in policy.POLICY


def test_every_resource_has_a_model():
    assert set(policy.MODELS) == RESOURCES


def test_only_owners_create_hoardings_contracts_and_invoices():
    for resource in ("hoarding", "contract", "billing", "assignment"):
        assert policy.is_allowed(_user("owner"), resource, "create")
        assert not policy.is_allowed(_user("client"), resource, "create")
        assert not policy.is_allowed(_user("photographer"), resource, "create")


def test_clients_cannot_touch_assignments():
    for action in ("create", "read", "update", "delete"):
        assert not policy.is_allowed(_user("client"), "assignment", action)


def test_require_raises_403_with_message():
    with pytest.raises(AppException) as exc_info:
        policy.require(_user("client"), "hoarding", "create", "Only owners can create hoardings")

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Only owners can create hoardings"


def test_unknown_role_is_forbidden():
    with pytest.raises(AppException) as exc_info:
        policy.role_of(_user("admin"))

    assert exc_info.value.status_code == 403


def test_photographer_transitions_are_forward_only():
    assert ("assigned", "in_progress") in policy.PHOTOGRAPHER_TRANSITIONS
    assert ("in_progress", "completed") in policy.PHOTOGRAPHER_TRANSITIONS
    assert ("completed", "assigned") not in policy.PHOTOGRAPHER_TRANSITIONS
    assert ("assigned", "cancelled") not in policy.PHOTOGRAPHER_TRANSITIONS


def test_client_may_only_set_paid():
    assert policy.CLIENT_PAYMENT_STATUSES == frozenset({"paid"})


def test_scope_for_owner_filters_on_owner_id():
    clauses = policy.scope(_user("owner", "owner-1"), "hoarding")

    assert len(clauses) == 1
    assert "owner_id" in str(clauses[0])


def test_scope_for_client_hoardings_is_active_only():
    clauses = policy.scope(_user("client"), "hoarding")

    assert len(clauses) == 1
    assert "status" in str(clauses[0])


def test_scope_for_denied_role_raises():
    with pytest.raises(AppException) as exc_info:
        policy.scope(_user("client"), "assignment")

    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_authorize_checks_ownership_field():
    from hoarding_api.models.hoarding import Hoarding

    hoarding = Hoarding(id="h-1", owner_id="owner-1", status="active")

    rule = await policy.authorize(None, _user("owner", "owner-1"), "hoarding", "update", hoarding)
    assert rule.fields == ("owner_id",)

    with pytest.raises(AppException) as exc_info:
        await policy.authorize(None, _user("owner", "owner-2"), "hoarding", "update", hoarding)
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_authorize_checks_fixed_values():
    from hoarding_api.models.hoarding import Hoarding

    inactive = Hoarding(id="h-1", owner_id="owner-1", status="inactive")

    with pytest.raises(AppException) as exc_info:
        await policy.authorize(None, _user("client"), "hoarding", "read", inactive)
    assert exc_info.value.status_code == 403
