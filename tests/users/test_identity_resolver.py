import pytest

from src.timesheet_system.timesheet_system.core.enums import Role
from src.timesheet_system.timesheet_system.core.exceptions import AuthenticationError, NotFoundError
from src.timesheet_system.timesheet_system.users.model import User
from src.timesheet_system.timesheet_system.users.service import IdentityResolver
from tests.fakes import InMemoryUsers


def make_users():
    return InMemoryUsers(
        User(user_id="u1", email="jane@corp.io", role=Role.EMPLOYEE, first_name="Jane", last_name="Doe"),
        User(user_id="u2", email="bob@example.com", role=Role.TEAM_LEAD),
        User(user_id="u3", email="gone@corp.io", role=Role.EMPLOYEE, is_active=False),
    )


def test_lookup_by_id_then_email_then_synthesized_email():
    identity = IdentityResolver(make_users())

    assert identity.resolve("u1").user_id == "u1"
    assert identity.resolve("jane@corp.io").user_id == "u1"
    assert identity.resolve("bob").user_id == "u2"


def test_unknown_or_inactive_principal():
    identity = IdentityResolver(make_users())

    assert identity.find(None) is None
    assert identity.find("  ") is None
    assert identity.find("u3") is None
    with pytest.raises(NotFoundError):
        identity.resolve("nobody")
    with pytest.raises(AuthenticationError):
        identity.resolve(None)


def test_override_only_honoured_when_enabled():
    locked = IdentityResolver(make_users(), allow_impersonation=False)
    open_ = IdentityResolver(make_users(), allow_impersonation=True)

    assert locked.resolve("u1", override="u2").user_id == "u1"
    assert open_.resolve("u1", override="u2").user_id == "u2"
    assert open_.resolve("u1", override="").user_id == "u1"


def test_user_info_profile():
    identity = IdentityResolver(make_users())
    assert identity.user_info("u1") == {
        "id": "u1",
        "email": "jane@corp.io",
        "firstName": "Jane",
        "lastName": "Doe",
        "role": "Employee",
    }


def test_resolve_or_provision_creates_employee_once():
    users = make_users()
    identity = IdentityResolver(users)

    user = identity.resolve_or_provision("newbie")
    assert user.email == "newbie@example.com"
    assert user.role == Role.EMPLOYEE

    again = identity.resolve_or_provision("newbie")
    assert again.user_id == user.user_id
    assert len(users.users) == 4

    with pytest.raises(AuthenticationError):
        identity.resolve_or_provision(None)
