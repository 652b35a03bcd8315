import pytest

from storefront.core.errors import ConflictError, InvalidCredentials, NotFoundError, ValidationError


def test_register_and_login(accounts, analytics):
    created = accounts.register("Asha", "asha@example.com", "pw")
    assert "password" not in created

    user = accounts.login("asha@example.com", "pw")
    assert user["id"] == created["id"]
    assert user["name"] == "Asha"
    assert "password" not in user

    assert analytics.records == [{
        "action": "signup",
        "name": "Asha",
        "email": "asha@example.com",
        "time": "2024-05-01T12:00:00+00:00",
    }]


def test_register_duplicate_email(accounts):
    accounts.register("Asha", "asha@example.com", "pw")
    with pytest.raises(ConflictError):
        accounts.register("Other", "asha@example.com", "pw2")


def test_register_requires_fields(accounts):
    with pytest.raises(ValidationError):
        accounts.register("  ", "asha@example.com", "pw")


def test_register_survives_analytics_failure(accounts, analytics, gateway):
    analytics.fail = True
    accounts.register("Asha", "asha@example.com", "pw")
    assert gateway.select_one("users", {"email": "asha@example.com"}) is not None


def test_login_with_wrong_password(accounts, user):
    with pytest.raises(InvalidCredentials):
        accounts.login("testuser@example.com", "nope")
    with pytest.raises(ConflictError):
        accounts.login("ghost@example.com", "testpassword")


def test_update_personal_info(accounts, gateway, user):
    info = {"phone": "9876543210", "city": "Jaipur"}
    accounts.update_personal_info(user["id"], info)
    assert gateway.select_one("users", {"id": user["id"]})["personal_info"] == info


def test_update_personal_info_unknown_user(accounts):
    with pytest.raises(NotFoundError):
        accounts.update_personal_info(999, {"city": "Jaipur"})


class RacingGateway:
    """Misses the existing row on the first lookup, as a concurrent insert would."""

    def __init__(self, inner):
        self.inner = inner
        self.lookups = 0

    def select_one(self, table, filters):
        self.lookups += 1
        if self.lookups == 1:
            return None
        return self.inner.select_one(table, filters)

    def insert(self, table, rows):
        return self.inner.insert(table, rows)


def test_register_lost_race_is_a_conflict(gateway, analytics, dispatcher, clock, user):
    from storefront.services.accounts import AccountService

    service = AccountService(RacingGateway(gateway), analytics, dispatcher, clock=clock)
    with pytest.raises(ConflictError, match="Email already registered"):
        service.register("Other", "testuser@example.com", "pw")
    assert analytics.records == []
