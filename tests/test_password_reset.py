from datetime import timedelta

import pytest
import redis

from storefront.core.errors import InvalidOrExpired, NotificationError, UserNotFound, UpstreamError
from storefront.services.password_reset import (
    InMemoryCodeStore, OneTimeCode, PasswordResetService, RedisCodeStore, generate_code,
)

EMAIL = "testuser@example.com"


def issued_code(store, email=EMAIL):
    return store.get(email).code


def test_generated_codes_are_six_digits():
    for _ in range(200):
        code = generate_code()
        assert len(code) == 6 and code.isdigit() and code[0] != "0"


def test_request_then_verify(reset_service, code_store, user, mailer):
    reset_service.request_code(EMAIL)
    code = issued_code(code_store)

    reset_service.verify_code(EMAIL, code)
    # Verification does not consume the code
    reset_service.verify_code(EMAIL, code)

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == EMAIL
    assert code in mailer.sent[0]["html"]
    assert "10 minutes" in mailer.sent[0]["html"]


def test_request_for_unknown_email(reset_service, code_store):
    with pytest.raises(UserNotFound):
        reset_service.request_code("nobody@example.com")
    assert code_store.get("nobody@example.com") is None


def test_wrong_code_is_rejected(reset_service, code_store, user):
    reset_service.request_code(EMAIL)
    wrong = "000000" if issued_code(code_store) != "000000" else "111111"
    with pytest.raises(InvalidOrExpired):
        reset_service.verify_code(EMAIL, wrong)


def test_verify_without_request(reset_service, user):
    with pytest.raises(InvalidOrExpired):
        reset_service.verify_code(EMAIL, "123456")


def test_code_expires_after_ttl(reset_service, code_store, clock, user):
    reset_service.request_code(EMAIL)
    code = issued_code(code_store)

    clock.advance(600)
    reset_service.verify_code(EMAIL, code)

    clock.advance(1)
    with pytest.raises(InvalidOrExpired):
        reset_service.verify_code(EMAIL, code)


def test_new_request_supersedes_previous_code(gateway, notifier, code_store, clock, user):
    codes = iter(["111111", "222222"])
    service = PasswordResetService(gateway, notifier, code_store, clock=clock, code_factory=lambda: next(codes))

    service.request_code(EMAIL)
    service.request_code(EMAIL)

    with pytest.raises(InvalidOrExpired):
        service.verify_code(EMAIL, "111111")
    service.verify_code(EMAIL, "222222")


def test_reset_password_consumes_code(reset_service, code_store, gateway, user):
    reset_service.request_code(EMAIL)
    code = issued_code(code_store)

    reset_service.reset_password(EMAIL, code, "new-secret")

    assert gateway.select_one("users", {"email": EMAIL})["password"] == "new-secret"
    assert code_store.get(EMAIL) is None
    with pytest.raises(InvalidOrExpired):
        reset_service.reset_password(EMAIL, code, "another")


def test_failed_reset_keeps_code(reset_service, code_store, gateway, user):
    reset_service.request_code(EMAIL)
    code = issued_code(code_store)

    with pytest.raises(InvalidOrExpired):
        reset_service.reset_password(EMAIL, "999999" if code != "999999" else "888888", "x")
    assert issued_code(code_store) == code
    assert gateway.select_one("users", {"email": EMAIL})["password"] == "testpassword"


def test_store_failure_during_reset_keeps_code(notifier, code_store, clock, user):
    class BrokenUpdates:
        def select_one(self, table, filters):
            return {"email": EMAIL}

        def update(self, table, patch, filters):
            raise UpstreamError("Update of users failed: OperationalError")

    service = PasswordResetService(BrokenUpdates(), notifier, code_store, clock=clock, code_factory=lambda: "123456")
    service.request_code(EMAIL)

    with pytest.raises(UpstreamError):
        service.reset_password(EMAIL, "123456", "new-secret")
    assert issued_code(code_store) == "123456"


def test_send_failure_is_reported(reset_service, mailer, user):
    mailer.fail = True
    with pytest.raises(NotificationError):
        reset_service.request_code(EMAIL)


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.ttls = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value
        self.ttls[key] = ex

    def delete(self, key):
        self.data.pop(key, None)


def test_redis_store_round_trip(clock):
    fake = FakeRedis()
    store = RedisCodeStore(fake, clock=clock)
    otp = OneTimeCode(code="654321", expires_at=clock() + timedelta(seconds=600))

    store.put(EMAIL, otp)
    assert fake.ttls[f"otp:{EMAIL}"] == 600
    assert store.get(EMAIL) == otp

    store.delete(EMAIL)
    assert store.get(EMAIL) is None


def test_redis_store_ignores_malformed_entries(clock):
    fake = FakeRedis()
    fake.data[f"otp:{EMAIL}"] = "not json"
    assert RedisCodeStore(fake, clock=clock).get(EMAIL) is None


def test_in_memory_store_delete_missing_is_noop():
    InMemoryCodeStore().delete(EMAIL)


class UnreachableRedis:
    def get(self, *args, **kwargs):
        raise redis.ConnectionError("Connection refused")

    set = delete = get


def test_redis_outage_becomes_upstream_error(clock):
    store = RedisCodeStore(UnreachableRedis(), clock=clock)
    otp = OneTimeCode(code="654321", expires_at=clock() + timedelta(seconds=600))

    with pytest.raises(UpstreamError, match="Reset code store unavailable"):
        store.get(EMAIL)
    with pytest.raises(UpstreamError, match="Reset code store unavailable"):
        store.put(EMAIL, otp)
    with pytest.raises(UpstreamError, match="Reset code store unavailable"):
        store.delete(EMAIL)
