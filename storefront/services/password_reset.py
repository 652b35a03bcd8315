# File: storefront/services/password_reset.py
"""
Password reset through emailed one-time codes.

A code moves NONE -> ISSUED -> VERIFIED/EXPIRED/SUPERSEDED. Requesting a
new code silently replaces the previous one; verifying does not consume
it; a successful reset deletes it.

verify_code and reset_password share a check-then-act race: two concurrent
resets with the same code can both pass validation before either deletes
it. Both would then write a password; the last write wins.
"""
import json
import logging
import math
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

import redis

from storefront.core.errors import InvalidOrExpired, UpstreamError, UserNotFound

logger = logging.getLogger(__name__)

RESET_TEMPLATE = "password-reset"
RESET_SUBJECT = "Password Reset OTP - Crystal Loom"

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))

@dataclass
class OneTimeCode:
    code: str
    expires_at: datetime

class InMemoryCodeStore:
    """Process-local store; codes are lost on restart."""

    def __init__(self):
        self._codes: Dict[str, OneTimeCode] = {}

    def get(self, email: str) -> Optional[OneTimeCode]:
        return self._codes.get(email)

    def put(self, email: str, otp: OneTimeCode) -> None:
        self._codes[email] = otp

    def delete(self, email: str) -> None:
        self._codes.pop(email, None)

class RedisCodeStore:
    """Codes shared between workers; Redis drops them once expired."""

    def __init__(self, client, prefix: str = "otp:", clock: Callable[[], datetime] = _utcnow):
        self._client = client
        self._prefix = prefix
        self._clock = clock

    def _key(self, email: str) -> str:
        return f"{self._prefix}{email}"

    def get(self, email: str) -> Optional[OneTimeCode]:
        try:
            raw = self._client.get(self._key(email))
        except redis.RedisError as e:
            logger.error(f"Reset code lookup failed for {email}: {e}")
            raise UpstreamError("Reset code store unavailable")
        if not raw:
            return None
        try:
            data = json.loads(raw)
            return OneTimeCode(code=data["code"], expires_at=datetime.fromisoformat(data["expires_at"]))
        except (json.JSONDecodeError, KeyError, ValueError):
            logger.warning(f"Discarding malformed reset code entry for {email}")
            return None

    def put(self, email: str, otp: OneTimeCode) -> None:
        ttl = max(math.ceil((otp.expires_at - self._clock()).total_seconds()), 1)
        payload = json.dumps({"code": otp.code, "expires_at": otp.expires_at.isoformat()})
        try:
            self._client.set(self._key(email), payload, ex=ttl)
        except redis.RedisError as e:
            logger.error(f"Storing reset code failed for {email}: {e}")
            raise UpstreamError("Reset code store unavailable")

    def delete(self, email: str) -> None:
        try:
            self._client.delete(self._key(email))
        except redis.RedisError as e:
            logger.error(f"Deleting reset code failed for {email}: {e}")
            raise UpstreamError("Reset code store unavailable")

class PasswordResetService:
    def __init__(
        self,
        gateway,
        notifier,
        store,
        ttl_seconds: int = 600,
        clock: Callable[[], datetime] = _utcnow,
        code_factory: Callable[[], str] = generate_code,
    ):
        self._gateway = gateway
        self._notifier = notifier
        self._store = store
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._code_factory = code_factory

    def request_code(self, email: str) -> None:
        if self._gateway.select_one("users", {"email": email}) is None:
            raise UserNotFound()

        otp = OneTimeCode(code=self._code_factory(), expires_at=self._clock() + self._ttl)
        self._store.put(email, otp)

        # Not best-effort: the caller must learn that the code never arrived
        self._notifier.send(email, RESET_SUBJECT, RESET_TEMPLATE, {
            "code": otp.code,
            "ttlMinutes": int(self._ttl.total_seconds() // 60),
        })
        logger.info(f"Password reset code issued for {email}")

    def _check(self, email: str, code: str) -> None:
        stored = self._store.get(email)
        if stored is None or stored.code != code or self._clock() > stored.expires_at:
            raise InvalidOrExpired()

    def verify_code(self, email: str, code: str) -> None:
        self._check(email, code)

    def reset_password(self, email: str, code: str, new_password: str) -> None:
        self._check(email, code)
        self._gateway.update("users", {"password": new_password}, {"email": email})
        self._store.delete(email)
        logger.info(f"Password reset completed for {email}")
