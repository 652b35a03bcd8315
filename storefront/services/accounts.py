# File: storefront/services/accounts.py
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from storefront.core.errors import (
    ConflictError, InvalidCredentials, NotFoundError, UpstreamError, ValidationError,
)

logger = logging.getLogger(__name__)

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def public_user(row: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in row.items() if k != "password"}

class AccountService:
    def __init__(self, gateway, analytics, dispatcher, clock: Callable[[], datetime] = _utcnow):
        self._gateway = gateway
        self._analytics = analytics
        self._dispatcher = dispatcher
        self._clock = clock

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        if not name.strip() or not email.strip() or not password:
            raise ValidationError("Name, email and password are required")
        if self._gateway.select_one("users", {"email": email}) is not None:
            raise ConflictError("Email already registered")

        try:
            user = self._gateway.insert("users", [{"name": name, "email": email, "password": password}])[0]
        except UpstreamError:
            # A concurrent registration took the email between the check and the insert
            if self._gateway.select_one("users", {"email": email}) is not None:
                raise ConflictError("Email already registered")
            raise
        logger.info(f"User registered: {email}")

        self._dispatcher.submit(
            self._analytics.append,
            {"action": "signup", "name": name, "email": email, "time": self._clock().isoformat()},
            description=f"sheets append for signup {email}",
        )
        return public_user(user)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        user = self._gateway.select_one("users", {"email": email, "password": password})
        if user is None:
            logger.warning(f"Failed login attempt for email: {email}")
            raise InvalidCredentials()
        logger.info(f"Successful login for user: {email}")
        return public_user(user)

    def update_personal_info(self, user_id: int, info: Dict[str, Any]) -> None:
        updated = self._gateway.update("users", {"personal_info": info}, {"id": user_id})
        if not updated:
            raise NotFoundError(f"User {user_id} not found")
        logger.info(f"Personal info updated for user {user_id}")
