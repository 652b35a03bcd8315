# File: storefront/api/deps.py
"""
Service wiring for the routes. Each provider builds its object once;
tests swap them through ``app.dependency_overrides``.
"""
from functools import lru_cache
import logging

import redis

from storefront.core.config import settings
from storefront.gateways.analytics import SheetsAnalyticsSink
from storefront.gateways.payment import RazorpayGateway
from storefront.gateways.persistence import PersistenceGateway
from storefront.notifications.mailer import SmtpMailer
from storefront.notifications.sender import NotificationSender
from storefront.services.accounts import AccountService
from storefront.services.orders import OrderWorkflow
from storefront.services.password_reset import (
    InMemoryCodeStore, PasswordResetService, RedisCodeStore,
)
from storefront.workers.background import BackgroundDispatcher

logger = logging.getLogger(__name__)

@lru_cache(maxsize=None)
def get_redis_pool():
    return redis.ConnectionPool.from_url(settings.REDIS_URL, decode_responses=True, max_connections=10)

def redis_client() -> redis.Redis:
    return redis.Redis(connection_pool=get_redis_pool())

@lru_cache(maxsize=None)
def get_gateway() -> PersistenceGateway:
    return PersistenceGateway()

@lru_cache(maxsize=None)
def get_dispatcher() -> BackgroundDispatcher:
    return BackgroundDispatcher(max_workers=settings.BACKGROUND_WORKERS)

@lru_cache(maxsize=None)
def get_analytics() -> SheetsAnalyticsSink:
    return SheetsAnalyticsSink(settings.SHEETS_URL)

@lru_cache(maxsize=None)
def get_notifier() -> NotificationSender:
    mailer = SmtpMailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        from_email=settings.FROM_EMAIL,
        starttls=settings.SMTP_STARTTLS,
    )
    return NotificationSender(mailer)

@lru_cache(maxsize=None)
def get_payment_gateway() -> RazorpayGateway:
    return RazorpayGateway(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET, settings.RAZORPAY_BASE)

@lru_cache(maxsize=None)
def get_code_store():
    if settings.OTP_BACKEND == "redis":
        return RedisCodeStore(redis_client())
    return InMemoryCodeStore()

@lru_cache(maxsize=None)
def get_account_service() -> AccountService:
    return AccountService(get_gateway(), get_analytics(), get_dispatcher())

@lru_cache(maxsize=None)
def get_order_workflow() -> OrderWorkflow:
    return OrderWorkflow(
        gateway=get_gateway(),
        notifier=get_notifier(),
        analytics=get_analytics(),
        dispatcher=get_dispatcher(),
        owner_email=settings.OWNER_EMAIL,
        display_tz=settings.ORDER_TIMEZONE,
    )

@lru_cache(maxsize=None)
def get_password_reset_service() -> PasswordResetService:
    return PasswordResetService(
        gateway=get_gateway(),
        notifier=get_notifier(),
        store=get_code_store(),
        ttl_seconds=settings.OTP_TTL_SECONDS,
    )

def check_redis_health():
    """Check Redis connection health"""
    try:
        redis_client().ping()
        return True
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        return False
