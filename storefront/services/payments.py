# File: storefront/services/payments.py
import logging
import time
from typing import Callable

from storefront.core.errors import ValidationError
from storefront.gateways.payment import PaymentOrder

logger = logging.getLogger(__name__)

def create_payment_order(
    gateway,
    amount: int,
    currency: str = "INR",
    clock: Callable[[], float] = time.time,
) -> PaymentOrder:
    """Create a gateway order for ``amount`` whole units; the gateway works in paise/cents."""
    if amount <= 0:
        raise ValidationError("Amount must be positive")
    receipt = f"receipt_{int(clock() * 1000)}"
    return gateway.create_order(amount * 100, currency.upper(), receipt)
