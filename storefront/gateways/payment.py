# File: storefront/gateways/payment.py
from typing import Optional
import logging

import httpx
from pydantic import BaseModel

from storefront.core.errors import UpstreamError

logger = logging.getLogger(__name__)

class PaymentOrder(BaseModel):
    id: str
    amount: int
    currency: str

def _mask(value: str) -> str:
    return f"{value[:5]}..." if value else "Not Set"

class RazorpayGateway:
    """Creates Razorpay orders through the REST API (basic auth with key id/secret)."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout
        logger.info(f"Loaded Razorpay Key ID: {_mask(key_id)}")

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def create_order(self, amount_minor: int, currency: str, receipt: str) -> PaymentOrder:
        if not self.configured:
            raise UpstreamError(
                "Razorpay not configured. Please set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET environment variables."
            )

        body = {"amount": amount_minor, "currency": currency, "receipt": receipt}
        try:
            with httpx.Client(
                timeout=self._timeout,
                auth=(self.key_id, self.key_secret),
                transport=self._transport,
            ) as client:
                resp = client.post(f"{self.base_url}/orders", json=body)
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Razorpay returned error: {e.response.status_code} {e.response.text}")
            raise UpstreamError("Failed to create payment order")
        except httpx.RequestError as e:
            logger.error(f"Razorpay request failed: {e}")
            raise UpstreamError("Failed to create payment order")

        try:
            data = resp.json()
            order = PaymentOrder(id=data["id"], amount=data["amount"], currency=data["currency"])
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Unexpected Razorpay response: {e.__class__.__name__}: {resp.text[:200]}")
            raise UpstreamError("Failed to create payment order")

        logger.info(f"Razorpay order created: {order.id} receipt={receipt}")
        return order
