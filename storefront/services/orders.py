# File: storefront/services/orders.py
"""
Order placement workflow.

Writes happen as a saga over three tables (orders, order_items,
order_status_history), one gateway call each, in that order. A failure
aborts the remaining steps and propagates unchanged; rows already written
stay (an order header without items is a known partial outcome). Analytics
and confirmation emails are handed to the background dispatcher and can
never change the result.
"""
import html
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List
from uuid import uuid4
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field

from storefront.core.errors import StorefrontError, UserNotFound, ValidationError

logger = logging.getLogger(__name__)

INITIAL_STATUS = "confirmed"
CONFIRMATION_TEMPLATE = "order-confirmation"

class CartItem(BaseModel):
    name: str = Field(..., min_length=1)
    price: int = Field(..., ge=0)
    qty: int = Field(..., ge=1)

class ShippingInfo(BaseModel):
    name: str
    address: str
    city: str
    state: str
    pincode: str
    phone: str

class PlacedOrder(BaseModel):
    order_id: str
    invoice: str

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def full_address(shipping: ShippingInfo) -> str:
    return f"{shipping.address}, {shipping.city}, {shipping.state} - {shipping.pincode}"

def build_invoice(order_id: str, cart: List[CartItem], total: int, shipping: ShippingInfo) -> str:
    lines = [
        f"Invoice for Order: {order_id}",
        "",
        "Shipping Info:",
        f"Name: {shipping.name}",
        f"Address: {full_address(shipping)}",
        f"Phone: {shipping.phone}",
        "",
        "Items:",
    ]
    for item in cart:
        lines.append(f"{item.name} - ₹{item.price} x {item.qty} = ₹{item.price * item.qty}")
    lines += ["", f"Total: ₹{total}", ""]
    return "\n".join(lines)

def build_items_html(cart: List[CartItem]) -> str:
    return "".join(
        f"<tr><td>{html.escape(item.name)}</td><td>₹{item.price}</td>"
        f"<td>{item.qty}</td><td>₹{item.price * item.qty}</td></tr>"
        for item in cart
    )

class OrderWorkflow:
    def __init__(
        self,
        gateway,
        notifier,
        analytics,
        dispatcher,
        owner_email: str,
        clock: Callable[[], datetime] = _utcnow,
        display_tz: str = "Asia/Kolkata",
    ):
        self._gateway = gateway
        self._notifier = notifier
        self._analytics = analytics
        self._dispatcher = dispatcher
        self._owner_email = owner_email
        self._clock = clock
        self._display_tz = ZoneInfo(display_tz)

    def place_order(
        self,
        user_id: int,
        email: str,
        cart: List[CartItem],
        total: int,
        shipping_info: ShippingInfo,
    ) -> PlacedOrder:
        if not cart:
            raise ValidationError("Cart is empty")

        user = self._gateway.select_one("users", {"id": user_id})
        if user is None:
            raise UserNotFound()
        username = user["name"]

        order_id = str(uuid4())
        self._gateway.insert("orders", [{
            "id": order_id,
            "user_id": user_id,
            "username": username,
            "total": total,
            "shipping_info": shipping_info.model_dump(),
            "status": INITIAL_STATUS,
        }])

        try:
            self._gateway.insert("order_items", [
                {
                    "order_id": order_id,
                    "username": username,
                    "product_name": item.name,
                    "price": item.price,
                    "quantity": item.qty,
                }
                for item in cart
            ])
            self._gateway.insert("order_status_history", [
                {"order_id": order_id, "status": INITIAL_STATUS}
            ])
        except StorefrontError as e:
            logger.error(f"Order {order_id} persisted without items/status history: {e}")
            raise

        logger.info(f"Order {order_id} placed by user {user_id} ({len(cart)} items, total {total})")

        now = self._clock()
        self._dispatcher.submit(
            self._analytics.append,
            self.analytics_record(order_id, email, cart, total, shipping_info, now),
            description=f"sheets append for order {order_id}",
        )

        invoice = build_invoice(order_id, cart, total, shipping_info)

        fields = {
            "name": shipping_info.name,
            "orderId": order_id,
            "orderDate": now.astimezone(self._display_tz).strftime("%d/%m/%Y"),
            "address": shipping_info.address,
            "city": shipping_info.city,
            "state": shipping_info.state,
            "pincode": shipping_info.pincode,
            "phone": shipping_info.phone,
            "total": total,
            "itemsHtml": build_items_html(cart),
        }
        self._dispatcher.submit(
            self._notifier.send, email, "Order Confirmation", CONFIRMATION_TEMPLATE, fields,
            description=f"customer confirmation for order {order_id}",
        )
        self._dispatcher.submit(
            self._notifier.send, self._owner_email, "New Order Received", CONFIRMATION_TEMPLATE,
            {**fields, "name": "Admin"},
            description=f"operator notification for order {order_id}",
        )

        return PlacedOrder(order_id=order_id, invoice=invoice)

    @staticmethod
    def analytics_record(
        order_id: str,
        email: str,
        cart: List[CartItem],
        total: int,
        shipping: ShippingInfo,
        now: datetime,
    ) -> Dict[str, Any]:
        return {
            "action": "order",
            "orderId": order_id,
            "name": shipping.name,
            "email": email,
            "phone": shipping.phone,
            "address": full_address(shipping),
            "total": total,
            "items": "; ".join(f"{i.name} x {i.qty} @ ₹{i.price}" for i in cart),
            "time": now.isoformat(),
        }

    def list_orders(self, user_id: int) -> List[Dict[str, Any]]:
        orders = self._gateway.select("orders", {"user_id": user_id})
        for order in orders:
            order["order_items"] = self._gateway.select("order_items", {"order_id": order["id"]})
            order["order_status_history"] = self._gateway.select(
                "order_status_history", {"order_id": order["id"]}
            )
        return sorted(orders, key=lambda o: o["created_at"])
