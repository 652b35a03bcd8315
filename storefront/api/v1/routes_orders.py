from fastapi import APIRouter, Depends, Request
from storefront.api.deps import get_order_workflow, get_payment_gateway
from storefront.api.v1.schemas import (
    OrderPayload, OrderPlacedResponse, PaymentOrderPayload, PaymentOrderResponse,
)
from storefront.core.config import settings
from storefront.core.limiting import limiter
from storefront.gateways.payment import RazorpayGateway
from storefront.services.orders import OrderWorkflow
from storefront.services.payments import create_payment_order

router = APIRouter()

@router.post("/create-razorpay-order", response_model=PaymentOrderResponse)
def create_razorpay_order(
    payload: PaymentOrderPayload,
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    order = create_payment_order(gateway, payload.amount, payload.currency)
    return order.model_dump()

@router.post("/order", response_model=OrderPlacedResponse)
@limiter.limit(settings.ORDER_RATE_LIMIT)
def place_order(
    request: Request,
    payload: OrderPayload,
    workflow: OrderWorkflow = Depends(get_order_workflow),
):
    """
    - Snapshots the username onto the order
    - Persists order, items and the initial "confirmed" status
    - Queues sheets append and confirmation emails (never fail the order)
    """
    placed = workflow.place_order(
        user_id=payload.user_id,
        email=str(payload.email),
        cart=payload.cart,
        total=payload.total,
        shipping_info=payload.shipping_info,
    )
    return {"orderId": placed.order_id, "invoice": placed.invoice}
