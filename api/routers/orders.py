"""
Orders API Endpoints.

Placement, editing of pending orders, delivery, and order reads.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.dependencies import get_actor, get_platform
from api.models import (
    DistributorResponse,
    EnrichedLineItemResponse,
    InvoiceResponse,
    OrderDetailResponse,
    OrderResponse,
    PlaceOrderRequest,
    UpdateOrderItemsRequest,
    UpdateOrderStatusRequest,
)
from domain.user import Actor
from services.platform import Platform

router = APIRouter()


@router.post("/orders", response_model=OrderResponse, status_code=201, summary="Place Order")
def place_order(
    request: PlaceOrderRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    """
    Place a PENDING order.

    The wallet balance is checked but not debited; the debit happens on delivery.
    Returns 409 with `InsufficientBalance` when the total exceeds the balance.
    """
    order = platform.orders.place_order(
        request.distributor_id,
        [item.to_domain() for item in request.items],
        actor.username,
    )
    return OrderResponse.from_domain(order)


@router.get("/orders", response_model=List[OrderResponse], summary="List Orders")
def list_orders(distributor_id: Optional[str] = None, platform: Platform = Depends(get_platform)):
    return [OrderResponse.from_domain(o) for o in platform.orders.list_orders(distributor_id)]


@router.get("/orders/{order_id}", response_model=OrderDetailResponse, summary="Order Detail")
def get_order(order_id: str, platform: Platform = Depends(get_platform)):
    order = platform.orders.get_order(order_id)
    items = platform.orders.get_order_items(order_id)
    return OrderDetailResponse(
        **OrderResponse.from_domain(order).model_dump(),
        items=[EnrichedLineItemResponse.from_enriched(i) for i in items],
    )


@router.put("/orders/{order_id}/items", response_model=OrderResponse, summary="Edit Pending Order")
def update_order_items(
    order_id: str,
    request: UpdateOrderItemsRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    """
    Replace a pending order's items. Prices and schemes are re-evaluated as of today.
    """
    order = platform.orders.update_order_items(
        order_id,
        [item.to_domain() for item in request.items],
        actor.username,
    )
    return OrderResponse.from_domain(order)


@router.put("/orders/{order_id}/status", response_model=OrderResponse, summary="Deliver Order")
def update_order_status(
    order_id: str,
    request: UpdateOrderStatusRequest,
    actor: Actor = Depends(get_actor),
    platform: Platform = Depends(get_platform),
):
    """
    Mark an order delivered and debit the wallet. Repeating the call is a no-op.
    """
    order = platform.orders.update_order_status(order_id, request.status, actor.username)
    return OrderResponse.from_domain(order)


@router.get("/orders/{order_id}/invoice", response_model=InvoiceResponse, summary="Invoice Data")
def get_invoice(order_id: str, platform: Platform = Depends(get_platform)):
    invoice = platform.orders.get_invoice_data(order_id)
    return InvoiceResponse(
        order=OrderResponse.from_domain(invoice.order),
        distributor=DistributorResponse.from_domain(invoice.distributor),
        items=[EnrichedLineItemResponse.from_enriched(i) for i in invoice.items],
    )
