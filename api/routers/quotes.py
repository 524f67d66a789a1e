"""
Quotes API Endpoints.

Live order-summary preview: prices requested items as of today without
creating an order.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_platform
from api.models import LineItemResponse, QuoteRequest, QuoteResponse
from services.platform import Platform

router = APIRouter()


@router.post(
    "/quotes",
    response_model=QuoteResponse,
    summary="Preview Order Pricing",
    description="Resolve special prices, scheme freebies and subtotal for a prospective order."
)
def calculate_quote(request: QuoteRequest, platform: Platform = Depends(get_platform)):
    """
    Calculate an order preview for a distributor.

    **How it works:**
    1. Items with quantity <= 0 or an unknown product are skipped
    2. Each product is priced at the distributor's active special price, else its default price
    3. Distributor-specific schemes apply if any are active, otherwise global schemes
    4. Freebies are listed with unit price 0 and do not count toward the subtotal
    """
    quote = platform.orders.preview(
        request.distributor_id,
        [item.to_domain() for item in request.items],
    )
    return QuoteResponse(
        distributor_id=quote.distributor_id,
        as_of=quote.as_of,
        items=[LineItemResponse.from_domain(item) for item in quote.line_items],
        subtotal=quote.subtotal,
        currency=quote.currency,
    )
