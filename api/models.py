"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.catalog import Product
from domain.distributor import Distributor
from domain.notification import Notification
from domain.order import EnrichedOrderItem, Order, OrderLineItem, OrderStatus, RequestedItem
from domain.promotions import DistributorScheme, Scheme, SpecialPrice
from domain.user import User, UserRole
from domain.wallet import EnrichedWalletTransaction


# ============================================================================
# Order Item Models
# ============================================================================

class RequestedItemModel(BaseModel):
    """A product and quantity requested by the caller."""
    product_id: str
    quantity: int

    def to_domain(self) -> RequestedItem:
        return RequestedItem(product_id=self.product_id, quantity=self.quantity)


class LineItemResponse(BaseModel):
    product_id: str
    quantity: int
    unit_price: Decimal
    is_freebie: bool
    line_total: Decimal

    @classmethod
    def from_domain(cls, item: OrderLineItem) -> "LineItemResponse":
        return cls(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            is_freebie=item.is_freebie,
            line_total=item.line_total,
        )


class EnrichedLineItemResponse(LineItemResponse):
    product_name: str
    hsn_code: str

    @classmethod
    def from_enriched(cls, enriched: EnrichedOrderItem) -> "EnrichedLineItemResponse":
        item = enriched.item
        return cls(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            is_freebie=item.is_freebie,
            line_total=item.line_total,
            product_name=enriched.product_name,
            hsn_code=enriched.hsn_code,
        )


# ============================================================================
# Quote Models
# ============================================================================

class QuoteRequest(BaseModel):
    """Request to preview pricing for an order."""
    distributor_id: str
    items: List[RequestedItemModel] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "distributor_id": "dist-1",
                "items": [{"product_id": "SKU001", "quantity": 18}],
            }
        }


class QuoteResponse(BaseModel):
    distributor_id: str
    as_of: date
    items: List[LineItemResponse]
    subtotal: Decimal
    currency: str

    class Config:
        json_schema_extra = {
            "example": {
                "distributor_id": "dist-1",
                "as_of": "2025-06-01",
                "items": [
                    {"product_id": "SKU001", "quantity": 18, "unit_price": "100", "is_freebie": False, "line_total": "1800"},
                    {"product_id": "SKU001", "quantity": 1, "unit_price": "0", "is_freebie": True, "line_total": "0"},
                ],
                "subtotal": "1800",
                "currency": "INR",
            }
        }


# ============================================================================
# Order Models
# ============================================================================

class PlaceOrderRequest(BaseModel):
    distributor_id: str
    items: List[RequestedItemModel] = Field(..., min_length=1)


class UpdateOrderItemsRequest(BaseModel):
    items: List[RequestedItemModel] = Field(..., min_length=1)


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus


class OrderResponse(BaseModel):
    order_id: str
    distributor_id: str
    total_amount: Decimal
    date: datetime
    placed_by: str
    status: OrderStatus

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            order_id=order.order_id,
            distributor_id=order.distributor_id,
            total_amount=order.total_amount,
            date=order.date,
            placed_by=order.placed_by,
            status=order.status,
        )


class OrderDetailResponse(OrderResponse):
    items: List[EnrichedLineItemResponse]


class InvoiceResponse(BaseModel):
    order: OrderResponse
    distributor: "DistributorResponse"
    items: List[EnrichedLineItemResponse]


# ============================================================================
# Distributor & Wallet Models
# ============================================================================

class OnboardDistributorRequest(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str
    state: str
    area: str
    has_special_pricing: bool = False
    has_special_schemes: bool = False
    agreement_url: Optional[str] = None


class DistributorResponse(BaseModel):
    distributor_id: str
    name: str
    phone: str
    state: str
    area: str
    wallet_balance: Decimal
    date_added: datetime
    added_by: str
    has_special_pricing: bool
    has_special_schemes: bool
    agreement_url: Optional[str] = None

    @classmethod
    def from_domain(cls, distributor: Distributor) -> "DistributorResponse":
        return cls(
            distributor_id=distributor.distributor_id,
            name=distributor.name,
            phone=distributor.phone,
            state=distributor.state,
            area=distributor.area,
            wallet_balance=distributor.wallet_balance,
            date_added=distributor.date_added,
            added_by=distributor.added_by,
            has_special_pricing=distributor.has_special_pricing,
            has_special_schemes=distributor.has_special_schemes,
            agreement_url=distributor.agreement_url,
        )


class RechargeRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)


class WalletBalanceResponse(BaseModel):
    distributor_id: str
    wallet_balance: Decimal


class WalletTransactionResponse(BaseModel):
    transaction_id: str
    distributor_id: str
    order_id: Optional[str] = None
    amount: Decimal
    transaction_type: str
    date: datetime
    actor: str
    balance_after: Decimal

    @classmethod
    def from_domain(cls, enriched: EnrichedWalletTransaction) -> "WalletTransactionResponse":
        tx = enriched.transaction
        return cls(
            transaction_id=tx.transaction_id,
            distributor_id=tx.distributor_id,
            order_id=tx.order_id,
            amount=tx.amount,
            transaction_type=tx.transaction_type.value,
            date=tx.date,
            actor=tx.actor,
            balance_after=enriched.balance_after,
        )


# ============================================================================
# Catalog & Promotion Models
# ============================================================================

class ProductModel(BaseModel):
    product_id: str
    name: str
    default_unit_price: Decimal = Field(..., ge=0)
    hsn_code: Optional[str] = None

    @classmethod
    def from_domain(cls, product: Product) -> "ProductModel":
        return cls(
            product_id=product.product_id,
            name=product.name,
            default_unit_price=product.default_unit_price,
            hsn_code=product.hsn_code,
        )

    def to_domain(self) -> Product:
        return Product(
            product_id=self.product_id,
            name=self.name,
            default_unit_price=self.default_unit_price,
            hsn_code=self.hsn_code,
        )


class AddProductRequest(BaseModel):
    name: str = Field(..., min_length=1)
    default_unit_price: Decimal = Field(..., ge=0)
    hsn_code: Optional[str] = None
    product_id: Optional[str] = None


class SchemeRequest(BaseModel):
    """Scheme definition. Omit distributor_id for a global scheme."""
    description: str
    buy_product_id: str
    buy_quantity: int = Field(..., ge=1)
    get_product_id: str
    get_quantity: int = Field(..., ge=1)
    start_date: date
    end_date: date
    distributor_id: Optional[str] = None


class SchemeResponse(BaseModel):
    scheme_id: str
    description: str
    buy_product_id: str
    buy_quantity: int
    get_product_id: str
    get_quantity: int
    start_date: date
    end_date: date
    is_global: bool
    distributor_id: Optional[str] = None

    @classmethod
    def from_domain(cls, scheme: Scheme) -> "SchemeResponse":
        return cls(
            scheme_id=scheme.scheme_id,
            description=scheme.description,
            buy_product_id=scheme.buy_product_id,
            buy_quantity=scheme.buy_quantity,
            get_product_id=scheme.get_product_id,
            get_quantity=scheme.get_quantity,
            start_date=scheme.start_date,
            end_date=scheme.end_date,
            is_global=scheme.is_global,
            distributor_id=scheme.distributor_id if isinstance(scheme, DistributorScheme) else None,
        )


class SpecialPriceRequest(BaseModel):
    distributor_id: str
    product_id: str
    price: Decimal = Field(..., ge=0)
    start_date: date
    end_date: date


class SpecialPriceUpdateRequest(BaseModel):
    price: Optional[Decimal] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class SpecialPriceResponse(BaseModel):
    special_price_id: str
    distributor_id: str
    product_id: str
    price: Decimal
    start_date: date
    end_date: date

    @classmethod
    def from_domain(cls, price: SpecialPrice) -> "SpecialPriceResponse":
        return cls(
            special_price_id=price.special_price_id,
            distributor_id=price.distributor_id,
            product_id=price.product_id,
            price=price.price,
            start_date=price.start_date,
            end_date=price.end_date,
        )


# ============================================================================
# Notification Models
# ============================================================================

class NotificationResponse(BaseModel):
    notification_id: str
    notification_type: str
    message: str
    date: datetime
    distributor_id: Optional[str] = None
    is_read: bool

    @classmethod
    def from_domain(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            notification_id=notification.notification_id,
            notification_type=notification.notification_type.value,
            message=notification.message,
            date=notification.date,
            distributor_id=notification.distributor_id,
            is_read=notification.is_read,
        )


# ============================================================================
# User Models
# ============================================================================

class AddUserRequest(BaseModel):
    username: str = Field(..., min_length=1)
    role: UserRole

    class Config:
        json_schema_extra = {
            "example": {"username": "exec2", "role": "Executive"}
        }


class UpdateUserRequest(BaseModel):
    username: Optional[str] = Field(None, min_length=1)
    role: Optional[UserRole] = None


class UserResponse(BaseModel):
    user_id: str
    username: str
    role: UserRole

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(user_id=user.user_id, username=user.username, role=user.role)


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    status_code: int

    class Config:
        json_schema_extra = {
            "example": {
                "error": "InsufficientBalance",
                "detail": "Insufficient wallet balance.",
                "status_code": 409
            }
        }


InvoiceResponse.model_rebuild()
