"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. JSON is camelCase on the wire.
"""

from datetime import datetime

from pydantic import Field

from shared.http import ApiModel


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(ApiModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str = Field(min_length=1, max_length=30)
    address: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    zip_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=1, max_length=100)


class LineSchema(ApiModel):
    product_id: str
    product_name: str
    product_price: float
    product_thumbnail: str | None = None
    quantity: int
    total_price: float


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(ApiModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartItemRequest(ApiModel):
    quantity: int = Field(ge=1)


class CartResponse(ApiModel):
    id: str | None = None
    owner_id: str
    items: list[LineSchema] = []
    total_amount: float = 0.0
    total_items: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_cart(cls, cart, owner_id=None) -> "CartResponse":
        if cart is None:
            return cls(owner_id=str(owner_id))
        return cls(
            id=str(cart.id),
            owner_id=str(cart.owner_id),
            items=[LineSchema(**line) for line in cart.snapshot()],
            total_amount=cart.total_amount,
            total_items=cart.total_items,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )


class CountResponse(ApiModel):
    count: int


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequest(ApiModel):
    shipping_address: ShippingAddressSchema
    payment_method: str | None = None
    notes: str | None = Field(default=None, max_length=1000)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shippingAddress": {
                        "firstName": "Ada",
                        "lastName": "Lovelace",
                        "email": "ada@example.com",
                        "phone": "+44 20 7946 0000",
                        "address": "12 Analytical Row",
                        "city": "London",
                        "state": "Greater London",
                        "zipCode": "N1 9GU",
                        "country": "GB",
                    },
                    "paymentMethod": "stripe",
                }
            ]
        }
    }


class GuestCheckoutRequest(CheckoutRequest):
    create_account: bool = False
    username: str | None = Field(default=None, max_length=100)
    password: str | None = Field(default=None, min_length=6, max_length=72)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(ApiModel):
    status: str
    payment_status: str | None = None
    notes: str | None = Field(default=None, max_length=1000)
    force: bool = False


class OrderResponse(ApiModel):
    id: str
    order_number: str
    user_id: str
    items: list[LineSchema]
    shipping_address: ShippingAddressSchema
    subtotal: float
    shipping_cost: float
    tax: float
    total_amount: float
    total_items: int
    status: str
    payment_method: str
    payment_status: str
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            user_id=str(order.owner_id),
            items=[
                LineSchema(
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    product_price=item.product_price,
                    product_thumbnail=item.product_thumbnail,
                    quantity=item.quantity,
                    total_price=item.total_price,
                )
                for item in order.items
            ],
            shipping_address=ShippingAddressSchema(**order.shipping_address.to_dict()),
            subtotal=order.subtotal,
            shipping_cost=order.shipping_cost,
            tax=order.tax,
            total_amount=order.total_amount,
            total_items=order.total_items,
            status=order.status,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderPageResponse(ApiModel):
    items: list[OrderResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(cls, page) -> "OrderPageResponse":
        return cls(
            items=[OrderResponse.from_order(order) for order in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )


class GuestCheckoutResponse(ApiModel):
    order: OrderResponse
    user_id: str | None = None


class OrderStatsResponse(ApiModel):
    total_orders: int
    total_revenue: float
    average_order_value: float
    pending_orders: int
    confirmed_orders: int
    processing_orders: int
    shipped_orders: int
    delivered_orders: int
    cancelled_orders: int
    revenue_by_status: dict[str, float]

    @classmethod
    def from_stats(cls, stats) -> "OrderStatsResponse":
        counts = stats.status_counts
        return cls(
            total_orders=stats.total_orders,
            total_revenue=stats.total_revenue,
            average_order_value=stats.average_order_value,
            pending_orders=counts.get("pending", 0),
            confirmed_orders=counts.get("confirmed", 0),
            processing_orders=counts.get("processing", 0),
            shipped_orders=counts.get("shipped", 0),
            delivered_orders=counts.get("delivered", 0),
            cancelled_orders=counts.get("cancelled", 0),
            revenue_by_status=stats.status_revenue,
        )
