"""FastAPI routes for the Ordering domain: carts, guest carts and orders."""

from fastapi import APIRouter, Depends, Header, Query, Response
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddToCartRequest,
    CartResponse,
    CheckoutRequest,
    CountResponse,
    GuestCheckoutRequest,
    GuestCheckoutResponse,
    OrderPageResponse,
    OrderResponse,
    OrderStatsResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from ordering.cart.cart import CartKind
from ordering.cart.guest import GUEST_HEADER, generate_guest_id, require_guest_id
from ordering.cart.items import AddCartItem, RemoveCartItem, UpdateCartItem
from ordering.cart.management import ClearCart, GetOrCreateCart, MergeGuestCart
from ordering.cart.queries import cart_for, item_count
from ordering.checkout.placement import GuestCheckout, PlaceOrder
from ordering.order.cancellation import CancelOrder
from ordering.order.queries import (
    OrderQuery,
    find_by_id,
    find_by_order_number,
    list_all,
    list_by_owner,
    order_stats,
)
from ordering.order.status import UpdateOrderStatus
from shared.errors import BadRequest
from shared.http import current_user_id, require_admin


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _cart_response(owner_id, kind=CartKind.USER.value) -> CartResponse:
    return CartResponse.from_cart(cart_for(owner_id, kind=kind), owner_id=owner_id)


def guest_id(response: Response, x_guest_id: str = Header(default="")) -> str:
    """Guest id from ``X-Guest-ID``, minted when absent, and echoed back.

    A header that does not carry a guest id is rejected.
    """
    value = require_guest_id(x_guest_id) if x_guest_id else generate_guest_id()
    response.headers[GUEST_HEADER] = value
    return value


def order_query(
    status: str | None = None,
    payment_status: str | None = Query(default=None, alias="paymentStatus"),
    order_number: str | None = Query(default=None, alias="orderNumber"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort_by: str = Query(default="createdAt", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
) -> OrderQuery:
    return OrderQuery(
        status=status,
        payment_status=payment_status,
        order_number=order_number,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(user_id: str = Depends(current_user_id)) -> CartResponse:
    _process(GetOrCreateCart(owner_id=user_id, kind=CartKind.USER.value))
    return _cart_response(user_id)


@cart_router.get("/count", response_model=CountResponse)
async def get_cart_count(user_id: str = Depends(current_user_id)) -> CountResponse:
    return CountResponse(count=item_count(user_id))


@cart_router.post("/add", status_code=201, response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, user_id: str = Depends(current_user_id)) -> CartResponse:
    _process(
        AddCartItem(
            owner_id=user_id,
            kind=CartKind.USER.value,
            product_id=body.product_id,
            quantity=body.quantity,
        )
    )
    return _cart_response(user_id)


@cart_router.patch("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str, body: UpdateCartItemRequest, user_id: str = Depends(current_user_id)
) -> CartResponse:
    _process(UpdateCartItem(owner_id=user_id, product_id=product_id, quantity=body.quantity))
    return _cart_response(user_id)


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: str, user_id: str = Depends(current_user_id)) -> CartResponse:
    _process(RemoveCartItem(owner_id=user_id, product_id=product_id))
    return _cart_response(user_id)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(user_id: str = Depends(current_user_id)) -> CartResponse:
    _process(ClearCart(owner_id=user_id))
    return _cart_response(user_id)


# ---------------------------------------------------------------------------
# Guest Cart Router
# ---------------------------------------------------------------------------
guest_cart_router = APIRouter(prefix="/guest-cart", tags=["guest-cart"])
GUEST = CartKind.GUEST.value


@guest_cart_router.get("", response_model=CartResponse)
async def get_guest_cart(owner_id: str = Depends(guest_id)) -> CartResponse:
    _process(GetOrCreateCart(owner_id=owner_id, kind=GUEST))
    return _cart_response(owner_id, GUEST)


@guest_cart_router.get("/count", response_model=CountResponse)
async def get_guest_cart_count(owner_id: str = Depends(guest_id)) -> CountResponse:
    return CountResponse(count=item_count(owner_id, kind=GUEST))


@guest_cart_router.post("/add", status_code=201, response_model=CartResponse)
async def add_to_guest_cart(body: AddToCartRequest, owner_id: str = Depends(guest_id)) -> CartResponse:
    _process(
        AddCartItem(
            owner_id=owner_id,
            kind=GUEST,
            product_id=body.product_id,
            quantity=body.quantity,
        )
    )
    return _cart_response(owner_id, GUEST)


@guest_cart_router.patch("/items/{product_id}", response_model=CartResponse)
async def update_guest_cart_item(
    product_id: str, body: UpdateCartItemRequest, owner_id: str = Depends(guest_id)
) -> CartResponse:
    _process(UpdateCartItem(owner_id=owner_id, kind=GUEST, product_id=product_id, quantity=body.quantity))
    return _cart_response(owner_id, GUEST)


@guest_cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_guest_cart_item(product_id: str, owner_id: str = Depends(guest_id)) -> CartResponse:
    _process(RemoveCartItem(owner_id=owner_id, kind=GUEST, product_id=product_id))
    return _cart_response(owner_id, GUEST)


@guest_cart_router.delete("", response_model=CartResponse)
async def clear_guest_cart(owner_id: str = Depends(guest_id)) -> CartResponse:
    _process(ClearCart(owner_id=owner_id, kind=GUEST))
    return _cart_response(owner_id, GUEST)


@guest_cart_router.post("/merge", response_model=CartResponse)
async def merge_guest_cart(
    user_id: str = Depends(current_user_id),
    x_guest_id: str = Header(default=""),
) -> CartResponse:
    """Fold the guest cart into the authenticated user's cart."""
    if not x_guest_id:
        raise BadRequest("Guest cart is empty or not found", field="guest_id")
    _process(MergeGuestCart(guest_id=require_guest_id(x_guest_id), user_id=user_id))
    return _cart_response(user_id)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/checkout", status_code=201, response_model=OrderResponse)
async def checkout(body: CheckoutRequest, user_id: str = Depends(current_user_id)) -> OrderResponse:
    order_id = _process(
        PlaceOrder(
            owner_id=user_id,
            shipping_address=body.shipping_address.model_dump_json(),
            payment_method=body.payment_method,
            notes=body.notes,
        )
    )
    return OrderResponse.from_order(find_by_id(order_id))


@order_router.post("/guest-checkout", status_code=201, response_model=GuestCheckoutResponse)
async def guest_checkout(body: GuestCheckoutRequest, x_guest_id: str = Header(default="")) -> GuestCheckoutResponse:
    if not x_guest_id:
        raise BadRequest("Guest cart not found. Please add items to cart first.", field="guest_id")

    result = _process(
        GuestCheckout(
            guest_id=require_guest_id(x_guest_id),
            shipping_address=body.shipping_address.model_dump_json(),
            payment_method=body.payment_method,
            notes=body.notes,
            create_account=body.create_account,
            username=body.username,
            password=body.password,
        )
    )
    return GuestCheckoutResponse(
        order=OrderResponse.from_order(find_by_id(result["order_id"])),
        user_id=result["user_id"],
    )


@order_router.get("/my-orders", response_model=OrderPageResponse)
async def my_orders(
    query: OrderQuery = Depends(order_query), user_id: str = Depends(current_user_id)
) -> OrderPageResponse:
    return OrderPageResponse.from_page(list_by_owner(user_id, query))


@order_router.get("/my-orders/stats", response_model=OrderStatsResponse)
async def my_order_stats(user_id: str = Depends(current_user_id)) -> OrderStatsResponse:
    return OrderStatsResponse.from_stats(order_stats(owner_id=user_id))


@order_router.get("/my-orders/{order_id}", response_model=OrderResponse)
async def my_order(order_id: str, user_id: str = Depends(current_user_id)) -> OrderResponse:
    return OrderResponse.from_order(find_by_id(order_id, owner_id=user_id))


@order_router.patch("/my-orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_my_order(order_id: str, user_id: str = Depends(current_user_id)) -> OrderResponse:
    _process(CancelOrder(order_id=order_id, owner_id=user_id))
    return OrderResponse.from_order(find_by_id(order_id))


# Admin
@order_router.get("", response_model=OrderPageResponse)
async def all_orders(query: OrderQuery = Depends(order_query), _: str = Depends(require_admin)) -> OrderPageResponse:
    return OrderPageResponse.from_page(list_all(query))


@order_router.get("/stats/overview", response_model=OrderStatsResponse)
async def stats_overview(_: str = Depends(require_admin)) -> OrderStatsResponse:
    return OrderStatsResponse.from_stats(order_stats())


@order_router.get("/number/{order_number}", response_model=OrderResponse)
async def order_by_number(order_number: str, _: str = Depends(require_admin)) -> OrderResponse:
    return OrderResponse.from_order(find_by_order_number(order_number))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_by_id(order_id: str, _: str = Depends(require_admin)) -> OrderResponse:
    return OrderResponse.from_order(find_by_id(order_id))


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, _: str = Depends(require_admin)
) -> OrderResponse:
    _process(
        UpdateOrderStatus(
            order_id=order_id,
            status=body.status,
            payment_status=body.payment_status,
            notes=body.notes,
            force=body.force,
        )
    )
    return OrderResponse.from_order(find_by_id(order_id))
