"""Storefront FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.domain import ordering  # noqa: E402
from payments.domain import payments  # noqa: E402

from shared.http import register_error_handlers
from shared.logging import add_context, clear_context

ordering.init()
payments.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/cart": ordering,
    "/guest-cart": ordering,
    "/orders": ordering,
    "/payments": payments,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Carts, checkout, orders and payments",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Guest-ID"],
)

register_error_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    clear_context()
    add_context(method=request.method, path=request.url.path)

    domain = _resolve_domain(request.url.path)
    if domain is not None:
        add_context(domain=domain.name)
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match: pass through (health check, docs)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from ordering.api.routes import cart_router, guest_cart_router, order_router  # noqa: E402
from payments.api.routes import payment_router  # noqa: E402

app.include_router(cart_router)
app.include_router(guest_cart_router)
app.include_router(order_router)
app.include_router(payment_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "ordering": {"name": ordering.name},
                "payments": {"name": payments.name},
            },
        }
    )
