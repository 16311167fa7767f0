"""Guest identifiers.

Guests are tracked by an opaque ``guest_<uuid4>`` id that travels in the
``X-Guest-ID`` request and response header. Anything else in that header
is rejected, so a guest request can never address a user's cart.
"""

from uuid import uuid4

from shared.errors import BadRequest

GUEST_HEADER = "X-Guest-ID"
GUEST_PREFIX = "guest_"


def generate_guest_id() -> str:
    return f"{GUEST_PREFIX}{uuid4()}"


def is_guest_id(value) -> bool:
    return bool(value) and str(value).startswith(GUEST_PREFIX)


def require_guest_id(value) -> str:
    if not is_guest_id(value):
        raise BadRequest("Invalid guest id", field="guest_id")
    return str(value)
