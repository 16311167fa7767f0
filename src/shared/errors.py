"""Error taxonomy shared by the ordering and payments contexts.

Every failure the outer surfaces can see maps onto one of four HTTP
categories. The classes extend protean's exceptions so that the
FastAPI integration translates them without extra plumbing:

    BadRequest  (ValidationError)        -> 400
    NotFound    (ObjectNotFoundError)    -> 404
    Forbidden   (InvalidOperationError)  -> 403
    Conflict    (InvalidOperationError)  -> 409
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class BadRequest(ValidationError):
    """The request is malformed or not allowed in the current state."""

    field = "request"
    default_message = "Bad request"

    def __init__(self, message: str | None = None, field: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__({field or self.field: [self.message]})


class EmptyCart(BadRequest):
    field = "cart"
    default_message = "Cart is empty"


class ProductUnavailable(BadRequest):
    field = "product_id"
    default_message = "Product is not available"


class InvalidTransition(BadRequest):
    field = "status"
    default_message = "Invalid status transition"


class InvalidState(BadRequest):
    field = "status"
    default_message = "Operation not allowed in the current state"


class ProviderError(BadRequest):
    """A payment provider call failed.

    The message keeps a stable prefix naming the operation, followed by
    whatever the provider reported.
    """

    field = "payment"

    def __init__(self, prefix: str, detail: str | None = None) -> None:
        self.prefix = prefix
        self.detail = detail
        super().__init__(f"{prefix}: {detail}" if detail else prefix)


class InvalidSignature(ProviderError):
    field = "signature"


class NotFound(ObjectNotFoundError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class Forbidden(InvalidOperationError):
    status_code = 403

    def __init__(self, message: str = "Access denied") -> None:
        self.message = message
        super().__init__(message)


class Conflict(InvalidOperationError):
    status_code = 409

    def __init__(self, message: str = "Conflicting update") -> None:
        self.message = message
        super().__init__(message)
