"""HTTP plumbing shared by the routers: error mapping, identity headers and
the camelCase response base model."""

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.integrations.fastapi import register_exception_handlers
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shared.errors import BadRequest, Conflict, Forbidden, NotFound

USER_HEADER = "X-User-ID"
ROLE_HEADER = "X-User-Role"
ADMIN_ROLE = "admin"


class ApiModel(BaseModel):
    """Base for request and response bodies. Serialized in camelCase,
    accepted in either camelCase or snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
async def _bad_request(request: Request, exc: BadRequest) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.messages})


async def _not_found(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": exc.message})


async def _forbidden(request: Request, exc: Forbidden) -> JSONResponse:
    return JSONResponse(status_code=403, content={"error": exc.message})


async def _conflict(request: Request, exc: Exception) -> JSONResponse:
    message = getattr(exc, "message", None) or "Resource was modified concurrently, retry the request"
    return JSONResponse(status_code=409, content={"error": message})


def register_error_handlers(app: FastAPI) -> None:
    """Install protean's handlers plus the storefront-specific categories."""
    register_exception_handlers(app)
    app.add_exception_handler(BadRequest, _bad_request)
    app.add_exception_handler(NotFound, _not_found)
    app.add_exception_handler(Forbidden, _forbidden)
    app.add_exception_handler(Conflict, _conflict)
    app.add_exception_handler(ExpectedVersionError, _conflict)


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------
def current_user_id(x_user_id: str = Header(default="")) -> str:
    """Authenticated user id, as forwarded by the gateway in front of us."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id


def require_admin(
    x_user_id: str = Header(default=""),
    x_user_role: str = Header(default=""),
) -> str:
    user_id = current_user_id(x_user_id)
    if x_user_role.lower() != ADMIN_ROLE:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user_id
