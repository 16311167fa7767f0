"""PayPal adapter, talking to the REST API with ``requests``.

Uses the Orders v2 API with ``intent=CAPTURE``: the buyer approves the
order at the returned approval URL, and confirmation captures it. Access
tokens come from the client-credentials grant and are cached until
shortly before they expire.
"""

import time

import requests
import structlog

from payments.gateway.port import (
    GatewayError,
    PaymentProvider,
    PaymentRequest,
    ProviderOutcome,
    ProviderPayment,
    RefundRequest,
    RefundResult,
)
from shared.money import format_amount

logger = structlog.get_logger(__name__)

SANDBOX_BASE_URL = "https://api-m.sandbox.paypal.com"
LIVE_BASE_URL = "https://api-m.paypal.com"

# Refresh tokens this many seconds before PayPal says they expire
TOKEN_EXPIRY_MARGIN = 60


def _require(body: dict, key: str, context: str):
    value = body.get(key)
    if not value:
        raise GatewayError(f"{context}: response is missing '{key}'")
    return value


class PayPalProvider(PaymentProvider):
    method = "paypal"
    label = "PayPal"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str = SANDBOX_BASE_URL,
        frontend_url: str = "http://localhost:3000",
        brand_name: str = "Storefront",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.frontend_url = frontend_url.rstrip("/")
        self.brand_name = brand_name
        self.timeout = timeout
        self.session = session or requests.Session()
        self._token: str | None = None
        self._token_expires_at = 0.0

    # -------------------------------------------------------------------
    # HTTP plumbing
    # -------------------------------------------------------------------
    def access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        try:
            response = self.session.post(
                f"{self.base_url}/v1/oauth2/token",
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise GatewayError(f"PayPal authentication failed: {exc}") from exc

        if not response.ok:
            raise GatewayError(f"PayPal authentication failed: {self._error_message(response)}")

        body = self._json(response)
        self._token = _require(body, "access_token", "PayPal authentication failed")
        try:
            expires_in = int(body.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        return self._token

    def _post(self, path: str, json: dict | None = None, headers: dict | None = None) -> dict:
        request_headers = {
            "Authorization": f"Bearer {self.access_token()}",
            "Content-Type": "application/json",
        }
        request_headers.update(headers or {})

        try:
            response = self.session.post(
                f"{self.base_url}{path}",
                json=json,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise GatewayError(str(exc)) from exc

        if not response.ok:
            raise GatewayError(f"PayPal API error: {self._error_message(response)}")
        return self._json(response)

    @staticmethod
    def _json(response) -> dict:
        try:
            body = response.json()
        except ValueError as exc:
            raise GatewayError(f"PayPal returned an invalid response (HTTP {response.status_code})") from exc
        if not isinstance(body, dict):
            raise GatewayError(f"PayPal returned an invalid response (HTTP {response.status_code})")
        return body

    @staticmethod
    def _error_message(response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if not isinstance(body, dict):
            return f"HTTP {response.status_code}"
        return body.get("message") or body.get("error_description") or "Unknown error"

    # -------------------------------------------------------------------
    # Provider operations
    # -------------------------------------------------------------------
    def create(self, request: PaymentRequest) -> ProviderPayment:
        body = self._post(
            "/v2/checkout/orders",
            json={
                "intent": "CAPTURE",
                "purchase_units": [
                    {
                        "reference_id": request.order_id,
                        "custom_id": request.order_id,
                        "amount": {
                            "currency_code": request.currency.upper(),
                            "value": format_amount(request.amount),
                        },
                    }
                ],
                "application_context": {
                    "brand_name": self.brand_name,
                    "landing_page": "BILLING",
                    "user_action": "PAY_NOW",
                    "return_url": request.success_url or f"{self.frontend_url}/payment/success",
                    "cancel_url": request.cancel_url or f"{self.frontend_url}/payment/cancel",
                },
            },
            headers={"PayPal-Request-Id": request.payment_id or request.order_id},
        )

        approval_url = next(
            (
                link.get("href")
                for link in body.get("links") or []
                if isinstance(link, dict) and link.get("rel") == "approve"
            ),
            None,
        )
        if not approval_url:
            raise GatewayError("PayPal did not return an approval link")

        paypal_order_id = _require(body, "id", "PayPal order creation failed")
        logger.info("PayPal order created", paypal_order_id=paypal_order_id, order_id=request.order_id)
        return ProviderPayment(reference=paypal_order_id, approval_url=approval_url)

    def confirm(self, reference: str) -> ProviderOutcome:
        body = self._post(f"/v2/checkout/orders/{reference}/capture")

        status = body.get("status")
        if status != "COMPLETED":
            return ProviderOutcome(status="failed", failure_reason=f"PayPal order status: {status}")

        try:
            capture_id = body["purchase_units"][0]["payments"]["captures"][0]["id"]
        except (KeyError, IndexError, TypeError):
            capture_id = None
        return ProviderOutcome(status="completed", transaction_id=capture_id, capture_id=capture_id)

    def refund(self, request: RefundRequest) -> RefundResult:
        if not request.capture_id:
            raise GatewayError("PayPal capture id is missing for this payment")

        body = self._post(
            f"/v2/payments/captures/{request.capture_id}/refund",
            json={
                "amount": {
                    "currency_code": request.currency.upper(),
                    "value": format_amount(request.amount),
                }
            },
        )
        return RefundResult(refund_id=_require(body, "id", "PayPal refund failed"), status=body.get("status"))
