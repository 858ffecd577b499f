# payments/services/stripe_client.py

"""
STRIPE REST CLIENT (PAYOUT PROCESSOR BOUNDARY)

Thin urllib client for the handful of Stripe endpoints the economy uses:
- /v1/accounts            Connect Express accounts (creator payouts)
- /v1/account_links       hosted onboarding links
- /v1/transfers           platform -> connected account transfers
- /v1/payment_intents     coin purchases

Rules:
- Stripe speaks application/x-www-form-urlencoded with bracketed keys
  (metadata[user_id]=42); responses are JSON.
- Every failure surfaces as PaymentProcessorError (never swallowed).
- Secret keys are never logged.
- Webhooks are verified with the Stripe-Signature scheme:
      HMAC-SHA256(secret, f"{t}.{raw_body}") == v1, within tolerance
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from payments.services.exceptions import PaymentProcessorError

logger = logging.getLogger(__name__)

STRIPE_API_BASE = "https://api.stripe.com"
DEFAULT_TIMEOUT_SECONDS = 20
DEFAULT_WEBHOOK_TOLERANCE_SECONDS = 300


def _flatten(params: dict, prefix: str = "") -> list[tuple[str, str]]:
    out: list[tuple[str, str]] = []
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            out.extend(_flatten(value, name))
        elif isinstance(value, (list, tuple)):
            for i, item in enumerate(value):
                if isinstance(item, dict):
                    out.extend(_flatten(item, f"{name}[{i}]"))
                else:
                    out.append((f"{name}[{i}]", str(item)))
        elif isinstance(value, bool):
            out.append((name, "true" if value else "false"))
        else:
            out.append((name, str(value)))
    return out


def _safe_preview(text: str, limit: int = 500) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " …(truncated)"


class StripeClient:
    def __init__(
        self,
        *,
        secret_key: str,
        webhook_secret: str = "",
        connect_webhook_secret: str = "",
        api_base: str = STRIPE_API_BASE,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        webhook_tolerance: int = DEFAULT_WEBHOOK_TOLERANCE_SECONDS,
    ):
        self.secret_key = (secret_key or "").strip()
        self.webhook_secret = (webhook_secret or "").strip()
        self.connect_webhook_secret = (connect_webhook_secret or "").strip()
        self.api_base = api_base.rstrip("/")
        self.timeout = int(timeout)
        self.webhook_tolerance = int(webhook_tolerance)

    # ============================================================
    # TRANSPORT
    # ============================================================

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        idempotency_key: str | None = None,
    ) -> dict[str, Any]:
        if not self.secret_key:
            raise PaymentProcessorError(
                "STRIPE_SECRET_KEY is not configured."
            )

        url = f"{self.api_base}{path}"
        data = None
        if params and method in ("POST", "DELETE"):
            data = urlencode(_flatten(params)).encode("utf-8")
        elif params:
            url = f"{url}?{urlencode(_flatten(params))}"

        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        req = Request(url, data=data, headers=headers, method=method)

        try:
            with urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            raw = ""
            try:
                raw = e.read().decode("utf-8", errors="replace")
            except OSError:
                raw = ""
            message = _safe_preview(raw) or str(e)
            try:
                message = json.loads(raw)["error"]["message"]
            except (ValueError, KeyError, TypeError):
                pass
            logger.warning(
                "stripe request rejected",
                extra={"path": path, "status": e.code},
            )
            raise PaymentProcessorError(f"Stripe HTTPError: {e.code} {message}") from e
        except URLError as e:
            raise PaymentProcessorError(f"Stripe URLError: {e}") from e
        except TimeoutError as e:
            raise PaymentProcessorError("Stripe request timed out") from e

        try:
            parsed = json.loads(raw)
        except ValueError as e:
            raise PaymentProcessorError(
                f"Stripe returned non-JSON: {_safe_preview(raw)}"
            ) from e

        if not isinstance(parsed, dict):
            raise PaymentProcessorError("Stripe returned an unexpected payload")
        return parsed

    # ============================================================
    # CONNECT
    # ============================================================

    def create_connected_account(self, *, user_id: str, email: str = "", country: str = "US") -> dict:
        return self._request_json(
            "POST",
            "/v1/accounts",
            params={
                "type": "express",
                "country": country,
                "email": email or None,
                "capabilities": {"transfers": {"requested": True}},
                "metadata": {"user_id": user_id},
            },
            idempotency_key=f"connect-account:{user_id}",
        )

    def create_account_link(self, *, account_id: str, return_url: str, refresh_url: str) -> dict:
        return self._request_json(
            "POST",
            "/v1/account_links",
            params={
                "account": account_id,
                "return_url": return_url,
                "refresh_url": refresh_url,
                "type": "account_onboarding",
            },
        )

    def retrieve_account(self, account_id: str) -> dict:
        return self._request_json("GET", f"/v1/accounts/{account_id}")

    def create_transfer(
        self,
        *,
        amount_cents: int,
        currency: str,
        destination: str,
        idempotency_key: str,
        metadata: dict | None = None,
    ) -> dict:
        return self._request_json(
            "POST",
            "/v1/transfers",
            params={
                "amount": int(amount_cents),
                "currency": currency.lower(),
                "destination": destination,
                "metadata": metadata or {},
            },
            idempotency_key=idempotency_key,
        )

    # ============================================================
    # PAYMENTS
    # ============================================================

    def create_payment_intent(
        self,
        *,
        amount_cents: int,
        currency: str,
        metadata: dict | None = None,
        idempotency_key: str | None = None,
    ) -> dict:
        return self._request_json(
            "POST",
            "/v1/payment_intents",
            params={
                "amount": int(amount_cents),
                "currency": currency.lower(),
                "automatic_payment_methods": {"enabled": True},
                "metadata": metadata or {},
            },
            idempotency_key=idempotency_key,
        )

    # ============================================================
    # WEBHOOKS
    # ============================================================

    def verify_signature(self, *, raw_body: bytes, header: str | None, secret: str | None = None, now: int | None = None) -> bool:
        secret = (secret if secret is not None else self.webhook_secret) or ""
        if not secret or not header:
            return False

        timestamp = None
        signatures: list[str] = []
        for part in str(header).split(","):
            key, _, value = part.strip().partition("=")
            if key == "t":
                timestamp = value
            elif key == "v1":
                signatures.append(value)

        if not timestamp or not signatures:
            return False

        try:
            ts = int(timestamp)
        except ValueError:
            return False

        current = int(now if now is not None else time.time())
        if abs(current - ts) > self.webhook_tolerance:
            return False

        signed_payload = timestamp.encode("utf-8") + b"." + (raw_body or b"")
        expected = hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()
        return any(hmac.compare_digest(expected, sig) for sig in signatures)

    @staticmethod
    def sign(*, raw_body: bytes, secret: str, timestamp: int) -> str:
        """Build a Stripe-Signature header value (used by tests and local tooling)."""
        signed_payload = str(timestamp).encode("utf-8") + b"." + (raw_body or b"")
        digest = hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()
        return f"t={timestamp},v1={digest}"
