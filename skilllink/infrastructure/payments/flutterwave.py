"""
Flutterwave payments API client.
Creates hosted checkout links for escrow deposits and checks webhook signatures.
"""

import hmac
import logging
from typing import Any, Dict, Optional

import requests

from skilllink.config import settings
from skilllink.domain.models.base import DomainException


logger = logging.getLogger(__name__)


class PaymentGatewayError(DomainException):
    """The payment provider refused or could not be reached."""

    def __init__(self, message: str):
        super().__init__(message, "PAYMENT_PROVIDER_ERROR")


class FlutterwaveClient:
    """Thin wrapper over the Flutterwave v3 REST API."""

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.flutterwave.com/v3",
        redirect_url: Optional[str] = None,
        timeout: int = 15,
        session: Optional[requests.Session] = None
    ):
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.redirect_url = redirect_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def create_payment(
        self,
        tx_ref: str,
        amount_minor_units: int,
        currency: str,
        customer_email: str,
        customer_name: str,
        description: str,
        meta: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Open a hosted checkout for a deposit.

        Returns a dict with ``payment_link`` and ``flutterwave_id``.
        Raises PaymentGatewayError when the provider does not answer with success.
        """
        payload = {
            "tx_ref": tx_ref,
            "amount": amount_minor_units / 100,
            "currency": currency,
            "redirect_url": self.redirect_url,
            "customer": {"email": customer_email, "name": customer_name},
            "customizations": {"title": "Job Payment", "description": description},
            "meta": meta or {},
        }

        try:
            response = self.session.post(
                f"{self.base_url}/payments",
                json=payload,
                headers=self._headers,
                timeout=self.timeout
            )
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error(f"Flutterwave request for {tx_ref} failed: {exc}")
            raise PaymentGatewayError("Payment provider is unavailable")

        if response.status_code >= 300 or body.get("status") != "success":
            message = body.get("message") or "Failed to initialize payment"
            logger.warning(f"Flutterwave rejected {tx_ref}: {message}")
            raise PaymentGatewayError(message)

        data = body.get("data") or {}
        return {
            "payment_link": data.get("link"),
            "flutterwave_id": data.get("id"),
        }


def verify_webhook_signature(received: Optional[str], expected: Optional[str]) -> bool:
    """Compare the ``verif-hash`` header against the configured secret hash."""
    if not received or not expected:
        return False
    return hmac.compare_digest(received, expected)


def get_payment_gateway() -> Optional[FlutterwaveClient]:
    """Configured Flutterwave client, or None when card payments are disabled."""
    if not settings.flutterwave_enabled:
        return None
    return FlutterwaveClient(
        secret_key=settings.flutterwave_secret_key,
        base_url=settings.flutterwave_base_url,
        redirect_url=settings.payment_redirect_url,
        timeout=settings.job_source_timeout_seconds,
    )
