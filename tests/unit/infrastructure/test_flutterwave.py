"""
Unit tests for the Flutterwave client.
"""

import pytest
import requests
from unittest.mock import Mock

from skilllink.infrastructure.payments.flutterwave import (
    FlutterwaveClient, PaymentGatewayError, verify_webhook_signature
)


def provider_response(status_code=200, body=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = body or {}
    return response


def create(client):
    return client.create_payment(
        tx_ref="job-1-1700000000000",
        amount_minor_units=150050,
        currency="NGN",
        customer_email="hire@widgets.ng",
        customer_name="Lagos Widgets",
        description="Escrow for contract c-1",
        meta={"contract_id": "c-1"},
    )


class TestFlutterwaveClient:
    """Test cases for FlutterwaveClient."""

    def setup_method(self):
        self.session = Mock(spec=requests.Session)
        self.client = FlutterwaveClient(
            secret_key="FLWSECK_TEST-abc",
            base_url="https://api.flutterwave.test/v3/",
            redirect_url="https://skilllink.test/payments/done",
            session=self.session,
        )

    def test_create_payment(self):
        """Test the checkout request shape and the returned link."""
        self.session.post.return_value = provider_response(body={
            "status": "success",
            "data": {"link": "https://checkout.flutterwave.test/abc", "id": 4411},
        })

        result = create(self.client)

        assert result == {"payment_link": "https://checkout.flutterwave.test/abc", "flutterwave_id": 4411}
        args, kwargs = self.session.post.call_args
        assert args[0] == "https://api.flutterwave.test/v3/payments"
        assert kwargs["json"]["amount"] == 1500.5
        assert kwargs["json"]["customer"] == {"email": "hire@widgets.ng", "name": "Lagos Widgets"}
        assert kwargs["json"]["redirect_url"] == "https://skilllink.test/payments/done"
        assert kwargs["headers"]["Authorization"] == "Bearer FLWSECK_TEST-abc"

    def test_provider_rejection(self):
        self.session.post.return_value = provider_response(400, {"status": "error", "message": "Invalid currency"})

        with pytest.raises(PaymentGatewayError, match="Invalid currency") as excinfo:
            create(self.client)
        assert excinfo.value.code == "PAYMENT_PROVIDER_ERROR"

    def test_unsuccessful_status_in_ok_response(self):
        self.session.post.return_value = provider_response(200, {"status": "error"})

        with pytest.raises(PaymentGatewayError, match="Failed to initialize payment"):
            create(self.client)

    def test_provider_unreachable(self):
        self.session.post.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(PaymentGatewayError, match="unavailable"):
            create(self.client)


class TestWebhookSignature:

    def test_matching_hash(self):
        assert verify_webhook_signature("s3cret", "s3cret") is True

    def test_mismatch_or_missing(self):
        assert verify_webhook_signature("wrong", "s3cret") is False
        assert verify_webhook_signature(None, "s3cret") is False
        assert verify_webhook_signature("s3cret", None) is False
