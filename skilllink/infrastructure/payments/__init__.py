from .flutterwave import (
    FlutterwaveClient, PaymentGatewayError, get_payment_gateway, verify_webhook_signature
)

__all__ = ["FlutterwaveClient", "PaymentGatewayError", "get_payment_gateway", "verify_webhook_signature"]
