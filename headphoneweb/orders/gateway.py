import json
from typing import Any, Dict, Optional
import stripe
from fastapi import Request
from headphoneweb.common.custom_exceptions import PaymentProviderError
from headphoneweb.orders.constants import logger


def _intent_to_dict(intent) -> Dict[str, Any]:
    return {
        "id": intent.get("id"),
        "client_secret": intent.get("client_secret"),
        "status": intent.get("status"),
        "amount": intent.get("amount"),
        "amount_received": intent.get("amount_received"),
        "currency": intent.get("currency"),
        "metadata": dict(intent.get("metadata") or {}),
        "receipt_email": intent.get("receipt_email"),
    }


class StripeGateway:
    """Thin async wrapper over the Stripe payment intents API.

    Every provider failure surfaces as PaymentProviderError so handlers never
    depend on stripe's exception hierarchy.
    """

    def __init__(self, secret_key: str, webhook_secret: str = "", currency: str = "usd"):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.currency = currency

    async def create_payment_intent(self, amount: int, metadata: Dict[str, str],
                                    receipt_email: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "amount": amount,
            "currency": self.currency,
            "automatic_payment_methods": {"enabled": True},
            "metadata": metadata,
        }
        if receipt_email:
            params["receipt_email"] = receipt_email
        try:
            intent = await stripe.PaymentIntent.create_async(api_key=self.secret_key, **params)
        except stripe.StripeError as e:
            logger.warning("stripe.intent.create_failed", extra={"error": str(e), "amount": amount})
            raise PaymentProviderError(e.user_message or str(e)) from e
        return _intent_to_dict(intent)

    async def retrieve_payment_intent(self, intent_id: str) -> Dict[str, Any]:
        try:
            intent = await stripe.PaymentIntent.retrieve_async(intent_id, api_key=self.secret_key)
        except stripe.InvalidRequestError as e:
            missing = getattr(e, "code", None) == "resource_missing"
            raise PaymentProviderError(str(e), not_found=missing) from e
        except stripe.StripeError as e:
            logger.warning("stripe.intent.retrieve_failed", extra={"error": str(e), "intent_id": intent_id})
            raise PaymentProviderError(str(e)) from e
        return _intent_to_dict(intent)

    async def cancel_payment_intent(self, intent_id: str) -> Dict[str, Any]:
        try:
            intent = await stripe.PaymentIntent.cancel_async(intent_id, api_key=self.secret_key)
        except stripe.StripeError as e:
            logger.warning("stripe.intent.cancel_failed", extra={"error": str(e), "intent_id": intent_id})
            raise PaymentProviderError(e.user_message or str(e)) from e
        return _intent_to_dict(intent)

    def construct_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """Verify the webhook signature and return the decoded event."""
        text = payload.decode("utf-8")
        try:
            stripe.WebhookSignature.verify_header(text, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise PaymentProviderError("Invalid signature") from e
        try:
            return json.loads(text)
        except ValueError as e:
            raise PaymentProviderError("Invalid payload") from e


def build_gateway(settings) -> StripeGateway:
    return StripeGateway(settings.STRIPE_SECRET_KEY, settings.STRIPE_WEBHOOK_SECRET, settings.STRIPE_CURRENCY)


def get_payment_gateway(request: Request):
    return request.app.state.payment_gateway
