from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from headphoneweb.common.custom_exceptions import PaymentProviderError
from headphoneweb.common.utils import json_ok
from headphoneweb.db.dependencies import get_session
from headphoneweb.orders.constants import EVENT_INTENT_CANCELED, EVENT_INTENT_SUCCEEDED, logger
from headphoneweb.orders.gateway import get_payment_gateway
from headphoneweb.orders.services import reconcile_order

RECONCILED_EVENTS = (EVENT_INTENT_SUCCEEDED, EVENT_INTENT_CANCELED)


async def stripe_webhook(request: Request, session: AsyncSession = Depends(get_session),
                         gateway=Depends(get_payment_gateway)):
    body = await request.body()
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No stripe signature found")

    try:
        event = gateway.construct_event(body, signature)
    except PaymentProviderError as e:
        logger.warning("stripe.webhook.rejected", extra={"error": e.message})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e

    event_type = event.get("type")
    if event_type in RECONCILED_EVENTS:
        intent = (event.get("data") or {}).get("object") or {}
        order = await reconcile_order(session, intent)
        if order is None:
            # provider retries non-2xx, an intent we never recorded will not appear later
            logger.warning("stripe.webhook.order_missing",
                           extra={"payment_intent_id": intent.get("id"), "event_type": event_type})
        else:
            logger.info("stripe.webhook.reconciled",
                        extra={"order_id": order["order_id"], "status": order["status"], "event_type": event_type})
    else:
        logger.info("stripe.webhook.ignored", extra={"event_type": event_type})

    return json_ok({"received": True, "type": event_type})
