from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from headphoneweb.common.custom_exceptions import PaymentProviderError
from headphoneweb.common.utils import success_response
from headphoneweb.db.dependencies import get_session
from headphoneweb.orders.constants import logger
from headphoneweb.orders.gateway import get_payment_gateway
from headphoneweb.orders.models import PaymentIntentIn
from headphoneweb.orders.services import create_checkout_order, load_order_details, reconcile_order

orders_router = APIRouter()


@orders_router.post("/stripe/payment-intent")
async def create_payment_intent(payload: PaymentIntentIn,
                                session: AsyncSession = Depends(get_session),
                                gateway=Depends(get_payment_gateway)):
    result = await create_checkout_order(session, gateway, payload.items, payload.email,
                                         previous_intent_id=payload.previous_intent_id)
    return success_response(result)


@orders_router.get("/payment-verify")
async def verify_payment(payment_intent: Optional[str] = Query(None),
                         session: AsyncSession = Depends(get_session),
                         gateway=Depends(get_payment_gateway)):
    if not payment_intent:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment intent ID is required")

    try:
        intent = await gateway.retrieve_payment_intent(payment_intent)
    except PaymentProviderError as e:
        if e.not_found:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment intent not found") from e
        logger.error("payment.verify.provider_error", extra={"payment_intent_id": payment_intent, "error": e.message})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Failed to verify payment") from e

    order = await reconcile_order(session, intent)
    if order is None:
        logger.warning("payment.verify.order_missing", extra={"payment_intent_id": payment_intent})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

    details = await load_order_details(session, order, intent.get("status"))
    return success_response({"order": details})
