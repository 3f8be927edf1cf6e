from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from headphoneweb.common.utils import success_response
from headphoneweb.db.dependencies import get_session
from headphoneweb.messages.constants import logger
from headphoneweb.messages.dependencies import normalize_email_address
from headphoneweb.messages.models import ContactIn, MessageResponseIn, MessageStatusIn
from headphoneweb.messages.notifier import get_notifier
from headphoneweb.messages.repository import insert_message, list_messages
from headphoneweb.messages.services import change_message_status, parse_status, respond_to_message

contact_router = APIRouter()
messages_admin_router = APIRouter()


@contact_router.post("/contact")
async def submit_contact(payload: ContactIn, session: AsyncSession = Depends(get_session)):
    if not payload.email or not payload.message or not payload.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email and message are required")

    email = normalize_email_address(payload.email)
    name = payload.name.strip() if payload.name else None

    message_id = await insert_message(session, name, email, payload.message)
    await session.commit()

    logger.info("contact.message.received", extra={"message_id": message_id})
    return success_response({"messageId": message_id}, status_code=status.HTTP_201_CREATED)


@messages_admin_router.get("")
async def get_messages(request: Request, status_filter: Optional[str] = Query(None, alias="status"),
                       session: AsyncSession = Depends(get_session)):
    if status_filter:
        status_filter = parse_status(status_filter)
    messages = await list_messages(session, status_filter)
    logger.debug("admin.messages.listed", extra={"admin_id": request.state.admin_id, "count": len(messages)})
    return success_response({"messages": messages})


@messages_admin_router.patch("/{message_id}/status")
async def update_message_status(request: Request, message_id: int, payload: MessageStatusIn,
                                session: AsyncSession = Depends(get_session)):
    new_status = parse_status(payload.status)

    updated = await change_message_status(session, message_id, new_status)
    await session.commit()

    logger.info("admin.message.status_changed",
                extra={"admin_id": request.state.admin_id, "message_id": message_id, "status": new_status})
    return success_response({"message": updated})


@messages_admin_router.post("/{message_id}/respond")
async def respond_message(request: Request, message_id: int, payload: MessageResponseIn,
                          session: AsyncSession = Depends(get_session),
                          notifier=Depends(get_notifier)):
    """Record the admin's reply and mark the message RESPONDED.

    A message that is gone by the time the row lock is taken answers 404
    "Message not found" rather than a generic 500, same as the status route.
    """
    if not payload.response or not payload.response.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Response is required")

    updated = await respond_to_message(session, notifier, message_id, payload.response)
    await session.commit()

    logger.info("admin.message.responded", extra={"admin_id": request.state.admin_id, "message_id": message_id})
    return success_response({"message": updated})
