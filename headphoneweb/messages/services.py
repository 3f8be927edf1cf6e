from typing import Optional
from fastapi import HTTPException, status
from headphoneweb.db.schema import MessageStatus
from headphoneweb.messages.constants import INVALID_STATUS, MESSAGE_NOT_FOUND, logger
from headphoneweb.messages.repository import get_message_for_update, save_response, set_message_status

VALID_STATUSES = {s.value for s in MessageStatus}


def parse_status(value: Optional[str]) -> str:
    if not value or value not in VALID_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_STATUS)
    return value


async def change_message_status(session, message_id: int, new_status: str) -> dict:
    """UNREAD and READ may move to any label; RESPONDED is terminal."""
    current = await get_message_for_update(session, message_id)
    if current is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MESSAGE_NOT_FOUND)

    if current["status"] == MessageStatus.RESPONDED.value and new_status != MessageStatus.RESPONDED.value:
        logger.info("message.status.locked", extra={"message_id": message_id, "requested": new_status})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Responded messages cannot change status")

    updated = await set_message_status(session, message_id, new_status)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MESSAGE_NOT_FOUND)
    return updated


async def respond_to_message(session, notifier, message_id: int, response_text: str) -> dict:
    current = await get_message_for_update(session, message_id)
    if current is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MESSAGE_NOT_FOUND)

    if current["admin_response"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message already has a response")

    await notifier.notify_response(current, response_text)
    return await save_response(session, message_id, response_text)
