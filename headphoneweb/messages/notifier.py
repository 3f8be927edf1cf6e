from fastapi import Request
from headphoneweb.messages.constants import logger


class LogNotifier:
    """Customer notification sink. Only records the outgoing reply in the logs."""

    async def notify_response(self, message: dict, response_text: str) -> None:
        logger.info(
            "message.response.notified",
            extra={
                "message_id": message["message_id"],
                "to": message["email"],
                "response_length": len(response_text),
            },
        )


def get_notifier(request: Request):
    return request.app.state.notifier
