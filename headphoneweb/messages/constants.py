from headphoneweb.common.logging_setup import get_logger

logger = get_logger("headphoneweb.messages")

INVALID_STATUS = "Invalid status value."
MESSAGE_NOT_FOUND = "Message not found"
