from headphoneweb.common.logging_setup import get_logger

logger = get_logger("headphoneweb.orders")

# stripe limits metadata values to 500 characters
METADATA_VALUE_LIMIT = 500

INTENT_SUCCEEDED = "succeeded"
INTENT_CANCELED = "canceled"

EVENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_INTENT_CANCELED = "payment_intent.canceled"
