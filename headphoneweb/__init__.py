from headphoneweb.common.logging_setup import get_logger

logger = get_logger("headphoneweb.app")
