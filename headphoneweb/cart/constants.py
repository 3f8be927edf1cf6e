from headphoneweb.common.logging_setup import get_logger

logger = get_logger("headphoneweb.cart")

ITEM_NOT_OWNED = "Cart item not found or doesn't belong to session"
