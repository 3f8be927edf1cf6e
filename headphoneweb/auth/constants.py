from headphoneweb.common.logging_setup import get_logger

logger = get_logger("headphoneweb.auth")

SITE_COOKIE_NAME = "site_session"

ADMIN_COOKIE_NAME = "admin_session"

SITE_SCOPE = "site"

ADMIN_SCOPE = "admin"

INVALID_CREDENTIALS = "Invalid credentials"
