from headphoneweb.common.logging_setup import get_logger

logger = get_logger("headphoneweb.middlewares")

PASSWORD_PAGE = "/enter-password"

ADMIN_PREFIX = "/admin"
ADMIN_LOGIN_PAGE = "/admin/login"
ADMIN_DASHBOARD_PAGE = "/admin/dashboard"

ADMIN_API_PREFIX = "/api/admin"

# reachable without a site session
SITE_PUBLIC_PATHS = (
    PASSWORD_PAGE,
    "/api/verify-password",
    "/api/admin/login",
    "/api/health",
    "/favicon.ico",
)
STATIC_PREFIXES = ("/static/", "/_next/", "/images/")

# admin api endpoints that do not need an admin session
ADMIN_API_PUBLIC_PATHS = ("/api/admin/login", "/api/admin/logout")

# payment provider callbacks arrive without any browser cookies
WEBHOOK_BYPASS_PATHS = ("/api/stripe/webhook",)
