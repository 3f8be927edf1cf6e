from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from headphoneweb import logger
from headphoneweb.api import cur_version
from headphoneweb.api.routers import admin_routers, public_routers
from headphoneweb.common.custom_exceptions import register_all_exceptions
from headphoneweb.common.logging_setup import setup_logging, stop_logging
from headphoneweb.config.settings import Settings, config_settings
from headphoneweb.db.connection import Database
from headphoneweb.messages.notifier import LogNotifier
from headphoneweb.middlewares.constants import WEBHOOK_BYPASS_PATHS
from headphoneweb.middlewares.request_gate_middleware import RequestGateMiddleware
from headphoneweb.middlewares.request_id_middleware import RequestIdMiddleware
from headphoneweb.orders.gateway import build_gateway
from headphoneweb.orders.webhooks import stripe_webhook


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.ENV, settings.SERVICE_NAME)

    app.state.db = Database(settings)
    if app.state.payment_gateway is None:
        app.state.payment_gateway = build_gateway(settings)
    app.state.notifier = LogNotifier()
    logger.info("app.startup", extra={"env": settings.ENV})

    try:
        yield
    finally:
        # new requests are no longer accepted at this point
        await app.state.db.dispose()
        logger.info("app.shutdown")
        stop_logging()


def create_app(settings: Optional[Settings] = None, payment_gateway=None) -> FastAPI:
    settings = settings or config_settings

    app = FastAPI(
        title="HeadphoneWeb",
        version=cur_version,
        lifespan=app_lifespan)

    app.state.settings = settings
    app.state.payment_gateway = payment_gateway

    app.include_router(public_routers)
    app.include_router(admin_routers)

    app.add_api_route(WEBHOOK_BYPASS_PATHS[0], stripe_webhook, methods=["POST"], name="stripe_webhook")

    app.add_middleware(RequestGateMiddleware, settings=settings)
    app.add_middleware(RequestIdMiddleware)
    register_all_exceptions(app)

    return app


app = create_app()
