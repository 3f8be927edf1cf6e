from fastapi import APIRouter
from headphoneweb.api import api_prefix
from headphoneweb.auth.routes import admin_auth_router, site_auth_router
from headphoneweb.cart.routes import carts_router
from headphoneweb.common.routes import home_router
from headphoneweb.messages.routes import contact_router, messages_admin_router
from headphoneweb.orders.routes import orders_router
from headphoneweb.products.routes import prods_public_router


public_routers = APIRouter(prefix=api_prefix)

public_routers.include_router(site_auth_router, tags=["site-auth"])
public_routers.include_router(prods_public_router, prefix="/products", tags=["products"])
public_routers.include_router(carts_router, prefix="/cart", tags=["cart"])
public_routers.include_router(orders_router, tags=["orders"])
public_routers.include_router(contact_router, tags=["contact"])
public_routers.include_router(home_router, tags=["home"])

#--------------------------------------------------------------------------------------------------------

admin_routers = APIRouter(prefix=f"{api_prefix}/admin")

admin_routers.include_router(admin_auth_router, tags=["admin-auth"])
admin_routers.include_router(messages_admin_router, prefix="/messages", tags=["messages-admin"])
