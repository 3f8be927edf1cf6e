from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from headphoneweb.common.utils import success_response
from headphoneweb.db.dependencies import get_session
from headphoneweb.products.models import StockCheckIn
from headphoneweb.products.repository import fetch_in_stock_products, fetch_product
from headphoneweb.products.services import check_product_stock

prods_public_router = APIRouter()


@prods_public_router.get("")
async def get_products(session: AsyncSession = Depends(get_session)):
    products = await fetch_in_stock_products(session)
    return success_response({"products": products}, status_code=status.HTTP_200_OK)


@prods_public_router.get("/{product_id}")
async def get_product_details(product_id: int, session: AsyncSession = Depends(get_session)):
    product = await fetch_product(session, product_id)
    return success_response({"product": product})


@prods_public_router.post("/check-stock")
async def check_stock(payload: StockCheckIn, session: AsyncSession = Depends(get_session)):
    available = await check_product_stock(session, payload.id, payload.quantity)
    return success_response({"available": available})
