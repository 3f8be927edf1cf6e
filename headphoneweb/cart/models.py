from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class CartBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId")


class CartAddIn(CartBase):
    product_id: Optional[int] = Field(default=None, alias="productId")
    quantity: Optional[int] = 1


class CartUpdateIn(CartBase):
    cart_item_id: Optional[int] = Field(default=None, alias="cartItemId")
    quantity: Optional[int] = None


class CartClearIn(CartBase):
    pass
