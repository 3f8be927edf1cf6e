from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CheckoutItemIn(BaseModel):
    product_id: Optional[int] = None
    name: Optional[str] = None
    price: Optional[Decimal] = None
    quantity: Optional[int] = None


class PaymentIntentIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: Optional[List[CheckoutItemIn]] = None
    email: Optional[str] = None
    # intent of an earlier, abandoned checkout attempt for the same cart
    previous_intent_id: Optional[str] = Field(default=None, alias="paymentIntentId")
