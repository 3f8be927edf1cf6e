from typing import List, Optional
from pydantic import BaseModel


class StockCheckIn(BaseModel):
    id: Optional[int] = None
    quantity: Optional[int] = None


class StockCheckBatchIn(BaseModel):
    items: List[StockCheckIn] = []
