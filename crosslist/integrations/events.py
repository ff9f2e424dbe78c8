"""
Events that feed the lifecycle engine from outside the sync adapters.

SaleEvent: a sale recorded against one platform (manual entry or an order
webhook). Carries what record_sale needs: where it sold, how many units and
for how much.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

class SaleEvent(BaseModel):
    platform: str
    quantity: int = Field(default=1, ge=1)
    price: Optional[float] = None
    timestamp: Optional[datetime] = None
    external_order_id: Optional[str] = None
