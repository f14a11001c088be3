from pydantic import BaseModel
from decimal import Decimal
from datetime import datetime

class SettlementCreate(BaseModel):
    from_user: str
    to_user: str
    amount: Decimal
    payment_method: str | None = None
    notes: str | None = None

class SettlementOut(BaseModel):
    id: str
    group_id: str
    from_user: str
    to_user: str
    amount: Decimal
    payment_method: str | None = None
    notes: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
