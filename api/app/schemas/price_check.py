"""
Price Check Schemas
"""
from pydantic import BaseModel
from typing import Optional, List
from decimal import Decimal
from uuid import UUID


class PriceCheckResult(BaseModel):
    """Outcome of checking one tracked flight"""
    flight_id: UUID
    route: str
    previous_price: Optional[Decimal] = None
    current_price: Optional[Decimal] = None
    price_drop: Decimal = Decimal("0")
    price_drop_percent: Decimal = Decimal("0")
    notification_sent: bool = False
    notification_type: Optional[str] = None
    suppressed: bool = False
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class PriceCheckSummary(BaseModel):
    """Outcome of one batch run"""
    success: bool
    checked: int
    notifications: int
    results: List[PriceCheckResult] = []

    @classmethod
    def skipped(cls) -> "PriceCheckSummary":
        return cls(success=False, checked=0, notifications=0, results=[])
