"""
Price Decision Rules - Turns a fresh fare into a recorded price and an optional alert

Pure functions only; persistence and delivery live in the price checker.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional

from app.schemas.flight import PriceCandidate

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

DEFAULT_DROP_THRESHOLD_PERCENT = Decimal("5")
DEFAULT_FALLBACK_MULTIPLIER = Decimal("1.2")


class NotificationType(str, Enum):
    BELOW_TARGET = "below-target"
    GENERIC_DROP = "generic-drop"
    RISE_AFTER_DROP = "rise-after-drop"


@dataclass(frozen=True)
class PriceDecision:
    """What one check observed and which alert, if any, it raises"""
    previous_price: Optional[Decimal]
    current_price: Decimal
    target_price: Decimal
    price_drop: Decimal
    price_drop_percent: Decimal
    notification_type: Optional[NotificationType]
    best_candidate: Optional[PriceCandidate] = None

    @property
    def should_notify(self) -> bool:
        return self.notification_type is not None


def resolve_current_price(
    previous_price: Optional[Decimal],
    target_price: Decimal,
    best_candidate: Optional[PriceCandidate],
    fallback_multiplier: Decimal = DEFAULT_FALLBACK_MULTIPLIER,
) -> Decimal:
    """
    Live fare if there is one, else the last known price, else a seed above target.
    """
    if best_candidate is not None:
        return Decimal(best_candidate.price).quantize(CENT, rounding=ROUND_HALF_UP)
    if previous_price is not None:
        return previous_price
    return (target_price * fallback_multiplier).quantize(CENT, rounding=ROUND_HALF_UP)


def evaluate_price_change(
    previous_price: Optional[Decimal],
    target_price: Decimal,
    best_candidate: Optional[PriceCandidate],
    drop_threshold_percent: Decimal = DEFAULT_DROP_THRESHOLD_PERCENT,
    fallback_multiplier: Decimal = DEFAULT_FALLBACK_MULTIPLIER,
) -> PriceDecision:
    """
    Apply the alert rules in priority order; the first match wins:

    1. current <= target                                  -> below-target
    2. current < previous and drop >= threshold percent   -> generic-drop
    3. current > previous and previous <= target          -> rise-after-drop

    Rules 2 and 3 need a previous price. A price that rises while it was
    already above target raises nothing.
    """
    target_price = Decimal(target_price)
    if previous_price is not None:
        previous_price = Decimal(previous_price)

    current_price = resolve_current_price(previous_price, target_price, best_candidate, fallback_multiplier)

    if previous_price is not None:
        price_drop = previous_price - current_price
    else:
        price_drop = Decimal("0")

    if previous_price:
        price_drop_percent = price_drop / previous_price * HUNDRED
    else:
        price_drop_percent = Decimal("0")

    notification_type: Optional[NotificationType] = None
    if current_price <= target_price:
        notification_type = NotificationType.BELOW_TARGET
    elif previous_price is not None and current_price < previous_price and price_drop_percent >= drop_threshold_percent:
        notification_type = NotificationType.GENERIC_DROP
    elif previous_price is not None and current_price > previous_price and previous_price <= target_price:
        notification_type = NotificationType.RISE_AFTER_DROP

    return PriceDecision(
        previous_price=previous_price,
        current_price=current_price,
        target_price=target_price,
        price_drop=price_drop,
        price_drop_percent=price_drop_percent.quantize(CENT, rounding=ROUND_HALF_UP),
        notification_type=notification_type,
        best_candidate=best_candidate,
    )


def build_notification_message(decision: PriceDecision, route: str) -> str:
    """Human readable in-app message for a decision that raised an alert"""
    current = decision.current_price
    if decision.notification_type == NotificationType.BELOW_TARGET:
        return f"Price alert! {route} is now €{current} (below your target of €{decision.target_price})"
    if decision.notification_type == NotificationType.GENERIC_DROP:
        return f"Price dropped! {route} decreased by {decision.price_drop_percent:.1f}% to €{current}"
    if decision.notification_type == NotificationType.RISE_AFTER_DROP:
        return f"Price increased! {route} rose to €{current} (was €{decision.previous_price})"
    raise ValueError("Decision raised no notification")


def notification_metadata(decision: PriceDecision) -> dict:
    """JSON-safe snapshot of the prices behind an alert"""
    def as_number(value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None

    return {
        "oldPrice": as_number(decision.previous_price),
        "newPrice": as_number(decision.current_price),
        "targetPrice": as_number(decision.target_price),
        "priceDrop": as_number(decision.price_drop),
        "priceDropPercent": as_number(decision.price_drop_percent),
        "bookingUrl": decision.best_candidate.booking_url if decision.best_candidate else None,
    }
