"""Change detection between an item's stored state and a fresh snapshot.

``evaluate`` is a pure function: it reads no clock, touches no database
and raises nothing for missing data. Both the scheduled cycle and the
manual refresh route call it, so they always agree on which events fire.

Rules:
- ``is_available`` and ``last_checked_at`` are always patched.
- A snapshot price updates ``current_price`` and widens the lowest/highest
  band toward it. The band never narrows.
- A strictly lower price emits TARGET_REACHED when it meets the target,
  otherwise PRICE_DROP when the drop clears the threshold. Never both.
- An unavailable item that comes back emits BACK_IN_STOCK.
- The first price ever seen never emits a price event.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from pricewatch.config import settings
from pricewatch.models.enums import EventKind
from pricewatch.scrapers.base import Snapshot


@dataclass(frozen=True)
class ItemState:
    """The fields of a tracked item the evaluator reads."""

    title: str
    currency: str
    current_price: Optional[Decimal] = None
    target_price: Optional[Decimal] = None
    lowest_price: Optional[Decimal] = None
    highest_price: Optional[Decimal] = None
    is_available: bool = True

    @classmethod
    def from_item(cls, item) -> "ItemState":
        return cls(
            title=item.title,
            currency=item.currency,
            current_price=item.current_price,
            target_price=item.target_price,
            lowest_price=item.lowest_price,
            highest_price=item.highest_price,
            is_available=item.is_available,
        )


@dataclass
class DomainEvent:
    """A notable change, persisted as a notification."""

    kind: EventKind
    title: str
    message: str
    old_price: Optional[Decimal] = None
    new_price: Optional[Decimal] = None


@dataclass
class Evaluation:
    """Outcome of one evaluation.

    Attributes:
        patch: Column name -> new value for the tracked item
        events: Events to record, in emission order
    """

    patch: Dict[str, Any] = field(default_factory=dict)
    events: List[DomainEvent] = field(default_factory=list)


def drop_percentage(old_price: Decimal, new_price: Decimal) -> Decimal:
    """Percent decrease from old to new; zero when old is not positive."""
    if old_price <= 0:
        return Decimal("0")
    return (old_price - new_price) / old_price * Decimal("100")


def evaluate(
    previous: ItemState,
    snapshot: Snapshot,
    checked_at: datetime,
    drop_threshold_pct: Optional[float] = None,
) -> Evaluation:
    """Compare stored state with a snapshot.

    Args:
        previous: Item state before this check
        snapshot: Freshly extracted values
        checked_at: Timestamp to record as last_checked_at
        drop_threshold_pct: Minimum drop for PRICE_DROP; defaults to
            settings.PRICE_DROP_THRESHOLD_PCT

    Returns:
        Evaluation with the item patch and the events to emit
    """
    if drop_threshold_pct is None:
        drop_threshold_pct = settings.PRICE_DROP_THRESHOLD_PCT
    threshold = Decimal(str(drop_threshold_pct))

    result = Evaluation(
        patch={
            "is_available": snapshot.is_available,
            "last_checked_at": checked_at,
        }
    )

    new_price = snapshot.price
    if new_price is not None:
        result.patch["current_price"] = new_price
        result.patch["lowest_price"] = (
            new_price if previous.lowest_price is None else min(previous.lowest_price, new_price)
        )
        result.patch["highest_price"] = (
            new_price if previous.highest_price is None else max(previous.highest_price, new_price)
        )

        old_price = previous.current_price
        if old_price is not None and new_price < old_price:
            event = _price_event(previous, old_price, new_price, snapshot.currency, threshold)
            if event:
                result.events.append(event)

    if not previous.is_available and snapshot.is_available:
        result.events.append(
            DomainEvent(
                kind=EventKind.BACK_IN_STOCK,
                title="Back in Stock",
                message=f"{previous.title} is now back in stock!",
                new_price=new_price,
            )
        )

    return result


def _price_event(
    previous: ItemState,
    old_price: Decimal,
    new_price: Decimal,
    snapshot_currency: Optional[str],
    threshold: Decimal,
) -> Optional[DomainEvent]:
    pct = drop_percentage(old_price, new_price)
    pct_display = pct.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    new_currency = snapshot_currency or previous.currency

    if previous.target_price is not None and new_price <= previous.target_price:
        return DomainEvent(
            kind=EventKind.TARGET_REACHED,
            title="Target Price Reached",
            message=(
                f"{previous.title} reached your target of {previous.currency} "
                f"{previous.target_price}: now {new_currency} {new_price} "
                f"({pct_display}% off)"
            ),
            old_price=old_price,
            new_price=new_price,
        )

    if pct >= threshold:
        return DomainEvent(
            kind=EventKind.PRICE_DROP,
            title="Price Drop Alert",
            message=(
                f"{previous.title} price dropped from {previous.currency} {old_price} "
                f"to {new_currency} {new_price} ({pct_display}% off)"
            ),
            old_price=old_price,
            new_price=new_price,
        )

    return None
