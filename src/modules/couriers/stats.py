"""Pure aggregation helpers for courier ratings and delivery statistics.

Nothing here touches the database: callers pass the delivered orders
(or their scores) and persist whatever they need.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from django.utils import timezone

TWO_PLACES = Decimal("0.01")

# Index 0 is Sunday.
WEEKDAY_LABELS = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


def average_rating(scores: Iterable[int]) -> Decimal:
    """Arithmetic mean of ``scores`` rounded to two places; 0 when empty."""
    values = list(scores)
    if not values:
        return Decimal("0.00")
    mean = Decimal(sum(values)) / Decimal(len(values))
    return mean.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def sunday_first_weekday(moment: datetime) -> int:
    """Weekday of ``moment`` in the active time zone, 0 = Sunday."""
    if timezone.is_aware(moment):
        moment = timezone.localtime(moment)
    return (moment.weekday() + 1) % 7


@dataclass(frozen=True)
class DeliveryStats:
    total_deliveries: int
    average_rating: Decimal
    total_ratings: int
    deliveries_per_weekday: List[int] = field(default_factory=lambda: [0] * 7)

    def as_dict(self) -> dict:
        return {
            "total_deliveries": self.total_deliveries,
            "average_rating": str(self.average_rating),
            "total_ratings": self.total_ratings,
            "deliveries_per_weekday": dict(
                zip(WEEKDAY_LABELS, self.deliveries_per_weekday)
            ),
        }


def delivery_stats(
    delivered: Sequence[Tuple[Optional[datetime], Optional[int]]],
) -> DeliveryStats:
    """Summarise ``(delivered_at, rating_score)`` pairs of delivered orders."""
    per_weekday = [0] * 7
    scores = []
    for delivered_at, score in delivered:
        if delivered_at is not None:
            per_weekday[sunday_first_weekday(delivered_at)] += 1
        if score:
            scores.append(score)

    return DeliveryStats(
        total_deliveries=len(delivered),
        average_rating=average_rating(scores),
        total_ratings=len(scores),
        deliveries_per_weekday=per_weekday,
    )
