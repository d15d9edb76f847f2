"""Monthly cost projection from observed per-period costs.

The projection is a plain arithmetic mean of ``total_cost`` over the
observed points, multiplied by 30.  Period length is not weighted and no
outliers are trimmed, so the figure is an approximation: a partial first
day or a one-off spike moves it directly.  Every projection is tagged with
``billing_detail="kubecost-avg-daily"`` so consumers can tell how it was
derived.
"""

from __future__ import annotations

from typing import Sequence

from kubecost_adapter.core.defaults import (
    DAYS_PER_MONTH,
    DEFAULT_CURRENCY,
    PROJECTION_BILLING_DETAIL,
)
from kubecost_adapter.core.types import CostPoint, ProjectedCost


def daily_average(points: Sequence[CostPoint]) -> float:
    """Mean ``total_cost`` across *points* (0.0 when empty)."""
    if not points:
        return 0.0
    return sum(p.total_cost for p in points) / len(points)


def project(
    points: Sequence[CostPoint],
    *,
    currency: str = DEFAULT_CURRENCY,
) -> ProjectedCost:
    """Extrapolate a monthly cost from observed points.

    An empty history is a valid answer: the projection carries only the
    currency, with zero prices and no provenance tag.

    Args:
        points: Normalized cost points, typically one per day.
        currency: ISO currency code to report.

    Returns:
        ``unit_price`` = daily average, ``cost_per_month`` = average x 30.
    """
    if not points:
        return ProjectedCost(currency=currency)

    daily = daily_average(points)
    return ProjectedCost(
        unit_price=daily,
        currency=currency,
        cost_per_month=daily * DAYS_PER_MONTH,
        billing_detail=PROJECTION_BILLING_DETAIL,
    )
