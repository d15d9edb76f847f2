"""Tests for monthly projection from observed cost points."""

from __future__ import annotations

import pytest

from kubecost_adapter.core.types import CostPoint
from kubecost_adapter.report.projection import daily_average, project


def _points(*totals: float) -> list[CostPoint]:
    return [CostPoint(start="", end="", total_cost=t) for t in totals]


class TestDailyAverage:
    def test_empty(self) -> None:
        assert daily_average([]) == 0.0

    def test_mean(self) -> None:
        assert daily_average(_points(1.0, 2.0, 6.0)) == pytest.approx(3.0)


class TestProject:
    def test_empty_history(self) -> None:
        projected = project([])
        assert projected.unit_price == 0.0
        assert projected.cost_per_month == 0.0
        assert projected.currency == "USD"
        assert projected.billing_detail == ""

    def test_two_days(self) -> None:
        projected = project(_points(100.0, 200.0))
        assert projected.unit_price == pytest.approx(150.0)
        assert projected.cost_per_month == pytest.approx(4500.0)
        assert projected.billing_detail == "kubecost-avg-daily"

    def test_single_point(self) -> None:
        projected = project(_points(220.9))
        assert projected.unit_price == pytest.approx(220.9)
        assert projected.cost_per_month == pytest.approx(6627.0)

    def test_currency_passed_through(self) -> None:
        assert project(_points(1.0), currency="EUR").currency == "EUR"
        assert project([], currency="EUR").currency == "EUR"

    def test_category_costs_ignored(self) -> None:
        points = [CostPoint(start="", end="", total_cost=10.0, cpu_cost=100.0, ram_cost=100.0)]
        assert project(points).unit_price == pytest.approx(10.0)
