from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from spendwise.models.analytics import (
    CategoryAmount,
    CategoryMonthTrend,
    CategoryTotal,
    ExpenseSummary,
    MonthlyTrendPoint,
    MonthSummary,
    TopCategory,
)
from spendwise.utils.timeutils import MONTH_NAMES, as_datetime


@dataclass
class _Bucket:
    total: float = 0.0
    count: int = 0

    def add(self, amount: float) -> None:
        self.total += amount
        self.count += 1


class SpendingAnalyzer:
    """
    Read-side aggregations over a user's expense records.

    Every method takes plain expense dicts (``amount``, ``category``, ``date``)
    so the same logic serves routes, background jobs and tests. Groups keep
    the order in which they are first seen, and all total-based sorts are
    stable, so equal totals stay in that order. Amounts are rounded to two
    decimals only on the way out.
    """

    def category_totals(
        self,
        expenses: Iterable[Dict[str, Any]],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[CategoryTotal]:
        buckets = self._by_category(self._in_range(expenses, start, end))
        ranked = sorted(buckets.items(), key=lambda item: item[1].total, reverse=True)
        return [
            CategoryTotal(category=category, total=round(bucket.total, 2), count=bucket.count)
            for category, bucket in ranked
        ]

    def monthly_trend(self, expenses: Iterable[Dict[str, Any]], months_count: int = 6) -> List[MonthlyTrendPoint]:
        buckets: Dict[Tuple[int, int], _Bucket] = defaultdict(_Bucket)
        for exp in expenses:
            when = as_datetime(exp["date"])
            buckets[(when.year, when.month)].add(_amount(exp))

        return [
            MonthlyTrendPoint(
                year=year,
                month=month,
                month_name=MONTH_NAMES[month],
                total=round(buckets[(year, month)].total, 2),
                count=buckets[(year, month)].count,
            )
            for year, month in _most_recent(buckets.keys(), months_count)
        ]

    def category_monthly_trend(
        self,
        expenses: Iterable[Dict[str, Any]],
        months_count: int = 6,
    ) -> List[CategoryMonthTrend]:
        per_month: Dict[Tuple[int, int], Dict[str, float]] = defaultdict(lambda: defaultdict(float))
        for exp in expenses:
            when = as_datetime(exp["date"])
            per_month[(when.year, when.month)][exp["category"]] += _amount(exp)

        trend = []
        for year, month in _most_recent(per_month.keys(), months_count):
            categories = per_month[(year, month)]
            trend.append(
                CategoryMonthTrend(
                    year=year,
                    month=month,
                    month_name=MONTH_NAMES[month],
                    categories=[
                        CategoryAmount(category=category, total=round(total, 2))
                        for category, total in categories.items()
                    ],
                    month_total=round(sum(categories.values()), 2),
                )
            )
        return trend

    def yearly_summary(self, expenses: Iterable[Dict[str, Any]], year: int) -> List[MonthSummary]:
        buckets: Dict[int, _Bucket] = defaultdict(_Bucket)
        for exp in expenses:
            when = as_datetime(exp["date"])
            if when.year == year:
                buckets[when.month].add(_amount(exp))

        return [
            MonthSummary(
                month=month,
                month_name=MONTH_NAMES[month],
                total=round(buckets[month].total, 2),
                count=buckets[month].count,
            )
            for month in sorted(buckets)
        ]

    def top_categories(
        self,
        expenses: Iterable[Dict[str, Any]],
        limit: int = 5,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[TopCategory]:
        buckets = self._by_category(self._in_range(expenses, start, end))
        ranked = sorted(buckets.items(), key=lambda item: item[1].total, reverse=True)
        return [
            TopCategory(
                category=category,
                total=round(bucket.total, 2),
                count=bucket.count,
                avg_expense=round(bucket.total / bucket.count, 2),
            )
            for category, bucket in ranked[: max(limit, 0)]
        ]

    def summary(
        self,
        expenses: Iterable[Dict[str, Any]],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> ExpenseSummary:
        amounts = [_amount(exp) for exp in self._in_range(expenses, start, end)]
        if not amounts:
            return ExpenseSummary()

        total = sum(amounts)
        return ExpenseSummary(
            total_expenses=round(total, 2),
            expense_count=len(amounts),
            avg_expense=round(total / len(amounts), 2),
            max_expense=round(max(amounts), 2),
            min_expense=round(min(amounts), 2),
        )

    @staticmethod
    def _in_range(
        expenses: Iterable[Dict[str, Any]],
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> List[Dict[str, Any]]:
        if start is None and end is None:
            return list(expenses)
        selected = []
        for exp in expenses:
            when = as_datetime(exp["date"])
            if start is not None and when < start:
                continue
            if end is not None and when > end:
                continue
            selected.append(exp)
        return selected

    @staticmethod
    def _by_category(expenses: Iterable[Dict[str, Any]]) -> Dict[str, _Bucket]:
        buckets: Dict[str, _Bucket] = defaultdict(_Bucket)
        for exp in expenses:
            buckets[exp["category"]].add(_amount(exp))
        return buckets


def _amount(expense: Dict[str, Any]) -> float:
    return float(expense.get("amount", 0))


def _most_recent(months: Iterable[Tuple[int, int]], months_count: int) -> List[Tuple[int, int]]:
    """Keep the latest ``months_count`` (year, month) keys, returned oldest first."""
    latest = sorted(months, reverse=True)[: max(months_count, 0)]
    return sorted(latest)
