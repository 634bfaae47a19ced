from datetime import datetime

import pytest

from spendwise.db.dynamo import get_table
from spendwise.db.insights import InsightStore
from spendwise.models.insight import MAX_RESPONSE_LENGTH, CachedInsight, InsightType
from spendwise.services.insight_cache import CachePolicy, InsightCache, is_servable

POLICIES = {
    InsightType.SPENDING_ANALYSIS: CachePolicy(max_age_hours=24, ttl_hours=24),
    InsightType.BUDGET_OPTIMIZATION: CachePolicy(max_age_hours=48, ttl_hours=48),
}


@pytest.fixture
def cache(dynamodb_tables, clock):
    return InsightCache(InsightStore(get_table("insights")), POLICIES, clock=clock)


def _insight(created_at, expires_at):
    return CachedInsight(
        id="abc",
        insight_type=InsightType.SPENDING_ANALYSIS,
        data_snapshot={},
        response="text",
        created_at=created_at,
        expires_at=expires_at,
    )


def test_is_servable_rejects_entries_older_than_max_age():
    insight = _insight("2025-03-19T11:00:00.000000", "2025-03-25T00:00:00.000000")
    assert is_servable(insight, 24, datetime(2025, 3, 20, 12, 0, 0)) is False
    assert is_servable(insight, 48, datetime(2025, 3, 20, 12, 0, 0)) is True


def test_is_servable_rejects_expired_entries():
    insight = _insight("2025-03-20T10:00:00.000000", "2025-03-20T12:00:00.000000")
    assert is_servable(insight, 24, datetime(2025, 3, 20, 12, 0, 0)) is False
    assert is_servable(insight, 24, datetime(2025, 3, 20, 11, 59, 59)) is True


def test_store_then_find_returns_same_entry(cache):
    snapshot = {"budget": 250, "totalSpent": 400.5, "topCategory": "Food"}
    stored = cache.store_insight("user-1", InsightType.SPENDING_ANALYSIS, snapshot, "Spend less on food.")

    found = cache.find_recent("user-1", InsightType.SPENDING_ANALYSIS, max_age_hours=0)

    assert found == stored
    assert found.data_snapshot == snapshot


def test_cached_text_keeps_surrounding_whitespace(cache):
    text = "## Spending Pattern Analysis\n\n- item\n"
    stored = cache.store_insight("user-1", InsightType.SPENDING_ANALYSIS, {}, text)

    found = cache.find_recent("user-1", InsightType.SPENDING_ANALYSIS, max_age_hours=0)

    assert stored.response == text
    assert found.response == text


def test_store_then_find_on_real_clock(dynamodb_tables):
    cache = InsightCache(InsightStore(get_table("insights")), POLICIES)
    stored = cache.store_insight("user-1", InsightType.BUDGET_OPTIMIZATION, {"budget": 100}, "Cut dining out.\n")

    assert cache.find_recent("user-1", InsightType.BUDGET_OPTIMIZATION, max_age_hours=1) == stored


def test_find_ignores_other_types_and_users(cache):
    cache.store_insight("user-1", InsightType.BUDGET_OPTIMIZATION, {}, "tips")
    cache.store_insight("user-2", InsightType.SPENDING_ANALYSIS, {}, "other user")

    assert cache.find_recent("user-1", InsightType.SPENDING_ANALYSIS) is None


def test_entry_older_than_max_age_is_a_miss_even_if_unexpired(cache, clock):
    cache.store_insight("user-1", InsightType.SPENDING_ANALYSIS, {}, "old", ttl_hours=72)
    clock.advance(hours=25)

    assert cache.find_recent("user-1", InsightType.SPENDING_ANALYSIS, max_age_hours=24) is None
    assert cache.find_recent("user-1", InsightType.SPENDING_ANALYSIS, max_age_hours=26) is not None


def test_find_returns_newest_entry(cache, clock):
    cache.store_insight("user-1", InsightType.SPENDING_ANALYSIS, {}, "first")
    clock.advance(hours=1)
    cache.store_insight("user-1", InsightType.SPENDING_ANALYSIS, {}, "second")

    assert cache.find_recent("user-1", InsightType.SPENDING_ANALYSIS).response == "second"


def test_store_truncates_and_sets_expiry(cache, clock):
    stored = cache.store_insight("user-1", InsightType.SPENDING_ANALYSIS, {}, "x" * (MAX_RESPONSE_LENGTH + 10))
    assert len(stored.response) == MAX_RESPONSE_LENGTH
    assert stored.expires_at == "2025-03-21T12:00:00.000000"


def test_list_active_newest_first_and_purge(cache, clock):
    cache.store_insight("user-1", InsightType.SPENDING_ANALYSIS, {}, "short", ttl_hours=1)
    clock.advance(minutes=10)
    cache.store_insight("user-1", InsightType.BUDGET_OPTIMIZATION, {}, "long")

    assert [i.response for i in cache.list_active("user-1")] == ["long", "short"]

    clock.advance(hours=2)
    assert [i.response for i in cache.list_active("user-1")] == ["long"]
    assert cache.purge_expired() == 1
    assert cache.purge_expired() == 0
    assert len(cache.store.table.scan_all()) == 1
