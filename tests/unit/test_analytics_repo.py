"""
Aggregation SQL tests against an in-memory SQLite database.

Run with: pytest tests/unit/test_analytics_repo.py -v
"""

import json
from datetime import date, datetime

import pytest
from sqlalchemy import text

from repositories.analytics_repo import AnalyticsRepository
from repositories.postgres_repo import PostgresRepository
from utils.error_handling import DataStoreError, ValidationError

BUSINESS_ID = "11111111-1111-1111-1111-111111111111"
OTHER_BUSINESS_ID = "22222222-2222-2222-2222-222222222222"

TODAY = date(2024, 3, 14)


@pytest.fixture
def repo(engine):
    return AnalyticsRepository(engine)


@pytest.fixture
def populated(seed):
    """Two tenants; the other tenant's customer outspends everyone."""
    seed(
        customers=[
            {"id": "c1", "business_id": BUSINESS_ID, "name": "Sarah Jones",
             "created_at": "2024-01-01T09:00:00"},
            {"id": "c2", "business_id": BUSINESS_ID, "name": "Tom 100%_Smith",
             "created_at": "2024-02-01T09:00:00"},
            {"id": "c3", "business_id": BUSINESS_ID, "name": "Never Visited",
             "created_at": "2024-03-01T09:00:00"},
            {"id": "x1", "business_id": OTHER_BUSINESS_ID, "name": "Sarah Other",
             "created_at": "2024-03-10T09:00:00"},
        ],
        appointments=[
            {"id": "a1", "business_id": BUSINESS_ID, "customer_id": "c1",
             "start_time": "2024-03-05T10:00:00", "price": 120.0},
            {"id": "a2", "business_id": BUSINESS_ID, "customer_id": "c1",
             "start_time": "2024-03-12T10:00:00", "price": 80.0},
            {"id": "a3", "business_id": BUSINESS_ID, "customer_id": "c2",
             "start_time": "2024-03-13T10:00:00", "price": 150.0},
            {"id": "a4", "business_id": BUSINESS_ID, "customer_id": "c2",
             "start_time": "2024-01-02T10:00:00", "price": 60.0},
            {"id": "a5", "business_id": BUSINESS_ID, "customer_id": "c1",
             "start_time": "2024-03-14T16:00:00", "price": 500.0, "status": "scheduled"},
            {"id": "x-a1", "business_id": OTHER_BUSINESS_ID, "customer_id": "x1",
             "start_time": "2024-03-06T10:00:00", "price": 9000.0},
        ],
    )


class TestBestCustomer:
    def test_highest_completed_revenue_wins(self, repo, populated):
        best = repo.best_customer(BUSINESS_ID, "2024-03-01", "2024-03-14")
        assert best.id == "c1"
        assert best.total_spent == pytest.approx(200.0)
        assert best.appointment_count == 2

    def test_scoped_to_tenant(self, repo, populated):
        best = repo.best_customer(OTHER_BUSINESS_ID, "2024-03-01", "2024-03-14")
        assert best.id == "x1"
        assert best.total_spent == pytest.approx(9000.0)

    def test_unknown_tenant_returns_none(self, repo, populated):
        assert repo.best_customer("99999999-9999-9999-9999-999999999999", "2024-03-01", "2024-03-14") is None

    def test_idempotent(self, repo, populated):
        first = repo.best_customer(BUSINESS_ID, "2024-03-01", "2024-03-14")
        second = repo.best_customer(BUSINESS_ID, "2024-03-01", "2024-03-14")
        assert first == second


class TestAtRisk:
    def test_inactive_and_never_visited(self, repo, populated):
        customers = repo.at_risk_customers(BUSINESS_ID, 30, today=TODAY)
        assert [c.id for c in customers] == ["c3"]
        assert customers[0].days_since_last_visit is None

    def test_longest_absence_sorted_after_never_visited(self, repo, populated):
        customers = repo.at_risk_customers(BUSINESS_ID, 1, today=date(2024, 6, 1))
        assert [c.id for c in customers] == ["c3", "c1", "c2"]
        assert customers[1].days_since_last_visit == (date(2024, 6, 1) - date(2024, 3, 12)).days

    @pytest.mark.parametrize("threshold", [0, 366])
    def test_threshold_bounds(self, repo, threshold):
        with pytest.raises(ValidationError):
            repo.at_risk_customers(BUSINESS_ID, threshold, today=TODAY)


class TestSearch:
    def test_case_insensitive_fragment(self, repo, populated):
        customers = repo.search_customers(BUSINESS_ID, "SARAH")
        assert [c.id for c in customers] == ["c1"]
        assert customers[0].total_spent == pytest.approx(200.0)

    def test_wildcards_are_literal(self, repo, populated):
        assert [c.id for c in repo.search_customers(BUSINESS_ID, "100%_")] == ["c2"]
        assert repo.search_customers(BUSINESS_ID, "s%") == []

    def test_no_fragment_lists_newest_first(self, repo, populated):
        customers = repo.search_customers(BUSINESS_ID, None, limit=2)
        assert [c.id for c in customers] == ["c3", "c2"]


class TestRevenue:
    def test_completed_only_in_range(self, repo, populated):
        revenue = repo.revenue_in_range(BUSINESS_ID, "2024-03-01", "2024-03-14")
        assert revenue.total_revenue == pytest.approx(350.0)
        assert revenue.appointment_count == 3
        assert revenue.unique_customers == 2
        assert revenue.avg_transaction_value == pytest.approx(350.0 / 3)

    def test_empty_period_is_zeroed(self, repo, populated):
        revenue = repo.revenue_in_range(BUSINESS_ID, "2020-01-01", "2020-01-31")
        assert revenue.total_revenue == 0
        assert revenue.appointment_count == 0
        assert revenue.avg_transaction_value == 0
        assert revenue.unique_customers == 0

    def test_no_row_returns_none(self, repo, monkeypatch):
        monkeypatch.setattr(repo, "fetch_one", lambda query, params: None)
        assert repo.revenue_in_range(BUSINESS_ID, "2024-03-01", "2024-03-14") is None


class TestAppointments:
    def test_all_statuses_ascending(self, repo, populated):
        appointments = repo.appointments_in_range(BUSINESS_ID, "2024-03-12", "2024-03-14")
        assert [a.id for a in appointments] == ["a2", "a3", "a5"]
        assert appointments[-1].status == "scheduled"
        assert appointments[0].customer_name == "Sarah Jones"
        assert appointments[0].start_time == datetime(2024, 3, 12, 10)


class TestDashboardFeeds:
    def test_customer_rollups(self, repo, populated):
        rows = {row["id"]: row for row in repo.customer_rollups(BUSINESS_ID)}
        assert set(rows) == {"c1", "c2", "c3"}
        assert rows["c1"]["total_appointments"] == 2
        assert rows["c1"]["last_visit"] == date(2024, 3, 12)
        assert rows["c3"]["last_visit"] is None
        assert rows["c3"]["total_spent"] == 0

    def test_completed_visits_since(self, repo, populated):
        rows = repo.completed_visits_since(BUSINESS_ID, "2024-03-01")
        assert [row["visit_date"] for row in rows] == [
            date(2024, 3, 5), date(2024, 3, 12), date(2024, 3, 13),
        ]


class TestAuditLog:
    def test_log_access_inserts_row(self, repo, engine):
        repo.log_access(BUSINESS_ID, "CHAT_QUERY", "revenue_general", {"timeframe": "today"})
        with engine.connect() as conn:
            row = conn.execute(text("SELECT * FROM security_audit_log")).mappings().one()
        assert row["action"] == "CHAT_QUERY"
        assert json.loads(row["details"]) == {"timeframe": "today"}
        assert row["created_at"] is not None

    def test_log_access_requires_action(self, repo):
        with pytest.raises(ValidationError):
            repo.log_access(BUSINESS_ID, " ", "revenue_general")


def test_unconfigured_engine_raises_data_store_error():
    with pytest.raises(DataStoreError):
        PostgresRepository(None).fetch_all("SELECT 1", {})


def test_sql_errors_are_wrapped(engine):
    with pytest.raises(DataStoreError):
        PostgresRepository(engine).fetch_one("SELECT * FROM missing_table", {})
