"""
Read-only aggregation queries backing the chat assistant and dashboards.

Every statement filters on ``business_id``; appointments are joined with the
tenant repeated on both sides so a mis-linked row from another business can
never leak into an aggregate. Date parameters are ISO calendar dates and are
compared against ``DATE(start_time)``.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from models.appointment import AppointmentResult
from models.customer import CustomerResult
from models.revenue import RevenueResult
from repositories.postgres_repo import PostgresRepository
from utils.error_handling import ValidationError
from utils.logging_config import get_logger

logger = get_logger(__name__)

_CUSTOMER_COLUMNS = """
    c.id AS id,
    c.name AS name,
    c.email AS email,
    c.phone AS phone,
    COALESCE(SUM(a.price), 0) AS total_spent,
    COUNT(a.id) AS appointment_count,
    MAX(DATE(a.start_time)) AS last_visit
"""


def _as_date(value: Any) -> Optional[date]:
    """Normalize driver output (date, datetime or ISO string) to a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _escape_like(fragment: str) -> str:
    return fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class AnalyticsRepository(PostgresRepository):
    """Tenant-scoped aggregation queries over customers and appointments."""

    def best_customer(
        self, business_id: str, start_date: str, end_date: str
    ) -> Optional[CustomerResult]:
        """Customer with the most completed revenue in range, then most appointments."""
        row = self.fetch_one(
            f"""
            SELECT {_CUSTOMER_COLUMNS}
            FROM customers c
            LEFT JOIN appointments a
              ON c.id = a.customer_id
             AND a.business_id = :business_id
             AND DATE(a.start_time) BETWEEN :start_date AND :end_date
             AND a.status = 'completed'
            WHERE c.business_id = :business_id
            GROUP BY c.id, c.name, c.email, c.phone
            ORDER BY total_spent DESC, appointment_count DESC, c.id ASC
            LIMIT 1
            """,
            {"business_id": business_id, "start_date": start_date, "end_date": end_date},
        )
        return self._to_customer(row) if row else None

    def at_risk_customers(
        self, business_id: str, days_threshold: int = 30, today: Optional[date] = None
    ) -> List[CustomerResult]:
        """Customers whose last completed visit is older than the threshold, or who never visited."""
        if days_threshold < 1 or days_threshold > 365:
            raise ValidationError("days_threshold must be between 1 and 365")

        today = today or date.today()
        cutoff = (today - timedelta(days=days_threshold)).isoformat()
        rows = self.fetch_all(
            f"""
            SELECT {_CUSTOMER_COLUMNS}
            FROM customers c
            LEFT JOIN appointments a
              ON c.id = a.customer_id
             AND a.business_id = :business_id
             AND a.status = 'completed'
            WHERE c.business_id = :business_id
            GROUP BY c.id, c.name, c.email, c.phone
            HAVING MAX(DATE(a.start_time)) < :cutoff
                OR MAX(DATE(a.start_time)) IS NULL
            """,
            {"business_id": business_id, "cutoff": cutoff},
        )

        customers = []
        for row in rows:
            customer = self._to_customer(row)
            if customer.last_visit is not None:
                customer.days_since_last_visit = (today - customer.last_visit).days
            customers.append(customer)

        # Never-visited first, then longest absence first.
        customers.sort(
            key=lambda c: (
                c.days_since_last_visit is not None,
                -(c.days_since_last_visit or 0),
                c.name,
            )
        )
        return customers

    def search_customers(
        self, business_id: str, name_fragment: Optional[str] = None, limit: int = 10
    ) -> List[CustomerResult]:
        """Most recently added customers whose name contains the fragment (case-insensitive)."""
        pattern = f"%{_escape_like(name_fragment.lower())}%" if name_fragment else "%"
        rows = self.fetch_all(
            f"""
            SELECT {_CUSTOMER_COLUMNS}
            FROM customers c
            LEFT JOIN appointments a
              ON c.id = a.customer_id
             AND a.business_id = :business_id
             AND a.status = 'completed'
            WHERE c.business_id = :business_id
              AND LOWER(c.name) LIKE :pattern ESCAPE '\\'
            GROUP BY c.id, c.name, c.email, c.phone, c.created_at
            ORDER BY c.created_at DESC, c.id ASC
            LIMIT :limit
            """,
            {"business_id": business_id, "pattern": pattern, "limit": limit},
        )
        return [self._to_customer(row) for row in rows]

    def revenue_in_range(
        self, business_id: str, start_date: str, end_date: str
    ) -> Optional[RevenueResult]:
        """Completed revenue aggregate; None only when the store returns no row."""
        row = self.fetch_one(
            """
            SELECT
                COALESCE(SUM(a.price), 0) AS total_revenue,
                COUNT(a.id) AS appointment_count,
                CASE
                    WHEN COUNT(a.id) > 0 THEN COALESCE(SUM(a.price), 0) * 1.0 / COUNT(a.id)
                    ELSE 0
                END AS avg_transaction_value,
                COUNT(DISTINCT a.customer_id) AS unique_customers
            FROM appointments a
            WHERE a.business_id = :business_id
              AND DATE(a.start_time) BETWEEN :start_date AND :end_date
              AND a.status = 'completed'
            """,
            {"business_id": business_id, "start_date": start_date, "end_date": end_date},
        )
        if not row:
            return None
        return RevenueResult(
            total_revenue=float(row["total_revenue"] or 0),
            appointment_count=int(row["appointment_count"] or 0),
            avg_transaction_value=float(row["avg_transaction_value"] or 0),
            unique_customers=int(row["unique_customers"] or 0),
        )

    def appointments_in_range(
        self, business_id: str, start_date: str, end_date: str
    ) -> List[AppointmentResult]:
        """Every appointment starting in range, any status, earliest first."""
        rows = self.fetch_all(
            """
            SELECT
                a.id AS id,
                c.name AS customer_name,
                a.title AS title,
                a.start_time AS start_time,
                a.end_time AS end_time,
                a.status AS status,
                a.price AS price
            FROM appointments a
            LEFT JOIN customers c
              ON a.customer_id = c.id
             AND c.business_id = :business_id
            WHERE a.business_id = :business_id
              AND DATE(a.start_time) BETWEEN :start_date AND :end_date
            ORDER BY a.start_time ASC
            """,
            {"business_id": business_id, "start_date": start_date, "end_date": end_date},
        )
        return [self._to_appointment(row) for row in rows]

    def customer_rollups(self, business_id: str) -> List[Dict[str, Any]]:
        """Lifetime completed-appointment aggregates per customer, for RFM scoring."""
        rows = self.fetch_all(
            """
            SELECT
                c.id AS id,
                c.name AS name,
                c.email AS email,
                COUNT(a.id) AS total_appointments,
                COALESCE(SUM(a.price), 0) AS total_spent,
                MAX(DATE(a.start_time)) AS last_visit
            FROM customers c
            LEFT JOIN appointments a
              ON c.id = a.customer_id
             AND a.business_id = :business_id
             AND a.status = 'completed'
            WHERE c.business_id = :business_id
            GROUP BY c.id, c.name, c.email
            ORDER BY c.name ASC
            """,
            {"business_id": business_id},
        )
        return [
            {
                "id": str(row["id"]),
                "name": row["name"],
                "email": row["email"],
                "total_appointments": int(row["total_appointments"] or 0),
                "total_spent": float(row["total_spent"] or 0),
                "last_visit": _as_date(row["last_visit"]),
            }
            for row in rows
        ]

    def completed_visits_since(self, business_id: str, start_date: str) -> List[Dict[str, Any]]:
        """Completed appointments on or after a date, one row per visit."""
        rows = self.fetch_all(
            """
            SELECT
                a.customer_id AS customer_id,
                DATE(a.start_time) AS visit_date,
                a.price AS price
            FROM appointments a
            WHERE a.business_id = :business_id
              AND a.status = 'completed'
              AND DATE(a.start_time) >= :start_date
            ORDER BY visit_date ASC
            """,
            {"business_id": business_id, "start_date": start_date},
        )
        return [
            {
                "customer_id": None if row["customer_id"] is None else str(row["customer_id"]),
                "visit_date": _as_date(row["visit_date"]),
                "price": float(row["price"] or 0),
            }
            for row in rows
        ]

    def log_access(
        self,
        business_id: str,
        action: str,
        resource: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append an audit record for an analytics read."""
        if not (action or "").strip() or not (resource or "").strip():
            raise ValidationError("action and resource are required")
        self.execute(
            """
            INSERT INTO security_audit_log (business_id, action, resource, details, created_at)
            VALUES (:business_id, :action, :resource, :details, CURRENT_TIMESTAMP)
            """,
            {
                "business_id": business_id,
                "action": action.strip(),
                "resource": resource.strip(),
                "details": json.dumps(details) if details is not None else None,
            },
        )

    @staticmethod
    def _to_customer(row: Dict[str, Any]) -> CustomerResult:
        return CustomerResult(
            id=str(row["id"]),
            name=row["name"],
            email=row.get("email"),
            phone=row.get("phone"),
            total_spent=float(row.get("total_spent") or 0),
            appointment_count=int(row.get("appointment_count") or 0),
            last_visit=_as_date(row.get("last_visit")),
        )

    @staticmethod
    def _to_appointment(row: Dict[str, Any]) -> AppointmentResult:
        price = row.get("price")
        return AppointmentResult(
            id=str(row["id"]),
            customer_name=row.get("customer_name"),
            title=row["title"],
            start_time=row["start_time"],
            end_time=row["end_time"],
            status=row["status"],
            price=None if price is None else float(price),
        )
