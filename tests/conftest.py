"""
Pytest configuration to ensure paths are set up correctly for tests.

This allows imports like `from handlers import health_check` to work
when running tests, simulating the Lambda environment where code
is deployed from the src/ directory.
"""

import os
import sys
from pathlib import Path

import boto3
import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool


def _ensure_paths_on_sys_path() -> None:
    """Add repository root AND src/ to sys.path if missing.

    The src/ directory is added to simulate Lambda's import behavior,
    where the deployment package makes src/ the root of the code.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"

    root_str = str(repo_root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    # Add src/ for Lambda-style imports (from handlers import ...)
    src_str = str(src_root)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Ensure boto3 has offline-friendly defaults so tests do not require AWS access.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")

# Create a default boto3 session so resources/clients do not error during import.
boto3.setup_default_session(region_name="eu-west-2")


_SCHEMA = (
    """
    CREATE TABLE customers (
        id TEXT PRIMARY KEY,
        business_id TEXT NOT NULL,
        name TEXT NOT NULL,
        email TEXT,
        phone TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE appointments (
        id TEXT PRIMARY KEY,
        business_id TEXT NOT NULL,
        customer_id TEXT,
        title TEXT NOT NULL,
        start_time TEXT NOT NULL,
        end_time TEXT NOT NULL,
        status TEXT NOT NULL,
        price REAL
    )
    """,
    """
    CREATE TABLE security_audit_log (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        business_id TEXT NOT NULL,
        action TEXT NOT NULL,
        resource TEXT NOT NULL,
        details TEXT,
        created_at TEXT
    )
    """,
)


@pytest.fixture
def engine():
    """In-memory SQLite engine with the CRM tables; one shared connection."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with eng.begin() as conn:
        for statement in _SCHEMA:
            conn.execute(text(statement))
    yield eng
    eng.dispose()


@pytest.fixture
def seed(engine):
    """Insert rows: seed(customers=[...], appointments=[...])."""

    def _seed(customers=(), appointments=()):
        with engine.begin() as conn:
            for row in customers:
                conn.execute(
                    text(
                        "INSERT INTO customers (id, business_id, name, email, phone, created_at) "
                        "VALUES (:id, :business_id, :name, :email, :phone, :created_at)"
                    ),
                    {"email": None, "phone": None, "created_at": "2024-01-01T00:00:00", **row},
                )
            for row in appointments:
                conn.execute(
                    text(
                        "INSERT INTO appointments "
                        "(id, business_id, customer_id, title, start_time, end_time, status, price) "
                        "VALUES (:id, :business_id, :customer_id, :title, :start_time, "
                        ":end_time, :status, :price)"
                    ),
                    {
                        "title": "Haircut",
                        "status": "completed",
                        "price": None,
                        "end_time": row["start_time"],
                        **row,
                    },
                )

    return _seed


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Each test starts with a fresh per-container limiter."""
    from utils import rate_limiter

    rate_limiter._rate_limiter = None
    yield
    rate_limiter._rate_limiter = None
