"""
PostgreSQL repository using SQLAlchemy Core.

The engine is created lazily and reused across warm Lambda invocations.
Credentials come from DATABASE_URL or, failing that, an RDS secret in
Secrets Manager.
"""

from __future__ import annotations

import json
import os
from typing import Any, List, Optional

import boto3
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool

from utils.error_handling import DataStoreError
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Connection pooling for Lambda reuse.
_engine: Optional[Engine] = None


def get_db_engine() -> Optional[Engine]:
    """Get or create SQLAlchemy engine with connection pooling."""
    global _engine
    if _engine is None:
        db_url = os.environ.get("DATABASE_URL")
        if not db_url:
            secret_arn = os.environ.get("DB_SECRET_ARN")
            if secret_arn:
                db_url = _secret_to_db_url(secret_arn)
            if not db_url:
                logger.warning("DATABASE_URL not set; DB calls will fail")
                return None
        _engine = create_engine(
            db_url,
            poolclass=QueuePool,
            pool_size=1,
            max_overflow=2,
            pool_pre_ping=True,
            pool_recycle=300,
        )
    return _engine


def _secret_to_db_url(secret_arn: str) -> Optional[str]:
    """Build a SQLAlchemy URL from an RDS secret."""
    try:
        sm = boto3.client("secretsmanager")
        secret_value = sm.get_secret_value(SecretId=secret_arn)["SecretString"]
        secret = json.loads(secret_value)
        host = secret.get("host")
        port = secret.get("port", 5432)
        username = secret.get("username")
        password = secret.get("password")
        dbname = secret.get("dbname", "postgres")
        if not (host and username and password):
            return None
        return f"postgresql+psycopg2://{username}:{password}@{host}:{port}/{dbname}"
    except Exception as exc:
        logger.warning("Failed to load DB secret", extra={"error": str(exc)})
        return None


class PostgresRepository:
    """Thin wrapper to keep SQL organized and parameterized."""

    def __init__(self, engine: Optional[Engine]):
        self.engine = engine

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise DataStoreError("Database is not configured")
        return self.engine

    def fetch_one(self, query: str, params: dict) -> Optional[dict]:
        """Execute a SELECT and return one row as dict."""
        try:
            with self._require_engine().connect() as conn:
                row = conn.execute(text(query), params).fetchone()
                return dict(row._mapping) if row else None
        except SQLAlchemyError as exc:
            raise DataStoreError("Query failed") from exc

    def fetch_all(self, query: str, params: dict) -> List[dict]:
        """Execute a SELECT and return every row as dict."""
        try:
            with self._require_engine().connect() as conn:
                result = conn.execute(text(query), params)
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as exc:
            raise DataStoreError("Query failed") from exc

    def execute(self, query: str, params: dict) -> Any:
        """Execute a parameterized statement."""
        try:
            with self._require_engine().begin() as conn:
                return conn.execute(text(query), params)
        except SQLAlchemyError as exc:
            raise DataStoreError("Statement failed") from exc
