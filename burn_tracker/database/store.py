"""
SQLAlchemy-backed store for burn events and run logs.

Uses DATABASE_URL when set (e.g. PostgreSQL); otherwise a SQLite file
(DB_PATH or burn_tracker.db). Each BurnStore owns its engine so several stores
(e.g. one per test) never share connections.

burn_events is unique on signature; burn_tracker_logs is append-only.
Every SQLAlchemy failure surfaces as StorageError.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import Boolean, Column, Integer, String, Text, create_engine, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from burn_tracker.burn_logging import get_logger
from burn_tracker.config.env import get_database_url
from burn_tracker.core.exceptions import StorageError
from burn_tracker.database.models import BurnEvent, RunSummary

logger = get_logger(__name__)

Base = declarative_base()

# -----------------------------------------------------------------------------
# SQLAlchemy models
# -----------------------------------------------------------------------------


class BurnEventRow(Base):
    """One detected burn. Rows are written once and never updated."""

    __tablename__ = "burn_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    signature = Column(String(128), unique=True, nullable=False, index=True)
    timestamp = Column(String(32), nullable=False, index=True)  # ISO-8601 UTC
    action = Column(String(16), nullable=False, default="Burn")
    from_address = Column(String(64), nullable=True, index=True)
    to_address = Column(String(64), nullable=True)
    amount = Column(String(64), nullable=False)  # Base units; string avoids precision loss
    token = Column(String(64), nullable=False)
    scrape_time = Column(String(32), nullable=False)
    created_at = Column(Integer, nullable=True)  # Unix seconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature": self.signature,
            "timestamp": self.timestamp,
            "action": self.action,
            "from_address": self.from_address,
            "to_address": self.to_address,
            "amount": self.amount,
            "token": self.token,
            "scrape_time": self.scrape_time,
        }


class RunLogRow(Base):
    """Audit record, one per pipeline invocation (append-only)."""

    __tablename__ = "burn_tracker_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    total_checked = Column(Integer, nullable=False, default=0)
    new_burns = Column(Integer, nullable=False, default=0)
    success = Column(Boolean, nullable=False, default=False)
    error_text = Column(Text, nullable=True)
    execution_time_ms = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(Integer, nullable=False, index=True)  # Unix seconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "total_checked": self.total_checked,
            "new_burns": self.new_burns,
            "success": self.success,
            "error_text": self.error_text,
            "execution_time_ms": self.execution_time_ms,
            "notes": self.notes,
            "created_at": self.created_at,
        }


# -----------------------------------------------------------------------------
# Store
# -----------------------------------------------------------------------------


def _display_url(url: str) -> str:
    return url.split("?")[0].split("@")[-1].split("//")[-1]


class BurnStore:
    """Persistence for burn events and run logs over one SQLAlchemy engine."""

    def __init__(self, url: str) -> None:
        connect_args: dict[str, Any] = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self._url = url
        self._engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        self._session_factory = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self._engine
        )

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        """Single session. Commits on success, rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_db(self) -> None:
        """Create tables if they do not exist. Safe to call on every startup."""
        try:
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as e:
            logger.exception("store_init_db_failed", error=str(e))
            raise StorageError(f"Failed to create tables: {e}") from e
        logger.info("store_init_db", url=_display_url(self._url))

    def dispose(self) -> None:
        self._engine.dispose()

    # --- Burn events (write side) ---

    def burn_event_exists(self, signature: str) -> bool:
        try:
            with self._session_scope() as session:
                row = (
                    session.query(BurnEventRow.id)
                    .filter(BurnEventRow.signature == signature)
                    .first()
                )
                return row is not None
        except SQLAlchemyError as e:
            raise StorageError(f"Existence check failed for {signature}: {e}") from e

    def insert_burn_event(self, event: BurnEvent) -> bool:
        """
        Insert the event unless its signature is already stored.
        Returns True if inserted, False if the UNIQUE constraint rejected it.
        """
        try:
            with self._session_scope() as session:
                session.add(
                    BurnEventRow(
                        signature=event.signature,
                        timestamp=event.timestamp,
                        action=event.action,
                        from_address=event.from_address,
                        to_address=event.to_address,
                        amount=event.amount,
                        token=event.token,
                        scrape_time=event.scrape_time,
                        created_at=int(time.time()),
                    )
                )
                session.flush()
            return True
        except IntegrityError:
            logger.info("store_burn_event_exists", signature=event.signature)
            return False
        except SQLAlchemyError as e:
            raise StorageError(f"Insert failed for {event.signature}: {e}") from e

    # --- Run logs ---

    def append_run_log(self, summary: RunSummary) -> int:
        """Append one run log row. Returns the new row id."""
        try:
            with self._session_scope() as session:
                row = RunLogRow(
                    total_checked=summary.total_checked or 0,
                    new_burns=summary.new_burns or 0,
                    success=bool(summary.success),
                    error_text=summary.error_text,
                    execution_time_ms=summary.execution_time_ms or 0,
                    notes=summary.notes,
                    created_at=int(time.time()),
                )
                session.add(row)
                session.flush()
                return row.id
        except SQLAlchemyError as e:
            raise StorageError(f"Run log insert failed: {e}") from e

    def list_run_logs(self, *, limit: int = 100) -> list[dict[str, Any]]:
        """Run logs, newest first."""
        try:
            with self._session_scope() as session:
                rows = session.query(RunLogRow).order_by(RunLogRow.id.desc()).limit(limit).all()
                return [r.to_dict() for r in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"Run log query failed: {e}") from e

    # --- Burn events (read side) ---

    def get_burn_event(self, signature: str) -> dict[str, Any] | None:
        try:
            with self._session_scope() as session:
                row = (
                    session.query(BurnEventRow)
                    .filter(BurnEventRow.signature == signature)
                    .first()
                )
                return row.to_dict() if row else None
        except SQLAlchemyError as e:
            raise StorageError(f"Burn event query failed: {e}") from e

    def latest_burn_event(self) -> dict[str, Any] | None:
        try:
            with self._session_scope() as session:
                row = (
                    session.query(BurnEventRow)
                    .order_by(BurnEventRow.timestamp.desc(), BurnEventRow.id.desc())
                    .first()
                )
                return row.to_dict() if row else None
        except SQLAlchemyError as e:
            raise StorageError(f"Burn event query failed: {e}") from e

    def count_burn_events(self) -> int:
        try:
            with self._session_scope() as session:
                return int(session.query(func.count(BurnEventRow.id)).scalar() or 0)
        except SQLAlchemyError as e:
            raise StorageError(f"Burn event count failed: {e}") from e

    def list_burn_events(self, *, offset: int = 0, limit: int = 50) -> list[dict[str, Any]]:
        """Page of burn events, newest timestamp first."""
        try:
            with self._session_scope() as session:
                rows = (
                    session.query(BurnEventRow)
                    .order_by(BurnEventRow.timestamp.desc(), BurnEventRow.id.desc())
                    .offset(offset)
                    .limit(limit)
                    .all()
                )
                return [r.to_dict() for r in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"Burn event query failed: {e}") from e

    def burn_events_between(
        self,
        *,
        start: str | None = None,
        end: str | None = None,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """Burn events with start <= timestamp < end (ISO strings), newest first."""
        try:
            with self._session_scope() as session:
                q = session.query(BurnEventRow)
                if start is not None:
                    q = q.filter(BurnEventRow.timestamp >= start)
                if end is not None:
                    q = q.filter(BurnEventRow.timestamp < end)
                rows = (
                    q.order_by(BurnEventRow.timestamp.desc(), BurnEventRow.id.desc())
                    .limit(limit)
                    .all()
                )
                return [r.to_dict() for r in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"Burn event query failed: {e}") from e


def get_store(url: str | None = None) -> BurnStore:
    """
    Return a BurnStore with tables created.

    url: SQLAlchemy URL. Default: DATABASE_URL, else sqlite:///<DB_PATH or burn_tracker.db>.
    """
    store = BurnStore(url or get_database_url())
    store.init_db()
    return store
