"""Time-series store for daily records.

`TimeSeriesStore` is the contract consumed by the strategy and the decision
engine. `SqlTimeSeriesStore` implements it over the `raw_records` key-value
table (see `veronica.common.models`):

- key = ``symbol + "_" + ISO-8601 date``, so key order is date order;
  symbols containing "_" are rejected so that prefix scans stay disjoint;
- inclusive range queries widen the end bound to the successor date and use
  the half-open key range ``[key(start), key(end + 1 day))``;
- payloads are JSON-encoded `RawRecord`s; a payload that fails to decode is
  reported as a `StorageError`, never skipped.

Usage:
    from veronica.common.database import get_session_factory
    from veronica.storage.backend import SqlTimeSeriesStore

    store = SqlTimeSeriesStore(get_session_factory())
    records = store.query_by_range("2330", date(2021, 6, 1), date(2021, 6, 30))
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import Protocol

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from veronica.common.exceptions import StorageError
from veronica.common.logging import get_logger
from veronica.common.models import RawRecordRow
from veronica.common.schemas import RawRecord

logger = get_logger("STORAGE")

KEY_SEPARATOR = "_"


class TimeSeriesStore(Protocol):
    """Query/insert contract of the daily record store."""

    def query(self, symbol: str, day: date) -> RawRecord | None: ...

    def query_by_range(self, symbol: str, start: date, end: date) -> list[RawRecord]: ...

    def query_all(self, symbol: str) -> list[RawRecord]: ...

    def batch_insert(self, records: Iterable[tuple[str, RawRecord]]) -> None: ...

    def batch_delete(self, keys: Iterable[tuple[str, date]]) -> None: ...


def _check_symbol(symbol: str) -> str:
    """Symbols must not contain the separator, or prefix scans would overlap."""
    if KEY_SEPARATOR in symbol:
        raise StorageError(
            "Symbol contains the key separator",
            context={"symbol": symbol, "separator": KEY_SEPARATOR},
        )
    return symbol


def make_key(symbol: str, day: date) -> str:
    """Build the storage key for (symbol, day).

    Raises:
        StorageError: If `symbol` contains KEY_SEPARATOR.
    """
    return f"{_check_symbol(symbol)}{KEY_SEPARATOR}{day.isoformat()}"


def encode_record(record: RawRecord) -> str:
    """Serialize a record payload."""
    return record.model_dump_json()


def decode_record(key: str, payload: str) -> RawRecord:
    """Deserialize a record payload.

    Raises:
        StorageError: If the payload is not a valid RawRecord.
    """
    try:
        return RawRecord.model_validate_json(payload)
    except ValidationError as exc:
        raise StorageError("Failed to decode stored record", context={"key": key}) from exc


class SqlTimeSeriesStore:
    """TimeSeriesStore backed by a SQLAlchemy key-value table.

    Args:
        session_factory: Factory producing sessions bound to a database that
            has the `raw_records` table.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def query(self, symbol: str, day: date) -> RawRecord | None:
        """Exact-match lookup. Returns None when no record exists."""
        key = make_key(symbol, day)
        try:
            with self._session_factory() as session:
                row = session.get(RawRecordRow, key)
                payload = row.payload if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError("Query failed", context={"key": key}) from exc

        if payload is None:
            return None
        return decode_record(key, payload)

    def query_by_range(self, symbol: str, start: date, end: date) -> list[RawRecord]:
        """Records with start <= date <= end, ascending by date."""
        if end < start:
            return []
        lower = make_key(symbol, start)
        upper = make_key(symbol, end + timedelta(days=1))
        return self._scan(lower, upper)

    def query_all(self, symbol: str) -> list[RawRecord]:
        """Every record of a symbol, ascending by date."""
        prefix = f"{_check_symbol(symbol)}{KEY_SEPARATOR}"
        # "`" sorts right after "_", closing the prefix range
        upper = f"{symbol}`"
        return self._scan(prefix, upper)

    def batch_insert(self, records: Iterable[tuple[str, RawRecord]]) -> None:
        """Insert or overwrite records in one transaction."""
        rows = [
            RawRecordRow(key=make_key(symbol, record.date), payload=encode_record(record))
            for symbol, record in records
        ]
        if not rows:
            return

        try:
            with self._session_factory() as session, session.begin():
                for row in rows:
                    session.merge(row)
        except SQLAlchemyError as exc:
            raise StorageError("Batch insert failed", context={"count": len(rows)}) from exc

        logger.debug("Records inserted", extra={"data": {"count": len(rows)}})

    def batch_delete(self, keys: Iterable[tuple[str, date]]) -> None:
        """Delete records by (symbol, date) in one transaction."""
        raw_keys = [make_key(symbol, day) for symbol, day in keys]
        if not raw_keys:
            return

        try:
            with self._session_factory() as session, session.begin():
                session.execute(delete(RawRecordRow).where(RawRecordRow.key.in_(raw_keys)))
        except SQLAlchemyError as exc:
            raise StorageError("Batch delete failed", context={"count": len(raw_keys)}) from exc

        logger.debug("Records deleted", extra={"data": {"count": len(raw_keys)}})

    def _scan(self, lower: str, upper: str) -> list[RawRecord]:
        """Decode every row with lower <= key < upper, in key order."""
        stmt = (
            select(RawRecordRow.key, RawRecordRow.payload)
            .where(RawRecordRow.key >= lower, RawRecordRow.key < upper)
            .order_by(RawRecordRow.key)
        )
        try:
            with self._session_factory() as session:
                rows = session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StorageError(
                "Range scan failed", context={"lower": lower, "upper": upper}
            ) from exc

        return [decode_record(key, payload) for key, payload in rows]
