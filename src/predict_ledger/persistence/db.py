"""Database engine initialization — SQLite WAL mode by default, PostgreSQL-ready.

Usage:
    engine = init_db()                          # data/ledger.db
    engine = init_db("postgresql://...")        # production
"""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import create_engine, event, inspect, select, text
from sqlalchemy.engine import Engine as SAEngine

from predict_ledger.ids import daily_id, is_canonical, normalize_id, participation_id
from predict_ledger.persistence.schema import (
    daily_profit_records,
    market_participations,
    metadata,
    participation_bets,
)

log = logging.getLogger("ledger.db")

_engine: SAEngine | None = None

DEFAULT_DB_PATH = "data/ledger.db"


def _set_sqlite_wal(dbapi_conn, connection_record):
    """Enable WAL mode so readers are not blocked while an event commits."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def init_db(url: str | None = None, sqlite_wal: bool = True) -> SAEngine:
    """Initialize the database engine, create tables, and run one-time migrations."""
    global _engine

    if url is None:
        db_path = Path(DEFAULT_DB_PATH)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        url = f"sqlite:///{db_path}"

    engine = create_engine(url, pool_pre_ping=True)

    if url.startswith("sqlite") and sqlite_wal:
        event.listen(engine, "connect", _set_sqlite_wal)

    metadata.create_all(engine)
    _ensure_columns(engine)
    migrate_legacy_ids(engine)
    _engine = engine
    log.info("DB │ initialized at %s", url)
    return engine


# Nullable columns added to tables after release: (table, column, SQL type).
# Fresh databases get them from schema.py; existing ones through ALTER TABLE.
_MIGRATIONS: list[tuple[str, str, str]] = []


def _ensure_columns(engine: SAEngine) -> None:
    """Add columns that may be missing from existing databases."""
    insp = inspect(engine)
    added = 0
    for table_name, col_name, col_type in _MIGRATIONS:
        existing = {c["name"] for c in insp.get_columns(table_name)}
        if col_name not in existing:
            with engine.begin() as conn:
                conn.execute(text(
                    f"ALTER TABLE {table_name} ADD COLUMN {col_name} {col_type}"
                ))
            added += 1
    if added:
        log.info("DB │ migrated %d new columns", added)


def migrate_legacy_ids(engine: SAEngine) -> int:
    """Rewrite participation and daily-record keys from the ``<a>_<b>`` scheme.

    Trader and market columns are normalized alongside the key. A legacy row whose
    canonical key already exists is left in place and reported. Returns rows rewritten.
    """
    moved = 0
    with engine.begin() as conn:
        rows = conn.execute(
            select(
                market_participations.c.id,
                market_participations.c.trader,
                market_participations.c.market,
            )
        ).all()
        for row in rows:
            if is_canonical(row.id):
                continue
            trader, market = normalize_id(row.trader), normalize_id(row.market)
            new_id = participation_id(trader, market)
            if _exists(conn, market_participations, new_id):
                log.warning("DB │ legacy participation %s collides with %s — skipped", row.id, new_id)
                continue
            conn.execute(
                market_participations.update()
                .where(market_participations.c.id == row.id)
                .values(id=new_id, trader=trader, market=market)
            )
            conn.execute(
                participation_bets.update()
                .where(participation_bets.c.participation_id == row.id)
                .values(participation_id=new_id)
            )
            moved += 1

        rows = conn.execute(
            select(
                daily_profit_records.c.id,
                daily_profit_records.c.trader,
                daily_profit_records.c.day,
            )
        ).all()
        for row in rows:
            if is_canonical(row.id):
                continue
            trader = normalize_id(row.trader)
            new_id = daily_id(trader, row.day)
            if _exists(conn, daily_profit_records, new_id):
                log.warning("DB │ legacy daily record %s collides with %s — skipped", row.id, new_id)
                continue
            conn.execute(
                daily_profit_records.update()
                .where(daily_profit_records.c.id == row.id)
                .values(id=new_id, trader=trader)
            )
            moved += 1

    if moved:
        log.info("DB │ migrated %d legacy ids to canonical form", moved)
    return moved


def _exists(conn, table, record_id: str) -> bool:
    return conn.execute(select(table.c.id).where(table.c.id == record_id)).first() is not None


def get_engine() -> SAEngine:
    """Return the active database engine. Raises if not initialized."""
    if _engine is None:
        raise RuntimeError("Database not initialized — call init_db() first")
    return _engine
