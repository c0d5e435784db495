"""Daily profit helpers shared by bet capture and both processors."""

from __future__ import annotations

from collections.abc import Callable

from predict_ledger.ids import daily_id
from predict_ledger.models import DailyProfitRecord

ONE_DAY = 86400


def day_timestamp(timestamp: int) -> int:
    """Start of the UTC day containing timestamp."""
    return (timestamp // ONE_DAY) * ONE_DAY


def new_daily_record(trader: str, timestamp: int) -> DailyProfitRecord:
    day = day_timestamp(timestamp)
    return DailyProfitRecord(id=daily_id(trader, day), trader=trader, day=day)


def daily_record_factory(trader: str, timestamp: int) -> Callable[[], DailyProfitRecord]:
    return lambda: new_daily_record(trader, timestamp)


def get_or_create_daily(
    load: Callable[[str], DailyProfitRecord | None], trader: str, timestamp: int
) -> DailyProfitRecord:
    """Load the (trader, day) record through load, or start a fresh one."""
    record = load(daily_id(trader, day_timestamp(timestamp)))
    return record if record is not None else new_daily_record(trader, timestamp)
