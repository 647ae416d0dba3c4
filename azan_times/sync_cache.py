"""Staleness check for fetched prayer times and the on-disk sync record."""

import datetime
import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

import pytz

from azan_times.prayer_api import DateInfo, PrayerTimings

LOGGER = logging.getLogger(__name__)

STALE_AFTER = datetime.timedelta(days=10)
CHECK_INTERVAL_MS = 24 * 60 * 60 * 1000  # re-check once a day

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".azantimes")
CACHE_FILE = os.path.join(CONFIG_DIR, "sync.json")


@dataclass
class SyncRecord:
    last_sync: datetime.datetime
    timings: PrayerTimings
    date: DateInfo


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(pytz.utc)


def is_stale(last_sync: Optional[datetime.datetime], now: datetime.datetime = None) -> bool:
    """True when there is no watermark or it is older than STALE_AFTER."""
    if last_sync is None:
        return True
    if now is None:
        now = utcnow()
    return now - last_sync > STALE_AFTER


def save_sync(last_sync: datetime.datetime, timings: PrayerTimings, date: DateInfo) -> None:
    """Write the watermark together with the data it stamps."""
    os.makedirs(CONFIG_DIR, exist_ok=True)
    record = {
        "last_sync": last_sync.astimezone(pytz.utc).isoformat(),
        "timings": timings.to_dict(),
        "date": date.to_dict(),
    }
    with open(CACHE_FILE, "w", encoding="utf-8") as f:
        json.dump(record, f, indent=2)


def load_sync() -> Optional[SyncRecord]:
    """Load the saved sync record, or return None if missing or unusable."""
    if not os.path.isfile(CACHE_FILE):
        return None
    try:
        with open(CACHE_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
        last_sync = datetime.datetime.fromisoformat(data["last_sync"])
        if last_sync.tzinfo is None:
            last_sync = pytz.utc.localize(last_sync)
        return SyncRecord(
            last_sync=last_sync,
            timings=PrayerTimings.from_api(data["timings"]),
            date=DateInfo.from_api(data["date"]),
        )
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
        LOGGER.warning("Ignoring unreadable sync cache %s: %s", CACHE_FILE, exc)
    return None
