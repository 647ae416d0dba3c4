"""Fetch prayer times and calendar dates from the Aladhan API."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

import requests

LOGGER = logging.getLogger(__name__)

ALADHAN_BASE = "https://api.aladhan.com/v1"
TIMINGS_BY_CITY_URL = f"{ALADHAN_BASE}/timingsByCity"

CITY = "Karachi"
COUNTRY = "Pakistan"
# Calculation method: 1 = University of Islamic Sciences, Karachi
# 2 = ISNA, 3 = MWL, 4 = Mecca, 5 = Egypt
METHOD = 1

REQUEST_TIMEOUT = 10

PRAYER_NAMES = ["Fajr", "Sunrise", "Dhuhr", "Asr", "Sunset", "Maghrib", "Isha"]
# Sunrise and Sunset are shown as a summary only; they take no delay.
MAIN_PRAYERS = ["Fajr", "Dhuhr", "Asr", "Maghrib", "Isha"]

MINUTES_PER_DAY = 24 * 60

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class PrayerTimings:
    fajr: str
    sunrise: str
    dhuhr: str
    asr: str
    sunset: str
    maghrib: str
    isha: str

    @classmethod
    def from_api(cls, raw: dict) -> "PrayerTimings":
        # The API may append a zone suffix, e.g. "04:30 (PKT)"
        return cls(**{name.lower(): raw[name][:5] for name in PRAYER_NAMES})

    def get(self, name: str) -> str:
        """Look a time up by its API name, e.g. ``"Maghrib"``."""
        return getattr(self, name.lower())

    def to_dict(self) -> dict:
        return {name: self.get(name) for name in PRAYER_NAMES}


@dataclass(frozen=True)
class CalendarDate:
    day: str
    month: str
    year: str

    @classmethod
    def from_api(cls, raw: dict) -> "CalendarDate":
        return cls(
            day=str(raw.get("day") or raw["date"]),
            month=raw["month"]["en"],
            year=str(raw["year"]),
        )

    def __str__(self) -> str:
        return f"{self.day} {self.month} {self.year}"


@dataclass(frozen=True)
class DateInfo:
    readable: str
    timestamp: str
    hijri: CalendarDate
    gregorian: CalendarDate

    @classmethod
    def from_api(cls, raw: dict) -> "DateInfo":
        return cls(
            readable=raw["readable"],
            timestamp=str(raw.get("timestamp", "")),
            hijri=CalendarDate.from_api(raw["hijri"]),
            gregorian=CalendarDate.from_api(raw["gregorian"]),
        )

    def to_dict(self) -> dict:
        """Serialize back into the API's own ``date`` shape."""
        return {
            "readable": self.readable,
            "timestamp": self.timestamp,
            "hijri": {
                "day": self.hijri.day,
                "month": {"en": self.hijri.month},
                "year": self.hijri.year,
            },
            "gregorian": {
                "day": self.gregorian.day,
                "month": {"en": self.gregorian.month},
                "year": self.gregorian.year,
            },
        }


# ──────────────────────────────────────────────────────────────────────────────
# Fetch results
# ──────────────────────────────────────────────────────────────────────────────
FAILURE_PREFIX = "Failed to load prayer times"


@dataclass(frozen=True)
class Ok:
    timings: PrayerTimings
    date: DateInfo


@dataclass(frozen=True)
class NetworkError:
    """Non-2xx HTTP status, or no response at all when ``status`` is None."""

    status: Optional[int]
    reason: str = ""

    @property
    def message(self) -> str:
        if self.status is None:
            return f"{FAILURE_PREFIX}: {self.reason or 'network unreachable'}"
        return f"{FAILURE_PREFIX}: HTTP error! status: {self.status}"


@dataclass(frozen=True)
class ApiError:
    """HTTP succeeded but the envelope's code/status was not 200/"OK"."""

    payload: Any

    @property
    def message(self) -> str:
        return f"{FAILURE_PREFIX}: API error: {self.payload}"


@dataclass(frozen=True)
class UnknownError:
    cause: Any

    @property
    def message(self) -> str:
        if isinstance(self.cause, Exception) and str(self.cause):
            return f"{FAILURE_PREFIX}: {self.cause}"
        return "An unexpected error occurred"


FetchResult = Union[Ok, NetworkError, ApiError, UnknownError]


def fetch_prayer_times(city: str = CITY, country: str = COUNTRY, method: int = METHOD) -> FetchResult:
    """
    Fetch today's prayer times and date info for a city.

    Never raises: transport failures, non-2xx statuses, API-level failures
    and malformed bodies come back as NetworkError, ApiError or
    UnknownError, each already logged.
    """
    params = {"city": city, "country": country, "method": method}
    LOGGER.debug("Requesting prayer times with params=%s", params)
    try:
        resp = requests.get(TIMINGS_BY_CITY_URL, params=params, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        LOGGER.error("Error fetching prayer times: %s", exc)
        return NetworkError(status=None, reason=str(exc))

    if not 200 <= resp.status_code < 300:
        LOGGER.error("Error fetching prayer times: HTTP status %s", resp.status_code)
        return NetworkError(status=resp.status_code)

    try:
        body = resp.json()
        if body.get("code") != 200 or body.get("status") != "OK":
            LOGGER.error("Aladhan API error: code=%s status=%s", body.get("code"), body.get("status"))
            return ApiError(payload=body.get("data"))
        data = body["data"]
        result = Ok(
            timings=PrayerTimings.from_api(data["timings"]),
            date=DateInfo.from_api(data["date"]),
        )
    except Exception as exc:
        LOGGER.exception("Unexpected error parsing prayer times")
        return UnknownError(cause=exc)

    LOGGER.info("Fetched prayer times for %s, %s (%s)", city, country, result.date.readable)
    return result


# ──────────────────────────────────────────────────────────────────────────────
# Display helpers
# ──────────────────────────────────────────────────────────────────────────────
def adjust_time(time_str: str, delay_minutes: int) -> str:
    """Shift an 'HH:MM' time by delay_minutes, wrapping past midnight."""
    hour, minute = map(int, time_str[:5].split(":"))
    total = (hour * 60 + minute + delay_minutes) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def parse_delay(value) -> int:
    """
    Coerce raw delay input to a non-negative minute count.

    Reads a leading integer the way a number field does ("15", " 7", "12min");
    anything else, including an empty field, is 0.
    """
    match = _LEADING_INT.match(str(value)) if value is not None else None
    if not match:
        return 0
    return max(int(match.group(1)), 0)
