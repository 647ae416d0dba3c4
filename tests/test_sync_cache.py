"""Tests for the sync_cache module."""

import datetime
import json
import os
import shutil
import tempfile
import unittest

import pytz

import azan_times.sync_cache as cache_mod
from azan_times.prayer_api import DateInfo, PrayerTimings
from azan_times.sync_cache import is_stale, load_sync, save_sync
from tests.test_prayer_api import MOCK_RESPONSE

NOW = datetime.datetime(2026, 10, 19, 12, 0, tzinfo=pytz.utc)


class TestIsStale(unittest.TestCase):
    def test_absent_watermark_is_stale(self):
        self.assertTrue(is_stale(None, NOW))

    def test_recent_watermark_is_fresh(self):
        self.assertFalse(is_stale(NOW - datetime.timedelta(days=9, hours=23), NOW))

    def test_exactly_ten_days_is_fresh(self):
        self.assertFalse(is_stale(NOW - datetime.timedelta(days=10), NOW))

    def test_older_than_ten_days_is_stale(self):
        self.assertTrue(is_stale(NOW - datetime.timedelta(days=10, seconds=1), NOW))

    def test_defaults_to_current_time(self):
        self.assertFalse(is_stale(datetime.datetime.now(pytz.utc)))


class TestSyncRecord(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.mkdtemp()
        self._orig_config_dir = cache_mod.CONFIG_DIR
        self._orig_cache_file = cache_mod.CACHE_FILE
        cache_mod.CONFIG_DIR = self._tmpdir
        cache_mod.CACHE_FILE = os.path.join(self._tmpdir, "sync.json")
        data = MOCK_RESPONSE["data"]
        self.timings = PrayerTimings.from_api(data["timings"])
        self.date = DateInfo.from_api(data["date"])

    def tearDown(self):
        cache_mod.CONFIG_DIR = self._orig_config_dir
        cache_mod.CACHE_FILE = self._orig_cache_file
        shutil.rmtree(self._tmpdir, ignore_errors=True)

    def test_save_and_load(self):
        save_sync(NOW, self.timings, self.date)
        record = load_sync()
        self.assertIsNotNone(record)
        self.assertEqual(record.last_sync, NOW)
        self.assertEqual(record.timings, self.timings)
        self.assertEqual(record.date, self.date)

    def test_watermark_saved_in_utc(self):
        karachi = pytz.timezone("Asia/Karachi")
        save_sync(NOW.astimezone(karachi), self.timings, self.date)
        with open(cache_mod.CACHE_FILE, encoding="utf-8") as f:
            self.assertEqual(json.load(f)["last_sync"], "2026-10-19T12:00:00+00:00")

    def test_load_returns_none_when_no_file(self):
        self.assertIsNone(load_sync())

    def test_load_returns_none_for_invalid_json(self):
        with open(cache_mod.CACHE_FILE, "w") as f:
            f.write("not valid json")
        self.assertIsNone(load_sync())

    def test_load_returns_none_for_missing_keys(self):
        with open(cache_mod.CACHE_FILE, "w") as f:
            json.dump({"last_sync": NOW.isoformat()}, f)
        self.assertIsNone(load_sync())

    def test_load_returns_none_for_corrupted_date(self):
        save_sync(NOW, self.timings, self.date)
        with open(cache_mod.CACHE_FILE, encoding="utf-8") as f:
            data = json.load(f)
        data["date"]["hijri"] = "07-05-1448"
        with open(cache_mod.CACHE_FILE, "w", encoding="utf-8") as f:
            json.dump(data, f)
        with self.assertLogs("azan_times.sync_cache", level="WARNING"):
            self.assertIsNone(load_sync())


if __name__ == "__main__":
    unittest.main()
