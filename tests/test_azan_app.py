"""Tests for the Tk widget; skipped when no display is available."""

import unittest
from unittest.mock import MagicMock

from azan_times.player import AzanPlayer
from azan_times.widget_state import PrayerTimesModel, ViewState
from tests.test_player import FakeClip
from tests.test_widget_state import OK

try:
    import tkinter as tk

    from azan_app import ICON_PLAYING, ICON_STOPPED, PrayerTimesWidget
except ImportError:
    tk = None


@unittest.skipIf(tk is None, "tkinter is not available")
class TestPrayerTimesWidget(unittest.TestCase):
    def setUp(self):
        try:
            self.root = tk.Tk()
        except tk.TclError as exc:
            self.skipTest(f"no display: {exc}")
        self.root.withdraw()
        self.model = PrayerTimesModel(fetcher=MagicMock(return_value=OK))
        self.player = AzanPlayer(clip_factory=FakeClip)
        self.widget = PrayerTimesWidget(self.root, model=self.model, player=self.player)
        self.widget.pack()

    def tearDown(self):
        self.root.destroy()

    def _pending_jobs(self):
        return self.root.tk.splitlist(self.root.tk.call("after", "info"))

    def test_renders_ready_table(self):
        self.assertIs(self.model.state, ViewState.READY)
        self.assertEqual(list(self.widget.delay_vars), ["Fajr", "Dhuhr", "Asr", "Maghrib", "Isha"])
        self.assertEqual(self.widget.adjusted_labels["Maghrib"].cget("text"), "18:28")

    def test_destroy_cancels_timers(self):
        check_job = self.widget._check_job
        tick_job = self.widget._tick_job
        self.assertIn(check_job, self._pending_jobs())
        self.assertIn(tick_job, self._pending_jobs())

        self.widget.destroy()

        pending = self._pending_jobs()
        self.assertNotIn(check_job, pending)
        self.assertNotIn(tick_job, pending)
        self.assertFalse(self.model.alive)

    def test_destroy_stops_playback(self):
        self.widget._toggle_azan()
        self.assertTrue(self.player.is_playing)
        self.widget.destroy()
        self.assertFalse(self.player.is_playing)
        self.assertTrue(self.player.clip.paused)

    def test_cleared_delay_shows_zero(self):
        var = self.widget.delay_vars["Fajr"]
        var.set("30")
        self.assertEqual(self.widget.adjusted_labels["Fajr"].cget("text"), "05:51")
        var.set("")
        self.assertEqual(var.get(), "0")
        self.assertEqual(self.model.delays["Fajr"], 0)
        self.assertEqual(self.widget.adjusted_labels["Fajr"].cget("text"), "05:21")

    def test_negative_delay_clamped(self):
        var = self.widget.delay_vars["Isha"]
        var.set("-5")
        self.assertEqual(var.get(), "0")
        self.assertEqual(self.widget.adjusted_labels["Isha"].cget("text"), "19:46")

    def test_delay_updates_adjusted_time(self):
        self.widget.delay_vars["Maghrib"].set("45")
        self.assertEqual(self.model.delays["Maghrib"], 45)
        self.assertEqual(self.widget.adjusted_labels["Maghrib"].cget("text"), "19:13")

    def test_tick_resets_icon_when_playback_ends(self):
        self.widget._toggle_azan()
        self.assertEqual(self.widget.btn_azan.cget("text"), ICON_PLAYING)
        self.player.clip.finish()
        self.widget._tick()
        self.assertEqual(self.widget.btn_azan.cget("text"), ICON_STOPPED)


if __name__ == "__main__":
    unittest.main()
