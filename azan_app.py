#!/usr/bin/env python3
"""
Azan Prayer Times Desktop Widget
Islamic pixel-art themed always-on-top window showing:
  - Today's date (readable, Hijri and Gregorian)
  - Sunrise / Sunset summary
  - The five daily prayers with a per-prayer delay and the delayed time
  - A toggle to play the azan
Timings come from the Aladhan API for Karachi and are re-fetched when
older than ten days.
"""

import logging
import threading
import tkinter as tk

import pytz

from azan_times.player import AzanPlayer
from azan_times.prayer_api import UnknownError, adjust_time
from azan_times.sync_cache import CHECK_INTERVAL_MS
from azan_times.widget_state import PrayerTimesModel, ViewState

LOGGER = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
# Theme constants: pixel-art Islamic palette
# ──────────────────────────────────────────────────────────────────────────────
BG_DARK = "#0d1117"          # near-black background
BG_CARD = "#161b22"          # slightly lighter card
BG_HIGHLIGHT = "#1a3a2a"     # deep Islamic green
BORDER_COLOR = "#2ea043"     # Islamic green border
ACCENT_GOLD = "#f0c040"
ACCENT_GREEN = "#3fb950"
TEXT_WHITE = "#e6edf3"
TEXT_DIM = "#8b949e"
TEXT_RED = "#ff6b6b"
TEXT_SUN = "#f0c040"         # sunrise
TEXT_MOON = "#7ec8e3"        # sunset

FONT_PIXEL = ("Courier", 10, "bold")
FONT_PIXEL_SM = ("Courier", 8)
FONT_PIXEL_LG = ("Courier", 14, "bold")
FONT_TITLE = ("Courier", 12, "bold")
FONT_HEADING = ("Courier", 18, "bold")

WINDOW_W = 520
WINDOW_H = 560

TICK_MS = 500  # poll audio end-of-playback

CITY_TZ = pytz.timezone("Asia/Karachi")

ICON_PLAYING = "🔊"
ICON_STOPPED = "🔈"

ERROR_HINT = "Please try again later or contact support if the problem persists."

PIXEL_DIVIDER = "◇ ─────────────────────────────── ◇"


# ──────────────────────────────────────────────────────────────────────────────
# Prayer-times widget
# ──────────────────────────────────────────────────────────────────────────────
class PrayerTimesWidget(tk.Frame):
    def __init__(self, master, model: PrayerTimesModel = None, player: AzanPlayer = None):
        super().__init__(master, bg=BG_DARK)
        self.model = model or PrayerTimesModel(runner=self._run_in_background, cache=True)
        self.player = player or AzanPlayer()

        self._body = None
        self._check_job = None
        self._tick_job = None
        self.delay_vars: dict = {}          # prayer -> tk.StringVar
        self.adjusted_labels: dict = {}     # prayer -> tk.Label
        self.btn_azan = None

        self.bind("<Destroy>", self._on_destroy)
        self.model.mount()
        self._render()
        self._check_job = self.after(CHECK_INTERVAL_MS, self._daily_check)
        self._tick_job = self.after(TICK_MS, self._tick)

    # ──────────────────────────────────────────────────────────────────────
    # Data loading (fetch runs in a background thread)
    # ──────────────────────────────────────────────────────────────────────
    def _run_in_background(self, fetch, done):
        def worker():
            try:
                result = fetch()
            except Exception as exc:
                LOGGER.error("Unexpected error fetching prayer times: %s", exc)
                result = UnknownError(cause=exc)
            try:
                self.after(0, lambda: self._deliver(done, result))
            except (RuntimeError, tk.TclError):
                LOGGER.debug("Widget gone before prayer times arrived")

        threading.Thread(target=worker, daemon=True).start()

    def _deliver(self, done, result):
        """Called in main thread once the fetch finishes."""
        done(result)
        if self.model.alive:
            self._render()

    def _daily_check(self):
        if self.model.sync_if_stale():
            LOGGER.info("Prayer times are stale; refreshing")
        self._check_job = self.after(CHECK_INTERVAL_MS, self._daily_check)

    def _tick(self):
        if self.player.poll() and self.btn_azan is not None:
            self.btn_azan.config(text=ICON_STOPPED)
        self._tick_job = self.after(TICK_MS, self._tick)

    def _on_destroy(self, event):
        if event.widget is not self:
            return
        for job in (self._check_job, self._tick_job):
            if job is not None:
                self.after_cancel(job)
        self._check_job = self._tick_job = None
        self.model.unmount()
        self.player.close()

    # ──────────────────────────────────────────────────────────────────────
    # Rendering
    # ──────────────────────────────────────────────────────────────────────
    def _render(self):
        if self._body is not None:
            self._body.destroy()
        self.delay_vars.clear()
        self.adjusted_labels.clear()
        self.btn_azan = None

        self._body = tk.Frame(self, bg=BG_DARK)
        self._body.pack(fill=tk.BOTH, expand=True)

        state = self.model.state
        if state is ViewState.ERROR:
            self._build_error()
        elif state is ViewState.LOADING:
            self._build_loading()
        else:
            self._build_ready()

    def _card(self, title: str, fg: str = ACCENT_GOLD):
        """Return (card, header) frames; the header row holds the title on the left."""
        card = tk.Frame(self._body, bg=BG_CARD, bd=1, relief=tk.RIDGE)
        card.pack(fill=tk.X, padx=10, pady=6)
        header = tk.Frame(card, bg=BG_CARD)
        header.pack(fill=tk.X, padx=8, pady=(6, 2))
        tk.Label(header, text=title, font=FONT_TITLE, fg=fg, bg=BG_CARD).pack(side=tk.LEFT)
        return card, header

    def _build_error(self):
        card, _ = self._card("Error", fg=TEXT_RED)
        tk.Label(
            card,
            text=self.model.error,
            font=FONT_PIXEL,
            fg=TEXT_WHITE,
            bg=BG_CARD,
            wraplength=WINDOW_W - 60,
            justify=tk.LEFT,
        ).pack(anchor="w", padx=8, pady=2)
        tk.Label(
            card,
            text=ERROR_HINT,
            font=FONT_PIXEL_SM,
            fg=TEXT_DIM,
            bg=BG_CARD,
            wraplength=WINDOW_W - 60,
            justify=tk.LEFT,
        ).pack(anchor="w", padx=8, pady=(2, 8))

    def _build_loading(self):
        card, _ = self._card("Loading...")
        tk.Label(
            card,
            text="Fetching prayer times, please wait...",
            font=FONT_PIXEL,
            fg=TEXT_DIM,
            bg=BG_CARD,
        ).pack(anchor="w", padx=8, pady=(2, 8))

    def _build_ready(self):
        timings = self.model.timings
        date = self.model.date

        # ── summary card: date + sunrise/sunset + azan toggle ────────────
        summary, summary_header = self._card("🕐  Prayer Times")
        self.btn_azan = tk.Button(
            summary_header,
            text=ICON_PLAYING if self.player.is_playing else ICON_STOPPED,
            font=FONT_PIXEL,
            fg=ACCENT_GOLD,
            bg=BG_CARD,
            activeforeground=TEXT_WHITE,
            activebackground=BG_HIGHLIGHT,
            bd=0,
            cursor="hand2",
            command=self._toggle_azan,
        )
        self.btn_azan.pack(side=tk.RIGHT)

        for text, fg in (
            (date.readable, TEXT_WHITE),
            (f"Hijri: {date.hijri}", ACCENT_GOLD),
            (f"Gregorian: {date.gregorian}", TEXT_DIM),
        ):
            tk.Label(summary, text=text, font=FONT_PIXEL_SM, fg=fg, bg=BG_CARD).pack()

        sun_row = tk.Frame(summary, bg=BG_CARD)
        sun_row.pack(fill=tk.X, padx=8, pady=(4, 8))
        tk.Label(
            sun_row, text=f"☀️  Sunrise: {timings.sunrise}", font=FONT_PIXEL, fg=TEXT_SUN, bg=BG_CARD
        ).pack(side=tk.LEFT)
        tk.Label(
            sun_row, text=f"🌙  Sunset: {timings.sunset}", font=FONT_PIXEL, fg=TEXT_MOON, bg=BG_CARD
        ).pack(side=tk.RIGHT)

        tk.Label(self._body, text=PIXEL_DIVIDER, font=("Courier", 9), fg=BORDER_COLOR, bg=BG_DARK).pack(pady=2)

        # ── main prayer table ────────────────────────────────────────────
        table_card, _ = self._card("Main Prayer Times")
        table = tk.Frame(table_card, bg=BG_CARD)
        table.pack(fill=tk.X, padx=8, pady=(2, 8))
        for col, heading in enumerate(("Prayer", "Time", "Adjusted Time", "Delay (minutes)")):
            tk.Label(table, text=heading, font=FONT_PIXEL_SM, fg=TEXT_DIM, bg=BG_CARD).grid(
                row=0, column=col, sticky="w", padx=4, pady=(0, 2)
            )

        for i, (name, base, adjusted, delay) in enumerate(self.model.rows(), start=1):
            tk.Label(table, text=name, font=FONT_PIXEL, fg=ACCENT_GREEN, bg=BG_CARD).grid(
                row=i, column=0, sticky="w", padx=4, pady=1
            )
            tk.Label(table, text=base, font=FONT_PIXEL_LG, fg=TEXT_WHITE, bg=BG_CARD).grid(
                row=i, column=1, sticky="w", padx=4
            )
            lbl_adjusted = tk.Label(table, text=adjusted, font=FONT_PIXEL_LG, fg=ACCENT_GOLD, bg=BG_CARD)
            lbl_adjusted.grid(row=i, column=2, sticky="w", padx=4)
            self.adjusted_labels[name] = lbl_adjusted

            var = tk.StringVar(master=table, value=str(delay))
            var.trace_add("write", lambda *_, prayer=name: self._on_delay_change(prayer))
            self.delay_vars[name] = var
            tk.Spinbox(
                table,
                from_=0,
                to=24 * 60,
                width=6,
                textvariable=var,
                font=FONT_PIXEL,
                fg=TEXT_WHITE,
                bg=BG_DARK,
                buttonbackground=BG_CARD,
                insertbackground=TEXT_WHITE,
            ).grid(row=i, column=3, sticky="w", padx=4)

        if self.model.last_sync is not None:
            synced = self.model.last_sync.astimezone(CITY_TZ).strftime("%d %b %Y %H:%M")
            tk.Label(
                self._body,
                text=f"Last synced: {synced} ({CITY_TZ.zone})",
                font=FONT_PIXEL_SM,
                fg=TEXT_DIM,
                bg=BG_DARK,
            ).pack(pady=(2, 6))

    # ──────────────────────────────────────────────────────────────────────
    # User input
    # ──────────────────────────────────────────────────────────────────────
    def _on_delay_change(self, prayer: str):
        var = self.delay_vars[prayer]
        delay = self.model.set_delay(prayer, var.get())
        if var.get() != str(delay):
            var.set(str(delay))  # Tcl does not re-fire this trace
        base = self.model.timings.get(prayer)
        self.adjusted_labels[prayer].config(text=adjust_time(base, delay))

    def _toggle_azan(self):
        playing = self.player.toggle()
        if self.btn_azan is not None:
            self.btn_azan.config(text=ICON_PLAYING if playing else ICON_STOPPED)


# ──────────────────────────────────────────────────────────────────────────────
# Host shell
# ──────────────────────────────────────────────────────────────────────────────
class AzanWindow:
    """Frameless always-on-top page wrapper that mounts the widget."""

    def __init__(self, root: tk.Tk):
        self.root = root
        self._drag_x = 0
        self._drag_y = 0
        self._setup_window()
        self._build_ui()

    def _setup_window(self):
        root = self.root
        root.title("Azan Prayer Times")
        root.configure(bg=BG_DARK)
        root.resizable(False, False)
        root.overrideredirect(True)        # remove OS title bar
        root.attributes("-topmost", True)  # always on top

        screen_w = root.winfo_screenwidth()
        screen_h = root.winfo_screenheight()
        x = screen_w - WINDOW_W - 40
        y = (screen_h - WINDOW_H) // 2
        root.geometry(f"{WINDOW_W}x{WINDOW_H}+{x}+{y}")

        root.bind("<ButtonPress-1>", self._on_drag_start)
        root.bind("<B1-Motion>", self._on_drag_motion)

    def _on_drag_start(self, event):
        self._drag_x = event.x_root - self.root.winfo_x()
        self._drag_y = event.y_root - self.root.winfo_y()

    def _on_drag_motion(self, event):
        self.root.geometry(f"+{event.x_root - self._drag_x}+{event.y_root - self._drag_y}")

    def _build_ui(self):
        outer = tk.Frame(self.root, bg=BORDER_COLOR, bd=0)
        outer.pack(fill=tk.BOTH, expand=True, padx=2, pady=2)
        inner = tk.Frame(outer, bg=BG_DARK, bd=0)
        inner.pack(fill=tk.BOTH, expand=True, padx=1, pady=1)

        # ── title bar (drag zone + close) ────────────────────────────────
        title_bar = tk.Frame(inner, bg=BG_CARD, height=32)
        title_bar.pack(fill=tk.X, side=tk.TOP)
        title_bar.pack_propagate(False)
        tk.Label(
            title_bar,
            text="  🕌  AZAN  ◆  مواقيت الصلاة  ",
            font=FONT_PIXEL,
            fg=ACCENT_GOLD,
            bg=BG_CARD,
        ).pack(side=tk.LEFT, padx=6)
        tk.Button(
            title_bar,
            text=" ✕ ",
            font=FONT_PIXEL_SM,
            fg=TEXT_RED,
            bg=BG_CARD,
            activeforeground=TEXT_WHITE,
            activebackground="#3a1a1a",
            bd=0,
            cursor="hand2",
            command=self.root.destroy,
        ).pack(side=tk.RIGHT, padx=4, pady=4)

        tk.Label(
            inner,
            text="Azan Prayer Times",
            font=FONT_HEADING,
            fg=TEXT_WHITE,
            bg=BG_DARK,
            pady=8,
        ).pack()

        self.widget = PrayerTimesWidget(inner)
        self.widget.pack(fill=tk.BOTH, expand=True)


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────
def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    root = tk.Tk()
    AzanWindow(root)
    root.mainloop()


if __name__ == "__main__":
    main()
