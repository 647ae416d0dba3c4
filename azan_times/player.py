"""Azan audio playback: a downloaded MP3 played through pygame's mixer."""

import logging
import os
import threading
from urllib.parse import urlparse

import pygame
import requests

from azan_times.sync_cache import CONFIG_DIR

LOGGER = logging.getLogger(__name__)

AZAN_AUDIO_URL = "https://www.islamcan.com/audio/adhan/azan1.mp3"
AUDIO_DIR = os.path.join(CONFIG_DIR, "audio")
DOWNLOAD_TIMEOUT = 30


def download_clip(url: str, path: str, timeout: int = DOWNLOAD_TIMEOUT) -> str:
    """Stream url to path, replacing the file only once the download completes."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    LOGGER.info("Downloading azan clip from %s to %s", url, path)
    resp = requests.get(url, stream=True, timeout=timeout)
    resp.raise_for_status()
    partial = path + ".part"
    with open(partial, "wb") as f:
        for chunk in resp.iter_content(chunk_size=8192):
            f.write(chunk)
    os.replace(partial, path)
    return path


class PygameClip:
    """
    One remote clip bound to pygame.mixer.music.

    The file is fetched and the mixer initialised on first play, not at
    construction, so building a clip never touches the network or the
    audio device.
    """

    def __init__(self, url: str, audio_dir: str = AUDIO_DIR):
        self.url = url
        filename = os.path.basename(urlparse(url).path) or "azan.mp3"
        self.path = os.path.join(audio_dir, filename)
        self._loaded = False
        self._at_start = True

    def downloaded(self) -> bool:
        return os.path.isfile(self.path)

    def download(self) -> None:
        download_clip(self.url, self.path)

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        if not self.downloaded():
            self.download()
        if not pygame.mixer.get_init():
            pygame.mixer.init()
        pygame.mixer.music.load(self.path)
        self._loaded = True

    def play(self) -> None:
        self._ensure_loaded()
        pygame.mixer.music.play()
        self._at_start = False

    def pause(self) -> None:
        if self._loaded:
            pygame.mixer.music.pause()

    def rewind(self) -> None:
        if self._loaded:
            pygame.mixer.music.rewind()
        self._at_start = True

    def is_busy(self) -> bool:
        return self._loaded and bool(pygame.mixer.music.get_busy())

    @property
    def position(self) -> float:
        """Seconds into the clip; 0.0 before the first play and after a rewind."""
        if self._at_start or not self._loaded:
            return 0.0
        return max(pygame.mixer.music.get_pos(), 0) / 1000.0


class AzanPlayer:
    """
    Play/stop toggle over a single lazily-built clip.

    A clip that is not on disk yet is downloaded on a daemon thread;
    toggle() returns at once with the flag set and poll(), called from the
    UI loop, starts playback when the download lands.
    """

    def __init__(self, url: str = AZAN_AUDIO_URL, clip_factory=PygameClip):
        self.url = url
        self._clip_factory = clip_factory
        self._clip = None
        self._download = None
        self._download_error = None
        self._pending = False
        self.is_playing = False

    @property
    def clip(self):
        if self._clip is None:
            self._clip = self._clip_factory(self.url)
        return self._clip

    @property
    def downloading(self) -> bool:
        return self._download is not None and self._download.is_alive()

    def toggle(self) -> bool:
        """Start playback if stopped, otherwise stop and rewind. Returns the new flag."""
        if self.is_playing:
            self._stop()
        else:
            self._start()
        return self.is_playing

    def _start(self) -> None:
        try:
            clip = self.clip
            if not clip.downloaded():
                self._begin_download(clip)
                self._pending = True
                self.is_playing = True
                return
            self._play(clip)
        except Exception:
            LOGGER.exception("Error playing Azan")
            self.is_playing = False
            return
        self.is_playing = True

    def _begin_download(self, clip) -> None:
        if self.downloading:
            return
        self._download_error = None

        def worker():
            try:
                clip.download()
            except Exception as exc:
                self._download_error = exc

        self._download = threading.Thread(target=worker, daemon=True)
        self._download.start()

    @staticmethod
    def _play(clip) -> None:
        if clip.position:
            clip.rewind()
        clip.play()

    def _stop(self) -> None:
        self.is_playing = False
        self._pending = False
        try:
            self.clip.pause()
            self.clip.rewind()
        except Exception:
            LOGGER.exception("Error stopping Azan")

    def poll(self) -> bool:
        """
        Advance playback state from the UI loop. True when the flag just
        dropped: the clip ended, or its download or start failed.
        """
        if self._pending:
            if self.downloading:
                return False
            self._pending = False
            if self._download_error is not None:
                LOGGER.error("Error downloading Azan: %s", self._download_error)
                self.is_playing = False
                return True
            try:
                self._play(self.clip)
            except Exception:
                LOGGER.exception("Error playing Azan")
                self.is_playing = False
                return True
            return False
        if self.is_playing and self._clip is not None and not self._clip.is_busy():
            LOGGER.debug("Azan playback finished")
            self.is_playing = False
            return True
        return False

    def close(self) -> None:
        if self.is_playing:
            self._stop()
