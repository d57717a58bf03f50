from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Protocol

from music_search.models import PlaybackState, Track

logger = logging.getLogger(__name__)


class AudioSink(Protocol):
    def load(self, url: str) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...


class NullAudioSink:
    """Sink that plays nothing; keeps a call log."""

    def __init__(self) -> None:
        self.src = ""
        self.playing = False
        self.calls: list[tuple[str, str]] = []

    def load(self, url: str) -> None:
        self.src = url
        self.calls.append(("load", url))

    def play(self) -> None:
        self.playing = True
        self.calls.append(("play", self.src))
        logger.debug("play %s", self.src or "<no preview>")

    def pause(self) -> None:
        self.playing = False
        self.calls.append(("pause", self.src))


def find_mpv_binary(preferred_path: str | None = None) -> str | None:
    if preferred_path and shutil.which(preferred_path):
        return preferred_path
    return shutil.which("mpv")


class MpvAudioSink:
    """Streams a preview URL through an ``mpv`` child process.

    Only one process exists at a time. Pausing stops the process, so playing
    again restarts the clip from the beginning.
    """

    def __init__(self, mpv_path: str) -> None:
        self.mpv_path = mpv_path
        self.src = ""
        self._proc: subprocess.Popen | None = None

    def load(self, url: str) -> None:
        self.pause()
        self.src = url

    def play(self) -> None:
        self.pause()
        if not self.src:
            return
        self._proc = subprocess.Popen(
            [self.mpv_path, "--no-video", "--really-quiet", self.src],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

    def pause(self) -> None:
        proc, self._proc = self._proc, None
        if proc is None or proc.poll() is not None:
            return
        proc.terminate()
        try:
            proc.wait(timeout=2)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()


def default_audio_sink() -> AudioSink:
    mpv = find_mpv_binary()
    if mpv is None:
        logger.warning("mpv not found on PATH; previews will not be audible")
        return NullAudioSink()
    return MpvAudioSink(mpv)


class PlaybackController:
    """Sole owner of the audio sink. At most one track is current."""

    def __init__(self, sink: AudioSink) -> None:
        self.sink = sink
        self.state = PlaybackState()

    def toggle_play(self, track: Track) -> PlaybackState:
        if self.state.is_playing_track(track):
            self.sink.pause()
            self.state.is_playing = False
        else:
            self.sink.load(track.preview_url or "")
            self.sink.play()
            self.state.current_track = track
            self.state.is_playing = True
        return self.state

    def close(self) -> None:
        self.sink.pause()
        self.state.is_playing = False

    def __enter__(self) -> PlaybackController:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
