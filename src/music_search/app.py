from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, TextIO

from music_search.config import Settings, configure_logging, load_local_env_file
from music_search.errors import MusicSearchError, TokenFetchError
from music_search.playback import NullAudioSink, PlaybackController, default_audio_sink
from music_search.search_session import SearchSession
from music_search.spotify_service import SearchClient, TokenBroker
from music_search.view import render

logger = logging.getLogger(__name__)

HELP_TEXT = "Commands: search <keyword> | next | prev | play <n> | token | help | quit"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search the music catalog and play preview clips")
    parser.add_argument("query", nargs="*", help="Optional keyword to search for right away")
    parser.add_argument("--mute", action="store_true", help="Do not play audio, only track state")
    return parser.parse_args(argv)


class MusicSearchApp:
    """Interactive terminal wiring of token broker, search session and playback."""

    def __init__(self, broker: TokenBroker, session: SearchSession, player: PlaybackController,
                 out: Callable[[str], None] = print) -> None:
        self.broker = broker
        self.session = session
        self.player = player
        self.out = out

    def load_token(self) -> bool:
        self.session.is_loading = True
        try:
            self.session.token = self.broker.fetch_token()
        except TokenFetchError as exc:
            self.session.message = exc.message
            return False
        else:
            self.session.message = ""
            return True
        finally:
            self.session.is_loading = False

    def play(self, arg: str) -> None:
        try:
            index = int(arg)
            if index < 1:
                raise IndexError(index)
            track = self.session.results[index - 1]
        except (ValueError, IndexError):
            logger.debug("play: no track at %r among %d results", arg, len(self.session.results))
            self.out(f"No track numbered {arg!r}.")
            return
        self.player.toggle_play(track)

    def handle(self, line: str) -> bool:
        """Run one command. Returns False when the loop should stop."""
        command, _, arg = line.strip().partition(" ")
        command = command.lower()
        arg = arg.strip()

        if command in ("quit", "exit", "q"):
            return False
        if command == "":
            return True
        if command == "help":
            self.out(HELP_TEXT)
            return True
        if command == "search":
            self.session.start(arg)
        elif command == "next":
            self.session.next_page()
        elif command in ("prev", "previous"):
            self.session.previous_page()
        elif command == "play":
            self.play(arg)
        elif command == "token":
            self.load_token()
        else:
            self.session.start(line)
        self.out(render(self.session, self.player.state))
        return True

    def run(self, stdin: TextIO, initial_query: str = "") -> None:
        with self.player:
            self.load_token()
            if initial_query:
                self.session.start(initial_query)
            self.out(render(self.session, self.player.state))
            self.out(HELP_TEXT)
            for line in stdin:
                if not self.handle(line):
                    break


def main(argv: list[str] | None = None) -> None:
    load_local_env_file()
    args = parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        broker = TokenBroker(settings)
    except MusicSearchError as exc:
        raise SystemExit(exc.message)

    sink = NullAudioSink() if args.mute else default_audio_sink()
    app = MusicSearchApp(broker, SearchSession(SearchClient()), PlaybackController(sink))
    app.run(sys.stdin, " ".join(args.query))


if __name__ == "__main__":
    main()
