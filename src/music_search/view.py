from __future__ import annotations

from music_search.models import PlaybackState
from music_search.search_session import SearchSession

LOADING_TEXT = "Loading..."
INITIAL_PROMPT = "Please search for your favorite song"


def render_track_rows(session: SearchSession, playback: PlaybackState) -> list[str]:
    rows = []
    for index, track in enumerate(session.results, start=1):
        button = "Pause" if playback.is_playing_track(track) else "Play"
        rows.append(f"{index:>2}. {track.name} - {track.primary_artist} [{button}]")
    return rows


def render_pagination(session: SearchSession) -> str:
    previous_label, next_label = session.page_labels
    if not session.can_go_previous:
        previous_label += " (disabled)"
    return f"{previous_label} | {next_label}"


def render(session: SearchSession, playback: PlaybackState) -> str:
    lines: list[str] = []
    if session.is_loading:
        lines.append(LOADING_TEXT)
    if session.message:
        lines.append(session.message)

    if session.show_pagination:
        lines.extend(render_track_rows(session, playback))
        lines.append(render_pagination(session))
    elif not session.has_searched:
        lines.append(INITIAL_PROMPT)
    return "\n".join(lines)
