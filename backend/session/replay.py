"""
Offline replay of captured realtime server traffic.

Feeds a JSONL capture (one server event per line) through a RealtimeSession
and reports the reconstructed conversation. Used by tools/replay_events.py
and handy for reproducing desync reports without a live connection.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from audio.export import write_wav
from realtime.items import Item
from session.realtime_session import RealtimeSession


@dataclass(frozen=True)
class ReplaySummary:
    lines_read: int
    events_dropped: int
    items: tuple[Item, ...]


def replay_lines(session: RealtimeSession, lines: Iterable[str]) -> ReplaySummary:
    """Feed non-blank lines to the session in order."""
    read = 0
    for line in lines:
        if not line.strip():
            continue
        read += 1
        session.on_server_message(line)

    return ReplaySummary(
        lines_read=read,
        events_dropped=session.dropped_events,
        items=tuple(session.conversation.get_items()),
    )


def describe_item(item: Item) -> str:
    """One-line human summary of an item."""
    f = item.formatted
    parts = [item.id, item.type]
    if item.role:
        parts.append(item.role)
    parts.append(str(item.status))
    if f.text:
        parts.append(f"text={f.text!r}")
    if f.transcript:
        parts.append(f"transcript={f.transcript!r}")
    if f.tool is not None:
        parts.append(f"tool={f.tool.name}({f.tool.arguments})")
    if f.output is not None:
        parts.append(f"output={f.output!r}")
    parts.append(f"audio_samples={f.audio.size}")
    return " ".join(parts)


def export_audio(items: Iterable[Item], out_dir: str | Path) -> list[Path]:
    """Write <item_id>.wav for every item that has formatted audio."""
    written: list[Path] = []
    for item in items:
        if item.formatted.audio.size == 0:
            continue
        written.append(write_wav(Path(out_dir) / f"{item.id}.wav", item.formatted.audio))
    return written
