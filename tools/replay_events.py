# tools/replay_events.py
"""
Replay a JSONL capture of realtime server events and print the conversation.

Usage:
    PYTHONPATH=backend python tools/replay_events.py capture.jsonl [--wav-dir out/] [--quiet]
"""
import argparse
import sys
from pathlib import Path

from observability import logger
from session.realtime_session import RealtimeSession
from session.replay import describe_item, export_audio, replay_lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("capture", type=Path)
    parser.add_argument("--wav-dir", type=Path, default=None)
    parser.add_argument("--quiet", action="store_true", help="suppress JSONL logs")
    args = parser.parse_args(argv)

    if args.quiet:
        logger.set_enabled(False)

    session = RealtimeSession()
    with args.capture.open(encoding="utf-8") as f:
        summary = replay_lines(session, f)

    for item in summary.items:
        print(describe_item(item))

    print(
        f"lines={summary.lines_read} items={len(summary.items)} "
        f"dropped={summary.events_dropped}"
    )

    if args.wav_dir is not None:
        for path in export_audio(summary.items, args.wav_dir):
            print(f"wrote {path}")

    return 1 if summary.events_dropped else 0


if __name__ == "__main__":
    sys.exit(main())
