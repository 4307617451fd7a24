#!/usr/bin/env python3
"""Score one recorded practice take against a rhythm pattern.

Usage:
    uv run python scripts/evaluate_take.py take.webm --pattern-id cajon-basic
    uv run python scripts/evaluate_take.py take.wav --pattern "B . S . B . S ." --bpm 90
    uv run python scripts/evaluate_take.py take.wav --pattern-id cajon-basic --matching exclusive --save
"""

import argparse
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cajoncoach.analysis.engine import AnalysisEngine
from cajoncoach.config import Settings
from cajoncoach.errors import CajonCoachError
from cajoncoach.history import JsonHistoryRepository, PracticeHistoryItem
from cajoncoach.patterns import PATTERNS


def main():
    parser = argparse.ArgumentParser(description="Score a practice take against a rhythm pattern")
    parser.add_argument("audio", type=Path, help="Recorded take (wav/webm/mp3/...)")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--pattern", help="Step codes, e.g. 'B . S . B . S .'")
    group.add_argument("--pattern-id", choices=sorted(PATTERNS), help="Built-in pattern")
    parser.add_argument("--bpm", type=float, default=None, help="Tempo (default: the pattern's)")
    parser.add_argument("--matching", choices=["nearest", "exclusive"], default=None)
    parser.add_argument("--save", action="store_true", help="Append the result to the practice history")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.pattern_id:
        library_pattern = PATTERNS[args.pattern_id]
        pattern = list(library_pattern.sequence)
        name = library_pattern.name
        bpm = library_pattern.tempo(args.bpm)
    else:
        pattern = args.pattern
        name = "Custom"
        if args.bpm is None:
            parser.error("--bpm is required with --pattern")
        bpm = args.bpm

    settings = Settings()
    if args.matching:
        settings.matching = args.matching

    engine = AnalysisEngine(settings)
    try:
        result = engine.analyze_recording(args.audio, pattern, bpm)
    except CajonCoachError as e:
        print(f"Error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(1)

    if args.save:
        repo = JsonHistoryRepository(settings.history_path, limit=settings.history_limit)
        repo.append(PracticeHistoryItem.from_result(result, rhythm_name=name, bpm=bpm))

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
