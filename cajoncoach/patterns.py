"""Rhythm pattern codes and the built-in pattern library.

A pattern is an ordered sequence of single-character step codes, one per
eighth-note slot:

    B         bass strike
    S / T     tone (slap) strike
    · . - _   rest, no hit expected
"""

from dataclasses import dataclass

from cajoncoach.analysis.models import HitType
from cajoncoach.errors import InvalidParameterError

REST = "·"

_CODE_MAP: dict[str, HitType | None] = {
    "B": HitType.BASS,
    "S": HitType.TONE,
    "T": HitType.TONE,
    REST: None,
    ".": None,
    "-": None,
    "_": None,
    "": None,
}


def parse_step(code: str) -> HitType | None:
    """Return the expected timbre for a step code, or None for a rest."""
    key = code.strip().upper()
    if key not in _CODE_MAP:
        raise InvalidParameterError(f"Unknown pattern step code: {code!r}")
    return _CODE_MAP[key]


def parse_pattern(codes: list[str] | str) -> list[HitType | None]:
    """Parse a sequence of step codes.

    A string is split on commas or whitespace ("B,·,S,·" or "B · S ·").
    """
    if isinstance(codes, str):
        codes = codes.replace(",", " ").split()
    return [parse_step(c) for c in codes]


@dataclass(frozen=True)
class RhythmPattern:
    """A named practice pattern with its suggested tempo."""
    id: str
    name: str
    sequence: tuple[str, ...]
    bpm: float
    category: str = "basic"

    def tempo(self, bpm: float | None = None) -> float:
        """The requested tempo, falling back to the suggested one only when none was given."""
        return self.bpm if bpm is None else bpm


PATTERNS: dict[str, RhythmPattern] = {
    p.id: p for p in [
        RhythmPattern(
            id="cajon-basic",
            name="Cajón Básico (4/4)",
            sequence=("B", REST, "S", REST, "B", REST, "S", REST),
            bpm=80,
        ),
        RhythmPattern(
            id="rumba-flamenca",
            name="Rumba Flamenca",
            sequence=("B", REST, "S", "S", "B", "B", "S", REST),
            bpm=95,
            category="flamenco",
        ),
        RhythmPattern(
            id="bass-pulse",
            name="Bass Pulse",
            sequence=("B", REST, "B", REST, "B", REST, "B", REST),
            bpm=70,
            category="warmup",
        ),
    ]
}


def get_pattern(pattern_id: str) -> RhythmPattern:
    """Look up a built-in pattern by id (raises KeyError if unknown)."""
    return PATTERNS[pattern_id]
