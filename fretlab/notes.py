"""Pitch classes and intervals.

This module is the bottom of the music kernel: the twelve equal-tempered
pitch classes, the ways of spelling them, and the thirteen named intervals
between them. Everything here is pure and total.
"""

from __future__ import annotations

from enum import Enum, auto, unique
from typing import Dict, List

from fretlab.base import MatchException

MAX_NOTES = 12
"""Number of distinct pitch classes in equal temperament."""


@unique
class NameStyle(Enum):
    """How accidentals are spelled when a note is rendered as text."""

    Sharp = auto()  # C♯
    Flat = auto()  # D♭
    Both = auto()  # C♯/D♭, used for fretboard labels


@unique
class Note(Enum):
    """Enumeration of the twelve pitch classes.

    Values are semitone offsets from C within an octave. Member names use
    flat spellings for the accidentals; use `name` for display text.
    """

    C = 0
    Db = 1
    D = 2
    Eb = 3
    E = 4
    F = 5
    Gb = 6
    G = 7
    Ab = 8
    A = 9
    Bb = 10
    B = 11

    @staticmethod
    def all() -> List[Note]:
        """Return all twelve notes in ascending order from C."""
        return list(_NOTE_LOOKUP.values())

    @staticmethod
    def from_value(value: int) -> Note:
        """Look up the note for a semitone offset, wrapping modulo 12."""
        return _NOTE_LOOKUP[value % MAX_NOTES]

    def shift(self, steps: int) -> Note:
        """Shift this note by a number of half steps.

        Args:
            steps: Number of half steps to move (can be negative).

        Returns:
            The pitch class `steps` positions later, modulo 12.
        """
        return _NOTE_LOOKUP[(self.value + steps) % MAX_NOTES]

    @property
    def is_natural(self) -> bool:
        return self.value in _NATURAL_LETTERS

    def name_in(self, style: NameStyle) -> str:
        """Spell this note in the given style.

        Naturals are always the bare letter. Accidentals use the unicode
        sharp and flat signs.

        Args:
            style: Which spelling to use for accidentals.

        Returns:
            The display text, e.g. "F♯", "G♭" or "F♯/G♭".

        Raises:
            MatchException: If the style is not recognized.
        """
        if self.is_natural:
            return _NATURAL_LETTERS[self.value]
        sharp = _NATURAL_LETTERS[self.value - 1] + SHARP_SIGN
        flat = _NATURAL_LETTERS[self.value + 1] + FLAT_SIGN
        if style == NameStyle.Sharp:
            return sharp
        elif style == NameStyle.Flat:
            return flat
        elif style == NameStyle.Both:
            return f"{sharp}/{flat}"
        else:
            raise MatchException(style)

    @property
    def label(self) -> str:
        """The Both-style name used for fretboard labels."""
        return self.name_in(NameStyle.Both)

    @property
    def wire_name(self) -> str:
        """The token used for this note in stored exercises."""
        return _WIRE_NAMES[self]

    @staticmethod
    def from_wire_name(token: str) -> Note:
        """Inverse of `wire_name`.

        Raises:
            KeyError: If the token is not a known note.
        """
        return _WIRE_LOOKUP[token]

    def __str__(self) -> str:
        return self.label


SHARP_SIGN = "♯"
FLAT_SIGN = "♭"

_NATURAL_LETTERS: Dict[int, str] = {
    0: "C",
    2: "D",
    4: "E",
    5: "F",
    7: "G",
    9: "A",
    11: "B",
}


def _build_note_lookup() -> Dict[int, Note]:
    d: Dict[int, Note] = {}
    for n in Note:
        d[n.value] = n
    assert len(d) == MAX_NOTES
    return d


_NOTE_LOOKUP = _build_note_lookup()

_WIRE_NAMES: Dict[Note, str] = {
    Note.C: "C",
    Note.Db: "CSharpOrDFlat",
    Note.D: "D",
    Note.Eb: "DSharpOrEFlat",
    Note.E: "E",
    Note.F: "F",
    Note.Gb: "FSharpOrGFlat",
    Note.G: "G",
    Note.Ab: "GSharpOrAFlat",
    Note.A: "A",
    Note.Bb: "ASharpOrBFlat",
    Note.B: "B",
}

_WIRE_LOOKUP: Dict[str, Note] = {v: k for k, v in _WIRE_NAMES.items()}


@unique
class Interval(Enum):
    """The thirteen named intervals from Unison to Octave.

    Values are the half-step counts.
    """

    Unison = 0
    MinorSecond = 1
    MajorSecond = 2
    MinorThird = 3
    MajorThird = 4
    PerfectFourth = 5
    Tritone = 6
    PerfectFifth = 7
    MinorSixth = 8
    MajorSixth = 9
    MinorSeventh = 10
    MajorSeventh = 11
    Octave = 12

    @property
    def half_steps(self) -> int:
        return self.value

    def of(self, note: Note) -> Note:
        """Apply this interval upwards from a note."""
        return note.shift(self.half_steps)

    @staticmethod
    def from_notes(lower: Note, upper: Note) -> Interval:
        """Find the ascending interval from one note to another.

        Equal notes yield Unison, never Octave, so the result always lies
        between Unison and MajorSeventh.

        Args:
            lower: The starting note.
            upper: The note being reached.

        Returns:
            The interval `i` such that `i.of(lower) == upper`.
        """
        return _INTERVAL_LOOKUP[(upper.value - lower.value) % MAX_NOTES]

    @property
    def display_name(self) -> str:
        return _INTERVAL_NAMES[self]

    def __str__(self) -> str:
        return self.display_name


_INTERVAL_LOOKUP: Dict[int, Interval] = {i.value: i for i in Interval}

_INTERVAL_NAMES: Dict[Interval, str] = {
    Interval.Unison: "Unison",
    Interval.MinorSecond: "Minor Second",
    Interval.MajorSecond: "Major Second",
    Interval.MinorThird: "Minor Third",
    Interval.MajorThird: "Major Third",
    Interval.PerfectFourth: "Perfect Fourth",
    Interval.Tritone: "Tritone",
    Interval.PerfectFifth: "Perfect Fifth",
    Interval.MinorSixth: "Minor Sixth",
    Interval.MajorSixth: "Major Sixth",
    Interval.MinorSeventh: "Minor Seventh",
    Interval.MajorSeventh: "Major Seventh",
    Interval.Octave: "Octave",
}
