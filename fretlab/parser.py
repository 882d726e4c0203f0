"""Parser for note names and tunings using Lark.

Note names are accepted the way people type them: a letter, any run of
sharps or flats (ASCII or unicode), and an optional octave number that is
discarded. Fretboard labels of the form "C♯/D♭" parse back to their note.
"""

from __future__ import annotations

from typing import List

from lark import Lark, Transformer
from lark.exceptions import LarkError, VisitError

from fretlab.base import FretlabError
from fretlab.config import Tuning
from fretlab.notes import Note

# Lark grammar for note names and tunings.
# Tunings are written highest string first and separated by whitespace
# and/or commas. Whitespace is significant: "E b" is two notes, "Eb" is one.
NOTE_GRAMMAR = r"""
LETTER: /[A-Ga-g]/
ACCIDENTAL: /[#b♯♭]/
OCTAVE: /-?[0-9]+/
SLASH: "/"
SEP: /\s*,\s*|\s+/

note: spelled (SLASH spelled)?
spelled: LETTER ACCIDENTAL* OCTAVE?

tuning: note (SEP note)*
"""

_LETTER_STEPS = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
_ACCIDENTAL_STEPS = {"#": 1, "♯": 1, "b": -1, "♭": -1}


class InvalidNote(FretlabError, ValueError):
    """Raised when text cannot be read as a note or tuning."""

    def __init__(self, text: str, reason: str = "not a note name") -> None:
        super().__init__(f"Invalid note {text!r}: {reason}")
        self.text = text
        self.reason = reason


class _EnharmonicMismatch(Exception):
    pass


class NoteTransformer(Transformer):
    """Transform parse trees into notes."""

    def spelled(self, items):
        """Letter plus accidentals; the octave token is dropped."""
        steps = _LETTER_STEPS[items[0].upper()]
        for item in items[1:]:
            if item.type == "ACCIDENTAL":
                steps += _ACCIDENTAL_STEPS[str(item)]
        return Note.from_value(steps)

    def note(self, items):
        """A single spelling or a pair that must name the same pitch class."""
        notes = [item for item in items if isinstance(item, Note)]
        if len(notes) == 2 and notes[0] != notes[1]:
            raise _EnharmonicMismatch()
        return notes[0]

    def tuning(self, items):
        return [item for item in items if isinstance(item, Note)]


_PARSER = Lark(NOTE_GRAMMAR, start=["note", "tuning"], parser="lalr")


def _parse(text: str, start: str):
    stripped = text.strip()
    if not stripped:
        raise InvalidNote(text, "empty")
    try:
        tree = _PARSER.parse(stripped, start=start)
        return NoteTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, _EnharmonicMismatch):
            raise InvalidNote(text, "spellings name different notes") from None
        raise
    except LarkError as e:
        raise InvalidNote(text) from e


def parse_note(text: str) -> Note:
    """Parse a single note name.

    Args:
        text: Text such as "C", "f#", "Bb3", "D♭" or "C♯/D♭".

    Returns:
        The pitch class named by the text.

    Raises:
        InvalidNote: If the text is not a note name.
    """
    return _parse(text, "note")


def parse_notes(text: str) -> List[Note]:
    """Parse a whitespace or comma separated list of note names."""
    return _parse(text, "tuning")


def parse_tuning(text: str) -> Tuning:
    """Parse a tuning written highest string first, e.g. "E B G D A E".

    Raises:
        InvalidNote: If any entry is not a note name.
        InvalidConfiguration: If the tuning has too many strings.
    """
    return Tuning.of(*parse_notes(text))
