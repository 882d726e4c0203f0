import pytest

from fretlab.base import InvalidConfiguration
from fretlab.config import Tuning
from fretlab.notes import Note
from fretlab.parser import InvalidNote, parse_note, parse_notes, parse_tuning


@pytest.mark.parametrize(
    "text, expected",
    [
        ("C", Note.C),
        ("c", Note.C),
        ("C#", Note.Db),
        ("c#", Note.Db),
        ("Db", Note.Db),
        ("D♭", Note.Db),
        ("F♯", Note.Gb),
        ("Bb3", Note.Bb),
        ("bb", Note.Bb),
        ("E4", Note.E),
        ("E#", Note.F),
        ("Cb", Note.B),
        ("F##", Note.G),
        ("  A  ", Note.A),
        ("C♯/D♭", Note.Db),
        ("F#/Gb", Note.Gb),
    ],
)
def test_parse_note(text: str, expected: Note) -> None:
    assert parse_note(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "   ", "H", "#C", "C C", "C#/Eb", "C/", "Cx", "12"],
)
def test_parse_note_invalid(text: str) -> None:
    with pytest.raises(InvalidNote) as exc_info:
        parse_note(text)
    assert exc_info.value.text == text


def test_invalid_note_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        parse_note("X")


def test_labels_parse_back() -> None:
    for note in Note:
        assert parse_note(note.label) == note


@pytest.mark.parametrize(
    "text, expected",
    [
        ("E B G D A E", Tuning.standard()),
        ("E,B,G,D,A,D", Tuning.drop_d()),
        ("G, D, A, E", Tuning.bass()),
        ("e4 b3 g3 d3 a2 e2 b1", Tuning.seven_string()),
    ],
)
def test_parse_tuning(text: str, expected: Tuning) -> None:
    assert parse_tuning(text) == expected


def test_parse_notes_keeps_order() -> None:
    assert parse_notes("C Eb G") == [Note.C, Note.Eb, Note.G]


def test_whitespace_separates_notes() -> None:
    assert parse_notes("E b") == [Note.E, Note.B]
    assert parse_notes("Eb") == [Note.Eb]


def test_parse_tuning_invalid_entry() -> None:
    with pytest.raises(InvalidNote):
        parse_tuning("E B Q D A E")


def test_parse_tuning_too_many_strings() -> None:
    with pytest.raises(InvalidConfiguration):
        parse_tuning("E B G D A E B E A")
