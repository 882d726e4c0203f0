"""Property-based tests for notes and intervals using Hypothesis."""

from hypothesis import given
from hypothesis import strategies as st

from fretlab.notes import Interval, NameStyle, Note
from tests.fretlab.hypo import configure_hypo

configure_hypo()

notes = st.sampled_from(list(Note))


@given(notes, st.integers(min_value=-1000, max_value=1000))
def test_shift_is_invertible(note: Note, steps: int) -> None:
    assert note.shift(steps).shift(-steps) == note


@given(notes, st.integers(-100, 100), st.integers(-100, 100))
def test_shift_composes(note: Note, a: int, b: int) -> None:
    assert note.shift(a).shift(b) == note.shift(a + b)


@given(notes, notes)
def test_from_notes_inverts_of(a: Note, b: Note) -> None:
    interval = Interval.from_notes(a, b)
    assert interval.of(a) == b
    assert interval != Interval.Octave


@given(notes)
def test_both_name_contains_sharp_and_flat(note: Note) -> None:
    both = note.name_in(NameStyle.Both)
    if note.is_natural:
        assert both == note.name_in(NameStyle.Sharp) == note.name_in(NameStyle.Flat)
    else:
        assert both == f"{note.name_in(NameStyle.Sharp)}/{note.name_in(NameStyle.Flat)}"
