"""Scale types and scale materialisation.

A scale is a root note paired with a scale type. Heptatonic scale types
carry a mode whose seven intervals are applied to the root; the chromatic
scale contains every pitch class and has no root.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Dict, List, Optional, Tuple

from fretlab.base import ScaleNotImplemented
from fretlab.notes import Interval, Note


@unique
class HeptaMode(Enum):
    """The seven-note modes. Values are the display names."""

    Major = "Major"
    Minor = "Minor"
    Dorian = "Dorian"
    Phrygian = "Phrygian"
    Lydian = "Lydian"
    Mixolydian = "Mixolydian"
    Locrian = "Locrian"

    @property
    def intervals(self) -> Tuple[Interval, ...]:
        """The seven intervals from the root, starting with Unison."""
        return _MODE_INTERVALS[self]

    @property
    def display_name(self) -> str:
        return self.value


_MODE_INTERVALS: Dict[HeptaMode, Tuple[Interval, ...]] = {
    HeptaMode.Major: (
        Interval.Unison,
        Interval.MajorSecond,
        Interval.MajorThird,
        Interval.PerfectFourth,
        Interval.PerfectFifth,
        Interval.MajorSixth,
        Interval.MajorSeventh,
    ),
    HeptaMode.Minor: (
        Interval.Unison,
        Interval.MajorSecond,
        Interval.MinorThird,
        Interval.PerfectFourth,
        Interval.PerfectFifth,
        Interval.MinorSixth,
        Interval.MinorSeventh,
    ),
    HeptaMode.Dorian: (
        Interval.Unison,
        Interval.MajorSecond,
        Interval.MinorThird,
        Interval.PerfectFourth,
        Interval.PerfectFifth,
        Interval.MajorSixth,
        Interval.MinorSeventh,
    ),
    HeptaMode.Phrygian: (
        Interval.Unison,
        Interval.MinorSecond,
        Interval.MinorThird,
        Interval.PerfectFourth,
        Interval.PerfectFifth,
        Interval.MinorSixth,
        Interval.MinorSeventh,
    ),
    HeptaMode.Lydian: (
        Interval.Unison,
        Interval.MajorSecond,
        Interval.MajorThird,
        Interval.Tritone,
        Interval.PerfectFifth,
        Interval.MajorSixth,
        Interval.MajorSeventh,
    ),
    HeptaMode.Mixolydian: (
        Interval.Unison,
        Interval.MajorSecond,
        Interval.MajorThird,
        Interval.PerfectFourth,
        Interval.PerfectFifth,
        Interval.MajorSixth,
        Interval.MinorSeventh,
    ),
    HeptaMode.Locrian: (
        Interval.Unison,
        Interval.MinorSecond,
        Interval.MinorThird,
        Interval.PerfectFourth,
        Interval.Tritone,
        Interval.MinorSixth,
        Interval.MinorSeventh,
    ),
}


# sealed
class ScaleType:
    """Base class for scale type variants.

    The variants are `Heptatonic` and `Chromatic`. Code that needs to
    distinguish them matches on the concrete class.
    """

    @staticmethod
    def all() -> List[ScaleType]:
        """Every scale type, heptatonic modes first."""
        types: List[ScaleType] = [Heptatonic(mode) for mode in HeptaMode]
        types.append(Chromatic())
        return types

    @staticmethod
    def from_name(name: str) -> Optional[ScaleType]:
        """Look up a scale type by its display name."""
        for scale_type in ScaleType.all():
            if scale_type_name(scale_type) == name:
                return scale_type
        return None


@dataclass(frozen=True)
class Heptatonic(ScaleType):
    """A seven-note scale in the given mode."""

    mode: HeptaMode


@dataclass(frozen=True)
class Chromatic(ScaleType):
    """All twelve pitch classes."""

    pass


def scale_type_name(scale_type: ScaleType) -> str:
    """Display name of a scale type, e.g. "Major" or "Chromatic"."""
    match scale_type:
        case Heptatonic(mode):
            return mode.display_name
        case Chromatic():
            return "Chromatic"
        case _:
            raise ScaleNotImplemented(scale_type)


def _materialise(root: Note, scale_type: ScaleType) -> Tuple[Note, ...]:
    match scale_type:
        case Heptatonic(mode):
            return tuple(interval.of(root) for interval in mode.intervals)
        case Chromatic():
            return tuple(root.shift(steps) for steps in range(12))
        case _:
            raise ScaleNotImplemented(scale_type)


@dataclass(frozen=True)
class Scale:
    """A root note together with a scale type.

    The member notes are materialised once at construction, in scale
    degree order starting from the root.
    """

    root_note: Note
    scale_type: ScaleType
    _notes: Tuple[Note, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_notes", _materialise(self.root_note, self.scale_type)
        )

    def notes(self) -> List[Note]:
        """The scale's notes in degree order."""
        return list(self._notes)

    def contains(self, note: Note) -> bool:
        return note in self._notes

    def root(self) -> Optional[Note]:
        """The root note, or None for the chromatic scale."""
        match self.scale_type:
            case Chromatic():
                return None
            case _:
                return self.root_note

    def __str__(self) -> str:
        match self.scale_type:
            case Chromatic():
                return "Chromatic"
            case _:
                return f"{self.root_note} {scale_type_name(self.scale_type)}"
