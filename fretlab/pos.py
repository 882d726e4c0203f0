"""Coordinates of fretboard cells.

A cell is one string at one fret. Fret 0 is the open string at the nut;
string 0 is the highest-pitched string, drawn at the top of the board.
"""

from dataclasses import dataclass
from typing import Generator

from fretlab import constants


@dataclass(frozen=True, order=True)
class FretCoord:
    """Identifies one cell of the fretboard grid.

    Used as a dictionary key throughout; equality is structural.
    """

    string_index: int
    """The string (0-based, 0 is the highest-pitched string)."""
    fret_index: int
    """The fret (0 is the open string at the nut)."""

    def __iter__(self) -> Generator[int, None, None]:
        """Iterate over string and fret indices.

        Yields:
            String index followed by fret index.
        """
        yield self.string_index
        yield self.fret_index

    def in_grid(self) -> bool:
        """Check whether this coordinate lies inside the preallocated grid."""
        return (
            0 <= self.string_index < constants.MAX_STRINGS
            and 0 <= self.fret_index < constants.MAX_FRETS
        )

    @staticmethod
    def iter_grid() -> "Generator[FretCoord, None, None]":
        """Iterate over every coordinate of the preallocated grid.

        Yields:
            FretCoord instances string by string, frets ascending.
        """
        for string_index in range(constants.MAX_STRINGS):
            for fret_index in range(constants.MAX_FRETS):
                yield FretCoord(string_index, fret_index)

    @staticmethod
    def iter_range(
        num_strings: int, min_fret: int, max_fret: int
    ) -> "Generator[FretCoord, None, None]":
        """Iterate over a rectangle of coordinates, frets inclusive.

        Args:
            num_strings: Number of strings, starting from string 0.
            min_fret: First fret to include.
            max_fret: Last fret to include.

        Yields:
            FretCoord instances string by string, frets ascending.
        """
        for string_index in range(num_strings):
            for fret_index in range(min_fret, max_fret + 1):
                yield FretCoord(string_index, fret_index)
