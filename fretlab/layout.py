"""Fretboard geometry.

The layout engine is a pure function from (visual configuration, playable
range, string count) to a `LayoutSnapshot`: everything a renderer needs to
draw the board without knowing anything about music.

Fret positions follow equal temperament. Along a string of length L the
distance from the nut to fret n is

    x(n) = L * (1 - 0.5 ** (n / 12))

so fret 12 sits at exactly half the string. The visible range is then
stretched to fill the view box (the zoom transform), leaving room for the
nut when fret 0 is visible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto, unique
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np
import numpy.typing as npt

from fretlab import constants
from fretlab.base import InvalidConfiguration
from fretlab.config import VisualConfig, validate_fret_range
from fretlab.pos import FretCoord

type Array = npt.NDArray[np.float64]

_EPSILON = 1e-9


def fret_positions(scale_length: float, num_frets: int) -> Array:
    """Distances from the nut to frets 0 through `num_frets` inclusive.

    Args:
        scale_length: Length of the vibrating string, in view-box units.
        num_frets: Highest fret to compute.

    Returns:
        An array of `num_frets + 1` positions, the first being 0.
    """
    n = np.arange(num_frets + 1, dtype=np.float64)
    return np.float64(scale_length) * (1.0 - np.power(0.5, n / 12.0))


def string_spacing(num_strings: int, height: float) -> float:
    """Vertical gap between strings; the strings are inset by one gap."""
    return height / (num_strings + 1)


@dataclass(frozen=True)
class Bounds:
    """An axis-aligned rectangle in view-box units."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        return (
            self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height
        )


@dataclass(frozen=True)
class FretLine:
    """A vertical fret bar."""

    fret: int
    x: float
    playable: bool
    """Bars bounding the playable range are drawn darker and thicker."""


@dataclass(frozen=True)
class StringLine:
    """A horizontal string; lower strings are drawn thicker."""

    string_index: int
    y: float
    thickness: float


@dataclass(frozen=True)
class MarkerDot:
    """One inlay dot. Frets 12 and 24 carry two."""

    fret: int
    x: float
    y: float
    radius: float


@unique
class OverlaySide(Enum):
    Left = auto()  # Between the nut (or left edge) and the playable range
    Right = auto()  # Between the playable range and the right edge


@dataclass(frozen=True)
class Overlay:
    """A translucent rectangle dimming frets outside the playable range."""

    side: OverlaySide
    bounds: Bounds


@dataclass(frozen=True)
class LayoutSnapshot:
    """Immutable geometry for one render cycle.

    All coordinates are in view-box units, with the origin at the top left.
    """

    width: float
    height: float
    fret_margin: float
    """Vertical padding above and below the fret bars."""
    nut_width: float
    """Configured nut width, whether or not the nut is visible."""
    has_nut: bool
    start_fret: int
    end_fret: int
    min_fret: int
    max_fret: int
    num_strings: int
    string_spacing: float
    range_start: float
    """Absolute position shown at the left edge of the zoomed range."""
    scale_factor: float
    """View-box units per absolute unit."""
    positions: Tuple[float, ...]
    """Absolute fret positions for frets 0 through 25."""
    fret_lines: Tuple[FretLine, ...]
    string_lines: Tuple[StringLine, ...]
    nut: Optional[Bounds]
    markers: Tuple[MarkerDot, ...]
    overlays: Tuple[Overlay, ...]
    click_targets: Mapping[FretCoord, Bounds]

    @property
    def visible(self) -> Tuple[int, int]:
        """The visible fret range, inclusive."""
        return (self.min_fret, self.max_fret)

    @property
    def playable(self) -> Tuple[int, int]:
        """The playable fret range, inclusive."""
        return (self.start_fret, self.end_fret)

    @property
    def effective_nut_width(self) -> float:
        return self.nut_width if self.has_nut else 0.0

    @property
    def fret_xs(self) -> Dict[int, float]:
        """View-box x of every visible fret bar."""
        return {line.fret: line.x for line in self.fret_lines}

    @property
    def string_ys(self) -> Tuple[float, ...]:
        return tuple(line.y for line in self.string_lines)

    @property
    def string_widths(self) -> Tuple[float, ...]:
        return tuple(line.thickness for line in self.string_lines)

    def to_viewbox_x(self, absolute_x: float) -> float:
        """Map an absolute position into the zoomed view box."""
        return (
            self.effective_nut_width
            + (absolute_x - self.range_start) * self.scale_factor
        )

    def string_y(self, string_index: int) -> float:
        return (string_index + 1) * self.string_spacing

    def fret_center_x(self, fret: int) -> Optional[float]:
        """Horizontal centre of the cell behind a fret bar.

        Fret 0 is centred on the nut, and has no position when the nut is
        not visible.
        """
        if fret == 0:
            return self.nut_width / 2 if self.has_nut else None
        if fret < 0 or fret >= len(self.positions):
            return None
        return self.to_viewbox_x((self.positions[fret - 1] + self.positions[fret]) / 2)

    def note_position(self, coord: FretCoord) -> Optional[Tuple[float, float]]:
        """Centre of a cell, where its note circle is drawn."""
        x = self.fret_center_x(coord.fret_index)
        if x is None:
            return None
        return (x, self.string_y(coord.string_index))

    def hit_test(self, x: float, y: float) -> Optional[FretCoord]:
        """The cell whose click target contains a view-box point."""
        for coord, bounds in self.click_targets.items():
            if bounds.contains(x, y):
                return coord
        return None


class LayoutEngine:
    """Computes layout snapshots inside a view box of fixed width.

    The fret position table depends only on the width, so it is computed
    once per engine.
    """

    def __init__(self, width: float = constants.VIEWBOX_WIDTH) -> None:
        if not width > 0:
            raise InvalidConfiguration(f"View box width must be positive: {width}")
        self._width = width
        self._positions = fret_positions(width, constants.MAX_FRETS)

    @property
    def width(self) -> float:
        return self._width

    @property
    def positions(self) -> Array:
        return self._positions

    def snapshot(
        self,
        config: VisualConfig,
        start_fret: int,
        end_fret: int,
        num_strings: int,
    ) -> LayoutSnapshot:
        """Compute the geometry for one render cycle.

        Args:
            config: Visual configuration.
            start_fret: First playable fret.
            end_fret: Last playable fret.
            num_strings: Number of strings drawn.

        Returns:
            The snapshot.

        Raises:
            InvalidConfiguration: If any input is out of range.
        """
        config.validate()
        validate_fret_range(start_fret, end_fret)
        if not constants.MIN_STRINGS <= num_strings <= constants.MAX_STRINGS:
            raise InvalidConfiguration(f"Unsupported string count: {num_strings}")

        width = self._width
        height = width / config.svg_aspect_ratio
        fret_margin = height * config.fret_margin_percentage
        min_fret = max(0, start_fret - config.extra_frets)
        max_fret = min(constants.MAX_FRET, end_fret + config.extra_frets)
        has_nut = min_fret == 0
        positions = self._positions

        # Without a nut the first visible bar sits on the left edge
        range_start = float(positions[min_fret]) if min_fret > 0 else 0.0
        # A lone nut column still needs one fret of width to scale against
        range_end = float(positions[max(max_fret, min_fret + 1)])
        available_width = width - config.nut_width if has_nut else width
        scale_factor = available_width / (range_end - range_start)
        offset = config.nut_width if has_nut else 0.0
        view_xs = offset + (positions - range_start) * scale_factor

        spacing = string_spacing(num_strings, height)

        fret_lines = tuple(
            FretLine(
                fret=fret,
                x=float(view_xs[fret]),
                playable=start_fret <= fret <= end_fret,
            )
            for fret in range(min_fret, max_fret + 1)
        )
        string_lines = tuple(
            StringLine(string_index=s, y=(s + 1) * spacing, thickness=1.0 + s)
            for s in range(num_strings)
        )
        nut = (
            Bounds(0.0, fret_margin, config.nut_width, height - 2 * fret_margin)
            if has_nut
            else None
        )

        def cell_span(fret: int) -> Tuple[float, float]:
            prev = float(positions[fret - 1])
            curr = float(positions[fret])
            mid = (prev + curr) / 2
            quarter = (curr - prev) / 4
            return (
                offset + (mid - quarter - range_start) * scale_factor,
                offset + (mid + quarter - range_start) * scale_factor,
            )

        markers: List[MarkerDot] = []
        mid_y = height / 2
        for fret in range(max(min_fret, 1), max_fret + 1):
            if fret not in config.marker_positions:
                continue
            x = offset + (
                (float(positions[fret - 1]) + float(positions[fret])) / 2 - range_start
            ) * scale_factor
            if fret in constants.DOUBLE_MARKER_FRETS:
                radius = constants.DOUBLE_MARKER_RADIUS
                markers.append(
                    MarkerDot(fret, x, mid_y - constants.DOUBLE_MARKER_OFFSET, radius)
                )
                markers.append(
                    MarkerDot(fret, x, mid_y + constants.DOUBLE_MARKER_OFFSET, radius)
                )
            else:
                markers.append(MarkerDot(fret, x, mid_y, constants.MARKER_RADIUS))

        overlays: List[Overlay] = []
        overlay_height = height - 2 * fret_margin
        if start_fret > min_fret:
            left_x = offset
            right_x = cell_span(start_fret)[0]
            if right_x > left_x:
                overlays.append(
                    Overlay(
                        OverlaySide.Left,
                        Bounds(left_x, fret_margin, right_x - left_x, overlay_height),
                    )
                )
        end_x = float(view_xs[end_fret])
        if width - end_x > _EPSILON:
            overlays.append(
                Overlay(
                    OverlaySide.Right,
                    Bounds(end_x, fret_margin, width - end_x, overlay_height),
                )
            )

        target_height = spacing * constants.CLICK_TARGET_HEIGHT_RATIO
        click_targets: Dict[FretCoord, Bounds] = {}
        for string_index in range(num_strings):
            top = (string_index + 1) * spacing - target_height / 2
            for fret in range(min_fret, max_fret + 1):
                coord = FretCoord(string_index, fret)
                if fret == 0:
                    click_targets[coord] = Bounds(
                        0.0, top, config.nut_width, target_height
                    )
                else:
                    left, right = cell_span(fret)
                    click_targets[coord] = Bounds(left, top, right - left, target_height)

        logging.debug(
            "layout: frets %d-%d visible, nut %s, scale %.3f",
            min_fret,
            max_fret,
            has_nut,
            scale_factor,
        )
        return LayoutSnapshot(
            width=width,
            height=height,
            fret_margin=fret_margin,
            nut_width=config.nut_width,
            has_nut=has_nut,
            start_fret=start_fret,
            end_fret=end_fret,
            min_fret=min_fret,
            max_fret=max_fret,
            num_strings=num_strings,
            string_spacing=spacing,
            range_start=range_start,
            scale_factor=scale_factor,
            positions=tuple(float(p) for p in positions),
            fret_lines=fret_lines,
            string_lines=string_lines,
            nut=nut,
            markers=tuple(markers),
            overlays=tuple(overlays),
            click_targets=MappingProxyType(click_targets),
        )
