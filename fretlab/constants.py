"""Constants for the fretboard core.

Grid bounds, view-box dimensions and drawing defaults live here so the
model, the layout engine and the render adapter agree on them.
"""

from typing import FrozenSet, Tuple

MAX_STRINGS = 8
"""Number of strings preallocated in every fretboard state grid."""

MAX_FRETS = 25
"""Number of fret columns preallocated per string (frets 0 to 24)."""

MAX_FRET = MAX_FRETS - 1
"""Highest fret index a playable or visible range may reach."""

MIN_STRINGS = 1
"""Smallest tuning accepted by the model."""

DEFAULT_START_FRET = 0
DEFAULT_END_FRET = 12

VIEWBOX_WIDTH = 800.0
"""Fixed view-box width; the height follows from the aspect ratio."""

DEFAULT_ASPECT_RATIO = 3.0
DEFAULT_FRET_MARGIN = 0.05
DEFAULT_NUT_WIDTH = 14.0
DEFAULT_EXTRA_FRETS = 1

DEFAULT_MARKER_POSITIONS: FrozenSet[int] = frozenset(
    {3, 5, 7, 9, 12, 15, 17, 19, 21, 24}
)
"""Conventional inlay positions."""

DOUBLE_MARKER_FRETS: FrozenSet[int] = frozenset({12, 24})
"""Frets whose inlay is drawn as two dots."""

MARKER_RADIUS = 6.0
DOUBLE_MARKER_RADIUS = 8.0
DOUBLE_MARKER_OFFSET = 28.0
"""Vertical distance of each double dot from the board's midline."""

CLICK_TARGET_HEIGHT_RATIO = 0.8
"""Height of a cell's click target as a fraction of the string spacing."""

NOTE_RADIUS = 12.0
NOTE_FONT_SIZE = 8.0

BOARD_FILL = "#deb887"
NUT_FILL = "#f8f8f8"
NUT_STROKE = "#222"
PLAYABLE_FRET_STROKE = "#444"
CONTEXT_FRET_STROKE = "#bbb"
PLAYABLE_FRET_WIDTH = 5.0
CONTEXT_FRET_WIDTH = 3.0
CONTEXT_FRET_OPACITY = 0.6
STRING_STROKE = "#888"
MARKER_FILL = "#444"
MARKER_OPACITY = 0.25
OVERLAY_FILL = "#fff"
OVERLAY_OPACITY = 0.35
NOTE_OPACITY = 0.85
LABEL_FILL = "white"

POSITION_PRESETS: Tuple[Tuple[str, int, int], ...] = (
    ("Root", 0, 4),
    ("First", 2, 6),
    ("Second", 4, 8),
    ("Third", 6, 10),
    ("Fourth", 8, 12),
)
"""Named practice positions as (name, start_fret, end_fret)."""
