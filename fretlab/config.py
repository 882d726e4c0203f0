"""Configuration module for fretlab.

This module defines the per-cell display state, the visual configuration
of a rendered fretboard, and the instrument tuning. All of these are
immutable values; the model swaps them wholesale and validates each
replacement in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto, unique
from typing import FrozenSet, Iterable, Optional, Tuple

from fretlab import constants
from fretlab.base import InvalidConfiguration, MatchException
from fretlab.notes import NameStyle, Note


@unique
class FretColor(Enum):
    """Colours a visible cell can take."""

    Red = auto()  # Wrong answer in the trainer
    Green = auto()  # Scale root, or the trainer's reference note
    Blue = auto()  # Other scale members

    @property
    def css(self) -> str:
        """The colour as a CSS colour keyword.

        Raises:
            MatchException: If the colour is not recognized.
        """
        if self == FretColor.Red:
            return "red"
        elif self == FretColor.Green:
            return "green"
        elif self == FretColor.Blue:
            return "blue"
        else:
            raise MatchException(self)


# sealed
class FretState:
    """Render instruction for a single cell.

    The variants are `Hidden` and `Visible`. States are plain values and
    compare structurally, which is what lets the model skip writes that
    would not change anything.
    """

    @staticmethod
    def hidden() -> Hidden:
        return _HIDDEN

    @staticmethod
    def visible(color: FretColor, label: str) -> Visible:
        return Visible(color, label)

    @property
    def is_visible(self) -> bool:
        return isinstance(self, Visible)


@dataclass(frozen=True)
class Hidden(FretState):
    """Nothing is drawn for the cell."""

    pass


@dataclass(frozen=True)
class Visible(FretState):
    """A coloured note circle with a short label."""

    color: FretColor
    label: str


_HIDDEN = Hidden()


@dataclass(frozen=True)
class VisualConfig:
    """Display parameters for one rendered fretboard.

    Holds geometry knobs only; tuning and fret range live on the model.
    """

    svg_aspect_ratio: float = constants.DEFAULT_ASPECT_RATIO
    """Width-to-height ratio of the view box (typically 2.0 to 5.0)."""
    fret_margin_percentage: float = constants.DEFAULT_FRET_MARGIN
    """Vertical padding as a fraction of the view-box height."""
    nut_width: float = constants.DEFAULT_NUT_WIDTH
    """Width of the nut in view-box units."""
    extra_frets: int = constants.DEFAULT_EXTRA_FRETS
    """Context frets drawn beyond each end of the playable range."""
    marker_positions: FrozenSet[int] = constants.DEFAULT_MARKER_POSITIONS
    """Frets carrying an inlay dot; 12 and 24 get two."""

    def validate(self) -> VisualConfig:
        """Check every field, returning self so calls can be chained.

        Raises:
            InvalidConfiguration: If any field is out of range.
        """
        if not self.svg_aspect_ratio > 0:
            raise InvalidConfiguration(
                f"Aspect ratio must be positive: {self.svg_aspect_ratio}"
            )
        if not 0 <= self.fret_margin_percentage < 0.5:
            raise InvalidConfiguration(
                f"Fret margin must be in [0, 0.5): {self.fret_margin_percentage}"
            )
        if not self.nut_width > 0:
            raise InvalidConfiguration(f"Nut width must be positive: {self.nut_width}")
        if self.extra_frets < 0:
            raise InvalidConfiguration(
                f"Extra frets cannot be negative: {self.extra_frets}"
            )
        for fret in self.marker_positions:
            if fret < 1 or fret > constants.MAX_FRET:
                raise InvalidConfiguration(f"Marker position off the board: {fret}")
        return self

    def with_aspect_ratio(self, ratio: float) -> VisualConfig:
        return replace(self, svg_aspect_ratio=ratio)

    def with_fret_margin(self, margin: float) -> VisualConfig:
        return replace(self, fret_margin_percentage=margin)

    def with_nut_width(self, width: float) -> VisualConfig:
        return replace(self, nut_width=width)

    def with_extra_frets(self, extra: int) -> VisualConfig:
        return replace(self, extra_frets=extra)

    def with_marker_positions(self, positions: Iterable[int]) -> VisualConfig:
        return replace(self, marker_positions=frozenset(positions))

    @staticmethod
    def wide_aspect() -> VisualConfig:
        """Wider, shorter board for large horizontal displays."""
        return VisualConfig(svg_aspect_ratio=4.0)


@dataclass(frozen=True)
class Tuning:
    """Open-string notes, index 0 being the highest-pitched string.

    The note at string s, fret f is `notes[s].shift(f)`.
    """

    notes: Tuple[Note, ...]

    def __post_init__(self) -> None:
        if len(self.notes) < constants.MIN_STRINGS:
            raise InvalidConfiguration("Tuning cannot be empty")
        if len(self.notes) > constants.MAX_STRINGS:
            raise InvalidConfiguration(
                f"Tuning has {len(self.notes)} strings, at most {constants.MAX_STRINGS} supported"
            )

    @staticmethod
    def of(*notes: Note) -> Tuning:
        return Tuning(tuple(notes))

    @staticmethod
    def standard() -> Tuning:
        """Standard six-string guitar tuning, E B G D A E."""
        return Tuning.of(Note.E, Note.B, Note.G, Note.D, Note.A, Note.E)

    @staticmethod
    def seven_string() -> Tuning:
        return Tuning.of(Note.E, Note.B, Note.G, Note.D, Note.A, Note.E, Note.B)

    @staticmethod
    def bass() -> Tuning:
        return Tuning.of(Note.G, Note.D, Note.A, Note.E)

    @staticmethod
    def drop_d() -> Tuning:
        return Tuning.of(Note.E, Note.B, Note.G, Note.D, Note.A, Note.D)

    def __len__(self) -> int:
        return len(self.notes)

    def __getitem__(self, string_index: int) -> Note:
        return self.notes[string_index]

    def note_at(self, string_index: int, fret_index: int) -> Note:
        return self.notes[string_index].shift(fret_index)

    def __str__(self) -> str:
        return " ".join(note.name_in(NameStyle.Sharp) for note in self.notes)


def validate_fret_range(start_fret: int, end_fret: int) -> None:
    """Check a playable range.

    Raises:
        InvalidConfiguration: If start > end, start < 0 or end > 24.
    """
    if start_fret < 0:
        raise InvalidConfiguration(f"Start fret cannot be negative: {start_fret}")
    if end_fret > constants.MAX_FRET:
        raise InvalidConfiguration(
            f"End fret {end_fret} beyond the last fret {constants.MAX_FRET}"
        )
    if start_fret > end_fret:
        raise InvalidConfiguration(
            f"Start fret {start_fret} is after end fret {end_fret}"
        )


@unique
class Instrument(Enum):
    """Defines the instrument presets available."""

    Guitar = auto()  # Six strings, standard tuning
    SevenString = auto()  # Standard tuning plus a low B
    Bass = auto()  # Four strings, E A D G
    DropD = auto()  # Standard tuning with the low E dropped to D


@dataclass(frozen=True)
class InstrumentConfig:
    """Everything needed to build a fretboard model for one instrument."""

    instrument: Instrument  # The instrument type
    instrument_name: str  # Display name (e.g., "Guitar", "Bass")
    tuning_name: str  # Name of the tuning (e.g., "Standard", "Drop D")
    tuning: Tuning  # Open-string notes, highest string first
    visual_config: VisualConfig  # Geometry knobs
    start_fret: int  # First playable fret
    end_fret: int  # Last playable fret

    def with_visual_config(self, visual_config: VisualConfig) -> InstrumentConfig:
        return replace(self, visual_config=visual_config)

    def with_fret_range(self, start_fret: int, end_fret: int) -> InstrumentConfig:
        return replace(self, start_fret=start_fret, end_fret=end_fret)


def init_guitar_config() -> InstrumentConfig:
    """Initialize a configuration for a six-string guitar.

    Standard tuning, default visuals, frets 0 to 12 playable.

    Returns:
        An InstrumentConfig with Guitar settings.
    """
    return InstrumentConfig(
        instrument=Instrument.Guitar,
        instrument_name="Guitar",
        tuning_name="Standard",
        tuning=Tuning.standard(),
        visual_config=VisualConfig(),
        start_fret=constants.DEFAULT_START_FRET,
        end_fret=constants.DEFAULT_END_FRET,
    )


def init_seven_string_config() -> InstrumentConfig:
    """Initialize a configuration for a seven-string guitar.

    Returns:
        An InstrumentConfig with a low B string below standard tuning.
    """
    return InstrumentConfig(
        instrument=Instrument.SevenString,
        instrument_name="7-String Guitar",
        tuning_name="Standard",
        tuning=Tuning.seven_string(),
        visual_config=VisualConfig(),
        start_fret=constants.DEFAULT_START_FRET,
        end_fret=constants.DEFAULT_END_FRET,
    )


def init_bass_config() -> InstrumentConfig:
    """Initialize a configuration for a four-string bass.

    Returns:
        An InstrumentConfig with bass tuning.
    """
    return InstrumentConfig(
        instrument=Instrument.Bass,
        instrument_name="Bass",
        tuning_name="Standard",
        tuning=Tuning.bass(),
        visual_config=VisualConfig(),
        start_fret=constants.DEFAULT_START_FRET,
        end_fret=constants.DEFAULT_END_FRET,
    )


def init_drop_d_config() -> InstrumentConfig:
    """Initialize a configuration for a guitar in drop-D tuning.

    Returns:
        An InstrumentConfig with the low string tuned down to D.
    """
    return InstrumentConfig(
        instrument=Instrument.DropD,
        instrument_name="Guitar",
        tuning_name="Drop D",
        tuning=Tuning.drop_d(),
        visual_config=VisualConfig(),
        start_fret=constants.DEFAULT_START_FRET,
        end_fret=constants.DEFAULT_END_FRET,
    )


def get_config_for_instrument(instrument: Instrument) -> InstrumentConfig:
    """Get the preset configuration for a given instrument.

    Args:
        instrument: The instrument type to configure.

    Returns:
        An InstrumentConfig with appropriate settings for the instrument.
    """
    if instrument == Instrument.Guitar:
        return init_guitar_config()
    elif instrument == Instrument.SevenString:
        return init_seven_string_config()
    elif instrument == Instrument.Bass:
        return init_bass_config()
    elif instrument == Instrument.DropD:
        return init_drop_d_config()
    else:
        raise MatchException(instrument)


def wide_aspect(config: InstrumentConfig) -> InstrumentConfig:
    """Preset variant drawn on a wide board."""
    return config.with_visual_config(VisualConfig.wide_aspect())


@dataclass(frozen=True)
class PositionPreset:
    """A named playable range used when setting up scale exercises."""

    name: str
    start_fret: int
    end_fret: int

    @property
    def fret_range(self) -> Tuple[int, int]:
        return (self.start_fret, self.end_fret)

    @staticmethod
    def all() -> Tuple[PositionPreset, ...]:
        return _POSITION_PRESETS

    @staticmethod
    def from_name(name: str) -> Optional[PositionPreset]:
        for preset in _POSITION_PRESETS:
            if preset.name.lower() == name.lower():
                return preset
        return None


_POSITION_PRESETS: Tuple[PositionPreset, ...] = tuple(
    PositionPreset(name, start, end) for name, start, end in constants.POSITION_PRESETS
)
