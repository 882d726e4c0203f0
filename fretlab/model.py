"""The fretboard model and its builder.

The model is the single source of truth for one rendered fretboard: the
playable range, the tuning, the visual configuration and the display
state of every cell. The state grid is allocated once, at construction,
for every coordinate the board could ever show. Later writes mutate the
existing cells and never add or remove one, so renderers may bind to a
cell once and keep the binding across reconfiguration.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, auto, unique
from types import MappingProxyType
from typing import (
    Callable,
    Dict,
    FrozenSet,
    Generator,
    List,
    Mapping,
    Optional,
    Protocol,
    Set,
)

from fretlab import constants
from fretlab.base import InvalidConfiguration
from fretlab.cell import Cell, Listeners, Subscription
from fretlab.config import (
    FretState,
    Instrument,
    InstrumentConfig,
    Tuning,
    VisualConfig,
    get_config_for_instrument,
    validate_fret_range,
)
from fretlab.notes import Note
from fretlab.pos import FretCoord
from fretlab.projector import project_scale
from fretlab.scale import Scale


class RandomSource(Protocol):
    """Uniform integer source; `random.Random` satisfies this."""

    def randrange(self, start: int, stop: int) -> int: ...


@unique
class ChangeKind(Enum):
    """What part of the model a change touched."""

    States = auto()  # One or more cell states
    Range = auto()  # Playable range
    Tuning = auto()  # Tuning, and with it the string count
    Visual = auto()  # Visual configuration


@dataclass(frozen=True)
class ModelChange:
    """One notification, covering everything changed in a batch."""

    kinds: FrozenSet[ChangeKind]
    """The kinds of change included."""
    coords: FrozenSet[FretCoord]
    """Cells whose state changed."""

    def has(self, kind: ChangeKind) -> bool:
        return kind in self.kinds

    @property
    def geometry_changed(self) -> bool:
        """True when the layout must be recomputed."""
        return bool(
            self.kinds & {ChangeKind.Range, ChangeKind.Tuning, ChangeKind.Visual}
        )


class FretboardModel:
    """Authoritative, observable state of one fretboard.

    Construct through `FretboardModelBuilder`. Writes never raise: writes
    to a coordinate outside the grid, or on a string the tuning does not
    have, are ignored.
    """

    def __init__(
        self,
        start_fret: int,
        end_fret: int,
        tuning: Tuning,
        visual_config: VisualConfig,
        fret_states: Optional[Mapping[FretCoord, FretState]] = None,
    ) -> None:
        """Validate the configuration and allocate the full state grid.

        Raises:
            InvalidConfiguration: If the range, tuning or visuals are invalid,
                or an initial state names a coordinate off the grid.
        """
        validate_fret_range(start_fret, end_fret)
        visual_config.validate()
        self._start_fret = start_fret
        self._end_fret = end_fret
        self._tuning = tuning
        self._visual_config = visual_config
        self._cells: Dict[FretCoord, Cell[FretState]] = {
            coord: Cell(FretState.hidden()) for coord in FretCoord.iter_grid()
        }
        self._cells_view: Mapping[FretCoord, Cell[FretState]] = MappingProxyType(
            self._cells
        )
        if fret_states is not None:
            for coord, state in fret_states.items():
                if coord not in self._cells:
                    raise InvalidConfiguration(f"Initial state off the grid: {coord}")
                self._cells[coord].set(state)
        self._listeners: Listeners[ModelChange] = Listeners()
        self._batch_depth = 0
        self._pending_kinds: Set[ChangeKind] = set()
        self._pending_coords: Set[FretCoord] = set()
        logging.info(
            "model created: %d strings, frets %d-%d",
            len(tuning),
            start_fret,
            end_fret,
        )

    @property
    def start_fret(self) -> int:
        return self._start_fret

    @property
    def end_fret(self) -> int:
        return self._end_fret

    @property
    def tuning(self) -> Tuning:
        return self._tuning

    @property
    def visual_config(self) -> VisualConfig:
        return self._visual_config

    @property
    def fret_states(self) -> Mapping[FretCoord, Cell[FretState]]:
        """Read-only view of the preallocated grid; the key set never changes."""
        return self._cells_view

    @property
    def num_strings(self) -> int:
        return len(self._tuning)

    @property
    def min_fret(self) -> int:
        """First visible fret, including context frets."""
        return max(0, self._start_fret - self._visual_config.extra_frets)

    @property
    def max_fret(self) -> int:
        """Last visible fret, including context frets."""
        return min(constants.MAX_FRET, self._end_fret + self._visual_config.extra_frets)

    def is_visible(self, coord: FretCoord) -> bool:
        return (
            0 <= coord.string_index < self.num_strings
            and self.min_fret <= coord.fret_index <= self.max_fret
        )

    def is_playable(self, coord: FretCoord) -> bool:
        return (
            0 <= coord.string_index < self.num_strings
            and self._start_fret <= coord.fret_index <= self._end_fret
        )

    def visible_coords(self) -> List[FretCoord]:
        return list(FretCoord.iter_range(self.num_strings, self.min_fret, self.max_fret))

    def playable_coords(self) -> List[FretCoord]:
        return list(
            FretCoord.iter_range(self.num_strings, self._start_fret, self._end_fret)
        )

    def note_at(self, coord: FretCoord) -> Note:
        """The pitch class sounding at a cell.

        Raises:
            IndexError: If the string is not part of the tuning.
        """
        return self._tuning.note_at(coord.string_index, coord.fret_index)

    def random_playable_coord(self, rng: RandomSource) -> FretCoord:
        """Pick a playable cell uniformly at random."""
        string_index = rng.randrange(0, self.num_strings)
        fret_index = rng.randrange(self._start_fret, self._end_fret + 1)
        return FretCoord(string_index, fret_index)

    def cell(self, coord: FretCoord) -> Cell[FretState]:
        """The stable cell for a grid coordinate.

        Raises:
            KeyError: If the coordinate is off the grid.
        """
        return self._cells[coord]

    def state(self, coord: FretCoord) -> FretState:
        """Current state of a cell; Hidden for coordinates off the grid."""
        cell = self._cells.get(coord)
        if cell is None:
            return FretState.hidden()
        return cell.get()

    def set_state(self, coord: FretCoord, state: FretState) -> bool:
        """Write one cell.

        Args:
            coord: The cell to write.
            state: The new state.

        Returns:
            True if the cell changed. Writes equal to the current value,
            off the grid, or on a string beyond the tuning return False.
        """
        cell = self._cells.get(coord)
        if cell is None or coord.string_index >= self.num_strings:
            logging.debug("ignoring write to %s", coord)
            return False
        if not cell.set(state):
            return False
        self._record(ChangeKind.States, coord)
        return True

    def hide_all(self) -> int:
        """Hide every cell in the grid, returning how many changed."""
        changed = 0
        hidden = FretState.hidden()
        with self.batch():
            for coord, cell in self._cells.items():
                if cell.set(hidden):
                    self._record(ChangeKind.States, coord)
                    changed += 1
        return changed

    def update_from_scale(self, scale: Scale) -> int:
        """Project a scale onto the visible cells, returning how many changed."""
        return project_scale(self, scale)

    def project_scale(self, scale: Scale) -> int:
        return self.update_from_scale(scale)

    def set_fret_range(self, start_fret: int, end_fret: int) -> None:
        """Move the playable range.

        Raises:
            InvalidConfiguration: If the range is invalid.
        """
        validate_fret_range(start_fret, end_fret)
        if (start_fret, end_fret) == (self._start_fret, self._end_fret):
            return
        self._start_fret = start_fret
        self._end_fret = end_fret
        self._record(ChangeKind.Range)

    def set_tuning(self, tuning: Tuning) -> None:
        """Retune the board; cells on strings the new tuning lacks are hidden."""
        if tuning == self._tuning:
            return
        with self.batch():
            hidden = FretState.hidden()
            for coord, cell in self._cells.items():
                if coord.string_index >= len(tuning) and cell.set(hidden):
                    self._record(ChangeKind.States, coord)
            self._tuning = tuning
            self._record(ChangeKind.Tuning)

    def set_visual_config(self, visual_config: VisualConfig) -> None:
        """Replace the visual configuration.

        Raises:
            InvalidConfiguration: If the configuration is invalid.
        """
        visual_config.validate()
        if visual_config == self._visual_config:
            return
        self._visual_config = visual_config
        self._record(ChangeKind.Visual)

    def on_change(self, callback: Callable[[ModelChange], None]) -> Subscription:
        """Subscribe to model changes.

        Outside a batch each write is delivered on its own. Inside a batch
        changes are merged and delivered once the outermost batch exits.
        """
        return self._listeners.add(callback)

    @contextmanager
    def batch(self) -> Generator[FretboardModel, None, None]:
        """Group mutations so observers see them as one change.

        Batches nest; only the outermost one delivers.
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._flush()

    def _record(self, kind: ChangeKind, coord: Optional[FretCoord] = None) -> None:
        self._pending_kinds.add(kind)
        if coord is not None:
            self._pending_coords.add(coord)
        if self._batch_depth == 0:
            self._flush()

    def _flush(self) -> None:
        if not self._pending_kinds:
            return
        change = ModelChange(
            kinds=frozenset(self._pending_kinds),
            coords=frozenset(self._pending_coords),
        )
        self._pending_kinds.clear()
        self._pending_coords.clear()
        logging.debug(
            "model change: %s, %d cells",
            sorted(k.name for k in change.kinds),
            len(change.coords),
        )
        self._listeners.notify(change)


class FretboardModelBuilder:
    """Fluent construction of a `FretboardModel`.

    Unset fields receive defaults: frets 0 to 12, standard tuning, default
    visual configuration and an all-Hidden grid. `build` validates once.
    """

    def __init__(self) -> None:
        self._start_fret = constants.DEFAULT_START_FRET
        self._end_fret = constants.DEFAULT_END_FRET
        self._tuning: Optional[Tuning] = None
        self._visual_config: Optional[VisualConfig] = None
        self._fret_states: Dict[FretCoord, FretState] = {}

    @staticmethod
    def from_config(config: InstrumentConfig) -> FretboardModelBuilder:
        return (
            FretboardModelBuilder()
            .start_fret(config.start_fret)
            .end_fret(config.end_fret)
            .tuning(config.tuning)
            .visual_config(config.visual_config)
        )

    @staticmethod
    def for_instrument(instrument: Instrument) -> FretboardModelBuilder:
        return FretboardModelBuilder.from_config(get_config_for_instrument(instrument))

    def start_fret(self, start_fret: int) -> FretboardModelBuilder:
        self._start_fret = start_fret
        return self

    def end_fret(self, end_fret: int) -> FretboardModelBuilder:
        self._end_fret = end_fret
        return self

    def fret_range(self, start_fret: int, end_fret: int) -> FretboardModelBuilder:
        return self.start_fret(start_fret).end_fret(end_fret)

    def tuning(self, tuning: Tuning) -> FretboardModelBuilder:
        self._tuning = tuning
        return self

    def visual_config(self, visual_config: VisualConfig) -> FretboardModelBuilder:
        self._visual_config = visual_config
        return self

    def fret_states(
        self, fret_states: Mapping[FretCoord, FretState]
    ) -> FretboardModelBuilder:
        """Initial states, merged over the all-Hidden grid."""
        self._fret_states.update(fret_states)
        return self

    def build(self) -> FretboardModel:
        """Create the model.

        Raises:
            InvalidConfiguration: If any field violates the model invariants.
        """
        return FretboardModel(
            start_fret=self._start_fret,
            end_fret=self._end_fret,
            tuning=self._tuning if self._tuning is not None else Tuning.standard(),
            visual_config=(
                self._visual_config
                if self._visual_config is not None
                else VisualConfig()
            ),
            fret_states=self._fret_states,
        )
