"""Projection of a scale onto a fretboard model.

For every visible cell the target state is decided from the note at that
cell alone: the root is green, other members blue, everything else and
every context fret outside the playable range hidden. Only cells whose
state differs are written, inside one model batch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fretlab.config import FretColor, FretState
from fretlab.notes import Note
from fretlab.pos import FretCoord
from fretlab.scale import Scale

if TYPE_CHECKING:
    from fretlab.model import FretboardModel


def target_state(scale: Scale, note: Note, playable: bool) -> FretState:
    """The state a cell holding `note` should take under `scale`.

    The chromatic scale has no root, so every playable cell is blue.
    """
    if not playable:
        return FretState.hidden()
    elif scale.root() == note:
        return FretState.visible(FretColor.Green, note.label)
    elif scale.contains(note):
        return FretState.visible(FretColor.Blue, note.label)
    else:
        return FretState.hidden()


def project_scale(model: FretboardModel, scale: Scale) -> int:
    """Write the scale's colouring into the model's visible cells.

    Args:
        model: The model to update.
        scale: The scale to show.

    Returns:
        The number of cells whose state changed.
    """
    changed = 0
    with model.batch():
        for string_index in range(model.num_strings):
            for fret_index in range(model.min_fret, model.max_fret + 1):
                coord = FretCoord(string_index, fret_index)
                state = target_state(
                    scale, model.note_at(coord), model.is_playable(coord)
                )
                if model.set_state(coord, state):
                    changed += 1
    return changed
