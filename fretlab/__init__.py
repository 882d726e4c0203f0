"""Fretboard model, layout and training core for guitar practice."""

from fretlab.config import (
    FretColor,
    FretState,
    Instrument,
    PositionPreset,
    Tuning,
    VisualConfig,
)
from fretlab.layout import LayoutEngine, LayoutSnapshot
from fretlab.model import FretboardModel, FretboardModelBuilder
from fretlab.notes import Interval, NameStyle, Note
from fretlab.pos import FretCoord
from fretlab.render import FretboardView, RenderAdapter, scene_to_svg
from fretlab.scale import Chromatic, HeptaMode, Heptatonic, Scale, ScaleType
from fretlab.trainer import Trainer

__all__ = [
    "Note",
    "NameStyle",
    "Interval",
    "Scale",
    "ScaleType",
    "Heptatonic",
    "Chromatic",
    "HeptaMode",
    "FretCoord",
    "FretColor",
    "FretState",
    "Tuning",
    "VisualConfig",
    "Instrument",
    "PositionPreset",
    "FretboardModel",
    "FretboardModelBuilder",
    "LayoutEngine",
    "LayoutSnapshot",
    "RenderAdapter",
    "FretboardView",
    "scene_to_svg",
    "Trainer",
]
