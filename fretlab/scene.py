"""Toolkit-neutral scene description.

A scene is a flat list of primitive shapes, each tagged with the layer it
belongs to. Layers are drawn in their declaration order, back to front.
Any vector surface can draw a scene; `fretlab.render.scene_to_svg` writes
one out as SVG.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, unique
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from fretlab.pos import FretCoord


@unique
class Layer(IntEnum):
    """Scene layers, in draw order."""

    Board = 0
    Nut = 1
    Frets = 2
    Strings = 3
    Markers = 4
    Overlays = 5
    ClickTargets = 6
    Notes = 7


# sealed
class Shape:
    """Base class for primitives. Variants are Line, Rect, Circle and Text."""

    pass


@dataclass(frozen=True)
class Line(Shape):
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    stroke_width: float
    opacity: float = 1.0


@dataclass(frozen=True)
class Rect(Shape):
    x: float
    y: float
    width: float
    height: float
    fill: str
    opacity: float = 1.0
    stroke: Optional[str] = None
    stroke_width: float = 0.0
    rx: float = 0.0


@dataclass(frozen=True)
class Circle(Shape):
    cx: float
    cy: float
    r: float
    fill: str
    opacity: float = 1.0


@dataclass(frozen=True)
class Text(Shape):
    """Text centred on (x, y)."""

    x: float
    y: float
    text: str
    fill: str
    font_size: float
    bold: bool = False


ClickHandler = Callable[[FretCoord], None]


@dataclass(frozen=True)
class Group:
    """Shapes drawn together on one layer.

    Groups for grid cells carry their coordinate, and clickable ones carry
    the handler to call with it.
    """

    layer: Layer
    shapes: Tuple[Shape, ...]
    coord: Optional[FretCoord] = None
    on_click: Optional[ClickHandler] = field(default=None, compare=False)

    def click(self) -> bool:
        """Deliver a click to this group's handler, if it has one."""
        if self.on_click is None or self.coord is None:
            return False
        self.on_click(self.coord)
        return True


@dataclass(frozen=True)
class Scene:
    """A sized scene of layered groups."""

    width: float
    height: float
    groups: Tuple[Group, ...]

    def ordered(self) -> List[Group]:
        """Groups in draw order; stable within a layer."""
        return sorted(self.groups, key=lambda g: g.layer)

    def layer(self, layer: Layer) -> List[Group]:
        return [g for g in self.groups if g.layer == layer]

    def shapes(self, layer: Layer) -> Iterator[Shape]:
        for group in self.layer(layer):
            yield from group.shapes

    def cell_groups(self, layer: Layer) -> Dict[FretCoord, Group]:
        return {g.coord: g for g in self.layer(layer) if g.coord is not None}

    def click(self, coord: FretCoord) -> bool:
        """Deliver a click on a cell, as a pointer surface would."""
        group = self.cell_groups(Layer.ClickTargets).get(coord)
        if group is None:
            return False
        return group.click()
