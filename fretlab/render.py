"""Render adapter: from layout and cell states to a scene.

`RenderAdapter` is stateless and knows nothing about music; it reads
geometry from a `LayoutSnapshot` and per-cell states from anything with a
`state(coord)` method. `FretboardView` is the reactive part: it keeps a
snapshot current as the model changes, recomputing the layout only when
the geometry-relevant configuration changes, and binds to the model's own
cells so no cell is ever created after the model is built.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import (
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Protocol,
    Set,
    Tuple,
    override,
)

from fretlab import constants
from fretlab.base import MatchException
from fretlab.cell import Cell, Listeners, Subscription
from fretlab.component import MappedComponent, MappedComponentConfig
from fretlab.config import FretState, Hidden, Visible, VisualConfig
from fretlab.layout import Bounds, LayoutEngine, LayoutSnapshot
from fretlab.model import FretboardModel, ModelChange
from fretlab.pos import FretCoord
from fretlab.scene import (
    Circle,
    ClickHandler,
    Group,
    Layer,
    Line,
    Rect,
    Scene,
    Shape,
    Text,
)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"


class StateSource(Protocol):
    """Anything that can report the state of a cell."""

    def state(self, coord: FretCoord) -> FretState: ...


class RenderAdapter:
    """Builds scenes, back to front, from a snapshot and cell states."""

    def render(
        self,
        snapshot: LayoutSnapshot,
        states: StateSource,
        on_click: Optional[ClickHandler] = None,
    ) -> Scene:
        """Build the scene for one render cycle.

        Args:
            snapshot: Geometry for this cycle.
            states: Source of per-cell states, usually the model.
            on_click: Called with the coordinate of a clicked cell. Without
                it no click targets are emitted.

        Returns:
            The scene.
        """
        groups: List[Group] = []
        groups.append(self._board(snapshot))
        if snapshot.nut is not None:
            groups.append(self._nut(snapshot.nut))
        groups.append(self._frets(snapshot))
        groups.append(self._strings(snapshot))
        groups.append(self._markers(snapshot))
        groups.append(self._overlays(snapshot))
        if on_click is not None:
            groups.extend(self._click_targets(snapshot, on_click))
        groups.extend(self._notes(snapshot, states))
        return Scene(snapshot.width, snapshot.height, tuple(groups))

    def _board(self, snapshot: LayoutSnapshot) -> Group:
        return Group(
            Layer.Board,
            (
                Rect(
                    0.0,
                    0.0,
                    snapshot.width,
                    snapshot.height,
                    fill=constants.BOARD_FILL,
                    rx=8.0,
                ),
            ),
        )

    def _nut(self, nut: Bounds) -> Group:
        return Group(
            Layer.Nut,
            (
                Rect(
                    nut.x,
                    nut.y,
                    nut.width,
                    nut.height,
                    fill=constants.NUT_FILL,
                    stroke=constants.NUT_STROKE,
                    stroke_width=5.0,
                    rx=3.0,
                ),
            ),
        )

    def _frets(self, snapshot: LayoutSnapshot) -> Group:
        shapes: List[Shape] = []
        top = snapshot.fret_margin
        bottom = snapshot.height - snapshot.fret_margin
        for fret_line in snapshot.fret_lines:
            if fret_line.playable:
                shapes.append(
                    Line(
                        fret_line.x,
                        top,
                        fret_line.x,
                        bottom,
                        stroke=constants.PLAYABLE_FRET_STROKE,
                        stroke_width=constants.PLAYABLE_FRET_WIDTH,
                    )
                )
            else:
                shapes.append(
                    Line(
                        fret_line.x,
                        top,
                        fret_line.x,
                        bottom,
                        stroke=constants.CONTEXT_FRET_STROKE,
                        stroke_width=constants.CONTEXT_FRET_WIDTH,
                        opacity=constants.CONTEXT_FRET_OPACITY,
                    )
                )
        return Group(Layer.Frets, tuple(shapes))

    def _strings(self, snapshot: LayoutSnapshot) -> Group:
        return Group(
            Layer.Strings,
            tuple(
                Line(
                    0.0,
                    string_line.y,
                    snapshot.width,
                    string_line.y,
                    stroke=constants.STRING_STROKE,
                    stroke_width=string_line.thickness,
                )
                for string_line in snapshot.string_lines
            ),
        )

    def _markers(self, snapshot: LayoutSnapshot) -> Group:
        return Group(
            Layer.Markers,
            tuple(
                Circle(
                    dot.x,
                    dot.y,
                    dot.radius,
                    fill=constants.MARKER_FILL,
                    opacity=constants.MARKER_OPACITY,
                )
                for dot in snapshot.markers
            ),
        )

    def _overlays(self, snapshot: LayoutSnapshot) -> Group:
        return Group(
            Layer.Overlays,
            tuple(
                Rect(
                    overlay.bounds.x,
                    overlay.bounds.y,
                    overlay.bounds.width,
                    overlay.bounds.height,
                    fill=constants.OVERLAY_FILL,
                    opacity=constants.OVERLAY_OPACITY,
                )
                for overlay in snapshot.overlays
            ),
        )

    def _click_targets(
        self, snapshot: LayoutSnapshot, on_click: ClickHandler
    ) -> List[Group]:
        return [
            Group(
                Layer.ClickTargets,
                (
                    Rect(
                        bounds.x,
                        bounds.y,
                        bounds.width,
                        bounds.height,
                        fill="transparent",
                    ),
                ),
                coord=coord,
                on_click=on_click,
            )
            for coord, bounds in snapshot.click_targets.items()
        ]

    def redraw_notes(
        self,
        scene: Scene,
        snapshot: LayoutSnapshot,
        states: StateSource,
        coords: Iterable[FretCoord],
    ) -> Scene:
        """Rebuild the note groups of some cells, reusing every other group.

        The scene must have been rendered from the same snapshot.
        """
        notes = scene.cell_groups(Layer.Notes)
        for coord in coords:
            group = self.note_group(snapshot, states, coord)
            if group is None:
                notes.pop(coord, None)
            else:
                notes[coord] = group
        others = tuple(g for g in scene.groups if g.layer != Layer.Notes)
        return Scene(
            scene.width,
            scene.height,
            others + tuple(notes[coord] for coord in sorted(notes)),
        )

    def note_group(
        self, snapshot: LayoutSnapshot, states: StateSource, coord: FretCoord
    ) -> Optional[Group]:
        """The note group for one cell, or None when nothing is drawn there."""
        position = snapshot.note_position(coord)
        if position is None:
            return None
        shapes = note_shapes(states.state(coord), *position)
        if not shapes:
            return None
        return Group(Layer.Notes, shapes, coord=coord)

    def _notes(self, snapshot: LayoutSnapshot, states: StateSource) -> List[Group]:
        groups: List[Group] = []
        for string_index in range(snapshot.num_strings):
            for fret in range(snapshot.min_fret, snapshot.max_fret + 1):
                group = self.note_group(snapshot, states, FretCoord(string_index, fret))
                if group is not None:
                    groups.append(group)
        return groups


def note_shapes(state: FretState, x: float, y: float) -> Tuple[Shape, ...]:
    """The circle and label for a cell state; nothing when hidden."""
    match state:
        case Hidden():
            return ()
        case Visible(color, label):
            return (
                Circle(
                    x,
                    y,
                    constants.NOTE_RADIUS,
                    fill=color.css,
                    opacity=constants.NOTE_OPACITY,
                ),
                Text(
                    x,
                    y,
                    label,
                    fill=constants.LABEL_FILL,
                    font_size=constants.NOTE_FONT_SIZE,
                    bold=True,
                ),
            )
        case _:
            raise MatchException(state)


@dataclass(frozen=True)
class LayoutConfig(MappedComponentConfig[FretboardModel]):
    """The part of a model that determines geometry."""

    visual_config: VisualConfig
    start_fret: int
    end_fret: int
    num_strings: int

    @classmethod
    @override
    def extract(cls, root_config: FretboardModel) -> LayoutConfig:
        return cls(
            visual_config=root_config.visual_config,
            start_fret=root_config.start_fret,
            end_fret=root_config.end_fret,
            num_strings=root_config.num_strings,
        )


class CellBinding:
    """Subscriptions to the model's cells for the currently visible range.

    Binding a coordinate subscribes to the model's existing cell for it;
    nothing here creates cells. Rebinding to a new range only adds and
    cancels subscriptions. Each write to a bound cell marks it dirty until
    the view redraws it.
    """

    def __init__(self, model: FretboardModel) -> None:
        self._model = model
        self._subscriptions: Dict[FretCoord, Subscription] = {}
        self._dirty: Set[FretCoord] = set()

    @property
    def bound_coords(self) -> FrozenSet[FretCoord]:
        return frozenset(self._subscriptions)

    def cell(self, coord: FretCoord) -> Cell[FretState]:
        return self._model.cell(coord)

    def state(self, coord: FretCoord) -> FretState:
        return self._model.state(coord)

    def bind(self, coords: Iterable[FretCoord]) -> None:
        wanted = set(coords)
        for coord in list(self._subscriptions):
            if coord not in wanted:
                self._subscriptions.pop(coord).cancel()
        for coord in wanted:
            if coord not in self._subscriptions:
                self._subscriptions[coord] = self._model.cell(coord).subscribe(
                    self._marker(coord)
                )

    def take_dirty(self) -> FrozenSet[FretCoord]:
        """Coordinates written since the last call."""
        dirty = frozenset(self._dirty)
        self._dirty.clear()
        return dirty

    def close(self) -> None:
        for subscription in self._subscriptions.values():
            subscription.cancel()
        self._subscriptions.clear()

    def _marker(self, coord: FretCoord) -> Callable[[FretState], None]:
        def mark(_state: FretState) -> None:
            self._dirty.add(coord)

        return mark


class FretboardView(MappedComponent[FretboardModel, LayoutConfig, LayoutSnapshot]):
    """Keeps a scene current for one model.

    A new scene is produced once per model notification, so a batch of
    writes is always rendered whole. When the layout is unchanged only the
    note groups of cells written since the last scene are rebuilt; a new
    layout rebuilds everything.
    """

    def __init__(
        self,
        model: FretboardModel,
        engine: Optional[LayoutEngine] = None,
        adapter: Optional[RenderAdapter] = None,
        on_click: Optional[ClickHandler] = None,
    ) -> None:
        self._model = model
        self._engine = engine if engine is not None else LayoutEngine()
        self._adapter = adapter if adapter is not None else RenderAdapter()
        self._on_click = on_click
        self._layout_count = 0
        self._render_count = 0
        self._redrawn: FrozenSet[FretCoord] = frozenset()
        self._listeners: Listeners[Scene] = Listeners()
        config = LayoutConfig.extract(model)
        super().__init__(config)
        self._snapshot = self.handle_mapped_config(config)
        self._binding = CellBinding(model)
        self._binding.bind(model.visible_coords())
        self._scene = self._render()
        self._subscription = model.on_change(self._on_model_change)

    @classmethod
    @override
    def extract_config(cls, root_config: FretboardModel) -> LayoutConfig:
        return LayoutConfig.extract(root_config)

    @override
    def handle_mapped_config(self, config: LayoutConfig) -> LayoutSnapshot:
        self._layout_count += 1
        logging.debug("recomputing layout")
        return self._engine.snapshot(
            config.visual_config,
            config.start_fret,
            config.end_fret,
            config.num_strings,
        )

    @property
    def snapshot(self) -> LayoutSnapshot:
        return self._snapshot

    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def binding(self) -> CellBinding:
        return self._binding

    @property
    def layout_count(self) -> int:
        """How many times the layout has been computed."""
        return self._layout_count

    @property
    def render_count(self) -> int:
        return self._render_count

    @property
    def redrawn(self) -> FrozenSet[FretCoord]:
        """Cells whose note groups were rebuilt for the current scene."""
        return self._redrawn

    def on_render(self, callback: Callable[[Scene], None]) -> Subscription:
        return self._listeners.add(callback)

    def click(self, coord: FretCoord) -> bool:
        return self._scene.click(coord)

    def to_svg(self) -> str:
        return scene_to_svg(self._scene)

    def close(self) -> None:
        self._subscription.cancel()
        self._binding.close()

    def _on_model_change(self, change: ModelChange) -> None:
        snapshot = self.handle_config(self._model) if change.geometry_changed else None
        dirty = self._binding.take_dirty()
        if snapshot is not None:
            self._snapshot = snapshot
            self._binding.bind(self._model.visible_coords())
            self._scene = self._render()
        else:
            logging.debug("redrawing %d cells", len(dirty))
            self._render_count += 1
            self._redrawn = dirty
            self._scene = self._adapter.redraw_notes(
                self._scene, self._snapshot, self._binding, dirty
            )
        self._listeners.notify(self._scene)

    def _render(self) -> Scene:
        self._render_count += 1
        self._redrawn = self._binding.bound_coords
        return self._adapter.render(self._snapshot, self._binding, self._on_click)


def _fmt(value: float) -> str:
    return format(value, ".6g")


def _shape_element(shape: Shape) -> ET.Element:
    match shape:
        case Line(x1, y1, x2, y2, stroke, stroke_width, opacity):
            element = ET.Element(
                "line",
                {
                    "x1": _fmt(x1),
                    "y1": _fmt(y1),
                    "x2": _fmt(x2),
                    "y2": _fmt(y2),
                    "stroke": stroke,
                    "stroke-width": _fmt(stroke_width),
                },
            )
            if opacity != 1.0:
                element.set("opacity", _fmt(opacity))
            return element
        case Rect(x, y, width, height, fill, opacity, stroke, stroke_width, rx):
            element = ET.Element(
                "rect",
                {
                    "x": _fmt(x),
                    "y": _fmt(y),
                    "width": _fmt(width),
                    "height": _fmt(height),
                    "fill": fill,
                },
            )
            if opacity != 1.0:
                element.set("opacity", _fmt(opacity))
            if stroke is not None:
                element.set("stroke", stroke)
                element.set("stroke-width", _fmt(stroke_width))
            if rx:
                element.set("rx", _fmt(rx))
            return element
        case Circle(cx, cy, r, fill, opacity):
            element = ET.Element(
                "circle",
                {"cx": _fmt(cx), "cy": _fmt(cy), "r": _fmt(r), "fill": fill},
            )
            if opacity != 1.0:
                element.set("opacity", _fmt(opacity))
            return element
        case Text(x, y, text, fill, font_size, bold):
            element = ET.Element(
                "text",
                {
                    "x": _fmt(x),
                    "y": _fmt(y),
                    "text-anchor": "middle",
                    "dominant-baseline": "central",
                    "fill": fill,
                    "font-size": _fmt(font_size),
                },
            )
            if bold:
                element.set("font-weight", "bold")
            element.text = text
            return element
        case _:
            raise MatchException(shape)


def scene_to_svg(scene: Scene) -> str:
    """Serialise a scene as a standalone SVG document.

    Groups are written in draw order. Cell groups carry `data-string` and
    `data-fret` attributes.
    """
    root = ET.Element(
        "svg",
        {
            "xmlns": SVG_NAMESPACE,
            "viewBox": f"0 0 {_fmt(scene.width)} {_fmt(scene.height)}",
        },
    )
    for group in scene.ordered():
        attrs = {"class": group.layer.name.lower()}
        if group.coord is not None:
            attrs["data-string"] = str(group.coord.string_index)
            attrs["data-fret"] = str(group.coord.fret_index)
        g = ET.SubElement(root, "g", attrs)
        for shape in group.shapes:
            g.append(_shape_element(shape))
    return ET.tostring(root, encoding="unicode")
