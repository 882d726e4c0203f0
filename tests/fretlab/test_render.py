import xml.etree.ElementTree as ET
from typing import List

import pytest

from fretlab.config import FretColor, FretState, Tuning, VisualConfig
from fretlab.layout import LayoutEngine
from fretlab.model import FretboardModel, FretboardModelBuilder
from fretlab.notes import Note
from fretlab.pos import FretCoord
from fretlab.render import FretboardView, RenderAdapter, note_shapes, scene_to_svg
from fretlab.scale import HeptaMode, Heptatonic, Scale
from fretlab.scene import Circle, Layer, Rect, Scene, Text

SVG = "{http://www.w3.org/2000/svg}"


def render(model: FretboardModel, clicks: List[FretCoord] | None = None) -> Scene:
    snapshot = LayoutEngine().snapshot(
        model.visual_config, model.start_fret, model.end_fret, model.num_strings
    )
    on_click = clicks.append if clicks is not None else None
    return RenderAdapter().render(snapshot, model, on_click)


def test_layers_in_draw_order() -> None:
    model = FretboardModelBuilder().build()
    model.set_state(FretCoord(0, 3), FretState.visible(FretColor.Green, "G"))
    scene = render(model, [])
    layers = [g.layer for g in scene.ordered()]
    assert layers == sorted(layers)
    assert layers[0] == Layer.Board
    assert layers[-1] == Layer.Notes
    assert set(layers) == set(Layer)


def test_nut_only_when_visible() -> None:
    assert render(FretboardModelBuilder().build()).layer(Layer.Nut)
    high = FretboardModelBuilder().fret_range(5, 9).build()
    assert render(high).layer(Layer.Nut) == []


def test_fret_and_string_counts() -> None:
    model = FretboardModelBuilder().fret_range(3, 7).build()
    scene = render(model)
    assert len(list(scene.shapes(Layer.Frets))) == 7
    assert len(list(scene.shapes(Layer.Strings))) == 6
    assert len(list(scene.shapes(Layer.Overlays))) == 2


def test_notes_for_visible_states() -> None:
    model = FretboardModelBuilder().fret_range(3, 7).build()
    model.project_scale(Scale(Note.G, Heptatonic(HeptaMode.Major)))
    # Outside the visible range, so not drawn
    model.set_state(FretCoord(0, 20), FretState.visible(FretColor.Red, "C"))
    scene = render(model)
    notes = scene.cell_groups(Layer.Notes)
    assert set(notes) == {
        coord for coord in model.visible_coords() if model.state(coord).is_visible
    }
    root = notes[FretCoord(5, 3)]
    circle, text = root.shapes
    assert isinstance(circle, Circle)
    assert circle.r == 12.0
    assert circle.fill == "green"
    assert isinstance(text, Text)
    assert text.text == "G"
    assert text.bold
    assert notes[FretCoord(5, 5)].shapes[0].fill == "blue"  # type: ignore[attr-defined]


def test_note_shapes_hidden() -> None:
    assert note_shapes(FretState.hidden(), 1.0, 2.0) == ()


def test_click_targets_deliver_coords() -> None:
    clicks: List[FretCoord] = []
    scene = render(FretboardModelBuilder().fret_range(3, 7).build(), clicks)
    targets = scene.cell_groups(Layer.ClickTargets)
    assert len(targets) == 6 * 7
    assert all(
        isinstance(shape, Rect) and shape.fill == "transparent"
        for shape in scene.shapes(Layer.ClickTargets)
    )
    assert scene.click(FretCoord(2, 4))
    assert not scene.click(FretCoord(2, 20))
    assert clicks == [FretCoord(2, 4)]


def test_no_click_targets_without_handler() -> None:
    scene = render(FretboardModelBuilder().build())
    assert scene.layer(Layer.ClickTargets) == []
    assert not scene.click(FretCoord(0, 1))


def test_view_renders_once_per_batch() -> None:
    model = FretboardModelBuilder().build()
    view = FretboardView(model)
    scenes: List[Scene] = []
    view.on_render(scenes.append)
    assert view.render_count == 1
    with model.batch():
        model.set_state(FretCoord(0, 1), FretState.visible(FretColor.Blue, "F"))
        model.set_state(FretCoord(0, 2), FretState.visible(FretColor.Blue, "F♯/G♭"))
    assert view.render_count == 2
    assert len(scenes) == 1
    assert set(scenes[0].cell_groups(Layer.Notes)) == {FretCoord(0, 1), FretCoord(0, 2)}
    assert view.scene is scenes[0]


def test_view_redraws_only_written_cells() -> None:
    model = FretboardModelBuilder().build()
    model.project_scale(Scale(Note.C, Heptatonic(HeptaMode.Major)))
    view = FretboardView(model)
    before = view.scene
    before_notes = before.cell_groups(Layer.Notes)
    written = FretCoord(1, 1)
    model.set_state(written, FretState.visible(FretColor.Red, "C"))
    assert view.redrawn == frozenset({written})
    after = view.scene
    after_notes = after.cell_groups(Layer.Notes)
    assert set(after_notes) == set(before_notes)
    assert after_notes[written] is not before_notes[written]
    assert after_notes[written].shapes[0].fill == "red"  # type: ignore[attr-defined]
    assert all(
        after_notes[coord] is group
        for coord, group in before_notes.items()
        if coord != written
    )
    others = [g for g in after.groups if g.layer != Layer.Notes]
    assert all(
        a is b
        for a, b in zip(others, (g for g in before.groups if g.layer != Layer.Notes))
    )
    assert view.binding.take_dirty() == frozenset()


def test_view_drops_hidden_cells() -> None:
    model = FretboardModelBuilder().build()
    view = FretboardView(model)
    coord = FretCoord(2, 4)
    model.set_state(coord, FretState.visible(FretColor.Blue, "F♯/G♭"))
    assert set(view.scene.cell_groups(Layer.Notes)) == {coord}
    model.set_state(coord, FretState.hidden())
    assert view.redrawn == frozenset({coord})
    assert view.scene.cell_groups(Layer.Notes) == {}


def test_partial_redraw_matches_full_render() -> None:
    model = FretboardModelBuilder().fret_range(3, 7).build()
    view = FretboardView(model)
    model.project_scale(Scale(Note.G, Heptatonic(HeptaMode.Major)))
    model.set_state(FretCoord(0, 4), FretState.visible(FretColor.Red, "G♯/A♭"))
    assert view.layout_count == 1
    assert view.scene == RenderAdapter().render(view.snapshot, model)


def test_view_recomputes_layout_only_for_geometry() -> None:
    model = FretboardModelBuilder().build()
    view = FretboardView(model)
    assert view.layout_count == 1
    model.project_scale(Scale(Note.C, Heptatonic(HeptaMode.Major)))
    assert view.layout_count == 1
    # Same string count, so the geometry is unchanged
    model.set_tuning(Tuning.drop_d())
    assert view.layout_count == 1
    assert view.render_count == 3
    model.set_fret_range(5, 9)
    assert view.layout_count == 2
    assert view.snapshot.visible == (4, 10)
    model.set_visual_config(VisualConfig(svg_aspect_ratio=4.0))
    assert view.layout_count == 3
    assert view.snapshot.height == pytest.approx(200.0)


def test_view_rebinds_existing_cells() -> None:
    model = FretboardModelBuilder().build()
    cells = {coord: model.cell(coord) for coord in model.fret_states}
    view = FretboardView(model)
    assert view.binding.bound_coords == frozenset(model.visible_coords())
    assert all(view.binding.cell(c) is cells[c] for c in view.binding.bound_coords)
    model.set_fret_range(5, 9)
    assert view.binding.bound_coords == frozenset(FretCoord.iter_range(6, 4, 10))
    assert model.cell(FretCoord(0, 0)).subscriber_count == 0
    assert model.cell(FretCoord(0, 5)).subscriber_count == 1
    assert all(model.cell(c) is cell for c, cell in cells.items())
    view.close()
    assert model.cell(FretCoord(0, 5)).subscriber_count == 0


def test_view_follows_string_count() -> None:
    model = FretboardModelBuilder().build()
    view = FretboardView(model)
    model.set_tuning(Tuning.bass())
    assert view.snapshot.num_strings == 4
    assert len(list(view.scene.shapes(Layer.Strings))) == 4
    model.set_tuning(Tuning.seven_string())
    assert len(list(view.scene.shapes(Layer.Strings))) == 7


def test_view_clicks() -> None:
    clicks: List[FretCoord] = []
    model = FretboardModelBuilder().build()
    view = FretboardView(model, on_click=clicks.append)
    assert view.click(FretCoord(3, 0))
    model.set_fret_range(5, 9)
    assert not view.click(FretCoord(3, 0))
    assert clicks == [FretCoord(3, 0)]


def test_view_stops_after_close() -> None:
    model = FretboardModelBuilder().build()
    view = FretboardView(model)
    view.close()
    model.set_state(FretCoord(0, 1), FretState.visible(FretColor.Blue, "F"))
    assert view.render_count == 1


def test_svg_output() -> None:
    model = FretboardModelBuilder().build()
    model.set_state(FretCoord(1, 1), FretState.visible(FretColor.Green, "C"))
    view = FretboardView(model, on_click=lambda coord: None)
    root = ET.fromstring(view.to_svg())
    assert root.tag == f"{SVG}svg"
    assert root.get("viewBox") == "0 0 800 266.667"
    classes = [g.get("class") for g in root.findall(f"{SVG}g")]
    assert classes[0] == "board"
    assert classes[-1] == "notes"
    note = root.findall(f"{SVG}g[@class='notes']")
    assert len(note) == 1
    assert note[0].get("data-string") == "1"
    assert note[0].get("data-fret") == "1"
    circle = note[0].find(f"{SVG}circle")
    assert circle is not None and circle.get("fill") == "green"
    text = note[0].find(f"{SVG}text")
    assert text is not None and text.text == "C"
    assert text.get("font-weight") == "bold"


def test_svg_of_empty_board_has_no_notes() -> None:
    svg = scene_to_svg(render(FretboardModelBuilder().build()))
    assert "class=\"notes\"" not in svg
    assert svg.startswith("<svg")
