import pytest

from fretlab.base import InvalidConfiguration, MatchException
from fretlab.config import (
    FretColor,
    FretState,
    Hidden,
    Instrument,
    PositionPreset,
    Tuning,
    Visible,
    VisualConfig,
    get_config_for_instrument,
    validate_fret_range,
    wide_aspect,
)
from fretlab.notes import Note


def test_fret_color_css() -> None:
    assert [c.css for c in FretColor] == ["red", "green", "blue"]


def test_fret_states_compare_structurally() -> None:
    assert FretState.hidden() == Hidden()
    assert FretState.hidden() is FretState.hidden()
    assert FretState.visible(FretColor.Green, "C") == Visible(FretColor.Green, "C")
    assert Visible(FretColor.Green, "C") != Visible(FretColor.Blue, "C")
    assert Visible(FretColor.Green, "C") != Hidden()
    assert not FretState.hidden().is_visible
    assert Visible(FretColor.Red, "D").is_visible


def test_visual_config_defaults() -> None:
    config = VisualConfig()
    assert config.svg_aspect_ratio == 3.0
    assert config.fret_margin_percentage == 0.05
    assert config.nut_width == 14.0
    assert config.extra_frets == 1
    assert config.marker_positions == frozenset({3, 5, 7, 9, 12, 15, 17, 19, 21, 24})
    assert config.validate() is config


def test_visual_config_with_methods_copy() -> None:
    base = VisualConfig()
    changed = (
        base.with_aspect_ratio(2.5)
        .with_fret_margin(0.1)
        .with_nut_width(10.0)
        .with_extra_frets(3)
        .with_marker_positions([5, 7])
    )
    assert base == VisualConfig()
    assert changed.svg_aspect_ratio == 2.5
    assert changed.fret_margin_percentage == 0.1
    assert changed.nut_width == 10.0
    assert changed.extra_frets == 3
    assert changed.marker_positions == frozenset({5, 7})


@pytest.mark.parametrize(
    "config",
    [
        VisualConfig(svg_aspect_ratio=0.0),
        VisualConfig(svg_aspect_ratio=-2.0),
        VisualConfig(fret_margin_percentage=0.5),
        VisualConfig(fret_margin_percentage=-0.01),
        VisualConfig(nut_width=0.0),
        VisualConfig(extra_frets=-1),
        VisualConfig(marker_positions=frozenset({0})),
        VisualConfig(marker_positions=frozenset({25})),
    ],
)
def test_visual_config_validate_rejects(config: VisualConfig) -> None:
    with pytest.raises(InvalidConfiguration):
        config.validate()


def test_wide_aspect() -> None:
    assert VisualConfig.wide_aspect().svg_aspect_ratio == 4.0
    config = wide_aspect(get_config_for_instrument(Instrument.Guitar))
    assert config.visual_config.svg_aspect_ratio == 4.0
    assert config.tuning == Tuning.standard()


def test_standard_tuning_is_high_to_low() -> None:
    tuning = Tuning.standard()
    assert tuning.notes == (Note.E, Note.B, Note.G, Note.D, Note.A, Note.E)
    assert len(tuning) == 6
    assert tuning[1] == Note.B
    assert tuning.note_at(5, 3) == Note.G
    assert str(tuning) == "E B G D A E"


@pytest.mark.parametrize("count", [0, 9])
def test_tuning_size_limits(count: int) -> None:
    with pytest.raises(InvalidConfiguration):
        Tuning.of(*([Note.E] * count))


@pytest.mark.parametrize(
    "instrument, strings, lowest",
    [
        (Instrument.Guitar, 6, Note.E),
        (Instrument.SevenString, 7, Note.B),
        (Instrument.Bass, 4, Note.E),
        (Instrument.DropD, 6, Note.D),
    ],
)
def test_instrument_presets(instrument: Instrument, strings: int, lowest: Note) -> None:
    config = get_config_for_instrument(instrument)
    assert config.instrument == instrument
    assert len(config.tuning) == strings
    assert config.tuning[strings - 1] == lowest
    assert (config.start_fret, config.end_fret) == (0, 12)
    config.visual_config.validate()


def test_get_config_for_unknown_instrument() -> None:
    with pytest.raises(MatchException):
        get_config_for_instrument("Banjo")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "start, end",
    [(-1, 3), (5, 4), (0, 25)],
)
def test_validate_fret_range_rejects(start: int, end: int) -> None:
    with pytest.raises(InvalidConfiguration):
        validate_fret_range(start, end)


@pytest.mark.parametrize("start, end", [(0, 0), (0, 24), (24, 24), (3, 7)])
def test_validate_fret_range_accepts(start: int, end: int) -> None:
    validate_fret_range(start, end)


def test_position_presets() -> None:
    assert [(p.name, p.fret_range) for p in PositionPreset.all()] == [
        ("Root", (0, 4)),
        ("First", (2, 6)),
        ("Second", (4, 8)),
        ("Third", (6, 10)),
        ("Fourth", (8, 12)),
    ]
    preset = PositionPreset.from_name("second")
    assert preset is not None and preset.fret_range == (4, 8)
    assert PositionPreset.from_name("Fifth") is None
