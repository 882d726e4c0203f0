from pathlib import Path
from typing import Callable, List

import pytest

from fretlab.config import Tuning
from fretlab.main import build_model, main, make_parser, parse_answer, run_trainer
from fretlab.model import FretboardModelBuilder
from fretlab.pos import FretCoord
from fretlab.trainer import Trainer
from tests.fretlab.fakes import ScriptedRandom


def reader(lines: List[str]) -> Callable[[str], str]:
    remaining = iter(lines)

    def read_line(_prompt: str) -> str:
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError() from None

    return read_line


def test_render_to_file(tmp_path: Path) -> None:
    out = tmp_path / "board.svg"
    main(["render", "--root", "G", "--position", "Second", "--output", str(out)])
    svg = out.read_text(encoding="utf-8")
    assert svg.startswith("<svg")
    assert 'class="notes"' in svg


def test_render_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    main(["render", "--scale", "Chromatic", "--instrument", "Bass"])
    assert capsys.readouterr().out.startswith("<svg")


@pytest.mark.parametrize(
    "argv",
    [
        ["render", "--root", "H"],
        ["render", "--tuning", "E B X"],
        ["render", "--start", "9", "--end", "3"],
        ["render", "--end", "30"],
    ],
)
def test_bad_input_exits_with_status_2(argv: List[str]) -> None:
    with pytest.raises(SystemExit) as info:
        main(argv)
    assert info.value.code == 2


def test_build_model_options() -> None:
    parser = make_parser()
    model = build_model(
        parser.parse_args(["render", "--instrument", "Bass", "--position", "Second"])
    )
    assert model.num_strings == 4
    assert (model.start_fret, model.end_fret) == (4, 8)

    model = build_model(
        parser.parse_args(["render", "--wide", "--start", "3", "--tuning", "E B G D A D"])
    )
    assert model.visual_config.svg_aspect_ratio == 4.0
    assert (model.start_fret, model.end_fret) == (3, 12)
    assert model.tuning == Tuning.drop_d()


@pytest.mark.parametrize(
    "line, coord",
    [
        ("6 5", FretCoord(5, 5)),
        ("1 0", FretCoord(0, 0)),
        (" 2   12 ", FretCoord(1, 12)),
        ("6", None),
        ("a b", None),
        ("6 -1", None),
        ("1 2 3", None),
    ],
)
def test_parse_answer(line: str, coord: FretCoord | None) -> None:
    assert parse_answer(line) == coord


def test_run_trainer_session() -> None:
    model = FretboardModelBuilder().build()
    trainer = Trainer(model, ScriptedRandom([3, 5, 5, 0, 0, 0]))
    output: List[str] = []
    run_trainer(trainer, reader(["nonsense", "5 5", "5 4"]), output.append, rounds=1)
    assert output == [
        "Find the Major Third above A (string 6, fret 5)",
        "Answer as: <string> <fret>",
        "Try again",
        "Correct!",
        "1 correct, 1 incorrect (50%)",
    ]
    assert all(not cell.get().is_visible for cell in model.fret_states.values())


def test_run_trainer_prompts_between_rounds() -> None:
    model = FretboardModelBuilder().build()
    trainer = Trainer(model, ScriptedRandom([3, 5, 5, 0, 0, 0]))
    output: List[str] = []
    run_trainer(trainer, reader(["5 4", "quit"]), output.append, rounds=3)
    assert output == [
        "Find the Major Third above A (string 6, fret 5)",
        "Correct!",
        "Find the Minor Second above E (string 1, fret 0)",
        "1 correct, 0 incorrect (100%)",
    ]


def test_run_trainer_stops_at_end_of_input() -> None:
    model = FretboardModelBuilder().build()
    trainer = Trainer(model, ScriptedRandom([3, 5, 5]))
    output: List[str] = []
    run_trainer(trainer, reader([]), output.append, rounds=1)
    assert output[-1] == "0 correct, 0 incorrect (0%)"


def test_train_command(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("builtins.input", lambda _prompt: "q")
    main(["train", "--seed", "3", "--rounds", "2"])
    out = capsys.readouterr().out
    assert out.startswith("Find the ")
    assert "0 correct, 0 incorrect (0%)" in out
