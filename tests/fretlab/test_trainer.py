import random
from typing import List

import pytest

from fretlab.config import FretColor, FretState
from fretlab.model import FretboardModel, FretboardModelBuilder, ModelChange
from fretlab.notes import Interval, Note
from fretlab.pos import FretCoord
from fretlab.trainer import (
    QUESTION_INTERVALS,
    AnswerOutcome,
    Phase,
    Question,
    Trainer,
    TrainerStats,
    describe,
    describe_outcome,
)
from tests.fretlab.fakes import ScriptedRandom

# Major third, low E string fret 5 (A); then minor second, high E open (E)
SCRIPT = [3, 5, 5, 0, 0, 0]


def make_trainer(values: List[int]) -> tuple[FretboardModel, Trainer]:
    model = FretboardModelBuilder().build()
    return model, Trainer(model, ScriptedRandom(values))


def test_question_intervals() -> None:
    assert len(QUESTION_INTERVALS) == 12
    assert Interval.Unison not in QUESTION_INTERVALS
    assert QUESTION_INTERVALS[3] == Interval.MajorThird
    assert QUESTION_INTERVALS[-1] == Interval.Octave


def test_start_poses_question() -> None:
    model, trainer = make_trainer(SCRIPT)
    assert trainer.phase == Phase.Idle
    question = trainer.start()
    assert question == Question(Interval.MajorThird, FretCoord(5, 5), Note.A)
    assert question.target == Note.Db
    assert trainer.phase == Phase.AwaitingAnswer
    assert model.state(FretCoord(5, 5)) == FretState.visible(FretColor.Green, "A")
    assert describe(question) == "Find the Major Third above A"


def test_start_clears_board_in_one_change() -> None:
    model, trainer = make_trainer(SCRIPT)
    model.set_state(FretCoord(0, 3), FretState.visible(FretColor.Blue, "G"))
    changes: List[ModelChange] = []
    model.on_change(changes.append)
    trainer.start()
    assert len(changes) == 1
    assert changes[0].coords == frozenset({FretCoord(0, 3), FretCoord(5, 5)})
    assert model.state(FretCoord(0, 3)) == FretState.hidden()


def test_wrong_then_right_answer() -> None:
    model, trainer = make_trainer(SCRIPT)
    trainer.start()

    # A string fret 5 is D
    assert trainer.submit(FretCoord(4, 5)) == AnswerOutcome.Incorrect
    assert model.state(FretCoord(4, 5)) == FretState.visible(FretColor.Red, "D")
    assert trainer.stats() == TrainerStats(correct=0, incorrect=1)
    assert trainer.phase == Phase.AwaitingAnswer

    # A string fret 4 is C sharp
    changes: List[ModelChange] = []
    model.on_change(changes.append)
    assert trainer.submit(FretCoord(4, 4)) == AnswerOutcome.Correct
    assert trainer.stats() == TrainerStats(correct=1, incorrect=1)
    assert len(changes) == 1
    assert model.state(FretCoord(4, 5)) == FretState.hidden()
    assert model.state(FretCoord(5, 5)) == FretState.hidden()
    assert model.state(FretCoord(0, 0)) == FretState.visible(FretColor.Green, "E")
    assert trainer.question == Question(Interval.MinorSecond, FretCoord(0, 0), Note.E)
    assert trainer.phase == Phase.AwaitingAnswer


def test_any_octave_counts() -> None:
    model, trainer = make_trainer(SCRIPT)
    trainer.start()
    # B string fret 2 is C sharp, two octaves from the A string answer
    assert model.note_at(FretCoord(1, 2)) == Note.Db
    assert trainer.submit(FretCoord(1, 2)) == AnswerOutcome.Correct


def test_ignored_clicks() -> None:
    model, trainer = make_trainer(SCRIPT)
    assert trainer.submit(FretCoord(4, 4)) == AnswerOutcome.Ignored
    trainer.start()
    assert trainer.submit(FretCoord(5, 5)) == AnswerOutcome.Ignored
    assert trainer.submit(FretCoord(6, 4)) == AnswerOutcome.Ignored
    assert trainer.submit(FretCoord(0, 25)) == AnswerOutcome.Ignored
    assert trainer.stats() == TrainerStats()
    assert model.state(FretCoord(5, 5)) == FretState.visible(FretColor.Green, "A")


def test_repeated_wrong_answers_count() -> None:
    _, trainer = make_trainer(SCRIPT)
    trainer.start()
    trainer.submit(FretCoord(4, 5))
    trainer.submit(FretCoord(4, 5))
    assert trainer.stats().incorrect == 2


def test_stop_clears_board() -> None:
    model, trainer = make_trainer(SCRIPT)
    trainer.start()
    trainer.submit(FretCoord(4, 5))
    trainer.stop()
    assert trainer.phase == Phase.Stopped
    assert trainer.question is None
    assert all(not cell.get().is_visible for cell in model.fret_states.values())
    assert trainer.submit(FretCoord(4, 4)) == AnswerOutcome.Ignored


def test_reset_zeroes_counters() -> None:
    model, trainer = make_trainer(SCRIPT)
    trainer.start()
    trainer.submit(FretCoord(4, 5))
    trainer.reset()
    assert trainer.stats() == TrainerStats()
    assert trainer.question == Question(Interval.MinorSecond, FretCoord(0, 0), Note.E)
    assert model.state(FretCoord(4, 5)) == FretState.hidden()
    assert model.state(FretCoord(5, 5)) == FretState.hidden()


def test_reference_stays_in_playable_range() -> None:
    model = FretboardModelBuilder().fret_range(5, 9).build()
    trainer = Trainer(model, random.Random(7))
    for _ in range(50):
        question = trainer.start()
        assert model.is_playable(question.reference)
        assert question.interval != Interval.Unison


@pytest.mark.parametrize(
    "stats, rate",
    [
        (TrainerStats(0, 0), 0),
        (TrainerStats(1, 1), 50),
        (TrainerStats(2, 1), 67),
        (TrainerStats(1, 2), 33),
        (TrainerStats(1, 7), 13),
        (TrainerStats(5, 0), 100),
    ],
)
def test_success_rate(stats: TrainerStats, rate: int) -> None:
    assert stats.success_rate == rate


def test_describe_outcome() -> None:
    assert describe_outcome(AnswerOutcome.Correct) == "Correct!"
    assert describe_outcome(AnswerOutcome.Incorrect) == "Try again"
    assert describe_outcome(AnswerOutcome.Ignored) == ""
