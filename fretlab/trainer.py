"""Interval recognition trainer.

The trainer uses a fretboard model as its only surface. Each round it
shows a reference note in green and asks for the note an interval above
it. Clicking a cell with the right pitch class scores a point and starts a
new round; clicking a wrong one marks it red and waits for another try.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto, unique
from typing import List, Optional

from fretlab.base import MatchException, Resettable
from fretlab.config import FretColor, FretState
from fretlab.model import FretboardModel, RandomSource
from fretlab.notes import Interval, Note
from fretlab.pos import FretCoord

QUESTION_INTERVALS: List[Interval] = [i for i in Interval if i != Interval.Unison]
"""Intervals a question may ask for; Octave is included."""


@unique
class Phase(Enum):
    """Where the trainer is in a round."""

    Idle = auto()  # Not started yet
    Prompting = auto()  # Choosing the next question
    AwaitingAnswer = auto()  # Reference shown, waiting for a click
    Stopped = auto()  # Session over, board cleared


@unique
class AnswerOutcome(Enum):
    """What a click meant."""

    Correct = auto()  # Counted; a new question has been posed
    Incorrect = auto()  # Counted; the cell is marked red
    Ignored = auto()  # Not counted: no question, off the board, or the reference


@dataclass(frozen=True)
class Question:
    """One round: find the note `interval` above `note`."""

    interval: Interval
    reference: FretCoord
    note: Note

    @property
    def target(self) -> Note:
        return self.interval.of(self.note)


@dataclass(frozen=True)
class TrainerStats:
    """Answer counters for a session."""

    correct: int = 0
    incorrect: int = 0

    @property
    def total(self) -> int:
        return self.correct + self.incorrect

    @property
    def success_rate(self) -> int:
        """Percentage of correct answers, rounded half up; 0 before any answer."""
        if self.total == 0:
            return 0
        return (self.correct * 200 + self.total) // (self.total * 2)


class Trainer(Resettable):
    """State machine driving the interval game on a model.

    Args:
        model: The board to draw on.
        rng: Source of uniform integers, e.g. `random.Random(seed)`.
    """

    def __init__(self, model: FretboardModel, rng: RandomSource) -> None:
        self._model = model
        self._rng = rng
        self._phase = Phase.Idle
        self._question: Optional[Question] = None
        self._stats = TrainerStats()

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def question(self) -> Optional[Question]:
        return self._question

    def stats(self) -> TrainerStats:
        return self._stats

    def start(self) -> Question:
        """Clear the board and pose the first question."""
        logging.info("trainer starting")
        with self._model.batch():
            self._model.hide_all()
            return self._prompt()

    def reset(self) -> None:
        """Zero the counters and pose a fresh question."""
        self._stats = TrainerStats()
        self.start()

    def stop(self) -> None:
        """End the session, hiding every highlight."""
        logging.info(
            "trainer stopped: %d correct, %d incorrect",
            self._stats.correct,
            self._stats.incorrect,
        )
        self._model.hide_all()
        self._question = None
        self._phase = Phase.Stopped

    def submit(self, coord: FretCoord) -> AnswerOutcome:
        """Interpret a click on a cell.

        Args:
            coord: The clicked cell.

        Returns:
            The outcome. Clicks outside a round, off the board or on the
            reference cell itself are ignored.
        """
        question = self._question
        if self._phase != Phase.AwaitingAnswer or question is None:
            return AnswerOutcome.Ignored
        if not coord.in_grid() or coord.string_index >= self._model.num_strings:
            return AnswerOutcome.Ignored
        if coord == question.reference:
            return AnswerOutcome.Ignored
        note = self._model.note_at(coord)
        if note == question.target:
            self._stats = TrainerStats(self._stats.correct + 1, self._stats.incorrect)
            logging.info("correct: %s is %s", note, question.interval)
            with self._model.batch():
                self._model.hide_all()
                self._prompt()
            return AnswerOutcome.Correct
        else:
            self._stats = TrainerStats(self._stats.correct, self._stats.incorrect + 1)
            logging.info("incorrect: %s is not %s", note, question.interval)
            self._model.set_state(coord, FretState.visible(FretColor.Red, note.label))
            return AnswerOutcome.Incorrect

    def _prompt(self) -> Question:
        self._phase = Phase.Prompting
        interval = QUESTION_INTERVALS[self._rng.randrange(0, len(QUESTION_INTERVALS))]
        reference = self._model.random_playable_coord(self._rng)
        note = self._model.note_at(reference)
        self._model.set_state(
            reference, FretState.visible(FretColor.Green, note.label)
        )
        question = Question(interval, reference, note)
        self._question = question
        self._phase = Phase.AwaitingAnswer
        logging.debug("question: %s above %s at %s", interval, note, reference)
        return question


def describe(question: Question) -> str:
    """One-line prompt text for a question."""
    return f"Find the {question.interval} above {question.note}"


def describe_outcome(outcome: AnswerOutcome) -> str:
    if outcome == AnswerOutcome.Correct:
        return "Correct!"
    elif outcome == AnswerOutcome.Incorrect:
        return "Try again"
    elif outcome == AnswerOutcome.Ignored:
        return ""
    else:
        raise MatchException(outcome)
