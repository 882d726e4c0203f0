"""Practice exercises and their JSON wire format.

An exercise is a named practice item. Scale and triad exercises carry a
key and a fret range; technique and song exercises carry nothing else.

The JSON format is shared with the existing exercise storage, so variants
are externally tagged: a variant with fields is an object with a single
key naming the variant, and a variant without fields is the bare tag
string. For example::

    {"id": "ex_1700000000000",
     "name": "G major, second position",
     "description": null,
     "exercise_type": {"Scale": {"root_note": "G",
                                 "scale_type": {"Hepatonic": "Major"},
                                 "fret_range": [4, 8]}}}
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from fretlab.base import FretlabError
from fretlab.notes import Note
from fretlab.scale import Chromatic, HeptaMode, Heptatonic, Scale, ScaleType

ID_PREFIX = "ex_"

_HEPTATONIC_TAG = "Hepatonic"
# The existing stores spell the tag this way; the correct spelling is read too
_HEPTATONIC_TAG_ALIASES = (_HEPTATONIC_TAG, "Heptatonic")
_CHROMATIC_TAG = "Chromatic"


class ExerciseFormatError(FretlabError, ValueError):
    """Raised when JSON does not describe a valid exercise."""


# sealed
class ExerciseType:
    """Base class for exercise type variants.

    The variants are `ScaleExercise`, `TriadExercise`, `Technique` and
    `Song`. The key and range editors are no-ops on the last two.
    """

    @property
    def type_name(self) -> str:
        match self:
            case ScaleExercise():
                return "Scale"
            case TriadExercise():
                return "Triad"
            case Technique():
                return "Technique"
            case Song():
                return "Song"
            case _:
                raise ExerciseFormatError(f"Unknown exercise type: {self!r}")

    def get_scale(self) -> Optional[Scale]:
        """The scale practised, if the exercise has a key."""
        match self:
            case ScaleExercise(root_note, scale_type, _) | TriadExercise(
                root_note, scale_type, _
            ):
                return Scale(root_note, scale_type)
            case _:
                return None

    def get_fret_range(self) -> Optional[Tuple[int, int]]:
        match self:
            case ScaleExercise(_, _, fret_range) | TriadExercise(_, _, fret_range):
                return fret_range
            case _:
                return None

    def with_root_note(self, root_note: Note) -> ExerciseType:
        match self:
            case ScaleExercise() | TriadExercise():
                return replace(self, root_note=root_note)
            case _:
                return self

    def with_scale_type(self, scale_type: ScaleType) -> ExerciseType:
        match self:
            case ScaleExercise() | TriadExercise():
                return replace(self, scale_type=scale_type)
            case _:
                return self

    def with_fret_range(self, fret_range: Tuple[int, int]) -> ExerciseType:
        match self:
            case ScaleExercise() | TriadExercise():
                return replace(self, fret_range=fret_range)
            case _:
                return self

    def __str__(self) -> str:
        match self:
            case ScaleExercise(root_note, scale_type, (lo, hi)):
                return f"{Scale(root_note, scale_type)} (frets {lo}-{hi})"
            case TriadExercise(root_note, scale_type, (lo, hi)):
                return f"{Scale(root_note, scale_type)} Triad (frets {lo}-{hi})"
            case _:
                return self.type_name


@dataclass(frozen=True)
class ScaleExercise(ExerciseType):
    """Play a scale within a fret range."""

    root_note: Note
    scale_type: ScaleType
    fret_range: Tuple[int, int]  # (min_fret, max_fret)


@dataclass(frozen=True)
class TriadExercise(ExerciseType):
    """Play the triads of a key within a fret range."""

    root_note: Note
    scale_type: ScaleType
    fret_range: Tuple[int, int]


@dataclass(frozen=True)
class Technique(ExerciseType):
    """Technique practice; no key or range."""

    pass


@dataclass(frozen=True)
class Song(ExerciseType):
    """Song practice; no key or range."""

    pass


class IdGenerator:
    """Issues `ex_<millis>` identifiers, never the same one twice.

    Two ids requested within the same millisecond get consecutive values.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0

    def generate(self) -> str:
        millis = int(self._clock() * 1000)
        if millis <= self._last:
            millis = self._last + 1
        self._last = millis
        return f"{ID_PREFIX}{millis}"


_ID_GENERATOR = IdGenerator()


def generate_id() -> str:
    return _ID_GENERATOR.generate()


@dataclass(frozen=True)
class Exercise:
    """A practice exercise."""

    id: str
    name: str
    exercise_type: ExerciseType
    description: Optional[str] = None

    @staticmethod
    def new(name: str, exercise_type: ExerciseType) -> Exercise:
        """Create an exercise with a fresh id and no description."""
        return Exercise(generate_id(), name, exercise_type)

    def with_description(self, description: Optional[str]) -> Exercise:
        return replace(self, description=description)

    def with_name(self, name: str) -> Exercise:
        return replace(self, name=name)

    def with_exercise_type(self, exercise_type: ExerciseType) -> Exercise:
        return replace(self, exercise_type=exercise_type)


def scale_type_to_wire(scale_type: ScaleType) -> Any:
    match scale_type:
        case Heptatonic(mode):
            return {_HEPTATONIC_TAG: mode.value}
        case Chromatic():
            return _CHROMATIC_TAG
        case _:
            raise ExerciseFormatError(f"Cannot encode scale type: {scale_type!r}")


def scale_type_from_wire(value: Any) -> ScaleType:
    if value == _CHROMATIC_TAG:
        return Chromatic()
    tag, payload = _single_entry(value, "scale_type")
    if tag not in _HEPTATONIC_TAG_ALIASES:
        raise ExerciseFormatError(f"Unknown scale type: {tag!r}")
    try:
        return Heptatonic(HeptaMode(payload))
    except ValueError:
        raise ExerciseFormatError(f"Unknown mode: {payload!r}") from None


def note_from_wire(value: Any) -> Note:
    try:
        return Note.from_wire_name(value)
    except (KeyError, TypeError):
        raise ExerciseFormatError(f"Unknown note: {value!r}") from None


def _fret_range_from_wire(value: Any) -> Tuple[int, int]:
    if (
        not isinstance(value, list)
        or len(value) != 2
        or not all(isinstance(v, int) and not isinstance(v, bool) for v in value)
    ):
        raise ExerciseFormatError(f"Fret range must be two integers: {value!r}")
    return (value[0], value[1])


def _single_entry(value: Any, what: str) -> Tuple[str, Any]:
    if not isinstance(value, dict) or len(value) != 1:
        raise ExerciseFormatError(f"Expected a single-key object for {what}: {value!r}")
    ((tag, payload),) = value.items()
    return tag, payload


def exercise_type_to_wire(exercise_type: ExerciseType) -> Any:
    match exercise_type:
        case ScaleExercise(root_note, scale_type, (lo, hi)) | TriadExercise(
            root_note, scale_type, (lo, hi)
        ):
            return {
                exercise_type.type_name: {
                    "root_note": root_note.wire_name,
                    "scale_type": scale_type_to_wire(scale_type),
                    "fret_range": [lo, hi],
                }
            }
        case Technique() | Song():
            return exercise_type.type_name
        case _:
            raise ExerciseFormatError(f"Cannot encode exercise type: {exercise_type!r}")


def exercise_type_from_wire(value: Any) -> ExerciseType:
    if value == "Technique":
        return Technique()
    if value == "Song":
        return Song()
    tag, payload = _single_entry(value, "exercise_type")
    if tag not in ("Scale", "Triad"):
        raise ExerciseFormatError(f"Unknown exercise type: {tag!r}")
    if not isinstance(payload, dict):
        raise ExerciseFormatError(f"{tag} payload must be an object: {payload!r}")
    try:
        root_note = note_from_wire(payload["root_note"])
        scale_type = scale_type_from_wire(payload["scale_type"])
        fret_range = _fret_range_from_wire(payload["fret_range"])
    except KeyError as e:
        raise ExerciseFormatError(f"{tag} exercise missing field {e}") from None
    if tag == "Scale":
        return ScaleExercise(root_note, scale_type, fret_range)
    else:
        return TriadExercise(root_note, scale_type, fret_range)


def exercise_to_dict(exercise: Exercise) -> Dict[str, Any]:
    return {
        "id": exercise.id,
        "name": exercise.name,
        "exercise_type": exercise_type_to_wire(exercise.exercise_type),
        "description": exercise.description,
    }


def exercise_from_dict(value: Any) -> Exercise:
    """Decode one exercise from parsed JSON.

    Raises:
        ExerciseFormatError: If the value is not a valid exercise.
    """
    if not isinstance(value, dict):
        raise ExerciseFormatError(f"Exercise must be an object: {value!r}")
    try:
        ex_id = value["id"]
        name = value["name"]
        exercise_type = exercise_type_from_wire(value["exercise_type"])
    except KeyError as e:
        raise ExerciseFormatError(f"Exercise missing field {e}") from None
    description = value.get("description")
    if not isinstance(ex_id, str) or not isinstance(name, str):
        raise ExerciseFormatError("Exercise id and name must be strings")
    if description is not None and not isinstance(description, str):
        raise ExerciseFormatError("Exercise description must be a string or null")
    return Exercise(ex_id, name, exercise_type, description)


def exercise_to_json(exercise: Exercise) -> str:
    return json.dumps(exercise_to_dict(exercise), ensure_ascii=False)


def exercise_from_json(text: str) -> Exercise:
    """Parse one exercise from JSON text.

    Raises:
        ExerciseFormatError: If the text is not JSON or not an exercise.
    """
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise ExerciseFormatError(f"Invalid JSON: {e}") from e
    return exercise_from_dict(value)


def exercises_to_json(exercises: List[Exercise]) -> str:
    return json.dumps([exercise_to_dict(ex) for ex in exercises], ensure_ascii=False)


def exercises_from_json(text: str) -> List[Exercise]:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise ExerciseFormatError(f"Invalid JSON: {e}") from e
    if not isinstance(value, list):
        raise ExerciseFormatError("Expected a list of exercises")
    return [exercise_from_dict(item) for item in value]
