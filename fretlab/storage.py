"""Persistence port for exercises.

`ExerciseRepository` is the interface the rest of the application stores
exercises through. Two implementations are provided: an in-memory one,
and one backed by a single JSON file holding a list of exercises.

Exercise names are unique per repository, compared case-insensitively
and ignoring surrounding whitespace. Saving or updating an exercise whose
name is already used by a different id fails with `ValidationError`.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABCMeta, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, override

from fretlab.base import FretlabError
from fretlab.exercise import (
    Exercise,
    ExerciseFormatError,
    exercise_from_dict,
    exercise_to_dict,
)


class RepositoryError(FretlabError):
    """Base class for persistence failures."""


class NotFound(RepositoryError):
    def __init__(self, exercise_id: str) -> None:
        super().__init__(f"Exercise not found: {exercise_id}")
        self.exercise_id = exercise_id


class StorageUnavailable(RepositoryError):
    """The backing store cannot be read or written."""


class SerializationError(RepositoryError):
    """Stored data could not be encoded or decoded."""


class ValidationError(RepositoryError):
    """The exercise violates a repository rule, such as name uniqueness."""


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def _validate(exercise: Exercise) -> None:
    if not exercise.id:
        raise ValidationError("Exercise id cannot be empty")
    if not exercise.name.strip():
        raise ValidationError("Exercise name cannot be empty")


class ExerciseRepository(metaclass=ABCMeta):
    """Storage for exercises, keyed by id."""

    @abstractmethod
    def find_all(self) -> List[Exercise]:
        """Every stored exercise, in insertion order."""
        raise NotImplementedError()

    @abstractmethod
    def find_by_id(self, exercise_id: str) -> Optional[Exercise]:
        raise NotImplementedError()

    @abstractmethod
    def save(self, exercise: Exercise) -> None:
        """Store a new exercise, or overwrite one with the same id.

        Raises:
            ValidationError: If the name is empty or taken by another id.
        """
        raise NotImplementedError()

    @abstractmethod
    def update(self, exercise: Exercise) -> None:
        """Overwrite an existing exercise.

        Raises:
            NotFound: If no exercise has this id.
            ValidationError: If the name is empty or taken by another id.
        """
        raise NotImplementedError()

    @abstractmethod
    def delete(self, exercise_id: str) -> None:
        """Remove an exercise.

        Raises:
            NotFound: If no exercise has this id.
        """
        raise NotImplementedError()

    def name_exists(self, name: str, exclude_id: Optional[str] = None) -> bool:
        """Whether another exercise already uses this name."""
        wanted = normalize_name(name)
        return any(
            normalize_name(ex.name) == wanted and ex.id != exclude_id
            for ex in self.find_all()
        )

    def _check_name(self, exercise: Exercise) -> None:
        _validate(exercise)
        if self.name_exists(exercise.name, exclude_id=exercise.id):
            raise ValidationError(f"Exercise name already in use: {exercise.name!r}")


class InMemoryExerciseRepository(ExerciseRepository):
    """Repository that lives as long as the process."""

    def __init__(self) -> None:
        self._exercises: Dict[str, Exercise] = {}

    @override
    def find_all(self) -> List[Exercise]:
        return list(self._exercises.values())

    @override
    def find_by_id(self, exercise_id: str) -> Optional[Exercise]:
        return self._exercises.get(exercise_id)

    @override
    def save(self, exercise: Exercise) -> None:
        self._check_name(exercise)
        self._exercises[exercise.id] = exercise

    @override
    def update(self, exercise: Exercise) -> None:
        if exercise.id not in self._exercises:
            raise NotFound(exercise.id)
        self._check_name(exercise)
        self._exercises[exercise.id] = exercise

    @override
    def delete(self, exercise_id: str) -> None:
        if self._exercises.pop(exercise_id, None) is None:
            raise NotFound(exercise_id)


class JsonFileExerciseRepository(ExerciseRepository):
    """Repository persisted as a JSON list in one file.

    The file is read on every call and rewritten on every change, so
    several repositories may share a file as long as they do not write
    concurrently. A missing file is an empty repository.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @override
    def find_all(self) -> List[Exercise]:
        return list(self._load().values())

    @override
    def find_by_id(self, exercise_id: str) -> Optional[Exercise]:
        return self._load().get(exercise_id)

    @override
    def save(self, exercise: Exercise) -> None:
        self._check_name(exercise)
        exercises = self._load()
        exercises[exercise.id] = exercise
        self._store(exercises)

    @override
    def update(self, exercise: Exercise) -> None:
        exercises = self._load()
        if exercise.id not in exercises:
            raise NotFound(exercise.id)
        self._check_name(exercise)
        exercises[exercise.id] = exercise
        self._store(exercises)

    @override
    def delete(self, exercise_id: str) -> None:
        exercises = self._load()
        if exercises.pop(exercise_id, None) is None:
            raise NotFound(exercise_id)
        self._store(exercises)

    def _load(self) -> Dict[str, Exercise]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise StorageUnavailable(f"Cannot read {self._path}: {e}") from e
        except json.JSONDecodeError as e:
            raise SerializationError(f"Corrupt exercise file {self._path}: {e}") from e
        if not isinstance(raw, list):
            raise SerializationError(f"Expected a list in {self._path}")
        exercises: Dict[str, Exercise] = {}
        for item in raw:
            try:
                exercise = exercise_from_dict(item)
            except ExerciseFormatError as e:
                raise SerializationError(str(e)) from e
            exercises[exercise.id] = exercise
        return exercises

    def _store(self, exercises: Dict[str, Exercise]) -> None:
        try:
            data = [exercise_to_dict(ex) for ex in exercises.values()]
        except ExerciseFormatError as e:
            raise SerializationError(str(e)) from e
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageUnavailable(f"Cannot write {self._path}: {e}") from e
        logging.debug("stored %d exercises in %s", len(data), self._path)
