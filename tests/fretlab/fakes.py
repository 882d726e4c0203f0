"""Test doubles shared by the trainer and command line tests."""

from typing import List


class ScriptedRandom:
    """Returns pre-chosen values from `randrange`, checking each is in range."""

    def __init__(self, values: List[int]) -> None:
        self._values = list(values)
        self.calls: List[tuple[int, int]] = []

    def randrange(self, start: int, stop: int) -> int:
        self.calls.append((start, stop))
        value = self._values.pop(0)
        assert start <= value < stop, f"{value} not in [{start}, {stop})"
        return value

    @property
    def remaining(self) -> int:
        return len(self._values)
