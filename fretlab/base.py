"""Base classes, exceptions and utilities shared across fretlab.

This module provides the abstract base classes and the exception hierarchy
used throughout the fretboard core.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Any


class Resettable(metaclass=ABCMeta):
    """Abstract base class for objects that can be reset to their initial state."""

    @abstractmethod
    def reset(self) -> None:
        """Reset this to a known good state for further use."""
        raise NotImplementedError()


class FretlabError(Exception):
    """Root of every error raised deliberately by fretlab."""


class InvalidConfiguration(FretlabError, ValueError):
    """Raised when a fretboard is constructed or reconfigured with bad values.

    Covers inverted or oversized fret ranges, empty or oversized tunings,
    non-positive aspect ratios and marker positions off the board. Callers
    are expected to supply valid input; presets never trigger this.
    """


class ScaleNotImplemented(FretlabError):
    """Raised when a scale type has no materialisation rule."""

    def __init__(self, scale_type: Any) -> None:
        super().__init__(f"No materialisation rule for scale type: {scale_type}")
        self.scale_type = scale_type


class MatchException(Exception):
    """Exception raised when pattern matching fails."""

    def __init__(self, value: Any) -> None:
        """Initialize a MatchException with the unmatched value.

        Args:
            value: The value that failed to match any pattern.
        """
        super().__init__(f"Failed to match value: {value}")
