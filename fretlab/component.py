"""Change detection for derived views of the model.

A mapped component watches one slice of a larger root object, such as
the geometry-relevant part of a fretboard model, and only recomputes when
that slice changes.
"""

from abc import ABCMeta, abstractmethod
from typing import Any, Generic, Optional, Type, TypeVar

C = TypeVar("C")
"""Type variable for the root object."""
X = TypeVar("X", bound="MappedComponentConfig[Any]")
"""Type variable for the extracted slice."""
R = TypeVar("R")
"""Type variable for the recomputed result."""


class MappedComponentConfig(Generic[C], metaclass=ABCMeta):
    """A value read out of a root object. Slices compare by equality."""

    @classmethod
    @abstractmethod
    def extract(cls: Type[X], root_config: C) -> X:
        raise NotImplementedError()


class MappedComponent(Generic[C, X, R], metaclass=ABCMeta):
    """Recomputes a result whenever the slice it depends on changes.

    Subclasses say how to slice the root (`extract_config`) and what to
    compute from a slice (`handle_mapped_config`).
    """

    def __init__(self, config: X) -> None:
        self._config = config

    @property
    def config(self) -> X:
        """The slice the current result was computed from."""
        return self._config

    @classmethod
    @abstractmethod
    def extract_config(cls, root_config: C) -> X:
        raise NotImplementedError()

    @abstractmethod
    def handle_mapped_config(self, config: X) -> R:
        """Compute the result for a slice that differs from the last one."""
        raise NotImplementedError()

    def handle_config(self, root_config: C, reset: bool = False) -> Optional[R]:
        """Look at a possibly changed root.

        Args:
            root_config: The root object.
            reset: Recompute even when the slice is unchanged.

        Returns:
            The new result, or None when the slice was unchanged.
        """
        config = self.extract_config(root_config)
        if not reset and config == self._config:
            return None
        self._config = config
        return self.handle_mapped_config(config)
