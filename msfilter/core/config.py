"""
Configuration primitives for the mutual structure filter.

Defines the run-state enum and a dataclass collecting the filter parameters.
"""

import math
import numbers
from dataclasses import dataclass
from enum import Enum

from msfilter.core.errors import InvalidParameterError


class PipelineState(Enum):
    """Lifecycle of a single pipeline run."""

    IDLE = "idle"
    PREPARING = "preparing"
    ITERATING = "iterating"
    DONE = "done"
    FAILED = "failed"


@dataclass
class FilterParams:
    """
    Parameters for iterative guided filtering.

    Defaults match the interactive application's initial slider values.
    """

    radius: int = 4  # pixel half-window
    epsilon: float = 0.005  # regularization ("smoothness")
    iterations: int = 3
    weight: float = 1.0  # reserved, not used by the filter math

    def validate(self) -> None:
        """Validate filter parameters."""

        if isinstance(self.radius, bool) or not isinstance(self.radius, numbers.Integral):
            raise InvalidParameterError(f"Radius must be an integer, got {self.radius!r}")

        if self.radius < 0:
            raise InvalidParameterError(f"Radius {self.radius} must be >= 0")

        if isinstance(self.iterations, bool) or not isinstance(self.iterations, numbers.Integral):
            raise InvalidParameterError(f"Iterations must be an integer, got {self.iterations!r}")

        if self.iterations < 1:
            raise InvalidParameterError(f"Iterations {self.iterations} must be >= 1")

        if isinstance(self.epsilon, bool) or not isinstance(self.epsilon, numbers.Real):
            raise InvalidParameterError(f"Epsilon must be a real number, got {self.epsilon!r}")

        if not math.isfinite(self.epsilon) or self.epsilon <= 0:
            raise InvalidParameterError(f"Epsilon {self.epsilon} must be a positive finite number")
