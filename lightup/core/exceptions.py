"""Custom exception hierarchy for the Light Up engine.

Routine gameplay never raises: illegal moves, infeasible states and
engine passes are reported through :class:`~lightup.core.constants.Outcome`.
"""


class LightUpError(Exception):
    """Base exception for engine failures."""


class BoardLayoutError(LightUpError):
    """Raised when a layout cannot be parsed or a non-blank cell is annotated."""


class GenerationExhaustedError(LightUpError):
    """Raised when no solvable layout is found within the retry cap."""
