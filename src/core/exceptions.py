"""
Exceptions shared by all layers.

Everything the domain raises on purpose derives from GameError, so the service (and anything above it)
can catch a single type. Ending a game is never an exception: that is reported through the game's outcome.
"""


class GameError(Exception):
    """Base class for expected, user facing errors."""


class IllegalMoveError(GameError):
    """The selected piece may be moved, but not to the requested square."""


class GameStateError(GameError):
    """The game cannot perform the request in its current state (or was restored from inconsistent data)."""


class InvalidFENError(GameError):
    """String cannot be interpreted as FEN."""


# NOTE: must not derive from ValueError, or pydantic validators wrap it into a ValidationError.
class InvalidRequestError(GameError):
    """A request model failed validation."""


class RepositoryError(GameError):
    """Persistence layer could not find / store the requested record."""
