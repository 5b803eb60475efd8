"""
Game Errors

Exceptions raised by the puzzle engine and its services.

Two families matter to callers:
- UserCorrectableError: the player can fix the input and try again; the
  message is shown briefly and nothing is recorded.
- DataLoadError: puzzle or dictionary data could not be loaded.
"""


class WordibbleError(Exception):
    """Base class for all game errors."""


class UserCorrectableError(WordibbleError, ValueError):
    """A rejected guess that leaves the game state untouched."""


class IncompleteGuessError(UserCorrectableError):
    """Some position of the guess is still empty."""

    def __init__(self, message: str = "Please enter a complete word"):
        super().__init__(message)


class NotInDictionaryError(UserCorrectableError):
    """The guess is not a valid word for this length."""

    def __init__(self, message: str = "Not in dictionary"):
        super().__init__(message)


class GameOverError(WordibbleError, ValueError):
    """The game already reached a terminal status."""

    def __init__(self, message: str = "Game is already over"):
        super().__init__(message)


class LengthMismatchError(WordibbleError, ValueError):
    """Guess and secret have different lengths."""


class InvalidSettingsError(WordibbleError, ValueError):
    """Game settings are out of range."""


class ShareUnavailableError(WordibbleError, ValueError):
    """Sharing is only possible for daily puzzles."""


class SessionNotFoundError(WordibbleError, KeyError):
    """No game has been loaded for this player."""


class DataLoadError(WordibbleError):
    """Puzzle or dictionary data could not be loaded."""


class NoPuzzleAvailableError(DataLoadError):
    """There is no puzzle for the requested date and length."""


class CorruptSnapshotError(WordibbleError, ValueError):
    """A persisted game snapshot has the wrong shape."""
