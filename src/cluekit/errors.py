"""Exception types shared across the clue subsystem."""

from __future__ import annotations


class ClueError(Exception):
    """Base class for cluekit errors."""


class FormatError(ClueError):
    """Binary payload is truncated, malformed, or of an unknown version."""


class InvalidCodeError(ClueError):
    """Share code does not match the expected pattern or fails to decode."""


class NotFoundError(ClueError):
    """Operation references a clue set that does not exist."""

    def __init__(self, set_id: str) -> None:
        super().__init__(f"Clue set not found: {set_id}")
        self.set_id = set_id


class UnresolvedReferenceError(ClueError):
    """A bookmark could not be located in the current story content.

    The resolver reports this as an outcome; it is only raised when a caller
    explicitly asks for a resolved passage via ``Resolution.require()``.
    """

    def __init__(self, story_id: str, segment_index: int) -> None:
        super().__init__(f"Could not locate passage {story_id}#{segment_index}")
        self.story_id = story_id
        self.segment_index = segment_index
