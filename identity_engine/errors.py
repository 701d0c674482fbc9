"""
Domain errors raised for invalid input.

Data insufficiency (too few sessions, unknown mood ids, empty catalogs) never
raises; those paths return documented fallbacks instead.
"""

from typing import Optional


class IdentityEngineError(ValueError):
    """Base class for invalid-input failures surfaced to the caller."""


class InvalidMoodCombinationError(IdentityEngineError):
    """Primary and secondary mood conflict with each other."""

    def __init__(self, primary: str, secondary: str):
        self.primary = primary
        self.secondary = secondary
        super().__init__(f"Mood '{primary}' conflicts with '{secondary}'")


class MalformedSessionError(IdentityEngineError):
    """A session record could not be validated."""

    def __init__(self, message: str, session_id: Optional[str] = None):
        self.session_id = session_id
        super().__init__(message)
