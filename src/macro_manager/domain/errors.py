"""Error taxonomy for the macro manager."""


class MacroManagerError(Exception):
    """Base class for application errors."""


class ValidationError(MacroManagerError):
    """User input was rejected; no state was changed."""


class EstimationError(MacroManagerError):
    """The AI estimation service failed or returned an unusable response."""


class PersistenceError(MacroManagerError):
    """The record store could not be read or written."""
