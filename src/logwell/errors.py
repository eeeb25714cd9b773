"""Application errors."""


class LogWellError(Exception):
    """Base class for application errors."""


class PersistenceError(LogWellError):
    """Raised when the key-value store rejects a read or write."""


class ProfileNotFoundError(LogWellError):
    """Raised when updating a profile that has not been created yet."""


class FoodNotFoundError(LogWellError):
    """Raised when a food id does not exist in the library."""
