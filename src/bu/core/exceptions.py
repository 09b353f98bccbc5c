"""
Exception classes for the utility registry.
"""


class UtilityError(Exception):
    """Base exception for utility-related errors."""


class InvalidNameError(UtilityError):
    """Utility name is empty or malformed."""


class UtilityNotFoundError(UtilityError):
    """Utility has no resolvable source file."""


class UtilityNotLoadedError(UtilityError):
    """Utility is not loaded in the current session."""


class UtilityImportError(UtilityError):
    """Utility source could not be executed."""


class PartialFailureError(UtilityError):
    """Some sub-operations of a bulk operation failed."""

    def __init__(self, message: str, succeeded: int = 0, failed: int = 0):
        super().__init__(message)
        self.succeeded = succeeded
        self.failed = failed


class CommandNotFoundError(UtilityError):
    """Command is not registered in the session."""


class UpdateError(UtilityError):
    """Updating the utilities directory failed."""
