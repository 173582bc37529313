"""
Exception classes for birthday-calendar-sync.
"""


class BirthdaySyncError(Exception):
    """Base exception for all birthday sync errors."""
    pass


class ConfigurationError(BirthdaySyncError):
    """Raised when config.yaml holds an invalid value."""
    pass


class ValidationError(BirthdaySyncError):
    """Raised when a contact is built without a name or birthday."""
    pass


class UnknownYearError(BirthdaySyncError):
    """Raised when an age is requested for a birthday without a year."""
    pass


class ProviderError(BirthdaySyncError):
    """Raised when a remote provider call fails."""
    pass


class ProviderTransientError(ProviderError):
    """Network trouble, throttling or a server-side error. Worth retrying."""
    pass


class ProviderFatalError(ProviderError):
    """Authorization failure or missing calendar. Aborts the whole pass."""
    pass
