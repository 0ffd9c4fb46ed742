"""Exception types raised by the preferences library."""


class PreferencesError(Exception):
    """Base class for every error raised by ``prefs_lib``."""


class BackendError(PreferencesError):
    """A backend adapter failed to read or persist preferences.

    Wraps I/O, permission, serialization and transport failures so callers
    only need to handle one type. The underlying exception is chained as
    ``__cause__``.
    """


class InvalidArgument(PreferencesError, ValueError):
    """A write was given a missing or ill-typed key or value."""


class MethodNotImplemented(PreferencesError):
    """A method channel received a call it does not know how to handle."""

    def __init__(self, method: str) -> None:
        super().__init__(f"Method not implemented: {method}")
        self.method = method
