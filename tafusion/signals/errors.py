"""Errors raised by indicator suites."""


class SuiteError(Exception):
    """Base class for indicator suite failures."""
    pass


class CollaboratorError(SuiteError):
    """Failure attributed to one named indicator inside a suite."""

    def __init__(self, indicator: str, message: str):
        super().__init__(message)
        self.indicator = indicator


class CollaboratorConstructionError(CollaboratorError):
    """An indicator rejected its construction parameters."""
    pass


class CollaboratorIngestionError(CollaboratorError):
    """An indicator rejected a sample that passed suite validation."""
    pass


class CollaboratorQueryError(CollaboratorError):
    """An indicator could not answer a derived-state query."""
    pass


class InvalidSampleError(SuiteError, ValueError):
    """Sample failed validation and was not forwarded to any indicator."""

    def __init__(self, message: str = "invalid price or volume"):
        super().__init__(message)
