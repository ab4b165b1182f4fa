"""
Exception hierarchy for DeutschMeister.

Every error raised on purpose by the package derives from
DeutschMeisterError so the CLI can report it in one place.
"""


class DeutschMeisterError(Exception):
    """Base class for all DeutschMeister errors."""

    pass


class InvalidGrade(DeutschMeisterError, ValueError):
    """Raised when a grade outside {0, 3, 4, 5} reaches the scheduler."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid grade {value!r}: expected one of 0, 3, 4, 5")


class MalformedProgressRecord(DeutschMeisterError, ValueError):
    """Raised when a serialized progress record cannot be turned into a ProgressRecord."""

    pass


class VocabularyError(DeutschMeisterError):
    """Raised when a vocabulary file or word entry cannot be loaded."""

    pass


class ProgressStoreError(DeutschMeisterError):
    """Raised when the progress file exists but cannot be read."""

    pass
