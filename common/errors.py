# common/errors.py
"""
Error taxonomy shared by the store, the resolver, the assembler and the
remote client.
"""


class ConsoleError(Exception):
    """Base class for every error surfaced to the user as a single message."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class OptionFetchError(ConsoleError):
    """A remote option list (engines, models, use cases, checks) failed to load."""

    def __init__(self, source, message):
        super().__init__(message)
        self.source = source


class ValidationError(ConsoleError):
    """User supplied configuration failed a required-field or range rule."""

    def __init__(self, field, message):
        super().__init__(message)
        self.field = field

    def to_dict(self):
        return {"field": self.field, "message": self.message}


class SubmissionError(ConsoleError):
    """A remote write returned failure or could not be reached."""

    def __init__(self, operation, message, status_code=None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
