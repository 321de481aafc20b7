# common/__init__.py
"""
Shared helpers and the error taxonomy of the configuration console.
"""

from .errors import ConsoleError, OptionFetchError, ValidationError, SubmissionError
from .utils import get_submission_message, preview_text
