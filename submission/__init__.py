# submission/__init__.py
"""
Validation and payload assembly for outbound configuration requests.
"""

from .assembler import OutboundRequest, SubmissionAssembler, endpoint_url, option_request
from .validation import Rule, first_violation, validate
