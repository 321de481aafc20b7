# providers/__init__.py
"""
Remote option providers and submission dispatch.
"""

from .client import ComplianceServiceClient, SubmissionResult
