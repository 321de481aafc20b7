# selection/__init__.py
"""
Cascading option resolution and check-selection logic.
"""

from .cascade import CascadeResolver, FetchTicket, pick_option
from .checks import (
    CheckSelectionEngine,
    default_compliance_selection,
    default_dormant_selection,
    derive_select_all,
)
