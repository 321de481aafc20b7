# selection/checks.py
"""
Check selection: default population of the dormant/compliance check sets and
the "Select All Dormant Checks" toggle semantics.
"""

import logging

from state.models import CheckKind, ConfigGroup, find_select_all_id

logger = logging.getLogger(__name__)


def default_dormant_selection(checks):
    """
    Initial dormant selection for a freshly loaded use case.

    Default-selected regular checks, plus the select-all id when every
    regular check is default-selected.
    """
    select_all_id = find_select_all_id(checks)
    regular = [check for check in checks if check.id != select_all_id]
    selected = {check.id for check in regular if check.is_default_selected}
    if select_all_id is not None and regular and all(check.is_default_selected for check in regular):
        selected.add(select_all_id)
    return frozenset(selected)


def default_compliance_selection(checks):
    return frozenset(check.id for check in checks if check.is_default_selected)


def derive_select_all(selected, checks):
    """Add or drop the select-all id so it mirrors whether all other ids are present."""
    selected = frozenset(selected)
    select_all_id = find_select_all_id(checks)
    if select_all_id is None:
        return selected

    other_ids = [check.id for check in checks if check.id != select_all_id]
    all_others_selected = bool(other_ids) and all(check_id in selected for check_id in other_ids)
    if all_others_selected:
        return selected | {select_all_id}
    return selected - {select_all_id}


class CheckSelectionEngine:
    """Applies checkbox events to the analysis selection group."""

    def __init__(self, store, catalog):
        self.store = store
        self.catalog = catalog

    def toggle(self, check_id, checked, kind):
        """
        Check or uncheck one check id.

        Ids missing from the loaded check list are stored as given; they never
        count towards the select-all state.

        Returns:
            frozenset: the resulting selected ids for ``kind``
        """
        kind = CheckKind(kind)
        if kind is CheckKind.COMPLIANCE:
            updated = self.store.update(ConfigGroup.ANALYSIS, lambda prev: {
                "selected_compliance_check_ids": _toggled(prev.selected_compliance_check_ids, check_id, checked),
            })
            return updated.selected_compliance_check_ids

        dormant_checks = list(self.catalog.dormant_checks)
        select_all_id = find_select_all_id(dormant_checks)

        def apply(prev):
            if select_all_id is not None and check_id == select_all_id:
                if checked:
                    ids = frozenset(check.id for check in dormant_checks)
                else:
                    ids = frozenset()
            else:
                ids = derive_select_all(
                    _toggled(prev.selected_dormant_check_ids, check_id, checked),
                    dormant_checks,
                )
            return {"selected_dormant_check_ids": ids}

        updated = self.store.update(ConfigGroup.ANALYSIS, apply)
        logger.debug(f"Dormant check '{check_id}' set to {checked}; {len(updated.selected_dormant_check_ids)} selected")
        return updated.selected_dormant_check_ids


def _toggled(ids, check_id, checked):
    if checked:
        return frozenset(ids) | {check_id}
    return frozenset(ids) - {check_id}
