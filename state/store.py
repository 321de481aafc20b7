# state/store.py
"""
Configuration store: the single source of truth for the configuration groups
of one console session.
"""

import logging
import threading
from typing import Any, Callable, Dict, Mapping, Union

from pydantic import BaseModel

from .models import GROUP_MODELS, ConfigGroup

logger = logging.getLogger(__name__)

Patch = Mapping[str, Any]
Updater = Callable[[BaseModel], Union[BaseModel, Patch]]


class ConfigStore:
    """
    Holds one immutable snapshot per configuration group.

    Writes go through ``update``/``reset_group`` only. Patches are coerced to
    the field types of the group model, but business rules (required fields,
    numeric ranges) are checked by the submission assembler, not here.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._groups: Dict[ConfigGroup, BaseModel] = {
            group: model() for group, model in GROUP_MODELS.items()
        }

    def get(self, group):
        """Return the current snapshot of a group."""
        return self._groups[ConfigGroup(group)]

    def update(self, group, patch: Union[Patch, Updater]):
        """
        Merge a partial record into a group, or apply an updater function.

        Args:
            group: ConfigGroup (or its string value)
            patch: mapping of field -> value, or a callable receiving the
                previous snapshot and returning a new snapshot or a mapping

        Returns:
            The new snapshot
        """
        group = ConfigGroup(group)
        with self._lock:
            previous = self._groups[group]
            if callable(patch):
                result = patch(previous)
                if isinstance(result, BaseModel):
                    if not isinstance(result, GROUP_MODELS[group]):
                        raise TypeError(
                            f"Updater for '{group.value}' returned {type(result).__name__}"
                        )
                    self._groups[group] = result
                    return result
                patch = result

            unknown = set(patch) - set(GROUP_MODELS[group].model_fields)
            if unknown:
                raise ValueError(f"Unknown field(s) for '{group.value}': {', '.join(sorted(unknown))}")

            updated = GROUP_MODELS[group].model_validate({**previous.model_dump(), **patch})
            self._groups[group] = updated
            return updated

    def reset_group(self, group):
        """Restore the literal defaults of one group."""
        group = ConfigGroup(group)
        with self._lock:
            self._groups[group] = GROUP_MODELS[group]()
            logger.info(f"Configuration group '{group.value}' reset to defaults")
            return self._groups[group]

    def reset_all(self):
        """Restore every group to its defaults."""
        with self._lock:
            for group in GROUP_MODELS:
                self._groups[group] = GROUP_MODELS[group]()
        logger.info("All configuration groups reset to defaults")

    def snapshot(self):
        """Return all groups as JSON ready dictionaries."""
        with self._lock:
            return {group.value: model.model_dump(mode="json") for group, model in self._groups.items()}
