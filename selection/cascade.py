# selection/cascade.py
"""
Cascade resolver.

Keeps dependent fields consistent when a parent field or a remote option list
changes:

    LLM provider            -> LLM model
    RAG generation provider -> RAG generation model
    use case                -> dormant / compliance checks
    database engine list    -> selected engine

Each reaction is a plain method called right after the mutation that can
trigger it. Remote fetches are tracked with tickets so that a response for a
parent value the user has already moved away from is dropped.
"""

import itertools
import logging
from typing import NamedTuple, Optional

from common.errors import ConsoleError
from state.models import ConfigGroup, OptionSource

from .checks import default_compliance_selection, default_dormant_selection

logger = logging.getLogger(__name__)


class FetchTicket(NamedTuple):
    source: OptionSource
    parent: Optional[str]
    seq: int


def pick_option(options, current):
    """Keep ``current`` when it is still offered, else fall back to the first option or ""."""
    if current in options:
        return current
    if options:
        return options[0]
    return ""


class CascadeResolver:

    def __init__(self, store, catalog):
        self.store = store
        self.catalog = catalog
        self._seq = itertools.count(1)
        self._latest = {}
        self._loaded = set()

    # --- Fetch bookkeeping ---

    def begin_fetch(self, source):
        """Register an outgoing fetch and return the ticket its completion must present."""
        source = OptionSource(source)
        ticket = FetchTicket(source, self._parent_value(source), next(self._seq))
        self._latest[source] = ticket.seq
        self.catalog.loading[source] = True
        self.catalog.errors[source] = None
        return ticket

    def is_current(self, ticket):
        if self._latest.get(ticket.source) != ticket.seq:
            return False
        return ticket.parent == self._parent_value(ticket.source)

    def has_loaded(self, source):
        return OptionSource(source) in self._loaded

    def _parent_value(self, source):
        if source is OptionSource.CHECKS:
            return self.store.get(ConfigGroup.ANALYSIS).selected_use_case
        return None

    def _complete(self, ticket):
        if self._latest.get(ticket.source) == ticket.seq:
            self.catalog.loading[ticket.source] = False
        if not self.is_current(ticket):
            logger.info(
                f"Discarding stale {ticket.source.value} response (request {ticket.seq}, parent {ticket.parent!r})"
            )
            return False
        return True

    # --- Completions ---

    def apply_database_options(self, ticket, engines):
        if not self._complete(ticket):
            return False
        self.catalog.database_engines = list(engines)
        self._loaded.add(OptionSource.DATABASES)
        self.reconcile_database_engine()
        logger.info(f"Loaded {len(engines)} database engine option(s)")
        return True

    def apply_llm_models(self, ticket, available):
        if not self._complete(ticket):
            return False
        self.catalog.llm_models = {provider: list(models) for provider, models in available.items()}
        self._loaded.add(OptionSource.LLM_MODELS)
        self.fill_empty_providers()
        self.reconcile_llm_model()
        self.reconcile_generation_model()
        logger.info(f"Loaded models for {len(self.catalog.llm_models)} LLM provider(s)")
        return True

    def apply_use_cases(self, ticket, use_cases):
        """
        Store the use-case list and default the selection to its first entry.

        Returns True only when the selected use case changed, i.e. the caller
        has to fetch checks for it.
        """
        if not self._complete(ticket):
            return False
        self.catalog.use_cases = list(use_cases)
        self._loaded.add(OptionSource.USE_CASES)
        return self.fill_empty_use_case()

    def apply_checks(self, ticket, dormant_checks, compliance_checks):
        if not self._complete(ticket):
            return False
        self.catalog.dormant_checks = list(dormant_checks)
        self.catalog.compliance_checks = list(compliance_checks)
        self._loaded.add(OptionSource.CHECKS)
        self.populate_default_checks()
        return True

    def fail_fetch(self, ticket, error):
        """Record a failed fetch and clear what depended on it. Never raises."""
        if not self._complete(ticket):
            return False

        message = error.message if isinstance(error, ConsoleError) else str(error)
        source = ticket.source
        self.catalog.errors[source] = message
        self._loaded.discard(source)
        logger.error(f"Option fetch for {source.value} failed: {message}")

        if source is OptionSource.DATABASES:
            self.catalog.database_engines = []
            self.store.update(ConfigGroup.DATABASE, {"engine_id": ""})
        elif source is OptionSource.LLM_MODELS:
            self.catalog.llm_models = {}
            self.store.update(ConfigGroup.LLM, {"model_name": ""})
            self.store.update(ConfigGroup.RAG, {"generation_model": ""})
        elif source is OptionSource.USE_CASES:
            self.catalog.use_cases = []
        elif source is OptionSource.CHECKS:
            self.clear_checks()
        return True

    # --- Reactions ---

    def reconcile_database_engine(self):
        if not self.has_loaded(OptionSource.DATABASES):
            return
        current = self.store.get(ConfigGroup.DATABASE).engine_id
        engine_id = pick_option(self.catalog.database_engines, current)
        if engine_id != current:
            self.store.update(ConfigGroup.DATABASE, {"engine_id": engine_id})

    def fill_empty_providers(self):
        providers = self.catalog.llm_providers
        if not providers:
            return
        if not self.store.get(ConfigGroup.LLM).provider:
            self.store.update(ConfigGroup.LLM, {"provider": providers[0]})
        if not self.store.get(ConfigGroup.RAG).generation_provider:
            self.store.update(ConfigGroup.RAG, {"generation_provider": providers[0]})

    def llm_model_options(self):
        return self.catalog.models_for(self.store.get(ConfigGroup.LLM).provider)

    def generation_model_options(self):
        return self.catalog.models_for(self.store.get(ConfigGroup.RAG).generation_provider)

    def reconcile_llm_model(self):
        if not self.has_loaded(OptionSource.LLM_MODELS):
            return
        current = self.store.get(ConfigGroup.LLM).model_name
        model_name = pick_option(self.llm_model_options(), current)
        if model_name != current:
            self.store.update(ConfigGroup.LLM, {"model_name": model_name})

    def reconcile_generation_model(self):
        if not self.has_loaded(OptionSource.LLM_MODELS):
            return
        current = self.store.get(ConfigGroup.RAG).generation_model
        model_name = pick_option(self.generation_model_options(), current)
        if model_name != current:
            self.store.update(ConfigGroup.RAG, {"generation_model": model_name})

    def change_llm_provider(self, provider):
        self.store.update(ConfigGroup.LLM, {"provider": provider})
        self.reconcile_llm_model()

    def change_generation_provider(self, provider):
        self.store.update(ConfigGroup.RAG, {"generation_provider": provider})
        self.reconcile_generation_model()

    def fill_empty_use_case(self):
        if self.catalog.use_cases and not self.store.get(ConfigGroup.ANALYSIS).selected_use_case:
            return self.change_use_case(self.catalog.use_cases[0].value)
        return False

    def change_use_case(self, use_case):
        """
        Switch the selected use case.

        The old check lists and selections belong to the previous use case, so
        both are cleared; the next check fetch repopulates the defaults.
        Returns True when the value actually changed.
        """
        if use_case == self.store.get(ConfigGroup.ANALYSIS).selected_use_case:
            return False
        self.store.update(ConfigGroup.ANALYSIS, {
            "selected_use_case": use_case,
            "selected_dormant_check_ids": frozenset(),
            "selected_compliance_check_ids": frozenset(),
        })
        self.catalog.dormant_checks = []
        self.catalog.compliance_checks = []
        self._loaded.discard(OptionSource.CHECKS)
        logger.info(f"Use case changed to {use_case!r}")
        return True

    def populate_default_checks(self):
        """Fill empty check selections from the default-selected flags of the loaded lists."""
        dormant_checks = self.catalog.dormant_checks
        compliance_checks = self.catalog.compliance_checks

        def apply(prev):
            patch = {}
            if not prev.selected_dormant_check_ids:
                patch["selected_dormant_check_ids"] = default_dormant_selection(dormant_checks)
            if not prev.selected_compliance_check_ids:
                patch["selected_compliance_check_ids"] = default_compliance_selection(compliance_checks)
            return patch

        self.store.update(ConfigGroup.ANALYSIS, apply)

    def clear_checks(self):
        self.catalog.dormant_checks = []
        self.catalog.compliance_checks = []
        self._loaded.discard(OptionSource.CHECKS)
        self.store.update(ConfigGroup.ANALYSIS, {
            "selected_dormant_check_ids": frozenset(),
            "selected_compliance_check_ids": frozenset(),
        })

    def reapply_defaults(self):
        """
        Re-run every "empty field takes the first option" rule, e.g. after a reset.

        Returns True when the selected use case changed.
        """
        self.reconcile_database_engine()
        if self.has_loaded(OptionSource.LLM_MODELS):
            self.fill_empty_providers()
        self.reconcile_llm_model()
        self.reconcile_generation_model()
        return self.fill_empty_use_case()
