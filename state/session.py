# state/session.py
"""
Configuration session: the object that owns one store and everything that
reads or writes it.

Both the Streamlit console and the REST API create one session per user and
pass it around; nothing here is module level state.
"""

import logging
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from common.errors import OptionFetchError, SubmissionError, ValidationError
from providers.client import ComplianceServiceClient
from selection.cascade import CascadeResolver
from selection.checks import CheckSelectionEngine
from submission.assembler import SubmissionAssembler

from .models import ConfigGroup, OptionCatalog, OptionSource
from .store import ConfigStore

logger = logging.getLogger(__name__)


class Notice(BaseModel):
    """The single dismissible message shown to the user."""

    message: str
    level: Literal["info", "success", "warning", "error"] = "info"
    operation: Optional[str] = None
    field: Optional[str] = None


class ConfigSession:

    def __init__(self, client=None, store=None):
        self.store = store or ConfigStore()
        self.catalog = OptionCatalog()
        self.resolver = CascadeResolver(self.store, self.catalog)
        self.checks = CheckSelectionEngine(self.store, self.catalog)
        self.assembler = SubmissionAssembler(self.store, self.catalog)
        self.client = client or ComplianceServiceClient()
        self.notice: Optional[Notice] = None
        self.created_at = datetime.now()

    # --- Notices ---

    def show_notice(self, message, level="info", operation=None, field=None):
        self.notice = Notice(message=message, level=level, operation=operation, field=field)
        return self.notice

    def dismiss_notice(self):
        self.notice = None

    # --- Option loading ---

    def _load(self, source, fetch, apply):
        ticket = self.resolver.begin_fetch(source)
        try:
            result = fetch()
        except OptionFetchError as e:
            self.resolver.fail_fetch(ticket, e)
            return False
        return apply(ticket, result)

    def load_options(self):
        """Fetch every option list; failures are recorded per source in the catalog."""
        self.load_databases()
        self.load_llm_models()
        self.load_use_cases()

    def load_databases(self):
        return self._load(OptionSource.DATABASES, self.client.fetch_database_options, self.resolver.apply_database_options)

    def load_llm_models(self):
        return self._load(OptionSource.LLM_MODELS, self.client.fetch_llm_models, self.resolver.apply_llm_models)

    def load_use_cases(self):
        applied = self._load(OptionSource.USE_CASES, self.client.fetch_use_cases, self.resolver.apply_use_cases)
        if self.store.get(ConfigGroup.ANALYSIS).selected_use_case:
            self.load_checks()
        return applied

    def load_checks(self):
        use_case = self.store.get(ConfigGroup.ANALYSIS).selected_use_case
        if not use_case:
            self.resolver.clear_checks()
            return False
        return self._load(
            OptionSource.CHECKS,
            lambda: self.client.fetch_checks(use_case),
            lambda ticket, checks: self.resolver.apply_checks(ticket, *checks),
        )

    def refresh_databases(self):
        """Clear the database form and reload the engine list."""
        self.store.reset_group(ConfigGroup.DATABASE)
        if self.load_databases():
            return self.show_notice("Database types refreshed and form cleared.", "success")
        error = self.catalog.error_for(OptionSource.DATABASES) or "Unknown error"
        return self.show_notice(f"Failed to refresh: {error}", "error")

    # --- Editing ---

    def edit(self, group, patch):
        """
        Apply a partial update coming from the user.

        Fields that drive a cascade are routed through the resolver after the
        plain fields are written, so dependent values are reconciled before
        this call returns.
        """
        group = ConfigGroup(group)
        patch = dict(patch)
        provider = patch.pop("provider", None) if group is ConfigGroup.LLM else None
        generation_provider = patch.pop("generation_provider", None) if group is ConfigGroup.RAG else None
        use_case = patch.pop("selected_use_case", None) if group is ConfigGroup.ANALYSIS else None

        if patch:
            self.store.update(group, patch)
        # A directly edited option value must still be one of the loaded options.
        if group is ConfigGroup.LLM and "model_name" in patch:
            self.resolver.reconcile_llm_model()
        if group is ConfigGroup.RAG and "generation_model" in patch:
            self.resolver.reconcile_generation_model()
        if group is ConfigGroup.DATABASE and "engine_id" in patch:
            self.resolver.reconcile_database_engine()
        if provider is not None:
            self.resolver.change_llm_provider(provider)
        if generation_provider is not None:
            self.resolver.change_generation_provider(generation_provider)
        if use_case is not None:
            self.select_use_case(use_case)
        return self.store.get(group)

    def select_use_case(self, use_case):
        if self.resolver.change_use_case(use_case):
            self.load_checks()

    def toggle_check(self, check_id, checked, kind):
        return self.checks.toggle(check_id, checked, kind)

    def reset_group(self, group):
        group = ConfigGroup(group)
        self.store.reset_group(group)
        if group is ConfigGroup.ANALYSIS:
            self.resolver.clear_checks()
        if self.resolver.reapply_defaults():
            self.load_checks()
        return self.store.get(group)

    def reset_all(self):
        """Reset every configuration group, then re-derive defaults from the loaded options."""
        self.store.reset_all()
        self.resolver.clear_checks()
        if self.resolver.reapply_defaults():
            self.load_checks()

    # --- Submissions ---

    def submit(self, operation, **extra):
        """
        Validate, assemble and send one outbound operation.

        Always returns the resulting notice; validation failures are
        "warning", remote failures "error". The configuration is left as the
        user entered it either way.
        """
        try:
            request = self.assembler.build(operation, **extra)
        except ValidationError as e:
            logger.info(f"{operation} blocked by validation on '{e.field}': {e.message}")
            return self.show_notice(e.message, "warning", operation=operation, field=e.field)

        try:
            result = self.client.submit(request)
        except SubmissionError as e:
            logger.error(f"{operation} failed: {e.message}")
            return self.show_notice(e.message, "error", operation=operation)

        if operation == "upload_knowledge":
            document_id = result.data.get("document_id")
            self.store.update(ConfigGroup.KNOWLEDGE_BASE, {
                "selected_file_name": request.files["file"][0],
                "document_id": str(document_id) if document_id is not None else None,
            })
        return self.show_notice(result.message, "success", operation=operation)
