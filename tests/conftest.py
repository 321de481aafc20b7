"""Shared fixtures for the configuration console test suite.

Provides a fake remote service client, sample check lists and ready-made
store/catalog/resolver objects.  No test ever touches the network.
"""

import pytest

from config import SELECT_ALL_DORMANT_CHECKS_NAME
from common.errors import OptionFetchError
from providers.client import SubmissionResult
from selection.cascade import CascadeResolver
from selection.checks import CheckSelectionEngine
from state.models import Check, CheckKind, OptionCatalog, OptionSource, UseCase
from state.session import ConfigSession
from state.store import ConfigStore
from submission.assembler import SubmissionAssembler


# ---------------------------------------------------------------------------
# Check helpers
# ---------------------------------------------------------------------------

def make_check(check_id, name=None, default=False, kind=CheckKind.DORMANT, disabled=False):
    return Check(
        id=check_id,
        name=name or f"Check {check_id.upper()}",
        kind=CheckKind(kind),
        is_default_selected=default,
        is_disabled=disabled,
    )


def select_all_check(check_id="all", default=False):
    return make_check(check_id, name=SELECT_ALL_DORMANT_CHECKS_NAME, default=default)


@pytest.fixture
def dormant_checks():
    return [
        make_check("a", name="Safe Deposit Dormancy", default=True),
        make_check("b", name="Investment Inactivity", default=True),
        select_all_check(),
    ]


@pytest.fixture
def compliance_checks():
    return [
        make_check("c1", name="Incomplete Contact Attempts", default=True, kind=CheckKind.COMPLIANCE),
        make_check("c2", name="Flag Candidates", default=False, kind=CheckKind.COMPLIANCE),
    ]


# ---------------------------------------------------------------------------
# Fake remote client
# ---------------------------------------------------------------------------

class FakeServiceClient:
    """Stands in for ComplianceServiceClient with canned option lists."""

    def __init__(self, dormant_checks=None, compliance_checks=None):
        self.database_options = ["azure_sql", "postgresql"]
        self.llm_models = {"openai": ["gpt-4", "gpt-3.5"], "anthropic": ["claude-3"]}
        self.use_cases = [
            UseCase(value="dormancy review", label="Dormancy Review"),
            UseCase(value="kyc", label="KYC Refresh"),
        ]
        self.checks = {
            "dormancy review": (list(dormant_checks or []), list(compliance_checks or [])),
            "kyc": (
                [make_check("k1", default=False)],
                [make_check("kc1", default=True, kind=CheckKind.COMPLIANCE)],
            ),
        }
        self.failures = {}
        self.calls = []
        self.submitted = []
        self.submit_result = SubmissionResult("Connection saved successfully: saved", {"success": True})
        self.submit_error = None

    def _record(self, source, *args):
        self.calls.append((source, *args))
        if source in self.failures:
            raise self.failures[source]

    def fail(self, source, message="boom"):
        self.failures[source] = OptionFetchError(source, message)

    def fetch_database_options(self):
        self._record(OptionSource.DATABASES)
        return list(self.database_options)

    def fetch_llm_models(self):
        self._record(OptionSource.LLM_MODELS)
        return {provider: list(models) for provider, models in self.llm_models.items()}

    def fetch_use_cases(self):
        self._record(OptionSource.USE_CASES)
        return list(self.use_cases)

    def fetch_checks(self, use_case):
        self._record(OptionSource.CHECKS, use_case)
        dormant, compliance = self.checks.get(use_case, ([], []))
        return list(dormant), list(compliance)

    def submit(self, request):
        self.submitted.append(request)
        if self.submit_error is not None:
            raise self.submit_error
        return self.submit_result


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    return ConfigStore()


@pytest.fixture
def catalog():
    return OptionCatalog()


@pytest.fixture
def resolver(store, catalog):
    return CascadeResolver(store, catalog)


@pytest.fixture
def engine(store, catalog):
    return CheckSelectionEngine(store, catalog)


@pytest.fixture
def assembler(store, catalog):
    return SubmissionAssembler(store, catalog)


@pytest.fixture
def fake_client(dormant_checks, compliance_checks):
    return FakeServiceClient(dormant_checks, compliance_checks)


@pytest.fixture
def session(fake_client):
    return ConfigSession(client=fake_client)


@pytest.fixture
def loaded_session(session):
    session.load_options()
    return session
