# providers/client.py
"""
HTTP client for the remote option providers and for dispatching assembled
submissions.
"""

import logging
from typing import Any, Dict, NamedTuple, Optional

import requests
from pydantic import ValidationError as PayloadError

from config import REQUEST_TIMEOUT
from common.errors import OptionFetchError, SubmissionError
from common.utils import get_submission_message, preview_text
from state.models import Check, CheckKind, OptionSource, UseCase
from submission.assembler import option_request

logger = logging.getLogger(__name__)

OPTION_LABELS = {
    OptionSource.DATABASES: "database types",
    OptionSource.LLM_MODELS: "LLM models",
    OptionSource.USE_CASES: "use cases",
    OptionSource.CHECKS: "checks",
}


class SubmissionResult(NamedTuple):
    message: str
    data: Dict[str, Any]


def server_detail(data):
    """Pull the most specific human readable message out of an error body."""
    if not isinstance(data, dict):
        return None
    for key in ("message", "error", "detail"):
        value = data.get(key)
        if value:
            return value if isinstance(value, str) else str(value)
    return None


# The compliance agent acknowledges saved selections with a bare message;
# every other service reports an explicit success flag.
MESSAGE_ACKNOWLEDGED_OPERATIONS = {"apply_selections"}


def is_success(data, operation):
    if operation in MESSAGE_ACKNOWLEDGED_OPERATIONS and "success" not in data:
        return bool(data.get("message")) and not data.get("error")
    return bool(data.get("success"))


class ComplianceServiceClient:
    """Talks to the configuration, LLM, compliance-agent, RAG and knowledge services."""

    def __init__(self, session=None, timeout=REQUEST_TIMEOUT):
        self.http = session or requests.Session()
        self.timeout = timeout

    # --- Option providers ---

    def fetch_database_options(self):
        data = self._fetch_json(OptionSource.DATABASES)
        databases = data.get("databases") if isinstance(data, dict) else None
        if not isinstance(databases, list) or not all(isinstance(db, dict) and "id" in db for db in databases):
            raise OptionFetchError(
                OptionSource.DATABASES,
                "Unexpected API response format or missing 'id' property in database objects.",
            )
        return [str(db["id"]) for db in databases]

    def fetch_llm_models(self):
        data = self._fetch_json(OptionSource.LLM_MODELS)
        available = data.get("available") if isinstance(data, dict) else None
        if not isinstance(available, dict) or not all(isinstance(models, list) for models in available.values()):
            raise OptionFetchError(OptionSource.LLM_MODELS, "Unexpected API response format for LLM models.")
        return {str(provider): [str(model) for model in models] for provider, models in available.items()}

    def fetch_use_cases(self):
        data = self._fetch_json(OptionSource.USE_CASES)
        use_cases = data.get("use_cases") if isinstance(data, dict) else None
        if not isinstance(use_cases, list):
            raise OptionFetchError(OptionSource.USE_CASES, "Unexpected API response format for use cases.")
        try:
            return [UseCase.model_validate(item) for item in use_cases]
        except PayloadError as e:
            logger.error(f"Malformed use case entry: {e}")
            raise OptionFetchError(OptionSource.USE_CASES, "Unexpected API response format for use cases.") from e

    def fetch_checks(self, use_case):
        """
        Fetch the dormant and compliance checks offered for a use case.

        Returns:
            tuple: (dormant checks, compliance checks); a missing list is empty
        """
        data = self._fetch_json(OptionSource.CHECKS, use_case=use_case)
        if not isinstance(data, dict):
            raise OptionFetchError(OptionSource.CHECKS, "Unexpected API response format for checks.")
        try:
            dormant = self._parse_checks(data.get("dormant_checks"), CheckKind.DORMANT)
            compliance = self._parse_checks(data.get("compliance_checks"), CheckKind.COMPLIANCE)
        except PayloadError as e:
            logger.error(f"Malformed check entry for use case {use_case!r}: {e}")
            raise OptionFetchError(OptionSource.CHECKS, "Unexpected API response format for checks.") from e
        return dormant, compliance

    @staticmethod
    def _parse_checks(items, kind):
        if not isinstance(items, list):
            return []
        if not all(isinstance(item, dict) for item in items):
            raise OptionFetchError(OptionSource.CHECKS, "Unexpected API response format for checks.")
        # The list a check arrives in decides its kind, whatever "type" says.
        return [Check.model_validate({**item, "type": kind.value}) for item in items]

    def _fetch_json(self, source, use_case=None):
        request = option_request(source, use_case=use_case)
        label = OPTION_LABELS[source]
        try:
            response = self.http.get(request.target, timeout=self.timeout, headers={"Accept": "application/json"})
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise OptionFetchError(source, f"Failed to load {label}: request timed out.") from e
        except requests.exceptions.ConnectionError as e:
            raise OptionFetchError(source, f"Failed to load {label}: service unreachable.") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise OptionFetchError(source, f"Failed to load {label}: HTTP {status}.") from e
        except requests.exceptions.RequestException as e:
            raise OptionFetchError(source, f"Failed to load {label}: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise OptionFetchError(source, f"Failed to load {label}: invalid JSON response.") from e

    # --- Submissions ---

    def submit(self, request):
        """
        Send an assembled request.

        Returns:
            SubmissionResult: the success notice text and the response body

        Raises:
            SubmissionError: with the user facing failure text
        """
        operation = request.operation
        logger.info(f"Submitting {operation} to {request.target}")
        try:
            response = self._send(request)
        except requests.exceptions.Timeout as e:
            raise SubmissionError(operation, get_submission_message(operation, "error", detail="Request timed out.")) from e
        except requests.exceptions.ConnectionError as e:
            raise SubmissionError(
                operation, get_submission_message(operation, "error", detail="Service unreachable. Check your connection.")
            ) from e
        except requests.exceptions.RequestException as e:
            raise SubmissionError(operation, get_submission_message(operation, "error", detail=str(e))) from e

        data = self._json_or_none(response)
        if not response.ok:
            detail = server_detail(data) or f"{response.status_code} - {response.reason or 'Unknown error'}"
            logger.warning(f"{operation} rejected with status {response.status_code}: {detail}")
            raise SubmissionError(
                operation, get_submission_message(operation, "failed", detail=detail), status_code=response.status_code
            )

        if not isinstance(data, dict):
            raise SubmissionError(
                operation,
                get_submission_message(operation, "failed", detail="Malformed response from server."),
                status_code=response.status_code,
            )

        if not is_success(data, operation):
            raise SubmissionError(
                operation, get_submission_message(operation, "failed", detail=server_detail(data)),
                status_code=response.status_code,
            )

        message = get_submission_message(
            operation,
            "success",
            message=data.get("message"),
            response=preview_text(data.get("response")),
            document_id=data.get("document_id"),
            filename=data.get("filename"),
        )
        return SubmissionResult(message, data)

    def _send(self, request):
        headers = {"Accept": "application/json"}
        kwargs = {"timeout": self.timeout, "headers": headers}
        if request.encoding == "json":
            headers["Content-Type"] = "application/json"
            kwargs["json"] = request.body
        elif request.encoding == "form":
            headers["Content-Type"] = "application/x-www-form-urlencoded"
            kwargs["data"] = request.body
        elif request.encoding == "multipart":
            # requests sets the multipart boundary header itself
            kwargs["data"] = request.body
            kwargs["files"] = request.files
        return self.http.request(request.method, request.target, **kwargs)

    @staticmethod
    def _json_or_none(response) -> Optional[Any]:
        try:
            return response.json()
        except ValueError:
            return None
