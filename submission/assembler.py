# submission/assembler.py
"""
Submission assembler: turns configuration snapshots into outbound request
descriptions for the remote configuration, LLM, compliance-agent, RAG and
knowledge services.

Nothing here touches the network; ``providers.client`` dispatches the
resulting ``OutboundRequest`` objects.
"""

import logging
from typing import Any, Dict, Literal, Optional, Tuple
from urllib.parse import quote

from pydantic import BaseModel

from config import (
    COMPLIANCE_AGENT_API_URL,
    CONFIG_API_URL,
    KNOWLEDGE_API_URL,
    LLM_API_URL,
    PROMPT_TYPE_PLACEHOLDER,
    RAG_CHUNK_OVERLAP,
    RAG_CHUNK_SIZE,
    RAG_CREDENTIALS_API_URL,
    RAG_TOP_K_RETRIEVAL,
)
from common.errors import ValidationError
from state.models import ConfigGroup, OptionSource, find_select_all_id

from .validation import (
    Rule,
    all_required,
    is_number,
    non_negative_int,
    positive_int,
    required,
    to_int,
    to_number,
    unit_interval,
    validate,
)

logger = logging.getLogger(__name__)


ENDPOINTS = {
    "database_options": (CONFIG_API_URL, "/db/databases"),
    "save_connection": (CONFIG_API_URL, "/db/connections/save"),
    "llm_models": (LLM_API_URL, "/llm/available"),
    "enable_llm": (LLM_API_URL, "/llm/generate"),
    "use_cases": (COMPLIANCE_AGENT_API_URL, "/get_use_cases"),
    "checks": (COMPLIANCE_AGENT_API_URL, "/get_checks/{use_case}"),
    "apply_selections": (COMPLIANCE_AGENT_API_URL, "/apply_selections"),
    "save_rag_credentials": (RAG_CREDENTIALS_API_URL, "/rag/credentials/save"),
    "upload_knowledge": (KNOWLEDGE_API_URL, "/knowledge/upload"),
    "execute_prompt": (KNOWLEDGE_API_URL, "/prompts/quick-execute"),
}

OPTION_ENDPOINTS = {
    OptionSource.DATABASES: "database_options",
    OptionSource.LLM_MODELS: "llm_models",
    OptionSource.USE_CASES: "use_cases",
    OptionSource.CHECKS: "checks",
}


def endpoint_url(name, **params):
    base_url, path = ENDPOINTS[name]
    encoded = {key: quote(str(value), safe="") for key, value in params.items()}
    return base_url.rstrip("/") + path.format(**encoded)


class OutboundRequest(BaseModel):
    """Description of one HTTP call: what to send and where."""

    operation: str
    method: Literal["GET", "POST"] = "POST"
    target: str
    body: Optional[Dict[str, Any]] = None
    encoding: Literal["none", "json", "form", "multipart"] = "json"
    files: Optional[Dict[str, Tuple[str, bytes]]] = None


def option_request(source, use_case=None):
    """GET description for one of the remote option lists."""
    source = OptionSource(source)
    name = OPTION_ENDPOINTS[source]
    if source is OptionSource.CHECKS:
        if not use_case:
            raise ValueError("A use case is required to fetch checks")
        target = endpoint_url(name, use_case=use_case)
    else:
        target = endpoint_url(name)
    return OutboundRequest(operation=name, method="GET", target=target, encoding="none")


# --- Rule lists ---

DATABASE_REQUIRED_MESSAGE = "Please fill in all required database connection fields, including password."
LLM_REQUIRED_MESSAGE = "Please fill in all LLM configuration fields."
RAG_REQUIRED_MESSAGE = "Please fill in all required RAG credential fields."

DATABASE_RULES = all_required(
    ["engine_id", "connection_name", "server_name", "database_name", "port", "user_name", "password"],
    DATABASE_REQUIRED_MESSAGE,
) + [
    is_number("port", "Port Number must be a valid number."),
]

ANALYSIS_RULES = [
    required("selected_use_case", "Please select a use case before saving."),
]

LLM_RULES = all_required(
    ["provider", "model_name", "prompt", "max_tokens", "temperature"],
    LLM_REQUIRED_MESSAGE,
) + [
    positive_int("max_tokens", "Max Tokens must be a positive number."),
    unit_interval("temperature", "Temperature must be a number between 0 and 1."),
]

RAG_RULES = all_required(
    [
        "generation_provider",
        "generation_model",
        "embedding_provider",
        "embedding_model",
        "vector_db_type",
        "vector_db_endpoint",
    ],
    RAG_REQUIRED_MESSAGE,
)

KNOWLEDGE_RULES = [
    positive_int("chunk_size", "Chunk Size must be a positive number."),
    non_negative_int("overlap", "Chunk Overlap must be a non-negative number."),
    Rule(
        "overlap",
        lambda config: to_int(config.overlap) < to_int(config.chunk_size),
        "Chunk Overlap must be less than Chunk Size.",
    ),
]

PROMPT_RULES = [
    required("prompt_input", "Prompt is a required field."),
    Rule(
        "prompt_type",
        lambda config: config.prompt_type not in ("", PROMPT_TYPE_PLACEHOLDER),
        "Please select a valid Type for Prompt Generation.",
    ),
    positive_int("max_tokens", "Max Tokens must be a positive number for Prompt Generation."),
    unit_interval("temperature", "Temperature must be a number between 0 and 1 for Prompt Generation."),
]


def _as_form_flag(value):
    return "true" if value else "false"


def _ordered_names(selected_ids, checks):
    """Map ids to display names in check-list order; ids the list doesn't know keep their raw value."""
    names_by_id = {check.id: check.name for check in checks}
    known = [check.id for check in checks if check.id in selected_ids]
    unknown = sorted(set(selected_ids) - set(names_by_id))
    return [names_by_id[check_id] for check_id in known] + unknown


class SubmissionAssembler:
    """Builds one ``OutboundRequest`` per outbound operation from the current store."""

    OPERATIONS = (
        "save_connection",
        "apply_selections",
        "enable_llm",
        "save_rag_credentials",
        "upload_knowledge",
        "execute_prompt",
    )

    def __init__(self, store, catalog):
        self.store = store
        self.catalog = catalog

    def build(self, operation, **extra):
        if operation not in self.OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")
        return getattr(self, operation)(**extra)

    def save_connection(self):
        config = self.store.get(ConfigGroup.DATABASE)
        validate(DATABASE_RULES, config)

        port = to_number(config.port)
        body = {
            "connection_name": config.connection_name.strip(),
            "database_type": config.engine_id.strip(),
            "server_name": config.server_name.strip(),
            "database_name": config.database_name.strip(),
            "port": int(port) if port.is_integer() else port,
            "username": config.user_name.strip(),
            "password": config.password,
            "description": config.description.strip(),
            "save_connection": bool(config.save_connection),
            "connect_immediately": bool(config.connect_immediately),
        }
        return OutboundRequest(operation="save_connection", target=endpoint_url("save_connection"), body=body)

    def apply_selections(self):
        config = self.store.get(ConfigGroup.ANALYSIS)
        validate(ANALYSIS_RULES, config)

        dormant_checks = self.catalog.dormant_checks
        select_all_id = find_select_all_id(dormant_checks)
        dormant_ids = {check_id for check_id in config.selected_dormant_check_ids if check_id != select_all_id}

        body = {
            "use_case": config.selected_use_case,
            "selected_dormant_checks": _ordered_names(dormant_ids, dormant_checks),
            "selected_compliance_checks": _ordered_names(
                config.selected_compliance_check_ids, self.catalog.compliance_checks
            ),
        }
        return OutboundRequest(operation="apply_selections", target=endpoint_url("apply_selections"), body=body)

    def enable_llm(self):
        config = self.store.get(ConfigGroup.LLM)
        validate(LLM_RULES, config)

        body = {
            "model_type": config.provider.lower(),
            "model_name": config.model_name,
            "prompt": config.prompt,
            "max_tokens": to_int(config.max_tokens),
            "temperature": to_number(config.temperature),
        }
        return OutboundRequest(operation="enable_llm", target=endpoint_url("enable_llm"), body=body)

    def save_rag_credentials(self):
        config = self.store.get(ConfigGroup.RAG)
        validate(RAG_RULES, config)

        body = {
            "generation_provider": config.generation_provider.lower(),
            "generation_model": config.generation_model,
            "generation_api_key": config.generation_api_key,
            "generation_api_base": None,
            "generation_api_version": None,
            "embedding_provider": config.embedding_provider,
            "embedding_model": config.embedding_model,
            "embedding_api_key": config.embedding_api_key,
            "embedding_api_base": None,
            "embedding_api_version": None,
            "storage_account": config.storage_account,
            "container_name": config.container_name,
            "connection_string": config.connection_string,
            "blob_prefix": None,
            "vector_db_type": config.vector_db_type.lower().replace(" ", ""),
            "vector_db_endpoint": config.vector_db_endpoint,
            "vector_db_api_key": config.vector_db_api_key,
            "vector_db_database_name": config.vector_db_database_name,
            "vector_db_container_name": config.vector_db_container_name,
            "chunk_size": RAG_CHUNK_SIZE,
            "chunk_overlap": RAG_CHUNK_OVERLAP,
            "top_k_retrieval": RAG_TOP_K_RETRIEVAL,
            "enabled": True,
        }
        return OutboundRequest(operation="save_rag_credentials", target=endpoint_url("save_rag_credentials"), body=body)

    def upload_knowledge(self, file_name=None, content=None):
        config = self.store.get(ConfigGroup.KNOWLEDGE_BASE)
        file_name = file_name or config.selected_file_name
        if not file_name or content is None:
            raise ValidationError("selected_file_name", "Please select a file to upload.")
        validate(KNOWLEDGE_RULES, config)

        body = {
            "chunk_size": str(to_int(config.chunk_size)),
            "chunk_overlap": str(to_int(config.overlap)),
            "extract_metadata": _as_form_flag(config.extract_metadata),
        }
        return OutboundRequest(
            operation="upload_knowledge",
            target=endpoint_url("upload_knowledge"),
            body=body,
            encoding="multipart",
            files={"file": (file_name, content)},
        )

    def execute_prompt(self):
        config = self.store.get(ConfigGroup.PROMPT_GENERATION)
        validate(PROMPT_RULES, config)

        body = {
            "prompt": config.prompt_input,
            "type": config.prompt_type,
            "use_rag": _as_form_flag(config.use_rag),
            "use_database": _as_form_flag(config.use_database),
            "show_code": _as_form_flag(config.show_code),
            "temperature": str(to_number(config.temperature)),
            "max_tokens": str(to_int(config.max_tokens)),
        }
        return OutboundRequest(
            operation="execute_prompt",
            target=endpoint_url("execute_prompt"),
            body=body,
            encoding="form",
        )
