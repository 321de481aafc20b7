# state/models.py
"""
Pydantic models for the configuration groups, the remote option payloads and
the option catalog owned by a configuration session.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from config import SELECT_ALL_DORMANT_CHECKS_NAME


class ConfigGroup(str, Enum):
    DATABASE = "database"
    LLM = "llm"
    RAG = "rag"
    ANALYSIS = "analysis"
    KNOWLEDGE_BASE = "knowledge_base"
    PROMPT_GENERATION = "prompt_generation"


class CheckKind(str, Enum):
    DORMANT = "dormant"
    COMPLIANCE = "compliance"


class OptionSource(str, Enum):
    DATABASES = "databases"
    LLM_MODELS = "llm_models"
    USE_CASES = "use_cases"
    CHECKS = "checks"


class _Snapshot(BaseModel):
    """Immutable group snapshot; updates always produce a new instance."""

    model_config = ConfigDict(frozen=True)


# --- Configuration groups ---

class DatabaseConnectionConfig(_Snapshot):
    engine_id: str = ""
    connection_name: str = ""
    server_name: str = ""
    database_name: str = ""
    port: str = ""
    user_name: str = ""
    password: str = ""
    description: str = "Azure SQL Database for compliance data"
    save_connection: bool = False
    connect_immediately: bool = True


class LlmConfig(_Snapshot):
    provider: str = ""
    model_name: str = ""
    prompt: str = "what is compliance"
    max_tokens: str = "1000"
    temperature: str = "0.2"


class RagCredentialsConfig(_Snapshot):
    generation_provider: str = ""
    generation_model: str = ""
    generation_api_key: str = "sk-..."
    embedding_provider: str = "Hugging Face"
    embedding_model: str = "BAAI/bge-large-en-v1.5"
    embedding_api_key: str = "API Key (if needed)"
    storage_account: str = "mystorageaccount"
    container_name: str = "compliance-docs"
    connection_string: str = "DefaultEndpointsProtocol=https;AccountName=..."
    vector_db_type: str = "Azure Cosmos DB"
    vector_db_endpoint: str = "https://your-cosmos.documents.azure.com:443/"
    vector_db_api_key: str = "Primary key"
    vector_db_database_name: str = "ComplianceVectorDB"
    vector_db_container_name: str = "compliance_vectors"


class AnalysisSelectionConfig(_Snapshot):
    selected_use_case: str = ""
    selected_dormant_check_ids: FrozenSet[str] = frozenset()
    selected_compliance_check_ids: FrozenSet[str] = frozenset()


class KnowledgeBaseConfig(_Snapshot):
    selected_file_name: Optional[str] = None
    chunk_size: str = "1000"
    overlap: str = "200"
    extract_metadata: bool = True
    document_id: Optional[str] = None


class PromptGenerationConfig(_Snapshot):
    prompt_input: str = ""
    prompt_type: str = "general_assistant"
    use_rag: bool = False
    use_database: bool = False
    show_code: bool = False
    temperature: str = "0.7"
    max_tokens: str = "1000"


GROUP_MODELS = {
    ConfigGroup.DATABASE: DatabaseConnectionConfig,
    ConfigGroup.LLM: LlmConfig,
    ConfigGroup.RAG: RagCredentialsConfig,
    ConfigGroup.ANALYSIS: AnalysisSelectionConfig,
    ConfigGroup.KNOWLEDGE_BASE: KnowledgeBaseConfig,
    ConfigGroup.PROMPT_GENERATION: PromptGenerationConfig,
}


# --- Remote option payloads ---

class UseCase(BaseModel):
    value: str
    label: str = ""


class Check(BaseModel):
    """A selectable check as delivered by the compliance agent service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    kind: CheckKind = Field(CheckKind.DORMANT, alias="type")
    is_default_selected: bool = Field(False, alias="default_selected")
    is_disabled: bool = Field(False, alias="disabled")

    @property
    def is_select_all(self):
        return self.name == SELECT_ALL_DORMANT_CHECKS_NAME


def find_select_all_id(checks):
    """Return the id of the "Select All" pseudo-check, or None when the list has none."""
    for check in checks:
        if check.is_select_all:
            return check.id
    return None


class OptionCatalog(BaseModel):
    """Option lists fetched from the remote services, plus per-source status."""

    database_engines: List[str] = Field(default_factory=list)
    llm_models: Dict[str, List[str]] = Field(default_factory=dict)
    use_cases: List[UseCase] = Field(default_factory=list)
    dormant_checks: List[Check] = Field(default_factory=list)
    compliance_checks: List[Check] = Field(default_factory=list)
    errors: Dict[OptionSource, Optional[str]] = Field(default_factory=dict)
    loading: Dict[OptionSource, bool] = Field(default_factory=dict)

    @property
    def llm_providers(self):
        return list(self.llm_models.keys())

    def models_for(self, provider):
        return list(self.llm_models.get(provider) or [])

    def error_for(self, source):
        return self.errors.get(source)

    def is_loading(self, source):
        return self.loading.get(source, False)
