# state/__init__.py
"""
Configuration state of a console session: group models, option catalog and
the store that owns them.

The session object lives in ``state.session`` and is imported from there
directly, since it pulls in the selection, submission and provider packages.
"""

from .models import (
    AnalysisSelectionConfig,
    Check,
    CheckKind,
    ConfigGroup,
    DatabaseConnectionConfig,
    KnowledgeBaseConfig,
    LlmConfig,
    OptionCatalog,
    OptionSource,
    PromptGenerationConfig,
    RagCredentialsConfig,
    UseCase,
    find_select_all_id,
)
from .store import ConfigStore
