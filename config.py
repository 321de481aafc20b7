# config.py
"""
Configuration settings for the compliance configuration console.
"""

import os


# --- Application Configuration ---
APP_NAME = "Compliance Configuration Console"
APP_VERSION = "1.0.0"
APP_TITLE = os.getenv("APP_TITLE", "Internal Audit Bot - Configuration")
APP_SUBTITLE = """
Configure the database connection, language model, RAG credentials and the
dormant/compliance checks used by the banking compliance analysis services.
"""

# --- API Authentication ---
APP_USERNAME = os.getenv("APP_USERNAME", "admin")
APP_PASSWORD = os.getenv("APP_PASSWORD", "pass123")


# --- Remote Service Endpoints ---
# Each remote collaborator can live on its own host.
CONFIG_API_URL = os.getenv("CONFIG_API_URL", "http://localhost:8001")
LLM_API_URL = os.getenv("LLM_API_URL", "http://localhost:8002")
COMPLIANCE_AGENT_API_URL = os.getenv("COMPLIANCE_AGENT_API_URL", "http://localhost:8003")
RAG_CREDENTIALS_API_URL = os.getenv("RAG_CREDENTIALS_API_URL", "http://localhost:8004")
KNOWLEDGE_API_URL = os.getenv("KNOWLEDGE_API_URL", "http://localhost:8005")

REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))


# --- Session State Keys ---
SESSION_CONFIG = "config_session"
SESSION_SECTION = "configuration_section"


# --- REST Session Expiry ---
SESSION_TTL = int(os.getenv("SESSION_TTL", "14400"))  # 4 hours


# --- Analysis Selection ---
SELECT_ALL_DORMANT_CHECKS_NAME = "Select All Dormant Checks"


# --- Static Option Lists ---
EMBEDDING_PROVIDER_OPTIONS = ["Hugging Face", "OpenAI", "Cohere"]
VECTOR_DB_TYPE_OPTIONS = ["Azure Cosmos DB", "Pinecone", "Weaviate", "Qdrant", "Chroma"]
PROMPT_TYPE_OPTIONS = [
    "--",
    "domain_knowledge",
    "data_visualization",
    "code_explanation",
    "natural_language",
    "sql_generation",
    "rag_query",
    "general_assistant",
    "custom",
]
PROMPT_TYPE_PLACEHOLDER = "--"


# --- RAG Retrieval Settings sent with saved credentials ---
RAG_CHUNK_SIZE = 1000
RAG_CHUNK_OVERLAP = 200
RAG_TOP_K_RETRIEVAL = 5
