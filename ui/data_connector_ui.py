# ui/data_connector_ui.py
"""
Data Connector section: database connection, LLM configuration, RAG
credentials and analysis mode selection.
"""

import logging

import pandas as pd
import streamlit as st

from config import EMBEDDING_PROVIDER_OPTIONS, VECTOR_DB_TYPE_OPTIONS
from state.models import ConfigGroup, OptionSource

from .widgets import (
    bound_checkbox,
    bound_selectbox,
    bound_text_area,
    bound_text_input,
    check_checkbox,
)

logger = logging.getLogger(__name__)


def _submit(session, operation, spinner_text):
    with st.spinner(spinner_text):
        session.submit(operation)
    st.rerun()


def _option_status(session, source, label):
    """Render loading/error state for an option source. Returns True when the control can be drawn."""
    error = session.catalog.error_for(source)
    if error:
        st.error(f"❌ {error}")
        return False
    if session.catalog.is_loading(source):
        st.info(f"⏳ Loading {label}...")
        return False
    return True


def render_database_section(session):
    st.subheader("🗄️ Connect with Database")

    if _option_status(session, OptionSource.DATABASES, "database types"):
        bound_selectbox(session, ConfigGroup.DATABASE, "engine_id", "Database Type",
                        session.catalog.database_engines)

    col1, col2 = st.columns(2)
    with col1:
        bound_text_input(session, ConfigGroup.DATABASE, "connection_name", "Connection Name")
        bound_text_input(session, ConfigGroup.DATABASE, "server_name", "Server Name")
        bound_text_input(session, ConfigGroup.DATABASE, "database_name", "Database Name")
    with col2:
        bound_text_input(session, ConfigGroup.DATABASE, "port", "Port Number", placeholder="1433")
        bound_text_input(session, ConfigGroup.DATABASE, "user_name", "User Name")
        bound_text_input(session, ConfigGroup.DATABASE, "password", "Password", type="password")

    bound_text_area(session, ConfigGroup.DATABASE, "description", "Description")
    bound_checkbox(session, ConfigGroup.DATABASE, "save_connection", "Save connection")
    bound_checkbox(session, ConfigGroup.DATABASE, "connect_immediately", "Connect immediately")

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("🔌 Connect", key="db_connect_button"):
            _submit(session, "save_connection", "Attempting to connect and save database connection...")
    with col2:
        if st.button("🔁 Reconnect", key="db_reconnect_button"):
            _submit(session, "save_connection", "Attempting to reconnect/re-verify database connection...")
    with col3:
        if st.button("🔄 Refresh", key="db_refresh_button"):
            with st.spinner("Refreshing database types..."):
                session.refresh_databases()
            st.rerun()


def render_llm_section(session):
    st.subheader("🤖 LLM Configuration")

    if _option_status(session, OptionSource.LLM_MODELS, "LLM models"):
        col1, col2 = st.columns(2)
        with col1:
            bound_selectbox(session, ConfigGroup.LLM, "provider", "LLM Provider",
                            session.catalog.llm_providers)
        with col2:
            bound_selectbox(session, ConfigGroup.LLM, "model_name", "Model Name",
                            session.resolver.llm_model_options())

    bound_text_area(session, ConfigGroup.LLM, "prompt", "Prompt")
    col1, col2 = st.columns(2)
    with col1:
        bound_text_input(session, ConfigGroup.LLM, "max_tokens", "Max Tokens")
    with col2:
        bound_text_input(session, ConfigGroup.LLM, "temperature", "Temperature (0-1)")

    if st.button("⚡ Enable LLM", key="llm_enable_button"):
        _submit(session, "enable_llm", "Attempting to enable LLM and generate response...")


def render_rag_section(session):
    st.subheader("📚 RAG Credentials")

    st.markdown("**Generation**")
    if _option_status(session, OptionSource.LLM_MODELS, "LLM models"):
        col1, col2 = st.columns(2)
        with col1:
            bound_selectbox(session, ConfigGroup.RAG, "generation_provider", "Generation LLM Provider",
                            session.catalog.llm_providers)
        with col2:
            bound_selectbox(session, ConfigGroup.RAG, "generation_model", "Generation Model",
                            session.resolver.generation_model_options())
    bound_text_input(session, ConfigGroup.RAG, "generation_api_key", "Generation API Key", type="password")

    st.markdown("**Embedding**")
    col1, col2 = st.columns(2)
    with col1:
        bound_selectbox(session, ConfigGroup.RAG, "embedding_provider", "Embedding Provider",
                        EMBEDDING_PROVIDER_OPTIONS)
    with col2:
        bound_text_input(session, ConfigGroup.RAG, "embedding_model", "Embedding Model")
    bound_text_input(session, ConfigGroup.RAG, "embedding_api_key", "Embedding API Key", type="password")

    st.markdown("**Document Storage**")
    col1, col2 = st.columns(2)
    with col1:
        bound_text_input(session, ConfigGroup.RAG, "storage_account", "Storage Account")
    with col2:
        bound_text_input(session, ConfigGroup.RAG, "container_name", "Container Name")
    bound_text_input(session, ConfigGroup.RAG, "connection_string", "Connection String", type="password")

    st.markdown("**Vector Database**")
    bound_selectbox(session, ConfigGroup.RAG, "vector_db_type", "Vector DB Type", VECTOR_DB_TYPE_OPTIONS)
    bound_text_input(session, ConfigGroup.RAG, "vector_db_endpoint", "Connection String / Endpoint")
    bound_text_input(session, ConfigGroup.RAG, "vector_db_api_key", "API Key", type="password")
    col1, col2 = st.columns(2)
    with col1:
        bound_text_input(session, ConfigGroup.RAG, "vector_db_database_name", "Database Name")
    with col2:
        bound_text_input(session, ConfigGroup.RAG, "vector_db_container_name", "Container Name")

    if st.button("💾 Save RAG Credentials", key="rag_save_button"):
        _submit(session, "save_rag_credentials", "Saving RAG Credentials...")


def selection_summary(session):
    """One row per loaded check with its current selection state."""
    analysis = session.store.get(ConfigGroup.ANALYSIS)
    rows = []
    for check in session.catalog.dormant_checks:
        if check.is_select_all:
            continue
        rows.append({"Check": check.name, "Type": "Dormant",
                     "Selected": check.id in analysis.selected_dormant_check_ids})
    for check in session.catalog.compliance_checks:
        rows.append({"Check": check.name, "Type": "Compliance",
                     "Selected": check.id in analysis.selected_compliance_check_ids})
    return pd.DataFrame(rows, columns=["Check", "Type", "Selected"])


def render_analysis_section(session):
    st.subheader("🔍 Analysis Modes")

    if _option_status(session, OptionSource.USE_CASES, "use cases"):
        use_cases = session.catalog.use_cases
        labels = {use_case.value: use_case.label or use_case.value for use_case in use_cases}
        bound_selectbox(session, ConfigGroup.ANALYSIS, "selected_use_case", "Use Case",
                        list(labels), format_func=lambda value: labels.get(value, value))

    if not session.store.get(ConfigGroup.ANALYSIS).selected_use_case:
        st.info("Select a use case to see its checks.")
        return

    if not _option_status(session, OptionSource.CHECKS, "checks"):
        return

    analysis = session.store.get(ConfigGroup.ANALYSIS)
    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**Dormant Checks**")
        if not session.catalog.dormant_checks:
            st.caption("No dormant checks for this use case.")
        for check in session.catalog.dormant_checks:
            check_checkbox(session, check, analysis.selected_dormant_check_ids)
    with col2:
        st.markdown("**Compliance Checks**")
        if not session.catalog.compliance_checks:
            st.caption("No compliance checks for this use case.")
        for check in session.catalog.compliance_checks:
            check_checkbox(session, check, analysis.selected_compliance_check_ids)

    summary = selection_summary(session)
    if not summary.empty:
        with st.expander(f"📋 Selection summary ({int(summary['Selected'].sum())} of {len(summary)} selected)"):
            st.dataframe(summary, use_container_width=True, hide_index=True)

    if st.button("💾 Save", key="analysis_save_button"):
        _submit(session, "apply_selections", "Saving analysis modes and checks...")


def render_data_connector(session):
    """Render the full Data Connector section."""
    render_database_section(session)
    st.markdown("---")
    render_llm_section(session)
    st.markdown("---")
    render_rag_section(session)
    st.markdown("---")
    render_analysis_section(session)
