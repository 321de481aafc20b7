# ui/prompt_setup_ui.py
"""
Prompt Setup section: RAG knowledge base upload and prompt generation.
"""

import streamlit as st

from config import PROMPT_TYPE_OPTIONS
from state.models import ConfigGroup

from .widgets import bound_checkbox, bound_selectbox, bound_text_area, bound_text_input


def render_knowledge_base_section(session):
    st.subheader("📄 RAG Knowledge Base")

    uploaded_file = st.file_uploader(
        "Upload Knowledge Document",
        type=["pdf", "docx", "txt", "md", "csv"],
        key="knowledge_file_uploader",
    )
    knowledge = session.store.get(ConfigGroup.KNOWLEDGE_BASE)
    if uploaded_file is not None and uploaded_file.name != knowledge.selected_file_name:
        # A new file invalidates the previous upload result.
        session.edit(ConfigGroup.KNOWLEDGE_BASE, {"selected_file_name": uploaded_file.name, "document_id": None})
        knowledge = session.store.get(ConfigGroup.KNOWLEDGE_BASE)

    if knowledge.selected_file_name:
        st.caption(f"Selected: {knowledge.selected_file_name}")
    if knowledge.document_id:
        st.caption(f"Document ID: {knowledge.document_id}")

    col1, col2 = st.columns(2)
    with col1:
        bound_text_input(session, ConfigGroup.KNOWLEDGE_BASE, "chunk_size", "Chunk Size")
    with col2:
        bound_text_input(session, ConfigGroup.KNOWLEDGE_BASE, "overlap", "Chunk Overlap")
    bound_checkbox(session, ConfigGroup.KNOWLEDGE_BASE, "extract_metadata", "Extract metadata")

    if st.button("⬆️ Upload", key="knowledge_upload_button"):
        with st.spinner("Uploading file and processing knowledge base..."):
            if uploaded_file is None:
                session.submit("upload_knowledge")
            else:
                session.submit("upload_knowledge", file_name=uploaded_file.name, content=uploaded_file.getvalue())
        st.rerun()


def render_prompt_generation_section(session):
    st.subheader("✍️ Prompt Generation")

    bound_text_area(session, ConfigGroup.PROMPT_GENERATION, "prompt_input", "Prompt")
    bound_selectbox(session, ConfigGroup.PROMPT_GENERATION, "prompt_type", "Type", PROMPT_TYPE_OPTIONS)

    col1, col2, col3 = st.columns(3)
    with col1:
        bound_checkbox(session, ConfigGroup.PROMPT_GENERATION, "use_rag", "Use RAG")
    with col2:
        bound_checkbox(session, ConfigGroup.PROMPT_GENERATION, "use_database", "Use Database")
    with col3:
        bound_checkbox(session, ConfigGroup.PROMPT_GENERATION, "show_code", "Show Code")

    col1, col2 = st.columns(2)
    with col1:
        bound_text_input(session, ConfigGroup.PROMPT_GENERATION, "temperature", "Temperature (0-1)")
    with col2:
        bound_text_input(session, ConfigGroup.PROMPT_GENERATION, "max_tokens", "Max Tokens")

    if st.button("🚀 Generate", key="prompt_generate_button"):
        with st.spinner("Sending prompt generation request..."):
            session.submit("execute_prompt")
        st.rerun()


def render_prompt_setup(session):
    render_knowledge_base_section(session)
    st.markdown("---")
    render_prompt_generation_section(session)
