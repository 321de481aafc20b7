# ui/configuration_ui.py
"""
Configuration page: sidebar navigation between sections, the shared notice
box and the global reset.
"""

import streamlit as st

from config import SESSION_SECTION

from .data_connector_ui import render_data_connector
from .prompt_setup_ui import render_prompt_setup
from .widgets import render_notice

SECTIONS = {
    "🔗 Data Connector": render_data_connector,
    "🧠 Prompt Setup": render_prompt_setup,
}


def render_sidebar(session):
    """Render the configuration sidebar and return the selected section name."""
    st.sidebar.header("⚙️ Configuration")
    section = st.sidebar.radio("Select section:", list(SECTIONS), key=SESSION_SECTION)

    st.sidebar.markdown("---")
    if st.sidebar.button("🔄 Reload Options", key="reload_options_button"):
        with st.spinner("Loading options..."):
            session.load_options()
        st.rerun()

    if st.sidebar.button("🧹 Reset Configuration", key="reset_configuration_button"):
        session.reset_all()
        session.show_notice("Configuration reset to defaults.", "info")
        st.rerun()

    return section


def render_configuration(session):
    section = render_sidebar(session)
    render_notice(session)
    SECTIONS[section](session)
