from datetime import datetime

import streamlit as st

# ⚠️ IMPORTANT: Set page config FIRST, before any other Streamlit call ⚠️
st.set_page_config(
    page_title="Internal Audit Bot - Configuration",
    page_icon="🏦",
    layout="wide",
    initial_sidebar_state="expanded"
)

from app_init import get_session, initialize_app
from config import APP_SUBTITLE, APP_TITLE
from ui.configuration_ui import render_configuration


if initialize_app():
    session = get_session()

    st.title(APP_TITLE)
    st.markdown(APP_SUBTITLE)

    render_configuration(session)

    st.markdown("---")
    st.markdown(f"*Banking Compliance Configuration Console • {datetime.now().year}*")
else:
    st.error("❌ The application failed to initialize. Check the logs for details.")
