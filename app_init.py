"""
Application initialization script.
This should be imported at the beginning of the Streamlit app.
"""
import logging
from datetime import datetime

import streamlit as st

from config import APP_NAME, APP_VERSION, SESSION_CONFIG
from state.session import ConfigSession

# Configure logging for the entire application here
# This should be the ONLY place where basicConfig is called
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


def create_session():
    """
    Create a configuration session and load the remote option lists.
    Option fetch failures are kept in the session catalog, never raised.
    """
    session = ConfigSession()
    session.load_options()
    logger.info("Configuration session created")
    return session


def get_session():
    """Return the configuration session of the current browser session, creating it on first use."""
    if SESSION_CONFIG not in st.session_state:
        st.session_state[SESSION_CONFIG] = create_session()
    return st.session_state[SESSION_CONFIG]


def initialize_app():
    """
    Initialize all application components.
    """
    try:
        logger.info("Starting application initialization")

        if 'app_config' not in st.session_state:
            st.session_state.app_config = {
                'app_name': APP_NAME,
                'version': APP_VERSION,
                'initialized_at': datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            }

        get_session()
        logger.info("Application initialization completed")
        return True

    except Exception as e:
        logger.error(f"Application initialization error: {e}")
        return False
