# ui/__init__.py
"""
Streamlit panels of the configuration console.
"""
