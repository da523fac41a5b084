"""Streamlit presentation helpers. Kept separate from domain and services."""
