"""Streamlit UI for LuxeFinder."""
