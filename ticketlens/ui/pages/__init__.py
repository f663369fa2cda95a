"""Streamlit pages for the dashboard."""

from . import dashboard, setup

__all__ = [
    "dashboard",
    "setup",
]
