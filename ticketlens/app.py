"""Streamlit app entrypoint for ticketlens."""

import streamlit as st

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Page config
st.set_page_config(
    page_title="ticketlens - Support KPIs",
    page_icon="📨",
    layout="wide",
    initial_sidebar_state="expanded",
)

from ticketlens.fetcher import ThreadCache
from ticketlens.ui.pages import dashboard, setup


def check_first_run() -> bool:
    """Check if this is a first run (no credentials or no data)."""
    if st.session_state.get("setup_complete"):
        return False

    return not setup.check_setup_complete()["complete"]


def main():
    """Main Streamlit app."""
    if check_first_run():
        setup.render()
        return

    st.sidebar.title("ticketlens")
    st.sidebar.caption("Support Mailbox KPIs")

    st.sidebar.divider()

    if st.sidebar.button("Refresh Data", key="sidebar_refresh"):
        _refresh_data_with_progress()

    cache = ThreadCache()
    st.sidebar.caption(f"Cached threads: {cache.get_thread_count():,}")

    if cache.is_fresh():
        st.sidebar.caption("Cache: Fresh")
    else:
        st.sidebar.caption("Cache: Stale")

    dashboard.render()


def _refresh_data_with_progress():
    """Refresh data with progress indicator."""
    from googleapiclient.errors import HttpError

    from ticketlens.fetcher import fetch_labels, fetch_threads

    progress_bar = st.sidebar.progress(0, text="Fetching labels...")

    def update_progress(current: int, total: int):
        pct = current / total if total > 0 else 0
        progress_bar.progress(pct, text=f"Fetching... ({current:,}/{total:,})")

    try:
        fetch_labels(use_cache=False)
        fetch_threads(use_cache=False, progress_callback=update_progress)
        progress_bar.progress(1.0, text="Complete!")
        st.sidebar.success("Data refreshed!")
        st.rerun()
    except FileNotFoundError as e:
        progress_bar.empty()
        st.sidebar.error(str(e))
    except HttpError as e:
        progress_bar.empty()
        st.sidebar.error(f"Error: {e}")


if __name__ == "__main__":
    main()
