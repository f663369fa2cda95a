"""Setup wizard page for first-run experience."""

import streamlit as st

from ticketlens.auth.credentials import load_credentials
from ticketlens.fetcher import ThreadCache


def check_setup_complete() -> dict:
    """
    Check if initial setup is complete.

    Returns:
        Dictionary with setup status for each step.
    """
    creds = load_credentials()
    has_credentials = creds is not None and creds.valid

    has_data = ThreadCache().get_thread_count() > 0

    return {
        "has_credentials": has_credentials,
        "has_data": has_data,
        "complete": has_credentials and has_data,
    }


def render():
    """Render the setup wizard."""
    st.title("Welcome to ticketlens")
    st.caption("Connect the support mailbox and fetch its threads")

    status = check_setup_complete()

    steps_complete = sum([status["has_credentials"], status["has_data"]])
    st.progress(steps_complete / 2, text=f"Step {min(steps_complete + 1, 2)} of 2")

    st.divider()

    st.subheader("Step 1: Connect Gmail")

    if status["has_credentials"]:
        st.success("Gmail connected!")
    else:
        st.markdown("""
        **Before you begin:**
        1. Make sure you have a `credentials.json` file from Google Cloud Console
        2. Place it in the project root directory
        3. Click the button below to authenticate (read-only access)
        """)

        if st.button("Connect Gmail", type="primary", key="connect_gmail"):
            with st.spinner("Opening browser for authentication..."):
                try:
                    from ticketlens.auth import get_gmail_service

                    service = get_gmail_service()
                    profile = service.users().getProfile(userId="me").execute()
                    st.success(f"Connected as: {profile.get('emailAddress')}")
                    st.rerun()
                except FileNotFoundError as e:
                    st.error(str(e))
        return

    st.divider()

    st.subheader("Step 2: Fetch Threads")

    if status["has_data"]:
        st.success(f"{ThreadCache().get_thread_count():,} threads cached.")
        if st.button("Open Dashboard", type="primary", key="finish_setup"):
            st.session_state["setup_complete"] = True
            st.rerun()
        return

    st.info("Every thread in the mailbox is listed and its metadata fetched.")

    if st.button("Fetch Threads", type="primary", key="fetch_threads"):
        from googleapiclient.errors import HttpError

        from ticketlens.fetcher import fetch_labels, fetch_threads

        progress_bar = st.progress(0, text="Fetching labels...")

        def update_progress(current: int, total: int):
            pct = current / total if total > 0 else 0
            progress_bar.progress(pct, text=f"Fetching... ({current:,}/{total:,})")

        try:
            fetch_labels(use_cache=False)
            threads = fetch_threads(use_cache=False, progress_callback=update_progress)
            progress_bar.progress(1.0, text="Complete!")
            st.success(f"Fetched {len(threads):,} threads")
            st.rerun()
        except HttpError as e:
            progress_bar.empty()
            st.error(f"Error: {e}")
