"""Dashboard page for Streamlit UI."""

import streamlit as st

import pandas as pd
import plotly.express as px

from ticketlens.analytics import (
    build_records,
    calculate_kpis,
    get_monthly_status_table,
    get_sector_breakdown,
)
from ticketlens.export import records_to_dataframe
from ticketlens.fetcher import ThreadCache


def render():
    """Render the KPI dashboard."""
    st.title("Dashboard")
    st.caption("Support thread volume, status and response times")

    cache = ThreadCache()
    records = build_records(cache.get_conversations(), cache.get_cached_labels())

    if not records:
        st.warning(
            "No thread data available. Click 'Refresh Data' in the sidebar to fetch threads."
        )
        return

    kpis = calculate_kpis(records)
    monthly = get_monthly_status_table(kpis)
    status = kpis["conversationsByStatus"]

    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric("Total Threads", f"{kpis['totalConversations']:,}")

    with col2:
        st.metric("Resolved", f"{status['resolved']:,}")

    with col3:
        st.metric("Open / In Progress", f"{status['open'] + status['inProgress']:,}")

    with col4:
        st.metric(
            "Avg. First Response",
            f"{kpis['averageResponseHours']:.2f} h",
            help="Mean hours until the first outbound message, threads without a reply excluded",
        )

    if kpis["disorderedConversations"]:
        st.warning(
            f"{len(kpis['disorderedConversations'])} thread(s) have a first response "
            "dated before the opening message."
        )

    st.divider()

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Threads by Sector")

        sectors = get_sector_breakdown(kpis)
        fig = px.pie(
            names=[s["sector"] for s in sectors],
            values=[s["count"] for s in sectors],
            hole=0.4,
        )
        fig.update_layout(showlegend=True, height=300)
        st.plotly_chart(fig, width="stretch")

    with col2:
        st.subheader("Quarterly Average")

        quarterly = kpis["quarterlyAverage"]
        q_df = pd.DataFrame(
            {"quarter": sorted(quarterly), "average": [quarterly[q] for q in sorted(quarterly)]}
        )
        fig = px.bar(q_df, x="quarter", y="average", color="average", color_continuous_scale="Blues")
        fig.update_layout(
            xaxis_title="",
            yaxis_title="Threads / month",
            coloraxis_showscale=False,
            height=300,
        )
        st.plotly_chart(fig, width="stretch")
        st.caption("Quarter total divided by 3, partial quarters read low")

    st.divider()

    st.subheader("Monthly Volume by Status")

    if monthly:
        month_df = pd.DataFrame(monthly)
        long_df = month_df.melt(
            id_vars="month",
            value_vars=["resolved", "open", "in_progress"],
            var_name="status",
            value_name="threads",
        )
        fig = px.bar(long_df, x="month", y="threads", color="status", barmode="group")
        fig.update_layout(xaxis_title="", yaxis_title="Threads", height=350)
        st.plotly_chart(fig, width="stretch")

    st.divider()

    st.subheader("Top Senders")

    senders = sorted(kpis["conversationsBySender"].items(), key=lambda x: (-x[1], x[0]))
    df = pd.DataFrame(senders[:15], columns=["Sender", "Threads"])
    st.dataframe(df, width="stretch", hide_index=True)

    st.divider()

    st.subheader("All Threads")

    table = records_to_dataframe(records)
    st.dataframe(table, width="stretch", hide_index=True)
    st.download_button(
        "Download CSV",
        table.to_csv(index=False).encode("utf-8"),
        file_name="threads.csv",
        mime="text/csv",
    )
