"""Tests for the analytics module."""

import pytest

from ticketlens.analytics import (
    UNDEFINED_SECTOR,
    UNKNOWN_SENDER,
    analyze_timing,
    build_record,
    build_records,
    calculate_kpis,
    extract_sender,
    get_monthly_status_table,
    get_sector_breakdown,
    identify_sector,
    resolve_status,
    sender_key,
)
from ticketlens.models import Conversation, ConversationRecord, Header, Label, Message


@pytest.fixture(autouse=True)
def default_label_rules(monkeypatch):
    """Make sure label naming rules come from the built-in defaults."""
    for var in (
        "SECTOR_PREFIX",
        "STATUS_RESOLVED_LABEL",
        "STATUS_OPEN_LABEL",
        "STATUS_IN_PROGRESS_LABEL",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def catalog():
    """Label catalog with system, department and status labels."""
    return [
        Label(id="INBOX", name="INBOX", type="system"),
        Label(id="SENT", name="SENT", type="system"),
        Label(id="L1", name="Setor Financeiro", type="user"),
        Label(id="L2", name="setor   Recursos Humanos", type="user"),
        Label(id="L3", name="Clientes", type="user"),
        Label(id="S1", name="Chamados Fechados", type="user"),
        Label(id="S2", name="Chamados em Aberto", type="user"),
        Label(id="S3", name="CHAMADOS EM ANDAMENTO", type="user"),
        Label(id="S4", name="Chamados Fechados 2022", type="user"),
    ]


def make_message(millis, labels=(), sender=None):
    headers = (Header(name="From", value=sender),) if sender else ()
    return Message(
        id=f"m{millis}",
        label_ids=tuple(labels),
        internal_date_ms=millis,
        headers=headers,
    )


def make_record(record_id, **kwargs):
    defaults = {"sender": "user@example.com", "sector": "Financeiro"}
    defaults.update(kwargs)
    return ConversationRecord(id=record_id, **defaults)


class TestIdentifySector:
    """Tests for department classification."""

    def test_strips_prefix(self, catalog):
        assert identify_sector(["INBOX", "L1"], catalog) == "Financeiro"

    def test_prefix_is_case_insensitive(self, catalog):
        assert identify_sector(["L2"], catalog) == "Recursos Humanos"

    def test_first_department_label_wins(self, catalog):
        assert identify_sector(["L2", "L1"], catalog) == "Recursos Humanos"
        assert identify_sector(["L1", "L2"], catalog) == "Financeiro"

    def test_no_department_label(self, catalog):
        assert identify_sector(["INBOX", "L3", "S1"], catalog) == UNDEFINED_SECTOR

    def test_empty_input(self, catalog):
        assert identify_sector([], catalog) == UNDEFINED_SECTOR
        assert identify_sector(None, catalog) == UNDEFINED_SECTOR

    def test_unknown_label_id_is_skipped(self, catalog):
        assert identify_sector(["Label_999", "L1"], catalog) == "Financeiro"

    def test_reserved_ids_are_ignored(self):
        # A system id is never a department, whatever its catalog name says
        catalog = [Label(id="STARRED", name="Setor Estrela")]
        assert identify_sector(["STARRED"], catalog) == UNDEFINED_SECTOR

    def test_custom_prefix(self, catalog, monkeypatch):
        monkeypatch.setenv("SECTOR_PREFIX", "Dept")
        catalog = catalog + [Label(id="D1", name="Dept Sales")]
        assert identify_sector(["L1", "D1"], catalog) == "Sales"

    def test_accepts_label_index(self, catalog):
        index = {label.id: label for label in catalog}
        assert identify_sector(["L1"], index) == "Financeiro"

    def test_bare_prefix_label_is_skipped(self):
        assert identify_sector(["L1"], [Label(id="L1", name="Setor")]) == UNDEFINED_SECTOR

        catalog = [Label(id="L1", name="Setor   "), Label(id="L2", name="Setor TI")]
        assert identify_sector(["L1", "L2"], catalog) == "TI"


class TestResolveStatus:
    """Tests for status flags."""

    def test_independent_flags(self, catalog):
        status = resolve_status(["S1", "S3"], catalog)
        assert status.resolved is True
        assert status.in_progress is True
        assert status.open is False

    def test_exact_match_only(self, catalog):
        status = resolve_status(["S4"], catalog)
        assert (status.resolved, status.open, status.in_progress) == (False, False, False)

    def test_open(self, catalog):
        assert resolve_status(["INBOX", "S2"], catalog).open is True

    def test_empty_input(self, catalog):
        status = resolve_status([], catalog)
        assert (status.resolved, status.open, status.in_progress) == (False, False, False)
        assert resolve_status(None, catalog).resolved is False


class TestSenders:
    """Tests for sender extraction and normalization."""

    def test_extract_from_first_message(self):
        messages = [
            make_message(0, sender="Jane Doe <jane@x.com>"),
            make_message(10, labels=["SENT"], sender="support@company.com"),
        ]
        assert extract_sender(messages) == "Jane Doe <jane@x.com>"

    def test_header_name_case_insensitive(self):
        message = Message(id="m1", headers=(Header(name="FROM", value="a@b.com"),))
        assert extract_sender([message]) == "a@b.com"

    def test_unknown_sender(self):
        assert extract_sender([]) == UNKNOWN_SENDER
        assert extract_sender(None) == UNKNOWN_SENDER
        assert extract_sender([make_message(0)]) == UNKNOWN_SENDER

    def test_sender_key(self):
        assert sender_key("Jane Doe <jane@x.com>") == "jane@x.com"
        assert sender_key("jane@x.com") == "jane@x.com"
        assert sender_key("Unknown") == "Unknown"


class TestTiming:
    """Tests for first-response timing."""

    def test_one_hour_response(self):
        timing = analyze_timing([make_message(0), make_message(3_600_000, ["SENT"])])

        assert timing.opened_at == "1970-01-01T00:00:00.000Z"
        assert timing.responded_at == "1970-01-01T01:00:00.000Z"
        assert timing.response_hours == 1.0

    def test_small_difference_rounds_to_zero(self):
        timing = analyze_timing([make_message(1000), make_message(5000, ["SENT"])])
        assert timing.response_hours == 0.0

    def test_first_outbound_message_counts(self):
        messages = [
            make_message(0, ["INBOX"]),
            make_message(1_800_000, ["INBOX"]),
            make_message(5_400_000, ["SENT"]),
            make_message(9_000_000, ["SENT"]),
        ]
        assert analyze_timing(messages).response_hours == 1.5

    def test_no_response(self):
        timing = analyze_timing([make_message(1_700_000_000_000, ["INBOX"])])

        assert timing.opened_at == "2023-11-14T22:13:20.000Z"
        assert timing.responded_at is None
        assert timing.response_hours is None

    def test_outbound_first_message(self):
        timing = analyze_timing([make_message(1000, ["SENT"]), make_message(9000)])
        assert timing.response_hours == 0.0

    def test_empty(self):
        timing = analyze_timing([])
        assert (timing.opened_at, timing.responded_at, timing.response_hours) == (
            None,
            None,
            None,
        )

    def test_half_hundredth_rounds_up(self):
        # 7.5 minutes is exactly 0.125 h
        timing = analyze_timing([make_message(0), make_message(450_000, ["SENT"])])
        assert timing.response_hours == 0.13

    def test_reply_without_date(self):
        messages = [make_message(0), Message(id="m2", label_ids=("SENT",))]
        timing = analyze_timing(messages)

        assert timing.opened_at == "1970-01-01T00:00:00.000Z"
        assert timing.responded_at is None
        assert timing.response_hours is None

    def test_missing_opening_date(self):
        messages = [Message(id="m1"), make_message(1000, ["SENT"])]
        assert analyze_timing(messages).opened_at is None


class TestBuildRecord:
    """Tests for per-thread record construction."""

    def test_build_record(self, catalog):
        messages = [
            make_message(0, ["INBOX", "L1", "S2"], sender="Jane <jane@x.com>"),
            make_message(7_200_000, ["SENT"]),
        ]
        record = build_record("t1", ["INBOX", "L1", "S2", "SENT"], catalog, messages)

        assert record.id == "t1"
        assert record.sender == "Jane <jane@x.com>"
        assert record.sector == "Financeiro"
        assert record.open is True
        assert record.resolved is False
        assert record.response_hours == 2.0

    def test_labels_derived_from_messages(self, catalog):
        messages = [make_message(0, ["INBOX"]), make_message(10, ["SENT", "L2", "S1"])]
        record = build_record("t1", None, catalog, messages)

        assert record.sector == "Recursos Humanos"
        assert record.resolved is True

    def test_empty_thread_uses_sentinels(self, catalog):
        record = build_record("t1", [], catalog, [])

        assert record.sender == UNKNOWN_SENDER
        assert record.sector == UNDEFINED_SECTOR
        assert record.opened_at is None
        assert not (record.resolved or record.open or record.in_progress)

    def test_disordered_thread_is_flagged(self, catalog, caplog):
        messages = [make_message(7_200_000), make_message(0, ["SENT"])]
        record = build_record("t9", None, catalog, messages)

        assert record.response_hours == -2.0
        assert record.is_disordered
        assert "t9" in caplog.text

    def test_build_records(self, catalog):
        conversations = [
            Conversation(id="a", messages=(make_message(0, ["L1"]),)),
            Conversation(id="b", messages=(make_message(0, ["L3"]),)),
        ]
        records = build_records(conversations, catalog)

        assert [r.id for r in records] == ["a", "b"]
        assert [r.sector for r in records] == ["Financeiro", UNDEFINED_SECTOR]


class TestCalculateKpis:
    """Tests for the KPI rollup."""

    @pytest.fixture
    def records(self):
        return [
            make_record(
                "t1",
                sender="Jane Doe <jane@x.com>",
                resolved=True,
                opened_at="2023-01-10T09:00:00.000Z",
                response_hours=2.0,
            ),
            make_record(
                "t2",
                sender="jane@x.com",
                sector="RH",
                open=True,
                opened_at="2023-02-01T09:00:00.000Z",
                response_hours=4.0,
            ),
            make_record(
                "t3",
                sender="bob@y.com",
                resolved=True,
                in_progress=True,
                opened_at="2023-02-20T09:00:00.000Z",
            ),
            make_record("t4", sector="Undefined", opened_at="2023-07-02T00:00:00.000Z"),
        ]

    def test_totals_and_groupings(self, records):
        kpis = calculate_kpis(records)

        assert kpis["totalConversations"] == 4
        assert kpis["conversationsBySector"] == {"Financeiro": 2, "RH": 1, "Undefined": 1}
        assert kpis["conversationsBySender"] == {
            "jane@x.com": 2,
            "bob@y.com": 1,
            "user@example.com": 1,
        }
        assert kpis["conversationsByMonth"] == {"2023-01": 1, "2023-02": 2, "2023-07": 1}

    def test_status_by_month(self, records):
        kpis = calculate_kpis(records)

        assert kpis["resolvedByMonth"] == {"2023-01": 1, "2023-02": 1}
        assert kpis["openByMonth"] == {"2023-02": 1}
        assert kpis["inProgressByMonth"] == {"2023-02": 1}

    def test_quarterly_average_divides_by_three(self, records):
        kpis = calculate_kpis(records)

        assert kpis["quarterlyAverage"] == {"2023-Q1": 1.0, "2023-Q3": 0.33}

    def test_average_response_excludes_missing(self, records):
        assert calculate_kpis(records)["averageResponseHours"] == 3.0

    def test_average_half_hundredth_rounds_up(self):
        records = [
            make_record("t1", response_hours=0.12),
            make_record("t2", response_hours=0.13),
        ]
        assert calculate_kpis(records)["averageResponseHours"] == 0.13

    def test_status_totals_include_undated_threads(self, records):
        records = records + [make_record("t5", resolved=True, open=True)]
        kpis = calculate_kpis(records)

        assert kpis["conversationsByStatus"] == {"resolved": 3, "open": 2, "inProgress": 1}
        assert sum(kpis["resolvedByMonth"].values()) == 2

    def test_no_response_times(self):
        kpis = calculate_kpis([make_record("t1")])
        assert kpis["averageResponseHours"] == 0

    def test_empty(self):
        kpis = calculate_kpis([])

        assert kpis["totalConversations"] == 0
        assert kpis["conversationsBySector"] == {}
        assert kpis["quarterlyAverage"] == {}
        assert kpis["averageResponseHours"] == 0

    def test_missing_or_malformed_dates_skip_monthly(self):
        records = [make_record("t1"), make_record("t2", opened_at="garbage")]
        kpis = calculate_kpis(records)

        assert kpis["totalConversations"] == 2
        assert kpis["conversationsBySector"] == {"Financeiro": 2}
        assert kpis["conversationsByMonth"] == {}

    def test_disordered_listed(self):
        records = [
            make_record("t1", opened_at="2023-01-01T00:00:00.000Z", response_hours=-1.5),
            make_record("t2", opened_at="2023-01-01T00:00:00.000Z", response_hours=1.5),
        ]
        kpis = calculate_kpis(records)

        assert kpis["disorderedConversations"] == ["t1"]

    def test_idempotent(self, records):
        assert calculate_kpis(records) == calculate_kpis(records)

    def test_sector_breakdown(self, records):
        rows = get_sector_breakdown(calculate_kpis(records))

        assert rows[0] == {"sector": "Financeiro", "count": 2, "percentage": 50.0}
        assert [r["sector"] for r in rows[1:]] == ["RH", "Undefined"]

    def test_monthly_status_table(self, records):
        rows = get_monthly_status_table(calculate_kpis(records))

        assert [r["month"] for r in rows] == ["2023-01", "2023-02", "2023-07"]
        assert rows[1] == {
            "month": "2023-02",
            "total": 2,
            "resolved": 1,
            "open": 1,
            "in_progress": 1,
        }
