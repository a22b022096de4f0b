"""Tests for the dashboard sinks."""

import json

from autodash.core.models import CardCandidate
from autodash.dashboard import InMemoryDashboardSink, JsonDashboardSink, dashboard_payload

CARDS = [
    CardCandidate(card_id="low", title="Low", score=10.0, query={"type": "query"}),
    CardCandidate(card_id="high", title="High", score=90.0, query={"type": "query"}),
]


def test_payload_orders_cards_by_score():
    payload = dashboard_payload(1, "Title", None, CARDS)
    assert [c["card_id"] for c in payload["cards"]] == ["high", "low"]
    assert payload["title"] == "Title"
    assert "created_at" in payload


class TestInMemoryDashboardSink:
    def test_sequential_ids(self):
        sink = InMemoryDashboardSink()
        assert sink.create_dashboard("a", None, CARDS) == 1
        assert sink.create_dashboard("b", "desc", CARDS) == 2
        assert sink.dashboards[2]["description"] == "desc"


class TestJsonDashboardSink:
    def test_writes_json_files(self, tmp_path):
        sink = JsonDashboardSink(tmp_path / "out")
        first = sink.create_dashboard("a", None, CARDS)
        second = sink.create_dashboard("b", None, CARDS[:1])
        assert (first, second) == (1, 2)
        data = json.loads((tmp_path / "out" / "dashboard_2.json").read_text(encoding="utf-8"))
        assert data["title"] == "b"
        assert [c["card_id"] for c in data["cards"]] == ["low"]

    def test_ids_continue_after_existing_files(self, tmp_path):
        (tmp_path / "dashboard_7.json").write_text("{}", encoding="utf-8")
        (tmp_path / "dashboard_notes.json").write_text("{}", encoding="utf-8")
        assert JsonDashboardSink(tmp_path).create_dashboard("a", None, CARDS) == 8
