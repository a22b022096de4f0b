"""Dashboard sinks: where the chosen card candidates end up.

`automagic_dashboard` hands the title, description and cards to a
`DashboardSink` and returns whatever id the sink assigns. Two sinks are
provided: an in-memory one (tests, embedding) and one writing JSON files.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from autodash.core.models import CardCandidate

logger = logging.getLogger(__name__)


class DashboardSink(Protocol):
    """Protocol for persisting a generated dashboard."""

    def create_dashboard(
        self, title: str, description: Optional[str], cards: Sequence[CardCandidate]
    ) -> int:
        """Persist the dashboard and return its id."""
        ...


def dashboard_payload(
    dashboard_id: int, title: str, description: Optional[str], cards: Sequence[CardCandidate]
) -> Dict[str, Any]:
    """JSON-serializable dashboard, cards ordered by descending score."""
    ordered = sorted(cards, key=lambda c: c.score, reverse=True)
    return {
        "id": dashboard_id,
        "title": title,
        "description": description,
        "created_at": datetime.now().isoformat(),
        "cards": [card.to_dict() for card in ordered],
    }


class InMemoryDashboardSink:
    """Keeps dashboards in a dict keyed by sequential ids."""

    def __init__(self) -> None:
        self.dashboards: Dict[int, Dict[str, Any]] = {}

    def create_dashboard(
        self, title: str, description: Optional[str], cards: Sequence[CardCandidate]
    ) -> int:
        dashboard_id = len(self.dashboards) + 1
        self.dashboards[dashboard_id] = dashboard_payload(dashboard_id, title, description, cards)
        return dashboard_id


class JsonDashboardSink:
    """Writes each dashboard to `<directory>/dashboard_<id>.json`."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _next_id(self) -> int:
        ids: List[int] = []
        for path in self.directory.glob("dashboard_*.json"):
            suffix = path.stem[len("dashboard_"):]
            if suffix.isdigit():
                ids.append(int(suffix))
        return max(ids, default=0) + 1

    def create_dashboard(
        self, title: str, description: Optional[str], cards: Sequence[CardCandidate]
    ) -> int:
        self.directory.mkdir(parents=True, exist_ok=True)
        dashboard_id = self._next_id()
        path = self.directory / f"dashboard_{dashboard_id}.json"
        payload = dashboard_payload(dashboard_id, title, description, cards)
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Saved dashboard JSON: %s", path)
        return dashboard_id


__all__ = ["DashboardSink", "InMemoryDashboardSink", "JsonDashboardSink", "dashboard_payload"]
