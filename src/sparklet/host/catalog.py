"""
Sparklet Catalog
In-memory store of sparklet metadata and definition text.
"""

from typing import Any

from ..core import get_logger, safe_json_dumps
from .types import SparkletMetadata, SparkletRecord

logger = get_logger(__name__)

# Canonical ids that win over earlier entries sharing their title
CANONICAL_IDS = frozenset({"tic-tac-toe", "sparklets-wizard"})

TIC_TAC_TOE: dict[str, Any] = {
    "initialState": {
        "cells": ["", "", "", "", "", "", "", "", ""],
        "turn": "X",
    },
    "helpers": {
        "winner": """
            const lines = [[0,1,2],[3,4,5],[6,7,8],[0,3,6],[1,4,7],[2,5,8],[0,4,8],[2,4,6]];
            const c = state.cells;
            const line = lines.find(l => c[l[0]] !== "" && c[l[0]] === c[l[1]] && c[l[0]] === c[l[2]]);
            return line ? c[line[0]] : "";
        """,
        "isFull": "return state.cells.every(c => c !== '');",
    },
    "actions": {
        "mark": """
            if (state.cells[params.index] !== "" || helpers.winner() !== "") return {};
            return {
                cells: state.cells.map((c, i) => i === params.index ? state.turn : c),
                turn: state.turn === "X" ? "O" : "X"
            };
        """,
        "reset": 'return {cells: ["", "", "", "", "", "", "", "", ""], turn: "X"};',
    },
    "view": {
        "styles": {
            "status": {"fontSize": 20, "textAlign": "center"},
            "board": {"flexDirection": "row", "flexWrap": "wrap", "width": 300},
        },
        "elements": [
            {
                "type": "text",
                "style": "status",
                "value": "{{helpers.winner() ? 'Winner: ' + helpers.winner() : helpers.isFull() ? 'Draw' : 'Turn: ' + state.turn}}",
            },
            {"type": "grid", "style": "board", "dataSource": "state.cells", "onPress": "mark"},
            {"type": "button", "label": "New game", "onPress": "reset"},
        ],
    },
}

COUNTER: dict[str, Any] = {
    "initialState": {"count": 0, "step": "1"},
    "actions": {
        "increment": "return {count: state.count + (parseInt(state.step) || 1)};",
        "decrement": "return {count: state.count - (parseInt(state.step) || 1)};",
        "reset": "return {count: 0};",
    },
    "view": {
        "styles": {
            "count": {"fontSize": 32},
            "hint": {"color": "gray", "display": "{{state.count === 0 ? 'none' : 'flex'}}"},
        },
        "elements": [
            {"type": "text", "style": "count", "value": "Count: {{state.count}}"},
            {"type": "input", "binding": "state.step", "placeholder": "Step"},
            {"type": "button", "label": "+{{state.step}}", "onPress": "increment"},
            {"type": "button", "label": "-{{state.step}}", "onPress": "decrement"},
            {"type": "text", "style": "hint", "value": "Press reset to start over"},
            {"type": "button", "label": "Reset", "onPress": "reset", "visible": "{{state.count !== 0}}"},
        ],
    },
}

SEED_RECORDS = [
    SparkletRecord(
        metadata=SparkletMetadata(id="tic-tac-toe", title="Tic Tac Toe", icon="grid"),
        definition=safe_json_dumps(TIC_TAC_TOE),
    ),
    SparkletRecord(
        metadata=SparkletMetadata(id="counter", title="Counter", icon="plus"),
        definition=safe_json_dumps(COUNTER),
    ),
]


class InMemorySparkletCatalog:
    """Sparklet records kept in insertion order."""

    def __init__(self, records: list[SparkletRecord] | None = None):
        self._records: list[SparkletRecord] = list(records or [])

    def add(self, record: SparkletRecord) -> None:
        """Add a record, replacing any record with the same id."""
        self._records = [r for r in self._records if r.metadata.id != record.metadata.id]
        self._records.append(record)
        logger.debug("sparklet_added", sparklet_id=record.metadata.id)

    def seed_initial_sparklets(self) -> None:
        """Install the built-in sparklets (idempotent)."""
        for record in SEED_RECORDS:
            if self._find(record.metadata.id) is None:
                self.add(record)
        logger.info("sparklets_seeded", count=len(self._records))

    def list_sparklets(self) -> list[SparkletMetadata]:
        """
        Metadata for every sparklet, one per title.

        The first record with a title wins unless a later one carries a
        canonical id. That one replaces it and moves to the end of the list.
        """
        by_title: dict[str, SparkletMetadata] = {}
        for record in self._records:
            meta = record.metadata
            if meta.title in by_title and meta.id in CANONICAL_IDS:
                del by_title[meta.title]
            if meta.title not in by_title:
                by_title[meta.title] = meta
        return list(by_title.values())

    def get_sparklet_definition(self, sparklet_id: str) -> str | None:
        record = self._find(sparklet_id)
        return record.definition if record else None

    def _find(self, sparklet_id: str) -> SparkletRecord | None:
        return next((r for r in self._records if r.metadata.id == sparklet_id), None)

    def __len__(self) -> int:
        return len(self._records)
