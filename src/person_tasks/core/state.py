# src/person_tasks/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..store.record_store import RecordStore
from .ports import DocumentClient


@dataclass
class AppState:
    # Settings are kept on the state for easy access from connectors.
    settings: Any
    client: DocumentClient
    store: RecordStore
