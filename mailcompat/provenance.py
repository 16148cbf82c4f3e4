# -*- coding: utf-8 -*-
"""
Provenance Tracking for the Email Compatibility Engine

SHA-256 audit trail for template checks and feature queries. Every entry
stores the chain hash it extends, so any entry can be re-derived and a
tampered or reordered log is detected by ``verify_chain``.

Example:
    >>> from mailcompat.provenance import ProvenanceTracker
    >>> tracker = ProvenanceTracker()
    >>> chain_hash = tracker.record("template_check", "check-1", "check", "abc123")
    >>> valid, entries = tracker.verify_chain("template_check", "check-1")
    >>> assert valid is True
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = (
    "entity_type",
    "entity_id",
    "action",
    "data_hash",
    "timestamp",
    "previous_hash",
    "chain_hash",
)


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def _chain_hash(previous_hash: str, data_hash: str, action: str, timestamp: str) -> str:
    combined = json.dumps({
        "previous": previous_hash,
        "data": data_hash,
        "action": action,
        "timestamp": timestamp,
    }, sort_keys=True)
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()


class ProvenanceTracker:
    """Chain-hashed, in-memory log of compatibility engine operations.

    Entries are kept both in one global sequence and grouped per entity
    (``<entity_type>:<entity_id>``).

    Attributes:
        _by_entity: Entries grouped by entity key.
        _entries: All entries in recording order.
        _head: Chain hash of the most recent entry.
        _lock: Thread-safety lock.
    """

    GENESIS_HASH = hashlib.sha256(b"mailcompat-provenance-genesis").hexdigest()

    def __init__(self) -> None:
        self._by_entity: Dict[str, List[Dict[str, Any]]] = {}
        self._entries: List[Dict[str, Any]] = []
        self._head: str = self.GENESIS_HASH
        self._lock = threading.Lock()
        logger.info("ProvenanceTracker initialized")

    def record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        data_hash: str,
    ) -> str:
        """Append an entry for an operation on an entity.

        Args:
            entity_type: Kind of entity (template_check, feature_query).
            entity_id: Entity identifier.
            action: Operation performed (check, query, ...).
            data_hash: SHA-256 of the operation payload.

        Returns:
            Chain hash of the new entry.
        """
        timestamp = _utcnow().isoformat()
        key = f"{entity_type}:{entity_id}"

        with self._lock:
            previous = self._head
            entry = {
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action,
                "data_hash": data_hash,
                "timestamp": timestamp,
                "previous_hash": previous,
                "chain_hash": _chain_hash(previous, data_hash, action, timestamp),
            }
            self._by_entity.setdefault(key, []).append(entry)
            self._entries.append(entry)
            self._head = entry["chain_hash"]

        logger.debug(
            "Recorded provenance: %s action=%s hash=%s",
            key, action, entry["chain_hash"][:16],
        )
        return entry["chain_hash"]

    def verify_chain(
        self,
        entity_type: str,
        entity_id: str,
    ) -> Tuple[bool, List[Dict[str, Any]]]:
        """Re-derive every chain hash recorded for an entity.

        Returns:
            Tuple of (is_valid, entries). An untracked entity is valid
            with no entries.
        """
        key = f"{entity_type}:{entity_id}"
        with self._lock:
            entries = list(self._by_entity.get(key, []))

        for entry in entries:
            missing = [name for name in _REQUIRED_FIELDS if name not in entry]
            if missing:
                logger.warning(
                    "Provenance entry for %s is missing fields %s", key, missing,
                )
                return False, entries
            expected = _chain_hash(
                entry["previous_hash"], entry["data_hash"],
                entry["action"], entry["timestamp"],
            )
            if expected != entry["chain_hash"]:
                logger.warning(
                    "Provenance hash mismatch for %s at %s", key, entry["timestamp"],
                )
                return False, entries
        return True, entries

    def verify_global_chain(self) -> bool:
        """Check that every entry links to its predecessor from genesis."""
        with self._lock:
            entries = list(self._entries)

        previous = self.GENESIS_HASH
        for entry in entries:
            if entry.get("previous_hash") != previous:
                return False
            previous = _chain_hash(
                previous, entry["data_hash"], entry["action"], entry["timestamp"],
            )
            if previous != entry.get("chain_hash"):
                return False
        return True

    def get_chain(self, entity_type: str, entity_id: str) -> List[Dict[str, Any]]:
        """Entries for one entity, oldest first."""
        with self._lock:
            return list(self._by_entity.get(f"{entity_type}:{entity_id}", []))

    def get_global_chain(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Most recent entries across all entities, newest first."""
        with self._lock:
            return list(reversed(self._entries[-limit:]))

    @property
    def entry_count(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def entity_count(self) -> int:
        with self._lock:
            return len(self._by_entity)

    def export_json(self) -> str:
        """Serialize the full log, oldest first."""
        with self._lock:
            data = list(self._entries)
        return json.dumps(data, indent=2, default=str)

    @staticmethod
    def build_hash(data: Any) -> str:
        """Deterministic SHA-256 of JSON-serializable data."""
        serialized = json.dumps(data, sort_keys=True, default=str)
        return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


__all__ = [
    "ProvenanceTracker",
]
